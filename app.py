"""
AnimeNews ID
============

Run with:
    python app.py

Visit:
    http://localhost:3000        - Homepage
    http://localhost:3000/admin  - Admin panel
"""

import logging

from flask import Flask

from animenews import AnimeNews
from animenews.core.config import Config

logging.basicConfig(level=logging.INFO,
                    format='%(asctime)s %(levelname)s [%(name)s] %(message)s')

# ===== App Setup =====

app = Flask(__name__)

# Session security
app.config['SESSION_COOKIE_SECURE'] = Config.SITE_URL.startswith('https://')

# ===== AnimeNews =====

animenews = AnimeNews(app)


# ===== Run =====

if __name__ == '__main__':
    logging.getLogger(__name__).info("Starting on port %s...", Config.port)
    app.run(debug=False, port=Config.port, host='0.0.0.0')
