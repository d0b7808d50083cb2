from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="animenews",
    version="0.1.0",
    description="Anime, manga and game news site with admin panel, RSS feeds, sitemaps and Google Indexing pings",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["animenews", "animenews.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Internet :: WWW/HTTP :: Dynamic Content :: News/Diary",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Framework :: Flask",
    ],
    python_requires=">=3.9",
    install_requires=[
        "Flask>=3.0.0",
        "Flask-CORS>=4.0.0",
        "python-dotenv>=1.0.0",
        "requests>=2.28.0",
        "boto3>=1.26.0",
        "google-auth>=2.20.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-flask>=1.2",
            "black>=22.0",
            "flake8>=5.0",
        ],
    },
    include_package_data=True,
    package_data={
        "animenews": [
            "modules/*/templates/*/*.html",
            "modules/*/templates/**/*.html",
            "modules/*/static/*.jpg",
        ],
    },
    zip_safe=False,
)
