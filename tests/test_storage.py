"""Image storage: object keys, URL resolution, R2 upload and clean-up."""

import io
import os
from unittest.mock import MagicMock, patch

import pytest
from werkzeug.datastructures import FileStorage

from animenews.core import storage

R2_CONFIG = {
    "R2_ENDPOINT": "https://account.r2.cloudflarestorage.com",
    "R2_ACCESS_KEY_ID": "key",
    "R2_SECRET_ACCESS_KEY": "secret",
    "R2_BUCKET_NAME": "news-images",
    "R2_PUBLIC_DOMAIN": "https://img.animenews.test/",
}


@pytest.mark.parametrize("filename, allowed", [
    ("cover.jpg", True),
    ("COVER.WEBP", True),
    ("anim.gif", True),
    ("script.php", False),
    ("noextension", False),
])
def test_allowed_file(filename, allowed):
    assert storage.allowed_file(filename) is allowed


def test_guess_content_type():
    assert storage.guess_content_type("a.JPG") == "image/jpeg"
    assert storage.guess_content_type("a.webp") == "image/webp"
    assert storage.guess_content_type("a.bin") == "application/octet-stream"


@pytest.mark.parametrize("name, expected", [
    ("My Cover Image.PNG", "1700000000000-my-cover-image.png"),
    ("Pokémon.jpg", "1700000000000-pokemon.jpg"),
    ("!!!.jpg", "1700000000000-image.jpg"),
    ("noext", "1700000000000-noext"),
])
def test_build_object_key(name, expected):
    assert storage.build_object_key(name, now_ms=1700000000000) == expected


@pytest.mark.parametrize("image, expected", [
    (None, "https://animenews.test/img/default-cover.jpg"),
    ("", "https://animenews.test/img/default-cover.jpg"),
    ("default.jpg", "https://animenews.test/img/default-cover.jpg"),
    ("old-cover.jpg", "https://animenews.test/uploads/old-cover.jpg"),
    ("https://img.animenews.test/1-a.jpg", "https://img.animenews.test/1-a.jpg"),
    ("http://legacy.test/a.jpg", "http://legacy.test/a.jpg"),
])
def test_resolve_image_url(image, expected):
    assert storage.resolve_image_url(image, "https://animenews.test/") == expected


def test_is_stored_image():
    assert storage.is_stored_image("https://img.animenews.test/1-a.jpg")
    assert not storage.is_stored_image("default.jpg")
    assert not storage.is_stored_image("legacy.jpg")
    assert not storage.is_stored_image(None)


def test_upload_falls_back_to_local_folder(app):
    upload = FileStorage(stream=io.BytesIO(b"jpeg-bytes"), filename="Cover Art.jpg")

    with app.app_context():
        assert not storage.is_cloud_storage()
        url = storage.upload_image(upload)

    assert url.startswith("https://animenews.test/uploads/")
    key = url.rsplit("/", 1)[-1]
    assert key.endswith("-cover-art.jpg")
    with open(os.path.join(app.config["UPLOAD_FOLDER"], key), "rb") as f:
        assert f.read() == b"jpeg-bytes"


def test_upload_to_r2(app):
    app.config.update(R2_CONFIG)
    upload = FileStorage(stream=io.BytesIO(b"png-bytes"), filename="poster.png")
    client = MagicMock()

    with app.app_context(), patch.object(storage, "_get_client", return_value=client):
        url = storage.upload_image(upload)

    kwargs = client.put_object.call_args.kwargs
    assert kwargs["Bucket"] == "news-images"
    assert kwargs["Body"] == b"png-bytes"
    assert kwargs["ACL"] == "public-read"
    assert kwargs["ContentType"] == "image/png"
    assert url == f"https://img.animenews.test/{kwargs['Key']}"


def test_delete_r2_object(app):
    app.config.update(R2_CONFIG)
    client = MagicMock()

    with app.app_context(), patch.object(storage, "_get_client", return_value=client):
        assert storage.delete_image("https://img.animenews.test/1700-cover.jpg") is True

    client.delete_object.assert_called_once_with(Bucket="news-images", Key="1700-cover.jpg")


def test_delete_local_file(app):
    folder = app.config["UPLOAD_FOLDER"]
    os.makedirs(folder, exist_ok=True)
    path = os.path.join(folder, "1700-cover.jpg")
    with open(path, "wb") as f:
        f.write(b"x")

    with app.app_context():
        assert storage.delete_image("https://animenews.test/uploads/1700-cover.jpg") is True
    assert not os.path.exists(path)


def test_delete_skips_sentinel(app):
    with app.app_context(), patch.object(storage, "_get_client") as get_client:
        assert storage.delete_image("default.jpg") is False
    get_client.assert_not_called()


def test_delete_never_raises(app):
    app.config.update(R2_CONFIG)
    client = MagicMock()
    client.delete_object.side_effect = RuntimeError("bucket unreachable")

    with app.app_context(), patch.object(storage, "_get_client", return_value=client):
        assert storage.delete_image("https://img.animenews.test/1700-cover.jpg") is False
