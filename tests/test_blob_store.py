"""
Blob Store Tests - uploads, thumbnails and best-effort deletes.

Run with: pytest tests/test_blob_store.py -v
"""
import pytest

from storage.blob_store import safe_filename, thumbnail_path


def test_thumbnail_path():
    assert thumbnail_path("rooms/A/slideshow/1-a.jpg") == "rooms/A/slideshow/1-a_200x200.webp"
    assert thumbnail_path("rooms/A/slideshow/1-a") == "rooms/A/slideshow/1-a_200x200.webp"


def test_safe_filename():
    assert safe_filename("my photo (1).JPG") == "my_photo_1_.JPG"
    assert safe_filename("../../etc/passwd") == "passwd"
    assert safe_filename("") == "photo.jpg"


class TestBlobStore:

    def test_store_returns_url(self, blobs):
        url = blobs.store(b"jpeg", "rooms/A/photos/1-a.jpg")
        assert url == "/media/rooms/A/photos/1-a.jpg"
        assert blobs.exists("rooms/A/photos/1-a.jpg")
        assert (blobs.root / "rooms" / "A" / "photos" / "1-a.jpg").read_bytes() == b"jpeg"

    def test_path_from_url(self, blobs):
        assert blobs.path_from_url("/media/rooms/A/x.jpg?v=2") == "rooms/A/x.jpg"
        assert blobs.path_from_url("https://elsewhere/x.jpg") is None

    def test_rejects_escaping_paths(self, blobs):
        with pytest.raises(ValueError):
            blobs.store(b"x", "rooms/../../secret")

    def test_delete(self, blobs):
        url = blobs.store(b"x", "rooms/A/photos/1-a.jpg")
        assert blobs.delete(url) is True
        assert not blobs.exists("rooms/A/photos/1-a.jpg")

    def test_delete_is_best_effort(self, blobs):
        assert blobs.delete("/media/rooms/A/missing.jpg") is False
        assert blobs.delete("not-a-url") is False

    def test_delete_with_thumbnail(self, blobs):
        url = blobs.store(b"x", "rooms/A/slideshow/1-a.jpg")
        blobs.store(b"t", "rooms/A/slideshow/1-a_200x200.webp")
        blobs.delete(url, with_thumbnail=True)
        assert not blobs.exists("rooms/A/slideshow/1-a_200x200.webp")

    def test_thumbnail_url_falls_back_to_original(self, blobs):
        url = blobs.store(b"x", "rooms/A/slideshow/1-a.jpg")
        assert blobs.thumbnail_url(url) == url
        blobs.store(b"t", "rooms/A/slideshow/1-a_200x200.webp")
        assert blobs.thumbnail_url(url) == "/media/rooms/A/slideshow/1-a_200x200.webp"
