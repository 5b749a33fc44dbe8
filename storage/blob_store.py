"""
Photo blob storage on the local filesystem
"""
import os
import re
from pathlib import Path
from typing import Optional
from urllib.parse import quote, unquote

from utils.logger import get_logger

logger = get_logger(__name__)

THUMBNAIL_SUFFIX = '_200x200.webp'


def thumbnail_path(path: str) -> str:
    """rooms/VTRY/slideshow/1-a.jpg -> rooms/VTRY/slideshow/1-a_200x200.webp"""
    stem, ext = os.path.splitext(path)
    if not ext:
        return path + THUMBNAIL_SUFFIX
    return stem + THUMBNAIL_SUFFIX


def safe_filename(name: str) -> str:
    """Keep uploaded file names to a predictable character set"""
    cleaned = re.sub(r'[^A-Za-z0-9._-]+', '_', os.path.basename(name or ''))
    return cleaned.strip('._') or 'photo.jpg'


class BlobStore:
    """
    Stores uploaded bytes under a scoped path and hands back a URL.

    Thumbnails are produced outside this process; thumbnail_url only
    points at the '_200x200.webp' sibling when it exists.
    """

    def __init__(self, root_dir: str, base_url: str):
        self.root = Path(root_dir)
        self.base_url = base_url.rstrip('/')

    def _resolve(self, path: str) -> Path:
        parts = [part for part in path.strip('/').split('/') if part]
        if not parts or any(part in ('.', '..') for part in parts):
            raise ValueError(f"Invalid blob path: {path!r}")
        return self.root.joinpath(*parts)

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{quote(path.strip('/'))}"

    def path_from_url(self, url: str) -> Optional[str]:
        """Inverse of url_for; None for URLs this store did not issue"""
        prefix = self.base_url + '/'
        if not url or not url.startswith(prefix):
            return None
        return unquote(url[len(prefix):].split('?', 1)[0])

    def store(self, data: bytes, path: str) -> str:
        """
        Write bytes at path and return their URL.
        OSError propagates: a failed upload is reported to the caller.
        """
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.debug("Stored blob %s (%d bytes)", path, len(data))
        return self.url_for(path)

    def exists(self, path: str) -> bool:
        try:
            return self._resolve(path).is_file()
        except ValueError:
            return False

    def delete(self, url: str, with_thumbnail: bool = False) -> bool:
        """
        Best-effort delete; failures are logged and swallowed.

        Returns:
            True if the original blob was removed
        """
        path = self.path_from_url(url)
        if path is None:
            logger.debug("Could not parse blob path from URL: %s", url)
            return False

        removed = self._unlink(path)
        if with_thumbnail:
            self._unlink(thumbnail_path(path))
        return removed

    def _unlink(self, path: str) -> bool:
        try:
            self._resolve(path).unlink()
            return True
        except (OSError, ValueError) as exc:
            logger.debug("Could not delete blob %s: %s", path, exc)
            return False

    def thumbnail_url(self, url: str) -> str:
        """Thumbnail URL when the derived variant exists, else the original"""
        path = self.path_from_url(url)
        if path is None:
            return url
        thumb = thumbnail_path(path)
        if self.exists(thumb):
            return self.url_for(thumb)
        return url
