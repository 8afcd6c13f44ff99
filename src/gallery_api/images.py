"""
Image store backed by the upload directory.
The directory listing is the only index; there is no metadata record per image.
"""
import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

from .clock import next_timestamp_ms
from .config import ALLOWED_EXTENSIONS

logger = logging.getLogger(__name__)

URL_PREFIX = "/images"


class InvalidImageName(ValueError):
    pass


def extension_of(filename: str) -> str:
    """Extension including the dot, as written in the original filename ('' when none)."""
    return os.path.splitext(filename or "")[1]


def is_allowed_image(filename: str) -> bool:
    ext = extension_of(filename).lower().lstrip(".")
    return ext in ALLOWED_EXTENSIONS


def generated_name(original_filename: str) -> str:
    return f"work-{next_timestamp_ms()}{extension_of(original_filename)}"


def image_url(name: str) -> str:
    return f"{URL_PREFIX}/{name}"


class ImageStore:
    def __init__(self, upload_dir: Path):
        self.upload_dir = Path(upload_dir)

    def ensure(self) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def list(self) -> List[Dict[str, str]]:
        """
        Enumerate image files in the upload directory.

        Raises:
            OSError if the directory cannot be read
        """
        with os.scandir(self.upload_dir) as it:
            entries = sorted(it, key=lambda e: e.name)

        images = []
        for entry in entries:
            if not entry.is_file() or not is_allowed_image(entry.name):
                continue
            images.append({
                "name": entry.name,
                "url": image_url(entry.name),
                "path": str(self.upload_dir / entry.name),
            })
        return images

    def save_all(self, files: Iterable[Tuple[str, bytes]]) -> List[Dict[str, str]]:
        """Write (original_filename, content) pairs under generated names."""
        saved = []
        for original, content in files:
            name = generated_name(original)
            (self.upload_dir / name).write_bytes(content)
            saved.append({"name": name, "url": image_url(name)})
        return saved

    def save(self, original_filename: str, content: bytes) -> Dict[str, str]:
        return self.save_all([(original_filename, content)])[0]

    def resolve(self, name: str) -> Path:
        """
        Map a request-supplied name to a path directly inside the upload directory.

        Raises:
            InvalidImageName if the name is empty, contains separators or
            would point outside the upload directory
        """
        if not name or name in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
            raise InvalidImageName(name)
        root = self.upload_dir.resolve()
        # The final component is not resolved: a symlink names itself, not its target
        candidate = root / name
        if candidate.parent != root:
            raise InvalidImageName(name)
        return candidate

    def delete(self, name: str) -> bool:
        """
        Remove an image. Returns False when no such file exists.

        Raises:
            InvalidImageName for names outside the upload directory
            OSError if the file exists but cannot be removed
        """
        path = self.resolve(name)
        if not (path.is_symlink() or path.is_file()):
            return False
        path.unlink()
        return True

    def discard(self, name: str) -> None:
        """Best-effort removal of a file this store just wrote."""
        try:
            self.delete(name)
        except (InvalidImageName, OSError) as e:
            logger.warning(f"Could not remove image {name}: {e}")
