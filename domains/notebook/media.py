"""File-backed image store for reminder attachments.

Images are opaque bytes; the handle is the file name under the media
directory. Load failures degrade to None so a missing image only hides the
attachment.
"""

import uuid
from pathlib import Path
from typing import Optional

import config as app_config
from logger import logger
from . import config


class MediaError(Exception):
    """Storing or deleting an image failed."""


class FileMediaStore:
    """Stores attachment images as files."""

    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root or app_config.MEDIA_DIR)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, handle: str) -> Path:
        # Handles are bare file names; never follow a path out of the root
        return self.root / Path(handle).name

    def store(self, image: bytes) -> str:
        """Save image bytes. Returns the handle."""
        if not image:
            raise MediaError("Empty image")

        handle = f"{uuid.uuid4()}{config.MEDIA_EXTENSION}"
        try:
            self._path(handle).write_bytes(image)
        except OSError as e:
            raise MediaError(f"Cannot store image: {e}") from e

        logger.info(f"Stored image: {handle}")
        return handle

    def fetch(self, handle: str) -> Optional[bytes]:
        """Load image bytes, or None if the image cannot be read."""
        try:
            return self._path(handle).read_bytes()
        except OSError as e:
            logger.warning(f"Cannot load image {handle}: {e}")
            return None

    def delete(self, handle: str) -> None:
        """Remove an image. Missing images are ignored."""
        try:
            self._path(handle).unlink(missing_ok=True)
        except OSError as e:
            raise MediaError(f"Cannot delete image {handle}: {e}") from e

        logger.info(f"Deleted image: {handle}")
