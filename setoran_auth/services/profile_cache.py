"""On-disk cache for the lecturer's profile photo."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class ProfilePhotoCache:
    """Location of the photo the host caches; cleared when the user logs out."""

    _FILE_NAME = "profile_photo"

    def __init__(self, directory: str) -> None:
        self._directory = Path(directory)

    @property
    def path(self) -> Path:
        return self._directory / self._FILE_NAME

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Unable to remove cached profile photo: %s", exc)


__all__ = ["ProfilePhotoCache"]
