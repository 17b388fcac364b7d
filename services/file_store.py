"""On-disk store for generated FDX documents.

Each document gets a fresh name derived from its title plus a random
suffix, so concurrent conversions never collide and names are not
guessable.  Lookups accept only names this store could have produced.
"""

import logging
import re
import unicodedata
from pathlib import Path
from uuid import uuid4

from core.exceptions import NotFoundException, StorageException

logger = logging.getLogger(__name__)

FDX_SUFFIX = ".fdx"
_VALID_NAME = re.compile(r"^[A-Za-z0-9_-]+\.fdx$")
_MAX_SLUG_LENGTH = 50


def slugify(text: str) -> str:
    """Reduce *text* to an ASCII filename stem, e.g. ``"Bar Scene!"`` -> ``"bar_scene"``."""
    ascii_text = (
        unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    )
    slug = re.sub(r"[^a-z0-9]+", "_", ascii_text.lower()).strip("_")
    return slug[:_MAX_SLUG_LENGTH].rstrip("_") or "screenplay"


class FileStore:
    """Write and look up generated FDX files under one directory."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def save(self, document: bytes, title: str) -> str:
        """Write *document* and return its generated filename.

        Raises:
            StorageException: If the file cannot be written
        """
        filename = f"{slugify(title)}_{uuid4().hex[:12]}{FDX_SUFFIX}"
        path = self.root / filename
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            path.write_bytes(document)
        except OSError as exc:
            logger.error("Failed to write %s: %s", path, exc)
            raise StorageException(
                "Generated screenplay could not be saved",
                details={"filename": filename, "error": str(exc)},
            ) from exc

        logger.info("Stored %s (%d bytes)", filename, len(document))
        return filename

    def path_for(self, filename: str) -> Path:
        """Return the path of a stored file.

        Raises:
            NotFoundException: If *filename* is malformed or does not exist
        """
        if not _VALID_NAME.match(filename):
            raise NotFoundException(
                "File not found",
                details={"filename": filename},
            )
        path = self.root / filename
        if not path.is_file():
            raise NotFoundException(
                "File not found",
                details={"filename": filename},
            )
        return path
