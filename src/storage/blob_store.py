# src/storage/blob_store.py

"""Directory-backed key/value store with atomic replace-on-write."""

import logging
import os
import tempfile
from pathlib import Path

from src.exceptions import PersistenceError

logger = logging.getLogger("price_monitor.storage")


class FileBlobStore:
    """Stores text records as files named by key inside one directory.

    Writes go to a temporary file in the same directory, are read back
    and compared against the intended content, and only then renamed
    over the target. Readers see either the previous or the new
    content, never a partial write.
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)
        logger.debug("FileBlobStore initialised, root=%s", self.root)

    def path_for(self, key: str) -> Path:
        """Return the file path backing *key*."""
        return self.root / key

    def read(self, key: str) -> str | None:
        """Return the stored text, or ``None`` when no record exists."""
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            msg = f"Failed to read {path}: {exc}"
            raise PersistenceError(msg) from exc

    def write_atomic(self, key: str, content: str) -> Path:
        """Replace the record for *key* with *content*.

        Raises:
            PersistenceError: The write, verification or rename failed.
                The previous record is left untouched and the temporary
                file is removed.
        """
        target = self.path_for(key)
        tmp_path: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self.root,
                prefix=f".{key}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_path = Path(tmp.name)
                tmp.write(content)
                tmp.flush()
                os.fsync(tmp.fileno())

            written = tmp_path.read_text(encoding="utf-8")
            if written != content:
                msg = f"Verification failed for {target}: content mismatch"
                raise PersistenceError(msg)

            os.replace(tmp_path, target)
        except Exception as exc:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            logger.error(
                "Write failed for %s: %s", target, exc, exc_info=True,
            )
            if isinstance(exc, PersistenceError):
                raise
            msg = f"Failed to write {target}: {exc}"
            raise PersistenceError(msg) from exc

        logger.info("Wrote %d chars to %s", len(content), target)
        return target
