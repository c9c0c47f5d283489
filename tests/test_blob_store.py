# tests/test_blob_store.py

"""Tests for the atomic file blob store."""

import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from src.exceptions import PersistenceError
from src.storage.blob_store import FileBlobStore


class TestFileBlobStore(unittest.TestCase):
    """Read / write_atomic behaviour."""

    def setUp(self) -> None:
        """Create a fresh store in a temp directory."""
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name) / "data"
        self.store = FileBlobStore(self.root)

    def _leftovers(self) -> list[str]:
        """Names of temp files left in the store directory."""
        return [p.name for p in self.root.iterdir() if p.suffix == ".tmp"]

    def test_creates_root_directory(self) -> None:
        """The root directory is created on init."""
        self.assertTrue(self.root.is_dir())

    def test_read_missing_returns_none(self) -> None:
        """Absent records are not an error."""
        self.assertIsNone(self.store.read("missing.json"))

    def test_write_then_read(self) -> None:
        """Written content is returned verbatim."""
        path = self.store.write_atomic("a.json", '{"k": "värde"}')
        self.assertEqual(path, self.root / "a.json")
        self.assertEqual(self.store.read("a.json"), '{"k": "värde"}')

    def test_overwrite_replaces_content(self) -> None:
        """A second write replaces the first."""
        self.store.write_atomic("a.json", "one")
        self.store.write_atomic("a.json", "two")
        self.assertEqual(self.store.read("a.json"), "two")

    def test_no_temp_file_left_on_success(self) -> None:
        """Successful writes leave no orphaned temp file."""
        self.store.write_atomic("a.json", "content")
        self.assertEqual(self._leftovers(), [])

    def test_crash_before_rename_keeps_original(self) -> None:
        """A failure between temp write and rename keeps the old file."""
        self.store.write_atomic("a.json", "original")

        with patch(
            "src.storage.blob_store.os.replace",
            side_effect=OSError("simulated crash"),
        ):
            with self.assertRaises(PersistenceError):
                self.store.write_atomic("a.json", "new content")

        self.assertEqual(self.store.read("a.json"), "original")
        self.assertEqual(self._leftovers(), [])

    def test_crash_before_rename_on_first_write(self) -> None:
        """No target file appears when the very first write fails."""
        with patch(
            "src.storage.blob_store.os.replace",
            side_effect=OSError("simulated crash"),
        ):
            with self.assertRaises(PersistenceError):
                self.store.write_atomic("a.json", "content")

        self.assertFalse((self.root / "a.json").exists())
        self.assertEqual(self._leftovers(), [])

    def test_verification_mismatch_raises(self) -> None:
        """Content that reads back differently is never renamed in."""
        self.store.write_atomic("a.json", "original")

        original_read_text = Path.read_text

        def _corrupt(path: Path, *args: object, **kwargs: object) -> str:
            text = original_read_text(path, *args, **kwargs)  # type: ignore[arg-type]
            return text[:-1] if path.suffix == ".tmp" else text

        with patch.object(Path, "read_text", _corrupt):
            with self.assertRaises(PersistenceError) as ctx:
                self.store.write_atomic("a.json", "replacement")

        self.assertIn("Verification failed", str(ctx.exception))
        self.assertEqual(self.store.read("a.json"), "original")
        self.assertEqual(self._leftovers(), [])


if __name__ == "__main__":
    unittest.main()
