import tempfile
import threading
import unittest
from pathlib import Path

from png2webp.batch import convert_all, iter_png_files
from png2webp.exceptions import ConversionError


class RecordingConverter:
    """Stands in for Converter; fails for files whose name contains 'bad' or 'crash'."""

    def __init__(self):
        self.lock = threading.Lock()
        self.seen = []

    def convert_file(self, path):
        with self.lock:
            self.seen.append(path)
        if "crash" in path.name:
            raise RuntimeError("worker crashed")
        if "bad" in path.name:
            raise ConversionError("decode failed: broken", source=str(path), stage="decode")
        return path.with_suffix(".webp")


class IterPngFilesTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)
        for name in ("b.png", "a.png", "notes.txt", "c.PNG", "sub/d.png", "sub/deeper/e.png", "sub/f.jpg"):
            path = self.root / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b'')

    def tearDown(self):
        self.tmp.cleanup()

    def test_walks_directories_recursively_in_sorted_order(self):
        found = [p.relative_to(self.root).as_posix() for p in iter_png_files([self.root])]
        self.assertEqual(found, ["a.png", "b.png", "sub/d.png", "sub/deeper/e.png"])

    def test_explicit_files_are_filtered_by_extension(self):
        found = list(iter_png_files([self.root / "notes.txt", self.root / "b.png"]))
        self.assertEqual(found, [self.root / "b.png"])

    def test_missing_path_is_ignored(self):
        self.assertEqual(list(iter_png_files([self.root / "nope"])), [])


class ConvertAllTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)
        for name in ("one.png", "two.png", "bad.png"):
            (self.root / name).write_bytes(b'')

    def tearDown(self):
        self.tmp.cleanup()

    def test_collects_successes_and_failures(self):
        converter = RecordingConverter()
        errors = []
        result = convert_all([self.root], workers=3, converter=converter,
                             error_handler=lambda path, e: errors.append(path))
        self.assertEqual(sorted(p.name for p in result.converted), ["one.png", "two.png"])
        self.assertEqual(list(result.failed), [self.root / "bad.png"])
        self.assertEqual(errors, [self.root / "bad.png"])
        self.assertEqual(len(converter.seen), 3)
        self.assertFalse(result.ok)

    def test_all_converted(self):
        (self.root / "bad.png").unlink()
        result = convert_all([self.root], workers=1, converter=RecordingConverter())
        self.assertTrue(result.ok)
        self.assertEqual(result.converted[self.root / "one.png"], self.root / "one.webp")

    def test_unexpected_error_is_recorded(self):
        (self.root / "crash.png").write_bytes(b'')
        errors = []
        result = convert_all([self.root], workers=2, converter=RecordingConverter(),
                             error_handler=lambda path, e: errors.append(path))
        self.assertEqual(sorted(p.name for p in result.converted), ["one.png", "two.png"])
        self.assertEqual(sorted(p.name for p in result.failed), ["bad.png", "crash.png"])
        self.assertIsInstance(result.failed[self.root / "crash.png"], RuntimeError)
        self.assertIn(self.root / "crash.png", errors)

    def test_workers_must_be_positive(self):
        with self.assertRaises(ValueError):
            convert_all([self.root], workers=0, converter=RecordingConverter())


if __name__ == "__main__":
    unittest.main()
