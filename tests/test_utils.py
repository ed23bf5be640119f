from pathlib import Path
from tempfile import TemporaryDirectory
import unittest

from exportbatch.models import JobKind
from exportbatch.utils import artifact_name, write_artifact


class UtilsTest(unittest.TestCase):
    def test_artifact_name(self) -> None:
        self.assertEqual(artifact_name("cover page", JobKind.IMAGE), "cover_page.png")
        self.assertEqual(artifact_name("../etc/passwd", "archive"), "etc_passwd.zip")
        self.assertEqual(artifact_name("///", "unknown"), "artifact.bin")

    def test_write_artifact_is_non_destructive(self) -> None:
        with TemporaryDirectory() as temp_dir:
            directory = Path(temp_dir) / "out"
            first = write_artifact(directory, "doc.txt", b"one")
            second = write_artifact(directory, "doc.txt", b"two")
            self.assertEqual(first.name, "doc.txt")
            self.assertEqual(second.name, "doc.1.txt")
            self.assertEqual(first.read_bytes(), b"one")
            self.assertEqual(second.read_bytes(), b"two")


if __name__ == "__main__":
    unittest.main()
