from contextlib import redirect_stderr, redirect_stdout
from io import StringIO
from pathlib import Path
from tempfile import TemporaryDirectory
import logging
import unittest

from exportbatch.cli import build_parser, main

CONFIG = """
paths:
  input: "./input.txt"
  output: "./exports"
batch:
  max_concurrency: 2
executors:
  image: exportbatch.executors:export_archive
jobs:
  - kind: archive
    identifier: bundle
  - kind: document
    identifier: notes
    config: {title: Notes}
  - kind: image
    identifier: cover
  - kind: vector
    identifier: diagram
""".strip()


class CliTest(unittest.TestCase):
    def tearDown(self) -> None:
        logging.getLogger("exportbatch").handlers.clear()

    def test_run_max_concurrency_flag(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["--config", "batch.yaml", "run", "--max-concurrency", "3"])
        self.assertEqual(args.command, "run")
        self.assertEqual(args.max_concurrency, 3)

    def test_run_writes_artifacts_and_reports_failures(self) -> None:
        with TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            (root / "input.txt").write_text("hello\n", encoding="utf-8")
            config_path = root / "batch.yaml"
            config_path.write_text(CONFIG, encoding="utf-8")

            stdout, stderr = StringIO(), StringIO()
            with redirect_stdout(stdout), redirect_stderr(stderr):
                code = main(["--config", str(config_path), "run"])

            self.assertEqual(code, 1)
            written = sorted(path.name for path in (root / "exports").iterdir())
            self.assertEqual(written, ["bundle.zip", "cover.png", "notes.txt"])
            self.assertIn("3 of 4 succeeded", stdout.getvalue())
            self.assertIn("[4/4]", stdout.getvalue())
            self.assertIn("failed diagram", stderr.getvalue())

    def test_run_names_duplicate_identifiers_by_their_own_kind(self) -> None:
        with TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            (root / "input.txt").write_text("hello\n", encoding="utf-8")
            config_path = root / "batch.yaml"
            config_path.write_text(
                """
paths:
  input: "./input.txt"
  output: "./exports"
jobs:
  - {kind: archive, identifier: same}
  - {kind: document, identifier: same}
""".strip(),
                encoding="utf-8",
            )

            with redirect_stdout(StringIO()), redirect_stderr(StringIO()):
                code = main(["--config", str(config_path), "run"])

            self.assertEqual(code, 0)
            written = sorted(path.name for path in (root / "exports").iterdir())
            self.assertEqual(written, ["same.txt", "same.zip"])
            self.assertTrue((root / "exports" / "same.zip").read_bytes().startswith(b"PK"))
            self.assertEqual((root / "exports" / "same.txt").read_bytes(), b"hello\n")

    def test_validate_reports_missing_kinds(self) -> None:
        with TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            (root / "input.txt").write_text("hello\n", encoding="utf-8")
            config_path = root / "batch.yaml"
            config_path.write_text(CONFIG, encoding="utf-8")

            stderr = StringIO()
            with redirect_stderr(stderr):
                code = main(["--config", str(config_path), "validate"])
            self.assertEqual(code, 2)
            self.assertIn("diagram", stderr.getvalue())

    def test_kinds(self) -> None:
        with TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "batch.yaml"
            config_path.write_text(CONFIG, encoding="utf-8")
            stdout = StringIO()
            with redirect_stdout(stdout):
                code = main(["--config", str(config_path), "kinds"])
            self.assertEqual(code, 0)
            self.assertEqual(stdout.getvalue().split(), ["archive", "document", "image"])


if __name__ == "__main__":
    unittest.main()
