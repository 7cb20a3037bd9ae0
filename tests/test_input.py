import io
import tempfile
import unittest
from pathlib import Path

from jqlive.cli.input import InputError, open_terminal_input, read_document


class FakeTty(io.StringIO):
    def isatty(self) -> bool:
        return True


class ReadDocumentTests(unittest.TestCase):
    def test_reads_named_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "doc.json"
            path.write_text('{"a": "ü"}\n', encoding="utf-8")
            self.assertEqual(read_document(str(path)), '{"a": "ü"}\n')

    def test_missing_file(self) -> None:
        with self.assertRaises(InputError) as ctx:
            read_document("/nonexistent/jqlive/doc.json")
        self.assertIn("No such file", str(ctx.exception))

    def test_directory_is_unreadable(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(InputError):
                read_document(tmp)

    def test_reads_piped_stdin(self) -> None:
        self.assertEqual(read_document(None, stdin=io.StringIO("[1]\n")), "[1]\n")

    def test_dash_means_stdin(self) -> None:
        self.assertEqual(read_document("-", stdin=io.StringIO("true")), "true")

    def test_interactive_stdin_without_file(self) -> None:
        with self.assertRaises(InputError) as ctx:
            read_document(None, stdin=FakeTty())
        self.assertIn("pipe a document", str(ctx.exception))


class TerminalInputTests(unittest.TestCase):
    def test_tty_stdin_uses_default_input(self) -> None:
        self.assertEqual(open_terminal_input(FakeTty()), (None, None))


if __name__ == "__main__":
    unittest.main()
