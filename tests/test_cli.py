"""Tests for the objcgen command line."""

import json

from objcgen.cli import main
from tests.helpers import SAMPLE_HEADER


class TestGenerate:
    """Test the generate subcommand."""

    def test_class_mode_writes_modules(self, tmp_path, capsys):
        """Generating from a file writes one module per class."""
        header = tmp_path / "View.h"
        header.write_text(SAMPLE_HEADER)
        out_dir = tmp_path / "out"

        code = main(["generate", "--file", str(header), "--output-dir", str(out_dir)])

        assert code == 0
        assert (out_dir / "View.py").exists()
        assert (out_dir / "Button.py").exists()
        assert "from View.h" in (out_dir / "View.py").read_text()
        output = capsys.readouterr().out
        assert "✓ Found 2 classes." in output
        assert "✓ Generated View.py" in output

    def test_string_input(self, tmp_path, capsys):
        """Header text can be passed inline with a custom bridge."""
        code = main(
            [
                "generate",
                "--string",
                "@interface Tiny : NSObject\n- (void)run;\n@end\n",
                "--output-dir",
                str(tmp_path),
                "--bridge-module",
                "bridges.test",
            ]
        )
        assert code == 0
        assert "import bridges.test as objc" in (tmp_path / "Tiny.py").read_text()

    def test_skipped_declarations_reported(self, tmp_path, capsys):
        """Skipped declarations are counted in the summary."""
        main(
            [
                "generate",
                "--string",
                "@interface Tiny : NSObject\n- (void);\n@end\n",
                "--output-dir",
                str(tmp_path),
            ]
        )
        assert "⚠ Skipped 1 declarations" in capsys.readouterr().out

    def test_method_mode_prints_json(self, capsys):
        """Method mode prints the parsed declaration as JSON."""
        code = main(
            [
                "generate",
                "--mode",
                "method",
                "--string",
                "/*! Adds a view. @param view The view. */\n// - (void)addSubview:(NSView *)view;",
            ]
        )
        assert code == 0
        described = json.loads(capsys.readouterr().out)
        assert described["name"] == "addSubview:"
        assert described["documentation"] == "Adds a view."
        assert described["parameters"][0]["documentation"] == "The view."

    def test_method_mode_without_declaration_fails(self, capsys):
        """Method mode fails when no declaration is present."""
        code = main(["generate", "--mode", "method", "--string", "/*! Only docs. */"])
        assert code == 1
        assert "✗" in capsys.readouterr().err

    def test_missing_file_fails(self, tmp_path, capsys):
        """An unreadable input file exits with an error."""
        code = main(["generate", "--file", str(tmp_path / "missing.h")])
        assert code == 1
        assert "Cannot read" in capsys.readouterr().err

    def test_ast_without_libclang_fails(self, tmp_path, monkeypatch, capsys):
        """The ast strategy without libclang is rejected."""
        monkeypatch.delenv("LIBCLANG_PATH", raising=False)
        code = main(["generate", "--strategy", "ast", "--string", "", "--output-dir", str(tmp_path)])
        assert code == 1
        assert "Invalid settings" in capsys.readouterr().err

    def test_no_reflow_flag(self, tmp_path):
        """Skipping reflow leaves incomplete markers in place."""
        main(
            [
                "generate",
                "--string",
                "@interface Broken : NSObject\n- (void)join:(id)a with:(id)a;\n@end\n",
                "--output-dir",
                str(tmp_path),
                "--no-reflow",
            ]
        )
        assert "# objcgen: incomplete join" in (tmp_path / "Broken.py").read_text()


class TestReflow:
    """Test the reflow subcommand."""

    def test_reflow_directory(self, tmp_path, capsys):
        """Reflowing a directory rewrites modules in place."""
        main(
            [
                "generate",
                "--string",
                "@interface Broken : NSObject\n- (void)join:(id)a with:(id)a;\n@end\n",
                "--output-dir",
                str(tmp_path),
                "--no-reflow",
            ]
        )
        capsys.readouterr()

        code = main(["reflow", str(tmp_path)])

        assert code == 0
        assert "Post-processed" in capsys.readouterr().out
        assert "def join(self, *args: Any) -> Any:" in (tmp_path / "Broken.py").read_text()

    def test_reflow_missing_path(self, tmp_path, capsys):
        """Reflowing a missing path exits with an error."""
        assert main(["reflow", str(tmp_path / "missing")]) == 1
