"""Tests for app.py - command line parsing, formatting and error reporting."""

import io
import json
import pytest
from pathlib import Path

from app import App, main


FIXTURES = Path(__file__).parent / "fixtures"


def make_app(**kwargs):
    return App(out=io.StringIO(), err=io.StringIO(), **kwargs)


class TestAppInitialization:
    """Test App configuration."""

    def test_app_defaults(self):
        """App uses default configuration."""
        app = App()
        assert app.base_dir is None
        assert app.output_format == "uml"
        assert app.check_only is False

    def test_invalid_format(self):
        """Unknown output formats are rejected before any file is read."""
        app = make_app(output_format="svg")
        with pytest.raises(ValueError, match="output_format must be one of"):
            app.run([FIXTURES / "test.uml"])


class TestAppOutput:
    """Test the three output formats on the fixture diagrams."""

    def test_uml_output(self):
        app = make_app()
        assert app.run([FIXTURES / "test.uml"]) == 0
        assert app.out.getvalue() == (
            "@startuml\n"
            "participant test1\n"
            "note position\n"
            "quick test\n"
            "end note\n"
            "participant test\n"
            "loop 5\n"
            "par\n"
            "note position\n"
            "inside par\n"
            "end note\n"
            "else\n"
            "note position\n"
            "else clause\n"
            "end note\n"
            "end par\n"
            "end loop\n"
            "activate test activate\n"
            "deactivate test deactivate\n"
            "@enduml\n"
        )

    def test_include_is_expanded(self):
        app = make_app()
        assert app.run([FIXTURES / "with_include.uml"]) == 0
        assert app.out.getvalue() == (
            "@startuml\n"
            "participant \"Web Server\" as web\n"
            "user->web:GET /\n"
            "db->web:rows\n"
            "@enduml\n"
        )

    def test_tree_output(self):
        app = make_app(output_format="tree")
        assert app.run([FIXTURES / "with_include.uml"]) == 0
        assert "Include 'parts/requests.uml'\n  Message(user -> web: GET /)\n" in app.out.getvalue()

    def test_json_output(self):
        app = make_app(output_format="json")
        assert app.run([FIXTURES / "with_include.uml"]) == 0
        data = json.loads(app.out.getvalue())
        assert data[0] == {"type": "StartMarker"}
        assert data[2]["type"] == "Include"
        assert data[2]["sequence"][1] == {
            "type": "Message", "from": "db", "to": "web", "text": "rows", "colour": None,
        }

    def test_base_dir(self):
        app = make_app(base_dir=FIXTURES)
        assert app.run([Path("test.uml")]) == 0


class TestAppErrors:
    """Failures are reported on stderr with a non-zero exit status."""

    def test_syntax_error(self, tmp_path):
        bad = tmp_path / "bad.uml"
        bad.write_text("@startuml\nloop forever\nA->B\nend\n@enduml\n")
        app = make_app()
        assert app.run([bad]) == 1
        assert "ERROR:" in app.err.getvalue()
        assert "Loop count must be a decimal number" in app.err.getvalue()
        assert app.out.getvalue() == ""

    def test_missing_file(self, tmp_path):
        app = make_app()
        assert app.run([tmp_path / "missing.uml"]) == 1
        assert "Cannot read file" in app.err.getvalue()

    def test_one_bad_file_does_not_stop_the_rest(self, tmp_path):
        app = make_app(check_only=True)
        assert app.run([tmp_path / "missing.uml", FIXTURES / "test.uml"]) == 1
        assert app.out.getvalue() == ""

    def test_check_only(self):
        app = make_app(check_only=True)
        assert app.run([FIXTURES / "test.uml", FIXTURES / "with_include.uml"]) == 0
        assert app.out.getvalue() == "2 file(s) OK\n"


class TestMain:
    """Test argument parsing and environment defaults."""

    def test_main_prints_canonical_text(self, capsys):
        assert main([str(FIXTURES / "parts" / "requests.uml")]) == 0
        assert capsys.readouterr().out == "user->web:GET /\ndb->web:rows\n"

    def test_main_error_status(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.uml")]) == 1
        assert "ERROR:" in capsys.readouterr().err

    def test_main_base_dir_from_environment(self, monkeypatch, capsys):
        monkeypatch.setenv("UMLSEQ_BASE_DIR", str(FIXTURES))
        assert main(["test.uml", "--check"]) == 0
        assert capsys.readouterr().out == "1 file(s) OK\n"

    def test_main_format_flag(self, capsys):
        assert main([str(FIXTURES / "test.uml"), "--format", "tree"]) == 0
        assert capsys.readouterr().out.startswith("StartMarker()\nParticipant(")

    def test_main_rejects_unknown_log_level(self, monkeypatch, capsys):
        monkeypatch.setenv("UMLSEQ_LOG_LEVEL", "verbose")
        assert main([str(FIXTURES / "test.uml")]) == 1
        captured = capsys.readouterr()
        assert "ERROR: UMLSEQ_LOG_LEVEL: unknown log level 'VERBOSE'" in captured.err
        assert captured.out == ""

    def test_main_accepts_log_level_name(self, monkeypatch, capsys):
        monkeypatch.setenv("UMLSEQ_LOG_LEVEL", "info")
        assert main([str(FIXTURES / "test.uml"), "--check"]) == 0
        assert capsys.readouterr().out == "1 file(s) OK\n"
