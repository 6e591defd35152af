"""Tests for output formatting."""

import io
import json

from rich.console import Console

from machindex.models import Record
from machindex.output import OutputContext, record_to_dict


def make_console() -> tuple[Console, io.StringIO]:
    output = io.StringIO()
    return Console(file=output, force_terminal=False, width=200), output


class TestOutputContextPrint:
    """Tests for OutputContext.print method."""

    def test_print_in_normal_mode(self) -> None:
        console, output = make_console()
        OutputContext(console=console).print("Hello world")
        assert "Hello world" in output.getvalue()

    def test_print_suppressed_in_json_mode(self) -> None:
        console, output = make_console()
        OutputContext(console=console, json_mode=True).print("Hello world")
        assert output.getvalue() == ""


class TestOutputContextMessages:
    """Tests for error and success messages."""

    def test_error_in_normal_mode(self) -> None:
        console, output = make_console()
        OutputContext(console=console).error("Something failed")
        assert "Error: Something failed" in output.getvalue()

    def test_error_text_is_not_markup(self) -> None:
        console, output = make_console()
        OutputContext(console=console).error("Machine '[bold]x' is locked")
        assert "Error: Machine '[bold]x' is locked" in output.getvalue()

    def test_error_in_json_mode(self, capsys) -> None:
        console, _ = make_console()
        OutputContext(console=console, json_mode=True).error("bad", {"path": "/x"})
        assert json.loads(capsys.readouterr().out) == {"error": "bad", "path": "/x"}

    def test_success_in_json_mode(self, capsys) -> None:
        console, _ = make_console()
        OutputContext(console=console, json_mode=True).success("done")
        assert json.loads(capsys.readouterr().out) == {"success": "done"}


class TestRecords:
    """Tests for record listing output."""

    def test_record_to_dict_includes_id(self) -> None:
        record = Record.from_struct("abc", {"name": "web", "updated_at": "stamp"})
        data = record_to_dict(record)
        assert data["id"] == "abc"
        assert data["name"] == "web"
        assert data["updated_at"] == "stamp"

    def test_table_in_normal_mode(self) -> None:
        console, output = make_console()
        records = [
            Record.from_struct("abc", {"name": "web", "provider": "docker"}),
            Record.from_struct("def", {"name": "db", "provider": "virtualbox"}),
        ]
        OutputContext(console=console).records(records)
        text = output.getvalue()
        assert "web" in text
        assert "virtualbox" in text
        assert "abc" in text

    def test_empty_listing(self) -> None:
        console, output = make_console()
        OutputContext(console=console).records([])
        assert "No machines" in output.getvalue()

    def test_json_listing(self, capsys) -> None:
        console, _ = make_console()
        records = [Record.from_struct("abc", {"name": "web", "data_path": "/d"})]
        OutputContext(console=console, json_mode=True).records(records)
        data = json.loads(capsys.readouterr().out)
        assert data[0]["id"] == "abc"
        assert data[0]["data_path"] == "/d"
