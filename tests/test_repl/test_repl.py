"""
Test Suite for the REPL Driver.

Drives the loop with a scripted line source and a small typer application,
checking dispatch, error reporting and termination.
"""

import click
import pytest
import typer

from utility.repl import MALFORMED_INPUT, ControlFlow, evaluate, repl, split_line


def make_app(calls):
    """Build a typer app recording the commands it runs."""
    app = typer.Typer()

    @app.command()
    def add(name: str, age: int) -> None:
        calls.append(("add", name, age))
        print(f"Added person: {name} ({age})")

    @app.command()
    def remove(name: str) -> None:
        calls.append(("remove", name))

    @app.command()
    def check(age: int) -> None:
        if age > 150:
            raise click.BadParameter("age out of range")
        calls.append(("check", age))

    @app.command(name="exit")
    def exit_() -> ControlFlow:
        calls.append(("exit",))
        return ControlFlow.EXIT

    return app


class Feeder:
    """Line source returning scripted lines, then EOF."""

    def __init__(self, *lines):
        self.lines = list(lines)
        self.prompts = []

    def __call__(self, prompt):
        self.prompts.append(prompt)
        if not self.lines:
            raise EOFError
        return self.lines.pop(0)


# SPLIT LINE
@pytest.mark.unit
@pytest.mark.parametrize(
    "line, expected",
    [
        ("add bob 30", ["add", "bob", "30"]),
        ("  add   bob 30  \n", ["add", "bob", "30"]),
        ('add "Mary Ann" 41', ["add", "Mary Ann", "41"]),
        ("", []),
    ],
)
def test_split_line(line, expected):
    """Test lines are split with shell quoting rules."""
    assert split_line(line) == expected


@pytest.mark.unit
def test_split_line_malformed():
    """Test unbalanced quotes are reported as malformed."""
    assert split_line('add "bob 30') is None


# EVALUATE
@pytest.mark.unit
def test_evaluate_runs_command(capsys):
    """Test the first word selects the command and the rest are its args."""
    calls = []
    command = typer.main.get_command(make_app(calls))

    result = evaluate(command, ["add", "bob", "30"])

    assert result is ControlFlow.CONTINUE
    assert calls == [("add", "bob", 30)]
    assert "Added person: bob (30)" in capsys.readouterr().out


@pytest.mark.unit
def test_evaluate_exit():
    """Test a command returning EXIT is reported as EXIT."""
    command = typer.main.get_command(make_app([]))

    assert evaluate(command, ["exit"]) is ControlFlow.EXIT


@pytest.mark.unit
def test_evaluate_unknown_command(capsys):
    """Test an unknown command prints an error and continues."""
    command = typer.main.get_command(make_app([]))

    result = evaluate(command, ["frobnicate"])

    assert result is ControlFlow.CONTINUE
    assert "No such command" in capsys.readouterr().out


@pytest.mark.unit
def test_evaluate_missing_argument(capsys):
    """Test a missing argument prints a usage error and continues."""
    calls = []
    command = typer.main.get_command(make_app(calls))

    result = evaluate(command, ["add", "bob"])

    assert result is ControlFlow.CONTINUE
    assert calls == []
    assert "Missing argument" in capsys.readouterr().out


@pytest.mark.unit
def test_evaluate_bad_parameter(capsys):
    """Test an unparsable value prints an error and continues."""
    calls = []
    command = typer.main.get_command(make_app(calls))

    result = evaluate(command, ["add", "bob", "old"])

    assert result is ControlFlow.CONTINUE
    assert calls == []
    assert "Error" in capsys.readouterr().out


@pytest.mark.unit
def test_evaluate_error_raised_by_command(capsys):
    """Test a click error raised inside a command is shown and the loop continues."""
    calls = []
    command = typer.main.get_command(make_app(calls))

    result = evaluate(command, ["check", "200"])

    assert result is ControlFlow.CONTINUE
    assert calls == []
    assert "age out of range" in capsys.readouterr().out


# REPL LOOP
@pytest.mark.unit
def test_repl_runs_until_eof():
    """Test every line is evaluated and EOF ends the loop."""
    calls = []
    feeder = Feeder("add bob 30", "remove bob")

    repl(make_app(calls), read_line=feeder)

    assert calls == [("add", "bob", 30), ("remove", "bob")]
    assert feeder.prompts == ["> ", "> ", "> "]


@pytest.mark.unit
def test_repl_stops_on_exit():
    """Test lines after an exit command are never read."""
    calls = []
    feeder = Feeder("add bob 30", "exit", "remove bob")

    repl(make_app(calls), read_line=feeder)

    assert calls == [("add", "bob", 30), ("exit",)]
    assert feeder.lines == ["remove bob"]


@pytest.mark.unit
def test_repl_reports_malformed_line(capsys):
    """Test a malformed line prints the error and the loop continues."""
    calls = []

    repl(make_app(calls), read_line=Feeder('add "bob', "remove bob"))

    assert MALFORMED_INPUT in capsys.readouterr().out
    assert calls == [("remove", "bob")]


@pytest.mark.unit
def test_repl_skips_blank_lines(capsys):
    """Test blank lines are ignored silently."""
    calls = []

    repl(make_app(calls), read_line=Feeder("", "   ", "remove bob"))

    assert calls == [("remove", "bob")]
    assert capsys.readouterr().out == ""


@pytest.mark.unit
def test_repl_continues_after_usage_error(capsys):
    """Test an unknown command does not stop the loop."""
    calls = []

    repl(make_app(calls), read_line=Feeder("nope", "remove bob"))

    assert "No such command" in capsys.readouterr().out
    assert calls == [("remove", "bob")]


@pytest.mark.unit
def test_repl_custom_prompt():
    """Test the prompt is passed to the line source."""
    feeder = Feeder()

    repl(make_app([]), read_line=feeder, prompt="$ ")

    assert feeder.prompts == ["$ "]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
