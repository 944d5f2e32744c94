"""End-to-end tests for the command-line interface."""

import io
import logging
from pathlib import Path

import pytest

from tsort.cli import EXIT_CYCLE, EXIT_ERROR, EXIT_OK, bootstrap_logging, main, parse_args, run


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch):
    """Run each test where no tsort.yaml and no TSORT_ variables exist."""
    monkeypatch.chdir(tmp_path)
    for var in ("TSORT_LOG_LEVEL", "TSORT_JSON_LOGS", "TSORT_REPORT_CYCLE"):
        monkeypatch.delenv(var, raising=False)


def run_stdin(text: str, monkeypatch, *argv: str) -> int:
    monkeypatch.setattr("sys.stdin", io.StringIO(text))
    return run(parse_args(list(argv)))


class TestArguments:
    """Test argument parsing."""

    def test_defaults(self):
        """Test that stdin is read when no file is given."""
        args = parse_args([])

        assert args.file == "-"
        assert args.config is None
        assert args.log_level is None
        assert not args.check

    def test_debug_sets_level(self):
        """Test that --debug implies the DEBUG level."""
        assert parse_args(["--debug"]).log_level == "DEBUG"

    def test_log_level_case_insensitive(self):
        """Test that --log-level accepts lower case."""
        assert parse_args(["--log-level", "info"]).log_level == "INFO"


class TestScenarios:
    """Test the documented input/output scenarios."""

    def test_documented_example(self, monkeypatch, capsys):
        """Test a b / b c / a d sorts to a d b c."""
        code = run_stdin("a b\nb c\na d\n", monkeypatch)

        assert code == EXIT_OK
        assert capsys.readouterr().out == "a\nd\nb\nc\n"

    def test_cycle_fails(self, monkeypatch, capsys):
        """Test that x y / y x exits non-zero and names the loop."""
        code = run_stdin("x y\ny x\n", monkeypatch)

        captured = capsys.readouterr()
        assert code == EXIT_CYCLE
        assert captured.out == ""
        assert "tsort: -: input contains a loop:" in captured.err
        assert "tsort: x\n" in captured.err
        assert "tsort: y\n" in captured.err

    def test_single_node(self, monkeypatch, capsys):
        """Test that a line with no targets prints the node."""
        code = run_stdin("p\n", monkeypatch)

        assert code == EXIT_OK
        assert capsys.readouterr().out == "p\n"

    def test_duplicate_edge(self, monkeypatch, capsys):
        """Test that m n / m n prints each node once."""
        code = run_stdin("m n\nm n\n", monkeypatch)

        assert code == EXIT_OK
        assert capsys.readouterr().out == "m\nn\n"

    def test_empty_input(self, monkeypatch, capsys):
        """Test that empty input gives empty output and success."""
        code = run_stdin("", monkeypatch)

        assert code == EXIT_OK
        assert capsys.readouterr().out == ""


class TestFilesAndConfig:
    """Test file input and configuration handling."""

    def test_reads_named_file(self, tmp_path: Path, capsys):
        """Test sorting a file given on the command line."""
        input_path = tmp_path / "deps.txt"
        input_path.write_text("a b\nb c\n")

        code = run(parse_args([str(input_path)]))

        assert code == EXIT_OK
        assert capsys.readouterr().out == "a\nb\nc\n"

    def test_cycle_message_names_file(self, tmp_path: Path, capsys):
        """Test that the loop message names the input file."""
        input_path = tmp_path / "deps.txt"
        input_path.write_text("s s\n")

        code = run(parse_args([str(input_path)]))

        assert code == EXIT_CYCLE
        assert f"tsort: {input_path}: input contains a loop:" in capsys.readouterr().err

    def test_missing_file(self, tmp_path: Path, capsys):
        """Test that an unreadable input exits with the error code."""
        code = run(parse_args([str(tmp_path / "missing.txt")]))

        assert code == EXIT_ERROR
        assert "missing.txt" in capsys.readouterr().err

    def test_missing_config(self, tmp_path: Path, monkeypatch, capsys):
        """Test that an explicit missing config file is an error."""
        code = run_stdin("a b\n", monkeypatch, "--config", str(tmp_path / "none.yaml"))

        assert code == EXIT_ERROR
        assert "Configuration file not found" in capsys.readouterr().err

    def test_config_separator(self, tmp_path: Path, monkeypatch, capsys):
        """Test that the configured separator terminates each name."""
        config_path = tmp_path / "tsort.yaml"
        config_path.write_text("output:\n  separator: ' '\n")

        code = run_stdin("a b\n", monkeypatch)

        assert code == EXIT_OK
        assert capsys.readouterr().out == "a b "

    def test_config_disables_cycle_members(self, tmp_path: Path, monkeypatch, capsys):
        """Test that report_cycle: false prints only the summary line."""
        config_path = tmp_path / "custom.yaml"
        config_path.write_text("output:\n  report_cycle: false\n")

        code = run_stdin("x y\ny x\n", monkeypatch, "-c", str(config_path))

        err = capsys.readouterr().err
        assert code == EXIT_CYCLE
        assert "input contains a loop" in err
        assert "tsort: x\n" not in err


    def test_malformed_section_with_env_override(self, tmp_path: Path, monkeypatch, capsys):
        """Test that a scalar config section plus an env override exits as a config error."""
        (tmp_path / "tsort.yaml").write_text("logging: verbose\n")
        monkeypatch.setenv("TSORT_LOG_LEVEL", "INFO")

        code = run_stdin("a b\n", monkeypatch)

        captured = capsys.readouterr()
        assert code == EXIT_ERROR
        assert captured.out == ""
        assert "must be a mapping" in captured.err
        assert "input contains a loop" not in captured.err


class TestBootstrapLogging:
    """Test logging setup before the configuration file is read."""

    def test_env_level_applies_before_config(self, monkeypatch):
        """Test that TSORT_LOG_LEVEL is honoured by the first configuration."""
        monkeypatch.setenv("TSORT_LOG_LEVEL", "DEBUG")

        bootstrap_logging(parse_args([]))

        assert logging.getLogger().level == logging.DEBUG

    def test_flag_wins_over_env(self, monkeypatch):
        """Test that --log-level overrides TSORT_LOG_LEVEL."""
        monkeypatch.setenv("TSORT_LOG_LEVEL", "DEBUG")

        bootstrap_logging(parse_args(["--log-level", "ERROR"]))

        assert logging.getLogger().level == logging.ERROR

    def test_invalid_env_level_falls_back(self, monkeypatch):
        """Test that an unusable TSORT_LOG_LEVEL does not break startup."""
        monkeypatch.setenv("TSORT_LOG_LEVEL", "LOUD")

        bootstrap_logging(parse_args([]))

        assert logging.getLogger().level == logging.WARNING

    def test_invalid_env_level_reported_by_run(self, monkeypatch, capsys):
        """Test that the full configuration load still rejects the bad level."""
        monkeypatch.setenv("TSORT_LOG_LEVEL", "LOUD")

        code = run_stdin("a b\n", monkeypatch)

        assert code == EXIT_ERROR
        assert capsys.readouterr().out == ""


class TestCheckMode:
    """Test --check validation output."""

    def test_check_valid_graph(self, monkeypatch, capsys):
        """Test that a DAG passes validation."""
        code = run_stdin("a b\n", monkeypatch, "--check")

        assert code == EXIT_OK
        assert "Validation Status: PASS" in capsys.readouterr().out

    def test_check_cycle(self, monkeypatch, capsys):
        """Test that a cycle fails validation with its path."""
        code = run_stdin("x y\ny x\n", monkeypatch, "--check")

        out = capsys.readouterr().out
        assert code == EXIT_CYCLE
        assert "Validation Status: FAIL" in out
        assert "x -> y -> x" in out


class TestMain:
    """Test the process entry point."""

    def test_main_exits_with_code(self, monkeypatch, capsys):
        """Test that main() raises SystemExit carrying the exit code."""
        monkeypatch.setattr("sys.stdin", io.StringIO("x y\ny x\n"))

        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == EXIT_CYCLE
