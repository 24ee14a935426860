"""
Tests for the command-line interface and the report formatters.
"""

import json
import os

import pytest

from flowlinter import cli
from flowlinter.core.aggregate import aggregate
from flowlinter.core.models import RunSummary, ScanReport, SeverityTally
from flowlinter.errors import RemoteRetrievalFailure
from flowlinter.formatters import CLIFormatter, JSONFormatter, get_formatter

from factories import make_detail, make_flow, make_rule_result, make_scan_result

EXAMPLES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "examples", "flows")


def build_report(*scan_results, status=0):
    issues, tally = aggregate(list(scan_results))
    return ScanReport(
        summary=RunSummary.build(len(scan_results), len(issues), tally),
        status=status,
        results=issues,
        scan_results=list(scan_results),
        tally=tally,
    )


@pytest.fixture
def in_tmp(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestScanCommand:
    """Tests for the scan command."""

    def test_json_output_and_exit_code(self, in_tmp, capsys):
        """Test JSON output and the failing exit code for the example flows."""
        code = cli.main(["scan", "-d", EXAMPLES_DIR, "--json"])

        data = json.loads(capsys.readouterr().out)
        assert code == 1
        assert data["status"] == 1
        assert data["summary"]["flowsNumber"] == 2
        assert data["summary"]["results"] == 7
        assert data["summary"]["errorLevelsDetails"] == {"error": 4, "warning": 3}
        assert {r["flowName"] for r in data["results"]} == {"Account Update Contacts"}

    def test_failon_never(self, in_tmp, capsys):
        """Test that --failon never always exits 0."""
        assert cli.main(["scan", "-d", EXAMPLES_DIR, "--json", "-f", "never"]) == 0

    def test_lint_alias_with_files(self, in_tmp, capsys):
        """Test the lint alias with an explicit file list."""
        path = os.path.join(EXAMPLES_DIR, "Case_Escalation.flow-meta.xml")

        code = cli.main(["lint", "-p", path, "--failon", "note"])

        out = capsys.readouterr().out
        assert code == 0
        assert "Total: 0 Results in 1 Flows." in out

    def test_text_output(self, in_tmp, capsys):
        """Test the plain text report."""
        cli.main(["scan", "-d", EXAMPLES_DIR, "--no-color"])

        out = capsys.readouterr().out
        assert "Flow: Account Update Contacts" in out
        assert "(7 results)" in out
        assert "Total: 7 Results in 2 Flows." in out
        assert "- error: 4" in out
        assert "- warning: 3" in out
        assert "- note: 0" in out

    def test_config_file(self, in_tmp, capsys):
        """Test that an explicit config file limits the rules and sets severities."""
        config = in_tmp / "custom.yml"
        config.write_text("rules:\n  FlowDescription:\n    severity: note\n")

        code = cli.main(["scan", "-d", EXAMPLES_DIR, "-c", str(config), "--json"])

        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert [r["rule"] for r in data["results"]] == ["Missing Flow Description"]
        assert data["results"][0]["severity"] == "note"

    def test_missing_config_file(self, in_tmp, capsys):
        """Test that a missing config file is reported as an error."""
        code = cli.main(["scan", "-d", EXAMPLES_DIR, "-c", "missing.yml"])

        assert code == 1
        assert "Error:" in capsys.readouterr().err

    def test_directory_and_files_are_exclusive(self, in_tmp, capsys):
        """Test that -d and -p cannot be combined."""
        path = os.path.join(EXAMPLES_DIR, "Case_Escalation.flow-meta.xml")

        with pytest.raises(SystemExit) as excinfo:
            cli.main(["scan", "-d", EXAMPLES_DIR, "-p", path])

        assert excinfo.value.code == 2

    def test_unknown_directory(self, in_tmp, capsys):
        """Test that a directory that does not exist is rejected."""
        with pytest.raises(SystemExit):
            cli.main(["scan", "-d", str(in_tmp / "nowhere")])

    def test_color_follows_terminal(self, in_tmp, monkeypatch, capsys):
        """Test that the text report is colored on a terminal."""
        monkeypatch.setattr("flowlinter.formatters.cli.supports_color", lambda: True)

        cli.main(["scan", "-d", EXAMPLES_DIR])

        assert "\x1b[" in capsys.readouterr().out

    def test_no_color_flag_disables_color(self, in_tmp, monkeypatch, capsys):
        """Test that --no-color turns off color on a terminal."""
        monkeypatch.setattr("flowlinter.formatters.cli.supports_color", lambda: True)

        cli.main(["scan", "-d", EXAMPLES_DIR, "--no-color"])

        out = capsys.readouterr().out
        assert "\x1b[" not in out
        assert "Total: 7 Results in 2 Flows." in out

    def test_output_format_selected_by_name(self, in_tmp, monkeypatch, capsys):
        """Test that the scan command picks its formatter by name."""
        requested = []

        def recording_get_formatter(name):
            requested.append(name)
            return get_formatter(name)

        monkeypatch.setattr(cli, "get_formatter", recording_get_formatter)

        cli.main(["scan", "--json"])
        cli.main(["scan"])

        assert requested == ["json", "cli"]

    def test_empty_directory_passes(self, in_tmp, capsys):
        """Test that scanning a directory without flows passes."""
        code = cli.main(["scan", "--json"])

        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert data["summary"]["flowsNumber"] == 0
        assert data["results"] == []


class TestRetrieveOption:
    """Tests for retrieving flows before the scan."""

    def test_retrieve_before_scan(self, in_tmp, monkeypatch, capsys):
        """Test that a target org triggers a retrieve first."""
        calls = []
        monkeypatch.setattr(cli, "retrieve_flows", lambda target, timeout=None: calls.append((target, timeout)))

        code = cli.main(["scan", "-u", "my-org", "--retrieve-timeout", "60", "--json"])

        assert code == 0
        assert calls == [("my-org", 60.0)]

    def test_retrieve_flag_uses_default_org(self, in_tmp, monkeypatch, capsys):
        """Test that --retrieve alone uses the default org."""
        calls = []
        monkeypatch.setattr(cli, "retrieve_flows", lambda target, timeout=None: calls.append(target))

        cli.main(["scan", "-r", "--json"])

        assert calls == [None]

    def test_retrieve_failure(self, in_tmp, monkeypatch, capsys):
        """Test that a failed retrieve prints its output and exits 1."""
        def failing(target, timeout=None):
            raise RemoteRetrievalFailure("Retrieve Operation Failed.", output="ERROR: no org")

        monkeypatch.setattr(cli, "retrieve_flows", failing)

        code = cli.main(["scan", "-o", "my-org"])

        err = capsys.readouterr().err
        assert code == 1
        assert "Retrieve Operation Failed." in err
        assert "ERROR: no org" in err


class TestOtherCommands:
    """Tests for init, list-rules and the bare command."""

    def test_no_command_prints_help(self, capsys):
        """Test that running without a command prints help."""
        assert cli.main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()

    def test_init(self, in_tmp, capsys):
        """Test config file creation and the --force flag."""
        assert cli.main(["init"]) == 0
        assert (in_tmp / ".flow-linter.yml").is_file()

        assert cli.main(["init"]) == 1
        assert "already exists" in capsys.readouterr().out

        assert cli.main(["init", "--force"]) == 0

    def test_list_rules(self, capsys):
        """Test that list-rules prints the built-in rules."""
        assert cli.main(["list-rules"]) == 0

        out = capsys.readouterr().out
        assert "HardcodedId" in out
        assert "DMLStatementInLoop" in out


class TestFormatters:
    """Tests for the report formatters."""

    def test_json_formatter(self):
        """Test the JSON report fields."""
        report = build_report(
            make_scan_result(make_flow(), make_rule_result("R1", [make_detail("A")])), status=1
        )

        data = json.loads(JSONFormatter().format_result(report))

        assert data["status"] == 1
        assert data["results"][0]["name"] == "A"
        assert data["results"][0]["flowUri"] == "flows/My_Flow.flow-meta.xml"

    def test_cli_formatter_groups_by_flow(self):
        """Test that the text report has one block per flow."""
        report = build_report(
            make_scan_result(make_flow("F1", "Flow One"), make_rule_result("R1", [make_detail("a")])),
            make_scan_result(make_flow("F2", "Flow Two"), make_rule_result("R2", [make_detail("b")], severity="warning")),
        )

        out = CLIFormatter(use_color=False).format_result(report)

        assert out.index("Flow: Flow One (F1.flow-meta.xml) (1 results)") < out.index("Flow: Flow Two")
        assert "Type: AutoLaunchedFlow" in out
        assert "Total: 2 Results in 2 Flows." in out
        assert "\x1b[" not in out

    def test_cli_formatter_empty_report(self):
        """Test the text report without findings."""
        report = ScanReport(
            summary=RunSummary.build(0, 0, SeverityTally()), status=0, results=[]
        )

        out = CLIFormatter(use_color=False).format_result(report)

        assert "Flow:" not in out
        assert "Total: 0 Results in 0 Flows." in out

    @pytest.mark.parametrize("name,expected", [
        ("json", JSONFormatter),
        ("cli", CLIFormatter),
        ("TEXT", CLIFormatter),
    ])
    def test_get_formatter(self, name, expected):
        """Test formatter lookup by name."""
        assert isinstance(get_formatter(name), expected)

    def test_unknown_formatter(self):
        """Test that an unknown format name is rejected."""
        with pytest.raises(ValueError):
            get_formatter("sarif")
