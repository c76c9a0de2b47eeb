"""
Tests for the PortHound command-line interface.
"""

import json

import pytest

from conftest import failed
from hound import cli
from hound.commands import HoundCommands
from hound.display import Display


@pytest.fixture
def use_runner(monkeypatch):
    """Route CLI commands through the given FakeRunner."""
    def install(runner):
        monkeypatch.setattr(
            cli, "HoundCommands",
            lambda config: HoundCommands(runner=runner, config=config),
        )
        return runner
    return install


class TestParser:
    """Tests for argument parsing."""

    def test_command_required(self):
        """Test that a subcommand is required."""
        with pytest.raises(SystemExit):
            cli.create_parser().parse_args([])

    def test_ports_options(self):
        """Test parsing of the ports subcommand options."""
        args = cli.create_parser().parse_args(
            ["--timeout", "4", "ports", "-s", "node", "-c", "dev", "--export", "out.csv"]
        )

        assert args.timeout == 4.0
        assert args.search == "node"
        assert args.category == "dev"
        assert args.export_file == "out.csv"
        assert args.handler is cli.run_ports

    def test_processes_defaults(self):
        """Test processes subcommand defaults."""
        args = cli.create_parser().parse_args(["processes"])

        assert args.sort == "memory"
        assert not args.ascending
        assert args.limit is None

    def test_bad_category(self):
        """Test that an unknown category is rejected."""
        with pytest.raises(SystemExit):
            cli.create_parser().parse_args(["ports", "-c", "games"])


class TestMain:
    """Tests for main() against canned tool output."""

    def test_ports_json(self, use_runner, host_runner, capsys):
        """Test ports output as JSON."""
        use_runner(host_runner)

        assert cli.main(["--no-color", "ports", "--json"]) == cli.EXIT_OK

        data = json.loads(capsys.readouterr().out)
        assert [entry["port"] for entry in data] == [135, 3000, 5353, 5432, 8080]
        assert data[4]["process_name"] == "myapp.exe"

    def test_ports_table(self, use_runner, host_runner, capsys):
        """Test ports output as a table."""
        use_runner(host_runner)

        assert cli.main(["--no-color", "ports"]) == cli.EXIT_OK
        assert "Listening Ports (5)" in capsys.readouterr().out

    def test_ports_filtered(self, use_runner, host_runner, capsys):
        """Test ports filtered by category."""
        use_runner(host_runner)

        assert cli.main(["ports", "--json", "-c", "database"]) == cli.EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert [entry["port"] for entry in data] == [5432]

    def test_ports_export(self, use_runner, host_runner, tmp_path):
        """Test exporting the port view to a file."""
        use_runner(host_runner)
        path = tmp_path / "ports.json"

        assert cli.main(["--no-color", "ports", "--export", str(path)]) == cli.EXIT_OK
        assert json.loads(path.read_text(encoding="utf-8"))["export_info"]["entry_count"] == 5

    def test_ports_bad_export_extension(self, use_runner, host_runner, tmp_path):
        """Test export to a file with an unknown extension."""
        use_runner(host_runner)

        assert cli.main(["ports", "--export", str(tmp_path / "out.txt")]) == cli.EXIT_ERROR

    def test_processes_sorted_and_limited(self, use_runner, host_runner, capsys):
        """Test process sorting and the row limit."""
        use_runner(host_runner)

        assert cli.main(["processes", "--json", "--sort", "pid", "--ascending", "-n", "2"]) == cli.EXIT_OK
        data = json.loads(capsys.readouterr().out)
        assert [entry["pid"] for entry in data] == [4, 100]

    def test_required_collector_failure(self, use_runner, make_runner, capsys):
        """Test that a failed required tool is reported as an error."""
        use_runner(make_runner(netstat="", tasklist=failed("tasklist")))

        assert cli.main(["--no-color", "ports"]) == cli.EXIT_ERROR
        assert "tasklist" in capsys.readouterr().err

    def test_kill_port(self, use_runner, host_runner, capsys):
        """Test killing the owner of a port."""
        use_runner(host_runner)

        assert cli.main(["--no-color", "kill-port", "8080", "--yes"]) == cli.EXIT_OK
        assert "Killed PID 100 on port 8080" in capsys.readouterr().out

    def test_kill_port_not_found(self, use_runner, host_runner, capsys):
        """Test kill-port on a port nobody listens on."""
        use_runner(host_runner)

        assert cli.main(["--no-color", "kill-port", "9999", "-y"]) == cli.EXIT_NOT_FOUND
        assert "No process found on port 9999" in capsys.readouterr().err
        assert not host_runner.ran("taskkill")

    def test_kill_declined(self, use_runner, host_runner, monkeypatch):
        """Test that a declined confirmation kills nothing."""
        use_runner(host_runner)
        monkeypatch.setattr(Display, "confirm", lambda self, question: False)

        assert cli.main(["kill-pid", "100"]) == cli.EXIT_ERROR
        assert host_runner.calls == []

    def test_kill_pid_failure(self, use_runner, make_runner, capsys):
        """Test reporting of a failed kill."""
        use_runner(make_runner(taskkill=failed("taskkill", 128)))

        assert cli.main(["--no-color", "kill-pid", "77", "--yes"]) == cli.EXIT_ERROR
        assert "Failed to kill PID 77" in capsys.readouterr().err

    def test_overview_json(self, use_runner, host_runner, monkeypatch, capsys):
        """Test network overview as JSON."""
        use_runner(host_runner)
        monkeypatch.setattr("hound.commands.local_address", lambda host, port: "10.1.2.3")

        assert cli.main(["overview", "--json"]) == cli.EXIT_OK
        assert json.loads(capsys.readouterr().out) == {"local_ip": "10.1.2.3", "hostname": "DESKTOP-42"}

    def test_bad_config(self, use_runner, host_runner, tmp_path, capsys):
        """Test that an invalid config file is reported."""
        use_runner(host_runner)
        path = tmp_path / "bad.toml"
        path.write_text("[hound]\ncommand_timeout = 0\n", encoding="utf-8")

        assert cli.main(["--no-color", "--config", str(path), "ports"]) == cli.EXIT_ERROR
        assert "command_timeout" in capsys.readouterr().err

    def test_timeout_applies_to_every_tool(self, monkeypatch, host_runner):
        """Test that --timeout limits every external tool."""
        seen = []

        def capture(config):
            seen.append(config)
            return HoundCommands(runner=host_runner, config=config)

        monkeypatch.setattr(cli, "HoundCommands", capture)

        assert cli.main(["--timeout", "3", "ports", "--json"]) == cli.EXIT_OK
        assert (seen[0].command_timeout, seen[0].path_timeout, seen[0].kill_timeout) == (3.0, 3.0, 3.0)
