"""
Tests for the command-line entry point (shim.py).
"""

import json
from unittest.mock import patch

import pytest

import shim
from langshim.config import Config
from langshim.errors import Unresolved


@pytest.fixture
def cli(make_context):
    """Run shim.main() against the temporary tree."""
    def _run(*args, context=None):
        context = context or make_context()
        with patch("shim.load_config", return_value=Config()), \
             patch("shim.setup_logging"), \
             patch("shim.build_context", return_value=context):
            return shim.main(["langshim", *args])
    return _run


class TestCurrent:
    """Tests for 'langshim current'."""

    def test_current(self, cli, roots, install, capsys):
        """Test the version and origin are shown."""
        install(roots.user, "python", "3.12.1")
        (roots.user / "languages" / "python" / "current").write_text("3.12.1")

        assert cli("current", "python") == 0
        out = capsys.readouterr().out
        assert "Python 3.12.1 (User default: 3.12.1)" in out

    def test_current_json(self, cli, roots, install, capsys):
        """Test JSON output."""
        install(roots.user, "python", "3.12.1")
        (roots.user / "languages" / "python" / "current").write_text("3.12.1")

        assert cli("current", "python", "--json") == 0
        data = json.loads(capsys.readouterr().out)
        assert data["version"] == "3.12.1"
        assert data["source"] == "user_default"

    def test_current_pin(self, cli, roots, install, capsys):
        """Test --pin behaves like a command line override."""
        install(roots.user, "python", "3.11.7")
        assert cli("current", "python", "--pin", "3.11.7") == 0
        assert "Command line override: 3.11.7" in capsys.readouterr().out

    def test_current_unresolved(self, cli, capsys):
        """Test an unresolved language reports on stderr and exits 1."""
        assert cli("current", "ruby") == 1
        err = capsys.readouterr().err
        assert "ruby not found and running in non-interactive mode" in err


class TestList:
    """Tests for 'langshim list'."""

    def test_list(self, cli, roots, install, capsys):
        """Test installed versions are printed newest first."""
        install(roots.user, "node", "18.19.0", binaries=("node",))
        install(roots.system, "node", "20.10.0", binaries=("node",))

        assert cli("list", "node") == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].startswith("20.10.0")
        assert "system" in lines[0]
        assert lines[1].startswith("18.19.0")

    def test_list_empty(self, cli, capsys):
        """Test the message when nothing is installed."""
        assert cli("list", "go") == 0
        assert "No managed Go versions installed" in capsys.readouterr().err

    def test_list_json(self, cli, roots, install, capsys):
        """Test JSON output."""
        install(roots.user, "node", "18.19.0", binaries=("node",))
        assert cli("list", "node", "--json") == 0
        data = json.loads(capsys.readouterr().out)
        assert data == [{
            "version": "18.19.0",
            "scope": "user",
            "path": str(roots.user / "languages" / "node" / "18.19.0"),
        }]


class TestWhichEnvUse:
    """Tests for 'which', 'env' and 'use'."""

    def test_which(self, cli, roots, install, capsys):
        """Test the mapped binary path is printed."""
        root = install(roots.user, "python", "3.12.1", binaries=("python3", "pip3"))
        (roots.user / "languages" / "python" / "current").write_text("3.12.1")

        assert cli("which", "python", "pip") == 0
        assert capsys.readouterr().out.strip() == str(root / "bin" / "pip3")

    def test_env(self, cli, roots, install, capsys):
        """Test the overlay is printed as exports."""
        root = install(roots.user, "node", "18.19.0", binaries=("node",))
        assert cli("env", "node", "--pin", "18.19.0") == 0
        out = capsys.readouterr().out
        assert f"export NPM_CONFIG_PREFIX={root}" in out

    def test_use(self, cli, roots, install):
        """Test the user marker is written."""
        install(roots.system, "go", "1.21.5", binaries=("go",))
        assert cli("use", "go", "1.21.5") == 0
        assert (roots.user / "languages" / "go" / "current").read_text() == "1.21.5\n"

    def test_use_not_installed(self, cli, capsys):
        """Test selecting a missing version fails."""
        assert cli("use", "go", "1.99.0") == 1
        assert "Specified version 1.99.0 not found for go" in capsys.readouterr().err

    def test_unknown_language_rejected(self, cli):
        """Test argparse rejects unregistered languages."""
        with pytest.raises(SystemExit) as exc_info:
            cli("current", "cobol")
        assert exc_info.value.code == 2


class TestShimMode:
    """Tests for invocation under a toolchain command name."""

    @patch("shim.run_shim", return_value=1)
    def test_language_argv0_dispatches(self, mock_run):
        """Test argv[0] naming a toolchain command goes to the dispatcher."""
        assert shim.main(["/opt/shims/npm", "install"]) == 1
        mock_run.assert_called_once_with(["/opt/shims/npm", "install"])

    @patch("shim.run_shim", return_value=1)
    def test_exec_subcommand(self, mock_run):
        """Test 'exec' dispatches as the named command."""
        shim.main(["langshim", "exec", "npm", "install", "--save"])
        mock_run.assert_called_once_with(["npm", "install", "--save"], command="npm")

    @patch("shim.run_shim", side_effect=Unresolved("node", interactive=True, install_hint="langshim node install <version>"))
    def test_dispatch_error_reported(self, mock_run, capsys):
        """Test dispatcher errors become exit code 1 with a message."""
        assert shim.main(["node", "app.js"]) == 1
        err = capsys.readouterr().err
        assert "✗ node not found. Run 'langshim node install <version>' to install a version" in err

    def test_shim_directories(self):
        """Test the shim's own directory is found from argv[0]."""
        assert shim.shim_directories(["/opt/shims/python"]) == ["/opt/shims"]
        assert shim.shim_directories(["python"]) == []
