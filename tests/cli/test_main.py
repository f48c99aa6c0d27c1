"""Tests for CLI main module."""

import json as _json
import os as _os
import pathlib as _pathlib

import click.testing as _click_testing

import viralmap
import viralmap.cli as cli


def _write(directory: _pathlib.Path, name: str, content: str) -> str:
    path = directory / name
    path.write_text(content)
    return str(path)


class TestCLIBasics:
    """Test basic CLI functionality."""

    def setup_method(self) -> None:
        """Set up test fixtures with clean environment."""
        clean_env = {k: v for k, v in _os.environ.items() if not k.startswith("VIRALMAP_")}
        self.runner = _click_testing.CliRunner(env=clean_env)

    def test_help_shows_all_commands(self) -> None:
        """Help output should list all available commands."""
        result = self.runner.invoke(cli.cli, ["--help"])
        assert result.exit_code == 0
        for cmd in ["get", "set", "merge", "fetch", "match"]:
            assert cmd in result.output, f"Command '{cmd}' missing from help"

    def test_version_shows_current_version(self) -> None:
        """Version flag should show the package version."""
        result = self.runner.invoke(cli.cli, ["--version"])
        assert result.exit_code == 0
        assert viralmap.__version__ in result.output


class TestGet:
    """Tests for the get command."""

    def setup_method(self) -> None:
        clean_env = {k: v for k, v in _os.environ.items() if not k.startswith("VIRALMAP_")}
        self.runner = _click_testing.CliRunner(env=clean_env)

    def test_scalar(self, tmp_path: _pathlib.Path) -> None:
        """Scalars print as text."""
        file = _write(tmp_path, "config.yaml", "server:\n  port: 8080\n")
        result = self.runner.invoke(cli.cli, ["get", file, "server.port"])
        assert result.exit_code == 0
        assert result.output == "8080\n"

    def test_mapping_as_yaml(self, tmp_path: _pathlib.Path) -> None:
        """Containers print as YAML."""
        file = _write(tmp_path, "config.yaml", "server:\n  port: 8080\n")
        result = self.runner.invoke(cli.cli, ["--no-color", "get", file, "server"])
        assert result.exit_code == 0
        assert result.output == "port: 8080\n"

    def test_json_output(self, tmp_path: _pathlib.Path) -> None:
        """--json prints JSON."""
        file = _write(tmp_path, "config.json", '{"a": {"b": [1, 2]}}')
        result = self.runner.invoke(cli.cli, ["get", file, "a", "--json"])
        assert result.exit_code == 0
        assert _json.loads(result.output) == {"b": [1, 2]}

    def test_missing_path(self, tmp_path: _pathlib.Path) -> None:
        """A missing path is an error."""
        file = _write(tmp_path, "config.yaml", "a: 1\n")
        result = self.runner.invoke(cli.cli, ["get", file, "b.c"])
        assert result.exit_code == 1
        assert "No value at b.c" in result.output

    def test_custom_separator(self, tmp_path: _pathlib.Path) -> None:
        """--separator changes how PATH is split."""
        file = _write(tmp_path, "config.yaml", "a:\n  b.c: 1\n")
        result = self.runner.invoke(cli.cli, ["--separator", "/", "get", file, "a/b.c"])
        assert result.exit_code == 0
        assert result.output == "1\n"

    def test_env_override(self, tmp_path: _pathlib.Path) -> None:
        """--env lets environment variables win."""
        file = _write(tmp_path, "config.yaml", "server:\n  port: 8080\n")
        result = self.runner.invoke(cli.cli, ["get", file, "server.port", "--env"], env={"SERVER_PORT": "9000"})
        assert result.exit_code == 0
        assert result.output == "9000\n"

    def test_env_prefix(self, tmp_path: _pathlib.Path) -> None:
        """--env-prefix names the variables to consult."""
        file = _write(tmp_path, "config.yaml", "port: 8080\n")
        result = self.runner.invoke(
            cli.cli,
            ["get", file, "port", "--env", "--env-prefix", "APP_"],
            env={"PORT": "1", "APP_PORT": "2"},
        )
        assert result.output == "2\n"

    def test_unreadable_document(self, tmp_path: _pathlib.Path) -> None:
        """Parse errors are reported without a traceback."""
        file = _write(tmp_path, "config.yaml", "a: 1\na: 2\n")
        result = self.runner.invoke(cli.cli, ["get", file, "a"])
        assert result.exit_code == 1
        assert "Error in document" in result.output


class TestSet:
    """Tests for the set command."""

    def setup_method(self) -> None:
        clean_env = {k: v for k, v in _os.environ.items() if not k.startswith("VIRALMAP_")}
        self.runner = _click_testing.CliRunner(env=clean_env)

    def test_prints_document(self, tmp_path: _pathlib.Path) -> None:
        """The updated document is printed; values are parsed as YAML."""
        file = _write(tmp_path, "config.yaml", "server:\n  port: 8080\n")
        result = self.runner.invoke(cli.cli, ["--no-color", "set", file, "server.tls.enabled", "true"])
        assert result.exit_code == 0
        assert result.output == "server:\n  port: 8080\n  tls:\n    enabled: true\n"
        assert _pathlib.Path(file).read_text() == "server:\n  port: 8080\n"

    def test_output_file(self, tmp_path: _pathlib.Path) -> None:
        """-o writes the document, as JSON for .json files."""
        file = _write(tmp_path, "config.yaml", "a: 1\n")
        output = tmp_path / "out.json"
        result = self.runner.invoke(cli.cli, ["set", file, "b", "[1, 2]", "-o", str(output)])
        assert result.exit_code == 0
        assert _json.loads(output.read_text()) == {"a": 1, "b": [1, 2]}

    def test_conflict(self, tmp_path: _pathlib.Path) -> None:
        """Writing below a scalar fails cleanly."""
        file = _write(tmp_path, "config.yaml", "a: 1\n")
        result = self.runner.invoke(cli.cli, ["set", file, "a.b", "2"])
        assert result.exit_code == 1
        assert "Cannot descend" in result.output


class TestMergeFetchMatch:
    """Tests for merge, fetch and match."""

    def setup_method(self) -> None:
        clean_env = {k: v for k, v in _os.environ.items() if not k.startswith("VIRALMAP_")}
        self.runner = _click_testing.CliRunner(env=clean_env)

    def test_merge(self, tmp_path: _pathlib.Path) -> None:
        """Later files are merged on top of earlier ones."""
        base = _write(tmp_path, "base.yaml", "server:\n  port: 1\n  hosts: [a]\n")
        local = _write(tmp_path, "local.yaml", "server:\n  port: 2\n  hosts: [b]\n  debug: true\n")
        result = self.runner.invoke(cli.cli, ["merge", base, local, "--json"])
        assert result.exit_code == 0
        assert _json.loads(result.output) == {"server": {"port": 2, "hosts": ["a", "b"], "debug": True}}

    def test_merge_no_overwrite_sorted(self, tmp_path: _pathlib.Path) -> None:
        """--no-overwrite keeps scalars; --sort orders keys."""
        base = _write(tmp_path, "base.yaml", "z: 1\na: 1\n")
        local = _write(tmp_path, "local.yaml", "z: 2\nm: 3\n")
        result = self.runner.invoke(cli.cli, ["--no-color", "merge", base, local, "--no-overwrite", "--sort"])
        assert result.exit_code == 0
        assert result.output == "a: 1\nm: 3\nz: 1\n"

    def test_fetch(self, tmp_path: _pathlib.Path) -> None:
        """fetch finds a key at any depth."""
        file = _write(tmp_path, "config.yaml", "db:\n  password: x\nusers:\n- password: y\n")
        result = self.runner.invoke(cli.cli, ["fetch", file, "password"])
        assert result.output == "x\n"
        result = self.runner.invoke(cli.cli, ["fetch", file, "password", "--all", "--json"])
        assert _json.loads(result.output) == ["x", "y"]

    def test_fetch_missing(self, tmp_path: _pathlib.Path) -> None:
        """A key found nowhere is an error."""
        file = _write(tmp_path, "config.yaml", "a: 1\n")
        result = self.runner.invoke(cli.cli, ["fetch", file, "nope"])
        assert result.exit_code == 1
        assert "No value for nope" in result.output

    def test_match(self, tmp_path: _pathlib.Path) -> None:
        """match prints the score and exits 1 unless it is positive."""
        file = _write(tmp_path, "config.yaml", "server:\n  port: 8080\n")
        result = self.runner.invoke(cli.cli, ["match", file, "{server: {port: 8080}}"])
        assert result.exit_code == 0
        assert result.output == "1\n"

        result = self.runner.invoke(cli.cli, ["match", file, "{server: {port: 1}}"])
        assert result.exit_code == 1
        assert result.output == "-1\n"

    def test_match_prototype_file(self, tmp_path: _pathlib.Path) -> None:
        """The prototype can be a file."""
        file = _write(tmp_path, "config.yaml", "a: 1\nb: 2\n")
        prototype = _write(tmp_path, "prototype.yaml", "a: ~\n")
        assert self.runner.invoke(cli.cli, ["match", file, prototype]).exit_code == 0
        assert self.runner.invoke(cli.cli, ["match", file, prototype, "--strict"]).exit_code == 1

    def test_match_rejects_non_mapping(self, tmp_path: _pathlib.Path) -> None:
        """Prototypes must be mappings."""
        file = _write(tmp_path, "config.yaml", "a: 1\n")
        result = self.runner.invoke(cli.cli, ["match", file, "[1, 2]"])
        assert result.exit_code == 2
