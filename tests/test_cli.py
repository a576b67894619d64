# SPDX-License-Identifier: MIT
"""Tests for the vendorcrawl command line."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from conftest import FakeFetcher, write_go
from vendorcrawl.config import CONFIG_FILENAME
from vendorcrawl.main import cli

UPSTREAM = {
    "github.com/user/alpha": ["fmt", "gopkg.in/yaml.v2"],
    "example.org/beta": [],
    "gopkg.in/yaml.v2": [],
}


@pytest.fixture
def fetchers(monkeypatch) -> list[FakeFetcher]:
    """Replace GitFetcher in the imports command, recording every instance."""
    created: list[FakeFetcher] = []

    def factory(allow_insecure: bool = False) -> FakeFetcher:
        fetcher = FakeFetcher(UPSTREAM)
        fetcher.allow_insecure = allow_insecure
        created.append(fetcher)
        return fetcher

    monkeypatch.setattr("vendorcrawl.commands.imports.GitFetcher", factory)
    return created


@pytest.fixture
def project(go_project: Path) -> Path:
    """The sample project, configured without pacing delays."""
    (go_project / CONFIG_FILENAME).write_text("[vendor]\npacing_delay = 0\n", encoding="utf-8")
    return go_project


class TestImportsCommand:
    """Tests for the imports command."""

    def test_vendors_dependencies(self, cli_runner: CliRunner, project: Path, fetchers: list[FakeFetcher]):
        """All transitive remote imports are vendored and listed."""
        result = cli_runner.invoke(cli, ["-C", str(project), "imports"])

        assert result.exit_code == 0, result.output
        assert "github.com/user/alpha rev-alpha" in result.output
        assert "gopkg.in/yaml.v2 rev-yaml_v2" in result.output
        assert "Vendored 3 dependencies" in result.output

        manifest = json.loads((project / "vendor" / "manifest").read_text(encoding="utf-8"))
        assert [d["importpath"] for d in manifest["dependencies"]] == [
            "example.org/beta",
            "github.com/user/alpha",
            "gopkg.in/yaml.v2",
        ]
        assert fetchers[0].allow_insecure is False

    def test_no_remote_dependencies(self, cli_runner: CliRunner, tmp_path: Path, fetchers: list[FakeFetcher]):
        """A project without remote imports still gets an empty manifest."""
        write_go(tmp_path / "main.go", "fmt", "./internal")

        result = cli_runner.invoke(cli, ["-C", str(tmp_path), "imports"])

        assert result.exit_code == 0, result.output
        assert "No remote dependencies to vendor." in result.output
        assert (tmp_path / "vendor" / "manifest").is_file()

    @pytest.mark.parametrize("flag", ["--precaire", "--insecure"])
    def test_insecure_flag(self, cli_runner: CliRunner, project: Path, fetchers: list[FakeFetcher], flag: str):
        """The insecure flag warns and is passed to the fetcher."""
        result = cli_runner.invoke(cli, ["-C", str(project), "imports", flag])

        assert result.exit_code == 0, result.output
        assert "Insecure protocols are allowed" in result.output
        assert fetchers[0].allow_insecure is True

    def test_insecure_from_config(self, cli_runner: CliRunner, project: Path, fetchers: list[FakeFetcher]):
        """allow_insecure in vendorcrawl.toml has the same effect as the flag."""
        (project / CONFIG_FILENAME).write_text(
            "[vendor]\npacing_delay = 0\nallow_insecure = true\n", encoding="utf-8"
        )

        result = cli_runner.invoke(cli, ["-C", str(project), "imports"])

        assert result.exit_code == 0, result.output
        assert fetchers[0].allow_insecure is True

    def test_fetch_failure(self, cli_runner: CliRunner, project: Path, monkeypatch):
        """A failed fetch exits non-zero and writes no manifest."""
        monkeypatch.setattr(
            "vendorcrawl.commands.imports.GitFetcher",
            lambda allow_insecure=False: FakeFetcher(UPSTREAM, fail_on=["gopkg.in/yaml.v2"]),
        )

        result = cli_runner.invoke(cli, ["-C", str(project), "imports"])

        assert result.exit_code == 1
        assert "Failed to fetch 'gopkg.in/yaml.v2'" in result.output
        assert not (project / "vendor" / "manifest").exists()

    def test_parse_failure(self, cli_runner: CliRunner, project: Path, fetchers: list[FakeFetcher]):
        """A malformed source file exits non-zero with its location."""
        (project / "broken.go").write_text("func main() {}\n", encoding="utf-8")

        result = cli_runner.invoke(cli, ["-C", str(project), "imports"])

        assert result.exit_code == 1
        assert "broken.go:1:" in result.output

    def test_invalid_config(self, cli_runner: CliRunner, project: Path, fetchers: list[FakeFetcher]):
        """Invalid configuration exits non-zero before anything is fetched."""
        (project / CONFIG_FILENAME).write_text("[vendor]\nvendor_dir = '/abs'\n", encoding="utf-8")

        result = cli_runner.invoke(cli, ["-C", str(project), "imports"])

        assert result.exit_code == 1
        assert "Invalid vendor_dir" in result.output
        assert fetchers == []

    def test_project_root_as_vendor_dir(self, cli_runner: CliRunner, project: Path, fetchers: list[FakeFetcher]):
        """A vendor_dir naming the project root is rejected and nothing is deleted."""
        (project / CONFIG_FILENAME).write_text("[vendor]\nvendor_dir = './'\npacing_delay = 0\n", encoding="utf-8")

        result = cli_runner.invoke(cli, ["-C", str(project), "imports"])

        assert result.exit_code == 1
        assert "Invalid vendor_dir" in result.output
        assert (project / "main.go").is_file()
        assert (project / "README.md").is_file()

    def test_verbose_logs_progress(self, cli_runner: CliRunner, project: Path, fetchers: list[FakeFetcher]):
        """Debug logging is shown only with --verbose."""
        quiet = cli_runner.invoke(cli, ["-C", str(project), "imports"])
        verbose = cli_runner.invoke(cli, ["-v", "-C", str(project), "imports"])

        assert quiet.exit_code == 0, quiet.output
        assert verbose.exit_code == 0, verbose.output
        assert "Collected" not in quiet.output
        assert "Collected" in verbose.output


class TestCli:
    """Tests for the command group."""

    def test_help(self, cli_runner: CliRunner):
        """The group lists the imports command."""
        result = cli_runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "imports" in result.output

    def test_imports_command_registered(self):
        """The imports command is registered on the group when main is loaded."""
        from vendorcrawl.commands import imports as imports_module

        assert cli.commands["imports"] is imports_module.imports

    def test_missing_directory(self, cli_runner: CliRunner, tmp_path: Path):
        """-C must name an existing directory."""
        result = cli_runner.invoke(cli, ["-C", str(tmp_path / "missing"), "imports"])

        assert result.exit_code == 2
