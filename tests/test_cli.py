"""
Tests for CLI commands — install, plan, upgrade, catalog, config check and global options.
"""

import json
import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from auxpkg.core.services.aux_install.catalog import CatalogError
from auxpkg.main import cli
from tests.helpers import aux, make_catalog, sysref


@pytest.fixture(autouse=True)
def _isolated(clean_env):
    """Keep the CLI's logging setup from leaking into other tests."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def catalog():
    return make_catalog(
        [
            aux("app", depends=["helper", "libfoo"]),
            aux("helper"),
            aux("curl", "9.0"),
        ],
        [
            sysref("libfoo", "1.2"),
            sysref("curl", "8.0"),
            sysref("tool", "1.0", installed=True),
            sysref("tool", "2.0"),
        ],
    )


def _patch_catalog(module: str, catalog):
    return patch(f"auxpkg.core.use_cases.{module}.build_catalog", return_value=catalog)


class TestCLIGlobal:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "install" in result.output
        assert "catalog" in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_install_requires_names(self):
        result = CliRunner().invoke(cli, ["install"])
        assert result.exit_code != 0


class TestInstallCommand:
    def test_mock_install(self, catalog):
        with _patch_catalog("install", catalog):
            result = CliRunner().invoke(cli, ["install", "--mock", "app"])
        assert result.exit_code == 0, result.output
        assert "Build order" in result.output
        assert "1. helper" in result.output
        assert "2. app" in result.output
        assert "libfoo=1.2" in result.output
        assert "✓ build:app" in result.output
        assert "Done" in result.output

    def test_dry_run_executes_nothing(self, catalog):
        with _patch_catalog("install", catalog), \
                patch("auxpkg.core.use_cases.install.execute_build_plan") as execute:
            result = CliRunner().invoke(cli, ["install", "--dry-run", "app"])
        assert result.exit_code == 0
        assert "[dry-run]" in result.output
        execute.assert_not_called()

    def test_plan_command(self, catalog):
        with _patch_catalog("install", catalog):
            result = CliRunner().invoke(cli, ["plan", "app"])
        assert result.exit_code == 0
        assert "2. app" in result.output

    def test_json(self, catalog):
        with _patch_catalog("install", catalog):
            result = CliRunner().invoke(cli, ["install", "--mock", "--json", "app"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["ok"] is True
        assert data["plan"]["bases"] == [["helper"], ["app"]]
        assert data["report"]["installed_bases"] == ["helper", "app"]

    def test_unknown_package(self, catalog):
        with _patch_catalog("install", catalog):
            result = CliRunner().invoke(cli, ["install", "--mock", "ghost"])
        assert result.exit_code == 1
        assert "Unable to find package(s): 'ghost'" in result.output

    def test_prompt_for_ambiguous_name(self, catalog):
        with _patch_catalog("install", catalog):
            result = CliRunner().invoke(cli, ["install", "--dry-run", "curl"], input="aux\n")
        assert result.exit_code == 0
        assert "available from both sources" in result.output
        assert "1. curl" in result.output

    def test_prefer_skips_prompt(self, catalog):
        with _patch_catalog("install", catalog):
            result = CliRunner().invoke(cli, ["install", "--dry-run", "--prefer", "system", "curl"])
        assert result.exit_code == 0
        assert "available from both sources" not in result.output
        assert "curl=8.0" in result.output

    def test_catalog_failure(self):
        with patch("auxpkg.core.use_cases.install.build_catalog", side_effect=CatalogError("offline")):
            result = CliRunner().invoke(cli, ["install", "app"])
        assert result.exit_code == 1
        assert "offline" in result.output

    def test_bad_config(self, tmp_path: Path):
        path = tmp_path / "bad.yml"
        path.write_text("recursion_limit: nope\n")
        result = CliRunner().invoke(cli, ["--config", str(path), "install", "app"])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestUpgradeCommand:
    def test_dry_run(self, catalog):
        with _patch_catalog("upgrade", catalog):
            result = CliRunner().invoke(cli, ["upgrade", "--dry-run"])
        assert result.exit_code == 0
        assert "tool → 2.0" in result.output

    def test_up_to_date(self):
        with _patch_catalog("upgrade", make_catalog()):
            result = CliRunner().invoke(cli, ["upgrade"])
        assert result.exit_code == 0
        assert "up to date" in result.output

    def test_exclusive_flags(self):
        result = CliRunner().invoke(cli, ["upgrade", "--aux-only", "--system-only"])
        assert result.exit_code == 1
        assert "mutually exclusive" in result.output

    def test_mock(self, catalog):
        with _patch_catalog("upgrade", catalog):
            result = CliRunner().invoke(cli, ["upgrade", "--mock"])
        assert result.exit_code == 0
        assert "✓ system:upgrade" in result.output


class TestCatalogCommands:
    def test_info(self, catalog):
        with _patch_catalog("catalog", catalog):
            result = CliRunner().invoke(cli, ["catalog", "info", "app"])
        assert result.exit_code == 0
        assert "Auxiliary:" in result.output
        assert "depends: helper, libfoo" in result.output

    def test_info_json(self, catalog):
        with _patch_catalog("catalog", catalog):
            result = CliRunner().invoke(cli, ["catalog", "info", "--json", "curl"])
        data = json.loads(result.stdout)
        assert data["system"]["version"] == "8.0"
        assert data["auxiliary"]["version"] == "9.0"

    def test_info_missing(self, catalog):
        with _patch_catalog("catalog", catalog):
            result = CliRunner().invoke(cli, ["catalog", "info", "ghost"])
        assert result.exit_code == 1
        assert "Unable to find package 'ghost'." in result.output

    def test_update_failure(self):
        with patch("auxpkg.core.use_cases.catalog.load_aux_archive", side_effect=CatalogError("HTTP 503")):
            result = CliRunner().invoke(cli, ["catalog", "update"])
        assert result.exit_code == 1
        assert "HTTP 503" in result.output

    def test_update(self):
        with patch("auxpkg.core.use_cases.catalog.load_aux_archive", return_value={"a": object()}):
            result = CliRunner().invoke(cli, ["catalog", "update"])
        assert result.exit_code == 0
        assert "1 packages cached" in result.output


class TestConfigCheckCommand:
    def test_valid(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text("recursion_limit: 12\n")
        result = CliRunner().invoke(cli, ["--config", str(path), "config", "check"])
        assert result.exit_code == 0
        assert "Configuration is valid" in result.output
        assert "recursion_limit: 12" in result.output

    def test_json(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text("distro: noble\n")
        result = CliRunner().invoke(cli, ["--config", str(path), "config", "check", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["valid"] is True
        assert data["settings"]["distro"] == "noble"

    def test_invalid(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text("unknown_key: 1\n")
        result = CliRunner().invoke(cli, ["--config", str(path), "config", "check"])
        assert result.exit_code == 1
        assert "Configuration errors" in result.output


class TestSearchCommands:
    def test_search_by_name(self, catalog):
        with _patch_catalog("catalog", catalog):
            result = CliRunner().invoke(cli, ["search", "cur"])
        assert result.exit_code == 0, result.output
        assert "curl  (system 8.0, aux 9.0)" in result.output
        assert "app" not in result.output

    def test_search_requires_query(self):
        result = CliRunner().invoke(cli, ["search"])
        assert result.exit_code == 2

    def test_no_results(self, catalog):
        with _patch_catalog("catalog", catalog):
            result = CliRunner().invoke(cli, ["search", "nothing-here"])
        assert result.exit_code == 0
        assert "No results." in result.output

    def test_search_json(self, catalog):
        with _patch_catalog("catalog", catalog):
            result = CliRunner().invoke(cli, ["search", "--json", "hel"])
        assert result.exit_code == 0
        assert [p["name"] for p in json.loads(result.stdout)["packages"]] == ["helper"]

    def test_list_system_names(self, catalog):
        with _patch_catalog("catalog", catalog):
            result = CliRunner().invoke(cli, ["list", "--source", "system", "--name-only"])
        assert result.exit_code == 0
        assert result.output.split() == ["curl", "libfoo", "tool"]

    def test_list_installed(self, catalog):
        with _patch_catalog("catalog", catalog):
            result = CliRunner().invoke(cli, ["list", "--installed", "--name-only"])
        assert result.output.split() == ["tool"]

    def test_catalog_failure(self):
        with _patch_catalog("catalog", None) as build:
            build.side_effect = CatalogError("offline")
            result = CliRunner().invoke(cli, ["list"])
        assert result.exit_code == 1
        assert "offline" in result.output


class TestCloneCommand:
    def test_mock_clone(self, catalog, tmp_path: Path):
        dest = tmp_path / "helper"
        with _patch_catalog("clone", catalog):
            result = CliRunner().invoke(cli, ["clone", "--mock", "--dest", str(dest), "helper"])
        assert result.exit_code == 0, result.output
        assert f"Cloned helper into {dest}" in result.output

    def test_points_to_building_base(self, tmp_path: Path):
        catalog = make_catalog([aux("hello"), aux("hello-doc", base="hello")])
        with _patch_catalog("clone", catalog):
            result = CliRunner().invoke(cli, ["clone", "--dest", str(tmp_path / "x"), "hello-doc"])
        assert result.exit_code == 1
        assert "Package base 'hello-doc' doesn't exist" in result.output
        assert "auxpkg clone hello" in result.output


class TestRemoveCommand:
    def _patch_index(self, catalog):
        return patch("auxpkg.core.use_cases.remove.load_system_index", return_value=catalog.system)

    def test_mock_remove(self, catalog):
        with self._patch_index(catalog):
            result = CliRunner().invoke(cli, ["remove", "--mock", "tool", "libfoo"])
        assert result.exit_code == 0, result.output
        assert "libfoo isn't installed, so not removing." in result.output
        assert "Removed tool" in result.output

    def test_nothing_to_remove(self, catalog):
        with self._patch_index(catalog):
            result = CliRunner().invoke(cli, ["remove", "libfoo"])
        assert result.exit_code == 1
        assert "Nothing to remove." in result.output

    def test_requires_names_or_autoremove(self):
        result = CliRunner().invoke(cli, ["remove"])
        assert result.exit_code == 2
        assert "--autoremove" in result.output
