"""
Tests for orchestration — request classification, planning, execution and the use cases.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from auxpkg.adapters import AdapterRegistry, MockAdapter
from auxpkg.core.models import Settings
from auxpkg.core.services.aux_install.catalog import CatalogError
from auxpkg.core.services.aux_install.domain import UnknownPackage
from auxpkg.core.services.aux_install.orchestration import (
    classify_requests,
    execute_build_plan,
    plan_install,
    upgrade_candidates,
)
from auxpkg.core.use_cases.catalog import catalog_info, search_catalog, update_catalog
from auxpkg.core.use_cases.clone import run_clone
from auxpkg.core.use_cases.config_check import check_config
from auxpkg.core.use_cases.install import run_install
from auxpkg.core.use_cases.remove import run_remove
from auxpkg.core.use_cases.upgrade import run_upgrade
from tests.helpers import aux, gz_archive, make_catalog, sysref


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(cache_dir=str(tmp_path / "cache"), mpr_url="https://mpr.example")


@pytest.fixture
def app_catalog():
    """app -> helper (aux), app -> libfoo (system); curl in both sources."""
    return make_catalog(
        [
            aux("app", depends=["helper", "libfoo>=1.0"]),
            aux("helper"),
            aux("curl", "9.0"),
        ],
        [sysref("libfoo", "1.2"), sysref("curl", "8.0")],
    )


@pytest.fixture
def mock_registry():
    registry = AdapterRegistry()
    mock = MockAdapter()
    registry.set_mock_mode(True, mock)
    return registry, mock


class TestClassifyRequests:
    def test_split_by_source(self, app_catalog):
        assert classify_requests(["app", "libfoo"], app_catalog) == (["app"], ["libfoo"])

    def test_both_sources_default_to_system(self, app_catalog):
        assert classify_requests(["curl"], app_catalog) == ([], ["curl"])

    def test_prefer(self, app_catalog):
        assert classify_requests(["curl"], app_catalog, prefer="aux") == (["curl"], [])

    def test_chooser_asked_only_for_ambiguous(self, app_catalog):
        asked = []

        def choose(name):
            asked.append(name)
            return "aux"

        assert classify_requests(["app", "curl"], app_catalog, choose=choose) == (["app", "curl"], [])
        assert asked == ["curl"]

    def test_missing_names_listed(self, app_catalog):
        with pytest.raises(UnknownPackage) as exc:
            classify_requests(["ghost", "app", "phantom"], app_catalog)
        assert exc.value.names == ["ghost", "phantom"]


class TestPlanInstall:
    def test_full_plan(self, app_catalog):
        build_plan = plan_install(["app"], ["curl"], app_catalog)
        assert build_plan.bases == [["helper"], ["app"]]
        marks = build_plan.plan.marks
        assert marks["curl"].auto_installed is False
        assert marks["curl"].reason == "requested"
        assert marks["libfoo"].auto_installed is True
        assert not build_plan.empty

    def test_members_group_by_base(self):
        catalog = make_catalog([
            aux("lib-bin", base="lib", depends=["lib-common"]),
            aux("lib-common", base="lib"),
        ])
        build_plan = plan_install(["lib-bin"], [], catalog)
        assert build_plan.bases == [["lib"]]
        assert build_plan.members == {"lib": ["lib-bin", "lib-common"]}

    def test_system_alternative_breaks_loop(self):
        catalog = make_catalog(
            [aux("A", depends=["sysfoo|B"]), aux("B", depends=["A"])],
            [sysref("sysfoo", "1.0")],
        )
        build_plan = plan_install(["A", "B"], [], catalog)
        assert build_plan.bases == [["A"], ["B"]]
        assert build_plan.plan.marks["sysfoo"].reason == "A"

    def test_nothing_to_do(self, app_catalog):
        assert plan_install([], [], app_catalog).empty

    def test_to_dict(self, app_catalog):
        data = plan_install(["app"], [], app_catalog).to_dict()
        assert data["bases"] == [["helper"], ["app"]]
        assert data["system_marks"][0]["name"] == "libfoo"


class TestExecuteBuildPlan:
    def test_action_order(self, app_catalog, settings, mock_registry):
        registry, mock = mock_registry
        report = execute_build_plan(plan_install(["app"], [], app_catalog), settings, registry)
        assert report.ok
        assert mock.action_ids == [
            "system:install",
            "clone:helper", "build:helper", "install:batch-1",
            "clone:app", "build:app", "install:batch-2",
        ]
        assert report.installed_bases == ["helper", "app"]

    def test_action_params(self, app_catalog, settings, mock_registry):
        registry, mock = mock_registry
        execute_build_plan(plan_install(["app"], [], app_catalog), settings, registry)
        params = {ctx.action.id: ctx.action.params for ctx in mock.call_log}

        assert params["system:install"] == {"packages": ["libfoo=1.2"], "auto": ["libfoo"]}
        helper_dir = str(settings.git_dir / "helper")
        assert params["clone:helper"]["url"] == "https://mpr.example/helper"
        assert params["clone:helper"]["path"] == helper_dir
        assert params["install:batch-1"]["debs"] == [f"{helper_dir}/helper_mock_all.deb"]
        assert params["install:batch-1"]["auto"] == ["helper"]
        assert params["install:batch-2"]["auto"] == []

    def test_stops_at_first_failure(self, app_catalog, settings, mock_registry):
        registry, mock = mock_registry
        mock.set_failure("build:helper", "compile error")
        report = execute_build_plan(plan_install(["app"], [], app_catalog), settings, registry)
        assert not report.ok
        assert report.failed.action_id == "build:helper"
        assert mock.action_ids[-1] == "build:helper"
        assert report.installed_bases == []

    def test_failed_system_install_stops_everything(self, app_catalog, settings, mock_registry):
        registry, mock = mock_registry
        mock.set_failure("system:install")
        report = execute_build_plan(plan_install(["app"], [], app_catalog), settings, registry)
        assert mock.action_ids == ["system:install"]
        assert not report.ok


class TestUpgradeCandidates:
    @pytest.fixture
    def catalog(self):
        return make_catalog(
            [aux("hello", "2.0"), aux("same", "1.0")],
            [
                sysref("hello", "1.0", installed=True, from_auxiliary=True),
                sysref("same", "1.0", installed=True, from_auxiliary=True),
                sysref("curl", "7.0", installed=True),
                sysref("curl", "8.0"),
            ],
        )

    def test_both(self, catalog):
        aux_roots, system = upgrade_candidates(catalog)
        assert aux_roots == ["hello"]
        assert [r.key for r in system] == ["curl=8.0"]

    def test_aux_only(self, catalog):
        assert upgrade_candidates(catalog, include_system=False) == (["hello"], [])

    def test_system_only(self, catalog):
        aux_roots, system = upgrade_candidates(catalog, include_aux=False)
        assert aux_roots == []
        assert len(system) == 1


class TestRunInstall:
    def test_no_names(self):
        assert run_install([]).error == "No packages were specified."

    def test_dry_run(self, app_catalog, settings):
        result = run_install(["app"], dry_run=True, settings=settings, catalog=app_catalog)
        assert result.ok
        assert result.report is None
        assert result.build_plan.bases == [["helper"], ["app"]]

    def test_mock_mode(self, app_catalog, settings):
        result = run_install(["app"], mock_mode=True, settings=settings, catalog=app_catalog)
        assert result.ok
        assert result.report.installed_bases == ["helper", "app"]
        assert result.to_dict()["report"]["ok"] is True

    def test_unknown_package(self, app_catalog, settings):
        result = run_install(["ghost"], settings=settings, catalog=app_catalog)
        assert not result.ok
        assert "'ghost'" in result.error
        assert result.to_dict() == {"ok": False, "error": result.error}

    def test_failure_reported(self, app_catalog, settings, mock_registry):
        registry, mock = mock_registry
        mock.set_failure("clone:helper", "network down")
        result = run_install(["app"], settings=settings, catalog=app_catalog, registry=registry)
        assert not result.ok
        assert result.report.failed.error == "network down"

    def test_catalog_error(self, settings):
        with patch("auxpkg.core.use_cases.install.build_catalog", side_effect=CatalogError("offline")):
            result = run_install(["app"], settings=settings)
        assert result.error == "offline"


class TestRunUpgrade:
    def test_exclusive_flags(self):
        result = run_upgrade(aux_only=True, system_only=True)
        assert "mutually exclusive" in result.error

    def test_up_to_date(self, settings):
        catalog = make_catalog([], [sysref("curl", "8.0", installed=True)])
        result = run_upgrade(settings=settings, catalog=catalog)
        assert result.up_to_date
        assert result.report is None

    def test_dry_run(self, settings):
        catalog = make_catalog([], [sysref("curl", "7.0", installed=True), sysref("curl", "8.0")])
        result = run_upgrade(dry_run=True, settings=settings, catalog=catalog)
        assert not result.up_to_date
        assert result.to_dict()["plan"]["system_upgrades"] == ["curl=8.0"]

    def test_mock_upgrade(self, settings, mock_registry):
        registry, mock = mock_registry
        catalog = make_catalog(
            [aux("hello", "2.0")],
            [sysref("hello", "1.0", installed=True, from_auxiliary=True)],
        )
        result = run_upgrade(settings=settings, catalog=catalog, registry=registry)
        assert result.ok
        assert mock.action_ids == ["clone:hello", "build:hello", "install:batch-1"]


class TestCatalogUseCases:
    def test_info_found(self, app_catalog):
        result = catalog_info("app", catalog=app_catalog)
        assert result.error is None
        data = result.to_dict()
        assert data["auxiliary"]["name"] == "app"
        assert data["distro"] == "jammy"
        assert data["selected"]["depends"] == ["helper", "libfoo>=1.0"]

    def test_info_missing(self, app_catalog):
        assert catalog_info("ghost", catalog=app_catalog).error == "Unable to find package 'ghost'."

    @patch("urllib.request.urlopen")
    def test_update(self, mock_urlopen, settings):
        mock_urlopen.return_value.__enter__.return_value.read.return_value = gz_archive(
            [{"Name": "a", "Version": "1"}, {"Name": "b", "Version": "2"}]
        )
        result = update_catalog(settings=settings)
        assert result.package_count == 2
        assert (Path(settings.cache_dir) / "cache.gz").is_file()

    def test_search(self, app_catalog):
        result = search_catalog(["cur"], catalog=app_catalog)
        assert [e.name for e in result.entries] == ["curl"]
        assert result.to_dict()["packages"][0]["system"]["version"] == "8.0"

    def test_list_by_source(self, app_catalog):
        result = search_catalog([], source="aux", catalog=app_catalog)
        assert [e.name for e in result.entries] == ["app", "curl", "helper"]

    def test_search_catalog_failure(self, settings):
        with patch("auxpkg.core.use_cases.catalog.build_catalog", side_effect=CatalogError("offline")):
            result = search_catalog(["x"], settings=settings)
        assert result.to_dict() == {"error": "offline"}


class TestClone:
    def test_clone_base(self, app_catalog, settings, mock_registry, tmp_path: Path):
        registry, mock = mock_registry
        dest = tmp_path / "work" / "helper"
        result = run_clone(
            "helper", dest=dest, settings=settings, catalog=app_catalog, registry=registry,
        )
        assert result.ok
        assert result.path == str(dest)
        params = mock.call_log[0].action.params
        assert params == {
            "operation": "clone",
            "url": "https://mpr.example/helper",
            "path": str(dest),
        }

    def test_package_name_hints_at_base(self, settings, mock_registry, tmp_path: Path):
        registry, mock = mock_registry
        catalog = make_catalog([aux("hello"), aux("hello-doc", base="hello")])
        result = run_clone(
            "hello-doc", dest=tmp_path / "x", settings=settings, catalog=catalog, registry=registry,
        )
        assert not result.ok
        assert "doesn't exist" in result.error
        assert result.hint == "hello"
        assert mock.call_count == 0

    def test_unknown_base_has_no_hint(self, app_catalog, settings, tmp_path: Path):
        result = run_clone("ghost", dest=tmp_path / "x", settings=settings, catalog=app_catalog)
        assert result.hint is None
        assert result.to_dict()["ok"] is False

    def test_existing_destination(self, app_catalog, settings, mock_registry, tmp_path: Path):
        registry, mock = mock_registry
        result = run_clone(
            "helper", dest=tmp_path, settings=settings, catalog=app_catalog, registry=registry,
        )
        assert "already exists" in result.error
        assert mock.call_count == 0

    def test_git_failure(self, app_catalog, settings, mock_registry, tmp_path: Path):
        registry, mock = mock_registry
        mock.set_failure("clone:helper", "git clone failed: boom")
        result = run_clone(
            "helper", dest=tmp_path / "helper", settings=settings, catalog=app_catalog, registry=registry,
        )
        assert not result.ok
        assert result.error == "git clone failed: boom"


class TestRemove:
    @pytest.fixture
    def system(self):
        return make_catalog(system_refs=[
            sysref("tool", "1.0", installed=True),
            sysref("libfoo", "1.2"),
        ]).system

    def test_installed_packages_removed(self, settings, system, mock_registry):
        registry, mock = mock_registry
        result = run_remove(
            ["tool", "libfoo"], purge=True, settings=settings, system=system, registry=registry,
        )
        assert result.ok
        assert result.removed == ["tool"]
        assert result.not_installed == ["libfoo"]
        action = mock.call_log[0].action
        assert action.id == "system:remove"
        assert action.params == {
            "operation": "remove", "packages": ["tool"], "purge": True, "autoremove": False,
        }

    def test_nothing_installed(self, settings, system, mock_registry):
        registry, mock = mock_registry
        result = run_remove(["libfoo"], settings=settings, system=system, registry=registry)
        assert result.error == "Nothing to remove."
        assert mock.call_count == 0

    def test_autoremove_alone(self, settings, system, mock_registry):
        registry, mock = mock_registry
        result = run_remove([], autoremove=True, settings=settings, system=system, registry=registry)
        assert result.ok
        assert mock.call_log[0].action.params["packages"] == []


class TestConfigCheck:
    def test_valid(self, tmp_path: Path, clean_env):
        path = tmp_path / "config.yml"
        path.write_text("recursion_limit: 10\n")
        result = check_config(path)
        assert result.valid
        assert result.config_path == path
        assert result.to_dict()["settings"]["recursion_limit"] == 10

    def test_no_file_warns(self, clean_env):
        result = check_config()
        assert result.valid
        assert "No config file found; using defaults." in result.warnings

    def test_invalid(self, tmp_path: Path, clean_env):
        path = tmp_path / "config.yml"
        path.write_text("recursion_limit: -1\n")
        result = check_config(path)
        assert not result.valid
        assert result.errors
