"""
Tests for configuration loading — config.yml parsing, environment overrides and validation.
"""

import textwrap
from pathlib import Path

import pytest

from auxpkg.core.config.loader import (
    ConfigError,
    default_config_path,
    find_config_file,
    load_settings,
)
from auxpkg.core.models import Settings


@pytest.fixture
def config_yml(tmp_path: Path) -> Path:
    content = textwrap.dedent("""\
        mpr_url: https://mpr.example.org/
        recursion_limit: 20
        distro: noble
        build_command: [makedeb, -s]
    """)
    path = tmp_path / "config.yml"
    path.write_text(content)
    return path


class TestDefaults:
    def test_no_file_no_env(self, clean_env: Path):
        settings = load_settings(env={"XDG_CONFIG_HOME": str(clean_env / "config")})
        assert settings.mpr_url == "https://mpr.makedeb.org"
        assert settings.recursion_limit == 50
        assert settings.archive_max_age == 300
        assert settings.git_branch == "master"

    def test_cache_dir_follows_xdg(self, clean_env: Path):
        settings = Settings()
        assert settings.cache_dir == str(clean_env / "cache" / "auxpkg")
        assert settings.git_dir == clean_env / "cache" / "auxpkg" / "git-pkg"


class TestFile:
    def test_values_loaded(self, config_yml: Path, clean_env):
        settings = load_settings(config_yml, env={})
        assert settings.mpr_url == "https://mpr.example.org"
        assert settings.recursion_limit == 20
        assert settings.distro == "noble"
        assert settings.build_command == ["makedeb", "-s"]

    def test_empty_file_uses_defaults(self, tmp_path: Path, clean_env):
        path = tmp_path / "config.yml"
        path.write_text("")
        assert load_settings(path, env={}).recursion_limit == 50

    def test_explicit_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "missing.yml", env={})

    def test_env_config_path_must_exist(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_settings(env={"AUXPKG_CONFIG": str(tmp_path / "missing.yml")})

    def test_default_location_is_picked_up(self, tmp_path: Path, clean_env):
        env = {"XDG_CONFIG_HOME": str(tmp_path / "xdg")}
        path = default_config_path(env)
        path.parent.mkdir(parents=True)
        path.write_text("recursion_limit: 7\n")
        assert find_config_file(env=env) == (path, False)
        assert load_settings(env=env).recursion_limit == 7

    def test_default_location_absent(self, tmp_path: Path):
        assert find_config_file(env={"XDG_CONFIG_HOME": str(tmp_path)}) == (None, False)

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text("mpr_url: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(path, env={})

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_settings(path, env={})

    def test_unknown_key(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text("mirror: somewhere\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_settings(path, env={})

    def test_bad_url(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text("mpr_url: ftp://nope\n")
        with pytest.raises(ConfigError):
            load_settings(path, env={})

    def test_recursion_limit_must_be_positive(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text("recursion_limit: 0\n")
        with pytest.raises(ConfigError):
            load_settings(path, env={})


class TestEnvironment:
    def test_env_beats_file(self, config_yml: Path):
        env = {"AUXPKG_RECURSION_LIMIT": "9", "AUXPKG_MPR_URL": "https://other.example"}
        settings = load_settings(config_yml, env=env)
        assert settings.recursion_limit == 9
        assert settings.mpr_url == "https://other.example"
        assert settings.distro == "noble"

    def test_legacy_mpr_url(self, tmp_path: Path):
        settings = load_settings(env={"MPR_URL": "https://legacy.example/", "XDG_CONFIG_HOME": str(tmp_path)})
        assert settings.mpr_url == "https://legacy.example"

    def test_prefixed_variable_wins_over_legacy(self, tmp_path: Path):
        env = {
            "AUXPKG_MPR_URL": "https://new.example",
            "MPR_URL": "https://legacy.example",
            "XDG_CONFIG_HOME": str(tmp_path),
        }
        assert load_settings(env=env).mpr_url == "https://new.example"

    def test_empty_variable_ignored(self, tmp_path: Path):
        env = {"AUXPKG_DISTRO": "", "XDG_CONFIG_HOME": str(tmp_path)}
        assert load_settings(env=env).distro is None

    def test_bad_env_value(self, tmp_path: Path):
        env = {"AUXPKG_RECURSION_LIMIT": "lots", "XDG_CONFIG_HOME": str(tmp_path)}
        with pytest.raises(ConfigError, match="environment"):
            load_settings(env=env)
