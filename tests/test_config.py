"""Tests for configuration loading and merging."""

import os
from pathlib import Path
from unittest.mock import patch

import yaml

from allocbind.allocations import NetworkPolicy
from allocbind.config.loader import (
    ENV_INTERFACE,
    ENV_ISPN,
    get_home_config_path,
    get_local_config_path,
    load_config,
    load_yaml_config,
    save_config,
)
from allocbind.config.schema import (
    DEFAULT_CONFIG,
    AllocbindConfig,
    DockerConfig,
    NetworkConfig,
)


def _network(
    interface: str | None = None, ispn: bool | None = None
) -> AllocbindConfig:
    return AllocbindConfig(
        docker=DockerConfig(network=NetworkConfig(interface=interface, ispn=ispn))
    )


class TestAllocbindConfig:
    """Tests for AllocbindConfig dataclass."""

    def test_default_config_values(self) -> None:
        """Test that DEFAULT_CONFIG has expected values."""
        network = DEFAULT_CONFIG.docker.network
        assert network.interface == "172.18.0.1"
        assert network.ispn is False
        assert network.name == "pelican_nw"

    def test_merge_prefers_other_values(self) -> None:
        """Test that merge prefers values from 'other' when set."""
        merged = _network(interface="10.0.0.1", ispn=False).merge(
            _network(interface="10.0.0.2", ispn=True)
        )
        assert merged.docker.network.interface == "10.0.0.2"
        assert merged.docker.network.ispn is True

    def test_merge_preserves_base_when_other_is_none(self) -> None:
        """Test that merge preserves base values when other is None."""
        merged = DEFAULT_CONFIG.merge(_network(ispn=True))
        assert merged.docker.network.interface == "172.18.0.1"
        assert merged.docker.network.name == "pelican_nw"
        assert merged.docker.network.ispn is True

    def test_merge_returns_new_instance(self) -> None:
        """Test that merge returns a new instance, not mutating originals."""
        base = _network(interface="10.0.0.1")
        override = _network(ispn=True)
        merged = base.merge(override)

        assert merged is not base
        assert base.docker.network.ispn is None
        assert override.docker.network.interface is None

    def test_to_dict_excludes_none(self) -> None:
        """Test that to_dict excludes None values."""
        data = _network(interface="10.0.0.1").to_dict()
        assert data == {"docker": {"network": {"interface": "10.0.0.1"}}}

    def test_from_dict_creates_config(self) -> None:
        """Test that from_dict reads the nested docker.network section."""
        config = AllocbindConfig.from_dict(
            {"docker": {"network": {"interface": "10.0.0.9", "ispn": True}}}
        )
        assert config.docker.network.interface == "10.0.0.9"
        assert config.docker.network.ispn is True
        assert config.docker.network.name is None

    def test_from_dict_ignores_unknown_keys(self) -> None:
        """Test that from_dict ignores unknown keys and malformed sections."""
        config = AllocbindConfig.from_dict({"unknown": 1, "docker": "nope"})
        assert config == AllocbindConfig()

    def test_from_dict_coerces_ispn_strings(self) -> None:
        """Test that string flags such as "false" are coerced correctly."""
        assert NetworkConfig.from_dict({"ispn": "false"}).ispn is False
        assert NetworkConfig.from_dict({"ispn": "yes"}).ispn is True
        assert NetworkConfig.from_dict({"ispn": 1}).ispn is True


class TestNetworkPolicy:
    """Tests for building a NetworkPolicy from config."""

    def test_from_default_config(self) -> None:
        """The default config rewrites loopback to the default bridge address."""
        policy = NetworkPolicy.from_config(DEFAULT_CONFIG)
        assert policy == NetworkPolicy(
            bridge_interface_ip="172.18.0.1", isolated_network=False
        )

    def test_from_unset_config(self) -> None:
        """Unset values become an empty interface and no isolation."""
        policy = NetworkPolicy.from_config(AllocbindConfig())
        assert policy == NetworkPolicy(bridge_interface_ip="", isolated_network=False)


class TestConfigLoader:
    """Tests for config file loading."""

    def test_get_home_config_path(self) -> None:
        """Test home config path is ~/.allocbind/config.yaml."""
        path = get_home_config_path()
        assert path.name == "config.yaml"
        assert path.parent.name == ".allocbind"
        assert path.parent.parent == Path.home()

    def test_get_local_config_path(self, tmp_path: Path) -> None:
        """Test local config path is ./.allocbind/config.yaml."""
        with patch("allocbind.config.loader.Path.cwd", return_value=tmp_path):
            path = get_local_config_path()
            assert path == tmp_path / ".allocbind" / "config.yaml"

    def test_load_yaml_config_returns_dict(self, tmp_path: Path) -> None:
        """Test loading a valid YAML file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("docker:\n  network:\n    ispn: true\n")
        assert load_yaml_config(config_file) == {"docker": {"network": {"ispn": True}}}

    def test_load_yaml_config_returns_none_for_missing_file(
        self, tmp_path: Path
    ) -> None:
        """Test loading a non-existent file returns None."""
        assert load_yaml_config(tmp_path / "nonexistent.yaml") is None

    def test_load_yaml_config_returns_none_for_invalid_yaml(
        self, tmp_path: Path
    ) -> None:
        """Test loading invalid YAML returns None."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("docker: [unclosed")
        assert load_yaml_config(config_file) is None

    def test_load_yaml_config_returns_none_for_non_mapping(
        self, tmp_path: Path
    ) -> None:
        """Test a YAML list is treated as absent."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- a\n- b\n")
        assert load_yaml_config(config_file) is None


class TestLoadConfig:
    """Tests for layered config loading."""

    def _paths(self, tmp_path: Path) -> tuple[Path, Path]:
        home = tmp_path / "home" / ".allocbind" / "config.yaml"
        local = tmp_path / "local" / ".allocbind" / "config.yaml"
        return home, local

    def _load(self, home: Path, local: Path, env: dict[str, str]) -> AllocbindConfig:
        clean_env = {
            k: v for k, v in os.environ.items() if k not in (ENV_INTERFACE, ENV_ISPN)
        }
        clean_env.update(env)
        with (
            patch("allocbind.config.loader.get_home_config_path", return_value=home),
            patch("allocbind.config.loader.get_local_config_path", return_value=local),
            patch.dict(os.environ, clean_env, clear=True),
        ):
            return load_config()

    def test_uses_defaults_when_no_files(self, tmp_path: Path) -> None:
        """Test defaults are returned when no config files exist."""
        home, local = self._paths(tmp_path)
        assert self._load(home, local, {}) == DEFAULT_CONFIG

    def test_local_overrides_home(self, tmp_path: Path) -> None:
        """Test local config takes precedence over home config."""
        home, local = self._paths(tmp_path)
        save_config(_network(interface="10.0.0.1", ispn=True), home)
        save_config(_network(interface="10.0.0.2"), local)

        network = self._load(home, local, {}).docker.network
        assert network.interface == "10.0.0.2"
        assert network.ispn is True
        assert network.name == "pelican_nw"

    def test_env_overrides_files(self, tmp_path: Path) -> None:
        """Test environment variables take precedence over config files."""
        home, local = self._paths(tmp_path)
        save_config(_network(interface="10.0.0.2", ispn=True), local)

        network = self._load(
            home, local, {ENV_INTERFACE: "192.168.5.1", ENV_ISPN: "false"}
        ).docker.network
        assert network.interface == "192.168.5.1"
        assert network.ispn is False

    def test_reads_files_on_every_call(self, tmp_path: Path) -> None:
        """Test a changed config file is seen by the next load."""
        home, local = self._paths(tmp_path)
        save_config(_network(ispn=False), local)
        assert self._load(home, local, {}).docker.network.ispn is False

        save_config(_network(ispn=True), local)
        assert self._load(home, local, {}).docker.network.ispn is True

    def test_save_config_writes_yaml(self, tmp_path: Path) -> None:
        """Test save_config creates parent dirs and writes non-None values."""
        path = tmp_path / "nested" / "config.yaml"
        save_config(_network(interface="10.0.0.1"), path)

        data = yaml.safe_load(path.read_text())
        assert data == {"docker": {"network": {"interface": "10.0.0.1"}}}
