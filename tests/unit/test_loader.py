"""Unit tests for the YAML config loader and env var resolution."""

from __future__ import annotations

from pathlib import Path

import pytest

from anf_replication.config.loader import (
    build_topology_config,
    builtin_topology,
    expand_env,
    load_topology_config,
    load_yaml,
    overlay,
)
from anf_replication.config.models import ReplicationSchedule, ServiceLevel

EXAMPLE_CONFIG = Path(__file__).resolve().parents[2] / "examples" / "topology.yaml"


class TestExpandEnv:
    def test_plain_string_unchanged(self):
        assert expand_env("hello") == "hello"

    def test_substitutes_env_var(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("ANF_LOCATION", "westeurope")
        assert expand_env("${ANF_LOCATION}") == "westeurope"

    def test_default_when_var_missing(self):
        assert expand_env("${MISSING_VAR:-fallback}") == "fallback"

    def test_env_var_overrides_default(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("ANF_RETRIES", "10")
        assert expand_env("${ANF_RETRIES:-50}") == "10"

    def test_missing_var_no_default_raises(self):
        with pytest.raises(ValueError, match="UNDEFINED_VAR"):
            expand_env("${UNDEFINED_VAR}")

    def test_embedded_in_resource_id(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("SUB", "1234")
        result = expand_env("/subscriptions/${SUB}/resourceGroups/rg")
        assert result == "/subscriptions/1234/resourceGroups/rg"

    def test_recursive_structures(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("VNET", "vnet-a")
        data = {"primary": {"vnet_name": "${VNET}"}, "protocols": ["${PROTO:-NFSv3}"]}
        assert expand_env(data) == {
            "primary": {"vnet_name": "vnet-a"},
            "protocols": ["NFSv3"],
        }

    def test_non_string_values_unchanged(self):
        data = {"retries": 50, "cleanup": False, "interval": 0.5, "nothing": None}
        assert expand_env(data) == data


class TestLoadYaml:
    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_yaml(tmp_path / "nope.yaml")

    def test_parse_error_reports_position(self, tmp_path: Path):
        bad = tmp_path / "bad.yaml"
        bad.write_text("primary:\n  location: [westus\n")
        with pytest.raises(ValueError, match="Failed to parse YAML"):
            load_yaml(bad)

    def test_top_level_must_be_mapping(self, tmp_path: Path):
        bad = tmp_path / "list.yaml"
        bad.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="must hold a mapping"):
            load_yaml(bad)

    def test_empty_file_is_no_override(self, tmp_path: Path):
        empty = tmp_path / "empty.yaml"
        empty.write_text("")
        assert load_yaml(empty) == {}

    def test_directory_is_not_a_config(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_yaml(tmp_path)


class TestBuiltinTopology:
    def test_packaged_values(self):
        builtin = builtin_topology()
        assert builtin["primary"]["account_name"] == "PrimaryANFAccount"
        assert builtin["secondary"]["vnet_name"] == "eastus-secondary-vnet"
        assert builtin["shared"]["protocol_types"] == ["NFSv3"]
        assert builtin["cleanup"] is False

    def test_vnet_resource_group_follows_resource_group(self):
        cfg = build_topology_config({"primary": {"resource_group": "other-rg"}})
        assert cfg.primary.vnet_resource_group == "other-rg"

    def test_overrides_applied(self):
        cfg = build_topology_config({"replication": {"schedule": "daily"}})
        assert cfg.replication.schedule == ReplicationSchedule.DAILY


class TestOverlay:
    def test_section_merged_key_by_key(self):
        base = {"primary": {"location": "westus", "pool_name": "p"}, "cleanup": False}
        result = overlay(base, {"primary": {"location": "westus3"}})
        assert result == {
            "primary": {"location": "westus3", "pool_name": "p"},
            "cleanup": False,
        }

    def test_inputs_untouched(self):
        base = {"shared": {"tags": {"Author": "a"}}}
        overlay(base, {"shared": {"tags": {"Owner": "b"}}})
        assert base == {"shared": {"tags": {"Author": "a"}}}

    def test_lists_replaced(self):
        result = overlay(
            {"protocol_types": ["NFSv3"]}, {"protocol_types": ["NFSv4.1"]}
        )
        assert result["protocol_types"] == ["NFSv4.1"]


class TestLoadTopologyConfig:
    def test_defaults_when_no_path(self):
        cfg = load_topology_config()
        assert cfg.primary.location == "westus"
        assert cfg.secondary.location == "eastus"
        assert cfg.primary.service_level == ServiceLevel.PREMIUM
        assert cfg.secondary.service_level == ServiceLevel.STANDARD
        assert cfg.shared.tags["Service"] == "Azure Netapp Files"
        assert cfg.polling.retries == 50
        assert cfg.cleanup is False

    def test_override_merges_with_defaults(self, tmp_path: Path):
        override = tmp_path / "topology.yaml"
        override.write_text("cleanup: true\nsecondary:\n  location: centralus\n")

        cfg = load_topology_config(override)

        assert cfg.cleanup is True
        assert cfg.secondary.location == "centralus"
        assert cfg.secondary.account_name == "SecondaryANFAccount"

    def test_invalid_override_names_source(self, tmp_path: Path):
        override = tmp_path / "topology.yaml"
        override.write_text("polling:\n  retries: 0\n")

        with pytest.raises(ValueError, match="Invalid topology config"):
            load_topology_config(override)

    def test_example_config_loads(self):
        cfg = load_topology_config(EXAMPLE_CONFIG)
        assert cfg.primary.account_name == "crr-primary-account"
        assert cfg.primary.location == "westus2"
        assert cfg.primary.vnet_resource_group == "anf-crr-primary-rg"
        assert cfg.replication.schedule == ReplicationSchedule.HOURLY
        assert cfg.polling.interval_seconds == 30

    def test_example_config_env_override(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("ANF_SECONDARY_LOCATION", "northeurope")
        monkeypatch.setenv("ANF_REPLICATION_SCHEDULE", "daily")
        cfg = load_topology_config(EXAMPLE_CONFIG)
        assert cfg.secondary.location == "northeurope"
        assert cfg.replication.schedule == ReplicationSchedule.DAILY
