"""
Tests for configuration loading, validation and the engine bridge.

Covers:
- Packaged defaults
- RESALE_CONFIG / RESALE_DATABASE_URL resolution
- ConfigurationError on bad values
- Deterministic checksums
- build_costing_policy
- RESALE_CONFIG_TRACE audit record
"""

import logging

import pytest
import yaml

from resale_config import DEFAULT_CONFIG_PATH, build_costing_policy, get_active_config
from resale_config.loader import (
    compute_checksum,
    config_to_dict,
    load_yaml_file,
    log_level,
    parse_configuration,
)
from resale_kernel.domain.values import Currency
from resale_kernel.exceptions import ConfigurationError


def _write(tmp_path, data, name="resale.yaml"):
    path = tmp_path / name
    path.write_text(yaml.safe_dump(data))
    return path


class TestDefaults:

    def test_packaged_defaults(self):
        config = get_active_config(environ={})
        assert config.config_id == "resale-py"
        assert config.currencies.source == "USD"
        assert config.currencies.local == "PYG"
        assert config.rounding.factor_places == 2
        assert config.key_prefixes.purchase == "C"
        assert config.database.url == "sqlite:///resale.db"
        assert config.source_path == str(DEFAULT_CONFIG_PATH)
        assert len(config.checksum) == 64

    def test_empty_mapping_uses_schema_defaults(self):
        config = parse_configuration({})
        assert config.config_id == "default"
        assert config.rounding.weight_places == 3
        assert config.logging.level == "INFO"


class TestResolution:

    def test_env_selects_file(self, tmp_path):
        path = _write(tmp_path, {"config_id": "from-env", "currencies": {"local": "brl"}})
        config = get_active_config(environ={"RESALE_CONFIG": str(path)})
        assert config.config_id == "from-env"
        assert config.currencies.local == "BRL"

    def test_explicit_path_beats_env(self, tmp_path):
        explicit = _write(tmp_path, {"config_id": "explicit"}, "a.yaml")
        env = _write(tmp_path, {"config_id": "env"}, "b.yaml")
        config = get_active_config(path=explicit, environ={"RESALE_CONFIG": str(env)})
        assert config.config_id == "explicit"

    def test_database_url_override(self):
        base = get_active_config(environ={})
        config = get_active_config(environ={"RESALE_DATABASE_URL": "sqlite://"})
        assert config.database.url == "sqlite://"
        assert config.checksum != base.checksum
        assert config.checksum == compute_checksum(config_to_dict(config))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(path=tmp_path / "nope.yaml", environ={})


class TestValidation:

    @pytest.mark.parametrize(
        "data, setting",
        [
            ({"currencies": {"source": "XXX"}}, "currencies.source"),
            ({"rounding": {"factor_places": -1}}, "rounding.factor_places"),
            ({"rounding": {"weight_places": "three"}}, "rounding.weight_places"),
            ({"rounding": {"weight_places": True}}, "rounding.weight_places"),
            ({"key_prefixes": {"sale": "  "}}, "key_prefixes.sale"),
            ({"database": {"url": ""}}, "database.url"),
            ({"logging": {"level": "LOUD"}}, "logging.level"),
            ({"rounding": [1, 2]}, "rounding"),
        ],
    )
    def test_bad_values(self, data, setting):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_configuration(data)
        assert exc_info.value.setting == setting
        assert exc_info.value.code == "CONFIGURATION_ERROR"

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError):
            load_yaml_file(path)

    def test_empty_file_is_empty_mapping(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_yaml_file(path) == {}


class TestChecksum:

    def test_deterministic(self):
        data = {"config_id": "x", "rounding": {"factor_places": 4}}
        assert parse_configuration(data).checksum == parse_configuration(dict(data)).checksum

    def test_source_path_not_part_of_identity(self):
        a = parse_configuration({}, source_path="/a.yaml")
        b = parse_configuration({}, source_path="/b.yaml")
        assert a.checksum == b.checksum

    def test_changes_with_values(self):
        a = parse_configuration({"rounding": {"factor_places": 2}})
        b = parse_configuration({"rounding": {"factor_places": 3}})
        assert a.checksum != b.checksum


class TestBridge:

    def test_build_costing_policy(self):
        config = parse_configuration({
            "currencies": {"source": "EUR", "local": "PYG"},
            "rounding": {"factor_places": 4, "average_cost_places": 0},
            "key_prefixes": {"purchase": "CP"},
        })
        policy = build_costing_policy(config)
        assert policy.source_currency == Currency("EUR")
        assert policy.local_currency == Currency("PYG")
        assert policy.factor_places == 4
        assert policy.average_cost_places == 0
        assert policy.key_prefixes.purchase == "CP"
        assert policy.key_prefixes.sale == "V"

    def test_log_level(self):
        assert log_level(parse_configuration({"logging": {"level": "debug"}})) == logging.DEBUG


def test_config_trace_emitted(captured_logs):
    config = get_active_config(environ={})
    traces = [r for r in captured_logs() if r["message"] == "RESALE_CONFIG_TRACE"]
    assert len(traces) == 1
    assert traces[0]["config_id"] == config.config_id
    assert traces[0]["checksum"] == config.checksum
    assert traces[0]["database_url_overridden"] is False
