"""Unit tests for configuration loading and validation."""

import copy
import json

import pytest

from inference_bench.core.config import BenchmarkConfig, load_config, parse_config
from inference_bench.core.exceptions import ConfigError


def with_override(data: dict, section: str, **values) -> dict:
    data = copy.deepcopy(data)
    data[section].update(values)
    return data


class TestParseConfig:
    """Tests for parse_config."""

    def test_valid_config(self, sample_config_data):
        config = parse_config(sample_config_data)

        assert isinstance(config, BenchmarkConfig)
        assert config.model.id == "deepseek-r1"
        assert config.concurrency.step == 2
        assert config.concurrency.duration_seconds == 0.2
        assert config.output.json_file is None

    def test_defaults(self, sample_config_data):
        data = copy.deepcopy(sample_config_data)
        del data["concurrency"]["step"]
        del data["concurrency"]["progress_interval_seconds"]
        del data["test"]["temperature"]
        del data["endpoint"]["timeout_seconds"]

        config = parse_config(data)

        assert config.concurrency.step == 1
        assert config.concurrency.progress_interval_seconds == 5.0
        assert config.test.temperature == 0.7
        assert config.test.service_tier == "default"
        assert config.endpoint.timeout_seconds == 120.0

    @pytest.mark.parametrize(
        "section, values, message",
        [
            ("endpoint", {"url": "  "}, "endpoint.url is required"),
            ("model", {"id": ""}, "model.id is required"),
            ("model", {"quota": 0}, "model.quota must be positive"),
            ("test", {"prompt_size": 0}, "test.prompt_size must be positive"),
            ("test", {"max_tokens": -1}, "test.max_tokens must be positive"),
            (
                "test",
                {"streaming": False, "non_streaming": False},
                "at least one of streaming or non_streaming must be enabled",
            ),
            ("concurrency", {"start": 0}, "concurrency.start must be positive"),
            ("concurrency", {"start": 10, "end": 5}, "concurrency.end must be >= concurrency.start"),
            ("concurrency", {"step": 0}, "concurrency.step must be positive"),
            ("concurrency", {"duration_seconds": 0}, "concurrency.duration_seconds must be positive"),
            ("output", {"report_file": ""}, "output.report_file is required"),
        ],
    )
    def test_validation_rules(self, sample_config_data, section, values, message):
        with pytest.raises(ConfigError, match=message) as exc_info:
            parse_config(with_override(sample_config_data, section, **values))

        assert str(exc_info.value).startswith("invalid configuration:")

    def test_missing_section(self, sample_config_data):
        data = copy.deepcopy(sample_config_data)
        del data["output"]

        with pytest.raises(ConfigError, match="output"):
            parse_config(data)

    def test_missing_required_field(self, sample_config_data):
        data = copy.deepcopy(sample_config_data)
        del data["test"]["max_tokens"]

        with pytest.raises(ConfigError, match="test.max_tokens"):
            parse_config(data)


class TestLoadConfig:
    """Tests for load_config."""

    def test_load_from_file(self, tmp_path, sample_config_data):
        path = tmp_path / "config.json"
        path.write_text(json.dumps(sample_config_data))

        config = load_config(path)

        assert config.endpoint.url == sample_config_data["endpoint"]["url"]

    def test_load_from_str_path(self, tmp_path, sample_config_data):
        path = tmp_path / "config.json"
        path.write_text(json.dumps(sample_config_data))

        assert load_config(str(path)).model.quota == 100

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="failed to read config file"):
            load_config(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")

        with pytest.raises(ConfigError, match="failed to parse config file"):
            load_config(path)

    def test_top_level_not_object(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2, 3]")

        with pytest.raises(ConfigError, match="failed to parse config file"):
            load_config(path)

    def test_invalid_values(self, tmp_path, sample_config_data):
        path = tmp_path / "config.json"
        path.write_text(json.dumps(with_override(sample_config_data, "concurrency", start=4, end=2)))

        with pytest.raises(ConfigError, match="concurrency.end must be >= concurrency.start"):
            load_config(path)
