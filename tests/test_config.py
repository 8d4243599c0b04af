"""Tests for configuration loading and collaborator construction."""

import json

import pytest

from lead_ingest.collaborators.sample import EchoEnricher, RuleBasedValidator
from lead_ingest.config import (
    ConfigurationError,
    detector_settings,
    import_settings,
    iter_enabled_collaborator_configs,
    load_configuration,
)
from lead_ingest.factory import build_enricher, build_validator
from lead_ingest.rate_limit import RateLimitedCollaborator

YAML_CONFIG = """
detector:
  accept_threshold: 0.6
import:
  batch_size: 10
  concurrent: true
  max_workers: 3
validators:
  - name: Disabled
    class: lead_ingest.collaborators.sample.RuleBasedValidator
    enabled: false
  - name: Rules
    class: lead_ingest.collaborators.sample.RuleBasedValidator
    options:
      required_fields: [email]
    rate_limit_per_minute: 600
enrichers:
  - name: Echo
    class: lead_ingest.collaborators.sample.EchoEnricher
"""


def test_load_yaml_configuration_and_build_collaborators(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(YAML_CONFIG, encoding="utf-8")

    config = load_configuration(path)

    validator = build_validator(config)
    enricher = build_enricher(config)
    assert isinstance(validator, RateLimitedCollaborator)
    assert validator.name == "Rules"
    assert isinstance(validator.wrapped, RuleBasedValidator)
    assert isinstance(enricher.wrapped, EchoEnricher)
    assert [entry["name"] for entry in iter_enabled_collaborator_configs(config, "validators")] == ["Rules"]


def test_detector_and_import_settings(tmp_path) -> None:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"detector": {"accept_threshold": 0.6}, "import": {"batch_size": 5}}), encoding="utf-8")

    config = load_configuration(path)

    detector = detector_settings(config)
    assert detector.accept_threshold == 0.6
    assert detector.suggest_threshold == 0.3
    settings = import_settings(config)
    assert settings.batch_size == 5
    assert settings.concurrent is False


def test_defaults_when_sections_missing() -> None:
    assert detector_settings({}).accept_threshold == 0.5
    assert import_settings(None).batch_size == 25
    assert build_validator({}) is None
    assert build_enricher({"enrichers": []}) is None


def test_invalid_threshold_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        detector_settings({"detector": {"accept_threshold": 1.5}})


def test_missing_and_unsupported_files(tmp_path) -> None:
    with pytest.raises(ConfigurationError):
        load_configuration(tmp_path / "missing.yaml")

    bad = tmp_path / "config.ini"
    bad.write_text("[x]", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_configuration(bad)


def test_collaborator_without_class_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        build_validator({"validators": [{"name": "nameless"}]})

    with pytest.raises(ConfigurationError):
        build_validator({"validators": [{"class": "lead_ingest.collaborators.sample.Missing"}]})
