"""Rule configuration loading (``misracheck.yml``)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .errors import ConfigError
from .rules.catalog import resolve
from .severity import Severity
from .utils import read_yaml_file

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "misracheck.yml"
_RULE_KEYS = {"enabled", "severity", "params"}
_TOP_LEVEL_KEYS = {"rules"}


@dataclass
class RuleSettings:
    """Per-rule settings from the configuration file."""

    enabled: bool = True
    severity: Optional[Severity] = None
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class EngineConfig:
    """Rule id to settings mapping applied at registry construction."""

    rules: Dict[str, RuleSettings] = field(default_factory=dict)
    source: Optional[Path] = None

    def settings_for(self, rule_id: str) -> RuleSettings:
        if rule_id in self.rules:
            return self.rules[rule_id]
        for key, settings in self.rules.items():
            if resolve(key) == rule_id:
                return settings
        return RuleSettings()


def load_config(config_path: Path) -> EngineConfig:
    """Load configuration from disk; a missing file yields the defaults."""

    config_file = Path(config_path)
    if config_file.is_dir():
        config_file = config_file / DEFAULT_CONFIG_FILENAME
    try:
        data = read_yaml_file(config_file)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {config_file}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed to read {config_file}: {exc}") from exc
    if data is None:
        logger.debug("No configuration at %s; using defaults", config_file)
        return EngineConfig(source=None)
    config = parse_config(data)
    config.source = config_file
    return config


def parse_config(data: Any) -> EngineConfig:
    if not isinstance(data, Mapping):
        raise ConfigError("Configuration root must be a mapping")
    for key in data:
        if key not in _TOP_LEVEL_KEYS:
            logger.warning("Ignoring unknown configuration key %r", key)

    rules_section = data.get("rules") or {}
    if not isinstance(rules_section, Mapping):
        raise ConfigError("'rules' must be a mapping of rule id to settings")

    rules: Dict[str, RuleSettings] = {}
    for rule_id, raw in rules_section.items():
        key = str(rule_id)
        rules[resolve(key) or key] = _parse_rule_settings(key, raw)
    return EngineConfig(rules=rules)


def _parse_rule_settings(rule_id: str, raw: Any) -> RuleSettings:
    # ``MISRA.10.1: false`` is shorthand for disabling a rule.
    if isinstance(raw, bool):
        return RuleSettings(enabled=raw)
    if raw is None:
        return RuleSettings()
    if not isinstance(raw, Mapping):
        raise ConfigError(f"Settings for {rule_id} must be a mapping")

    for key in raw:
        if key not in _RULE_KEYS:
            logger.warning("Ignoring unknown setting %r for rule %s", key, rule_id)

    enabled = raw.get("enabled", True)
    if not isinstance(enabled, bool):
        raise ConfigError(f"'enabled' for {rule_id} must be true or false")

    severity = raw.get("severity")
    params = raw.get("params") or {}
    if not isinstance(params, Mapping):
        raise ConfigError(f"'params' for {rule_id} must be a mapping")

    return RuleSettings(
        enabled=enabled,
        severity=Severity.parse(severity) if severity is not None else None,
        params=dict(params),
    )
