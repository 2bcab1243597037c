"""Rule registry: rule id to rule mapping with enable/disable toggles."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Set

from .config import EngineConfig, RuleSettings
from .errors import ConfigError, DuplicateRuleId, UnknownRuleId
from .rules import Rule
from .rules.catalog import resolve
from .rules.essential_types import UnsignedSignedCompareRule
from .rules.pointer_casts import VoidPointerCastRule
from .rules.stdio import DEFAULT_UNSAFE_FUNCTIONS, UnboundedFormatWriteRule
from .severity import Severity

logger = logging.getLogger(__name__)


class RuleRegistry:
    """Hold rules in registration order.

    Disabling a rule keeps it registered so it can be re-enabled later in the
    same session. Severity overrides live here rather than on the rules so a
    rule instance stays stateless.
    """

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: Dict[str, Rule] = {}
        self._disabled: Set[str] = set()
        self._severity: Dict[str, Severity] = {}
        for rule in rules:
            self.register(rule)

    def register(self, rule: Rule) -> None:
        if rule.id in self._rules:
            raise DuplicateRuleId(rule.id)
        self._rules[rule.id] = rule

    def get(self, rule_id: str) -> Rule:
        try:
            return self._rules[rule_id]
        except KeyError:
            raise UnknownRuleId(rule_id) from None

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    # ------------------------------------------------------------------
    # Toggles
    # ------------------------------------------------------------------
    def enable(self, rule_id: str) -> None:
        self.get(rule_id)
        self._disabled.discard(rule_id)

    def disable(self, rule_id: str) -> None:
        self.get(rule_id)
        self._disabled.add(rule_id)

    def enable_category(self, category: str) -> int:
        ids = [rule.id for rule in self._rules.values() if rule.category == category]
        self._disabled.difference_update(ids)
        return len(ids)

    def disable_category(self, category: str) -> int:
        ids = [rule.id for rule in self._rules.values() if rule.category == category]
        self._disabled.update(ids)
        return len(ids)

    def is_enabled(self, rule_id: str) -> bool:
        self.get(rule_id)
        return rule_id not in self._disabled

    def active_rules(self, category: Optional[str] = None) -> List[Rule]:
        """Return enabled rules in registration order, optionally for one category."""

        return [
            rule
            for rule_id, rule in self._rules.items()
            if rule_id not in self._disabled and (category is None or rule.category == category)
        ]

    # ------------------------------------------------------------------
    # Severity
    # ------------------------------------------------------------------
    def set_severity(self, rule_id: str, severity: Optional[Severity]) -> None:
        self.get(rule_id)
        if severity is None:
            self._severity.pop(rule_id, None)
        else:
            self._severity[rule_id] = severity

    def severity_for(self, rule: Rule) -> Severity:
        return self._severity.get(rule.id, rule.severity)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def apply_config(self, config: EngineConfig) -> None:
        for rule_id, settings in config.rules.items():
            if rule_id not in self._rules:
                rule_id = resolve(rule_id) or rule_id
            if rule_id not in self._rules:
                logger.warning("Configuration names unknown rule %s; ignoring", rule_id)
                continue
            if settings.enabled:
                self.enable(rule_id)
            else:
                self.disable(rule_id)
            if settings.severity is not None:
                self.set_severity(rule_id, settings.severity)


def _unsafe_functions(settings: RuleSettings) -> Iterable[str]:
    value: Any = settings.params.get("unsafe_functions", DEFAULT_UNSAFE_FUNCTIONS)
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple, set, frozenset)) or not all(isinstance(item, str) for item in value):
        raise ConfigError("'unsafe_functions' for MISRA.21.6 must be a list of function names")
    return value


def _warn_unknown_params(rule_id: str, params: Mapping[str, Any], known: Set[str]) -> None:
    for key in params:
        if key not in known:
            logger.warning("Ignoring unknown parameter %r for rule %s", key, rule_id)


def default_rules(config: Optional[EngineConfig] = None) -> List[Rule]:
    """Instantiate the shipped rules, passing configured parameters through."""

    config = config or EngineConfig()
    compare = config.settings_for(UnsignedSignedCompareRule.id)
    casts = config.settings_for(VoidPointerCastRule.id)
    writes = config.settings_for(UnboundedFormatWriteRule.id)
    _warn_unknown_params(UnsignedSignedCompareRule.id, compare.params, set())
    _warn_unknown_params(VoidPointerCastRule.id, casts.params, set())
    _warn_unknown_params(UnboundedFormatWriteRule.id, writes.params, {"unsafe_functions"})
    return [
        UnsignedSignedCompareRule(),
        VoidPointerCastRule(),
        UnboundedFormatWriteRule(unsafe_functions=_unsafe_functions(writes)),
    ]


def build_registry(
    config: Optional[EngineConfig] = None,
    rules: Optional[Iterable[Rule]] = None,
) -> RuleRegistry:
    """Construct a fully configured registry; raises before returning a partial one."""

    config = config or EngineConfig()
    registry = RuleRegistry(default_rules(config) if rules is None else rules)
    registry.apply_config(config)
    logger.debug(
        "Registry built with %d rule(s), %d active",
        len(registry),
        len(registry.active_rules()),
    )
    return registry
