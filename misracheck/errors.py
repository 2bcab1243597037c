"""Exception hierarchy shared across the rule engine."""

from __future__ import annotations


class MisraCheckError(Exception):
    """Base class for all errors raised by misracheck."""


class MalformedFact(MisraCheckError):
    """A node was asked for an attribute its kind does not carry."""

    def __init__(self, message: str, node: object | None = None) -> None:
        super().__init__(message)
        self.node = node


class FactDecodeError(MalformedFact):
    """A serialized fact record could not be decoded into a node."""


class DuplicateRuleId(MisraCheckError):
    """A rule with the same identifier is already registered."""

    def __init__(self, rule_id: str) -> None:
        super().__init__(f"Rule already registered: {rule_id}")
        self.rule_id = rule_id


class UnknownRuleId(MisraCheckError, KeyError):
    """The registry has no rule with the requested identifier."""

    def __init__(self, rule_id: str) -> None:
        super().__init__(f"Unknown rule: {rule_id}")
        self.rule_id = rule_id

    def __str__(self) -> str:
        return self.args[0]


class ConfigError(MisraCheckError):
    """Raised when a configuration file cannot be parsed."""
