"""Severity definitions for diagnostics."""

from __future__ import annotations

from enum import Enum

from .errors import ConfigError


class Severity(str, Enum):
    """Enumerate the supported severity levels for diagnostics."""

    ERROR = "ERROR"
    WARNING = "WARNING"
    NOTE = "NOTE"

    @property
    def rank(self) -> int:
        """Return an integer ranking, highest first when sorted descending."""

        ordering = {
            Severity.ERROR: 2,
            Severity.WARNING: 1,
            Severity.NOTE: 0,
        }
        return ordering[self]

    @classmethod
    def parse(cls, value: object) -> "Severity":
        if isinstance(value, Severity):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        choices = ", ".join(member.value.lower() for member in cls)
        raise ConfigError(f"Invalid severity {value!r}; expected one of: {choices}")


# MISRA classifications map onto default reporting severities.
CLASSIFICATION_SEVERITY = {
    "Mandatory": Severity.ERROR,
    "Required": Severity.WARNING,
    "Advisory": Severity.NOTE,
}
