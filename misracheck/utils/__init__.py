"""Utility helpers for misracheck."""

from .fileio import read_yaml_file

__all__ = ["read_yaml_file"]
