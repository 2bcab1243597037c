"""MISRA-C rule engine operating on resolved semantic fact graphs."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("misracheck")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.1.0-dev"

__all__ = ["__version__"]
