from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

# Version
try:
    __version__ = _pkg_version("sievelab")
except PackageNotFoundError:
    __version__ = "0+unknown"

# Public API re-exports
from .config import has_profile, load_settings, read_current_profile
from .engine import Cursor, SieveEngine
from .factors import factors_of, prime_factorization
from .families import FAMILIES, classify
from .runtime import APPLY, CFG
from .stats import SeriesPoint, Stats, summarize
from .table import Entry, NumberTable
from .utility import InvalidBound, InvalidInput, UserInputError
from .workspace import workspace_dir

__all__ = [
    "APPLY",
    "CFG",
    "FAMILIES",
    "Cursor",
    "Entry",
    "InvalidBound",
    "InvalidInput",
    "NumberTable",
    "SeriesPoint",
    "SieveEngine",
    "Stats",
    "UserInputError",
    "__version__",
    "classify",
    "factors_of",
    "has_profile",
    "load_settings",
    "prime_factorization",
    "read_current_profile",
    "summarize",
    "workspace_dir",
]
