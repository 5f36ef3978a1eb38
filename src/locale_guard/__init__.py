from __future__ import annotations

try:
    from importlib.metadata import version as _version

    __version__ = _version("locale-guard")
except Exception:
    __version__ = "0.0.0"

from .rules import ValidationRules
from .sync import sync_language
from .validate import validate

__all__ = [
    'ValidationRules',
    'sync_language',
    'validate',
]
