from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


# =========================
# Constants / Conventions
# =========================

DEFAULT_SOURCE_LOCALE = "en"
DEFAULT_REPORT_FILE = "report.json"
DEFAULT_LANGUAGES: Tuple[str, ...] = ("de", "es", "fr", "it", "ja", "ko", "pl", "pt", "ru", "tr", "zh")

JSON_SUFFIX = ".json"

# 语言代码：2~5 个小写字母（de / zh / yue ...）
LANGUAGE_CODE_PATTERN = r"^[a-z]{2,5}$"


# =========================
# Sync Models
# =========================

@dataclass(frozen=True)
class LanguageStats:
    """
    Completion statistics for one language.
    - untranslated: keys without a distinct translation (copied placeholder OR missing)
    - missing: keys absent from the file before sync (also counted in untranslated)
    """
    translated: int
    untranslated: int
    missing: int
    completion: float

    def to_dict(self) -> Dict[str, object]:
        return {
            "translated": self.translated,
            "untranslated": self.untranslated,
            "missing": self.missing,
            "completion": self.completion,
        }


@dataclass(frozen=True)
class SyncReport:
    """Generated report.json content. Never hand-edited."""
    generated: str
    total_keys: int
    languages: Dict[str, LanguageStats] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, object]:
        return {
            "generated": self.generated,
            "totalKeys": self.total_keys,
            "languages": {code: st.to_dict() for code, st in self.languages.items()},
        }

    def ranked(self) -> List[Tuple[str, LanguageStats]]:
        """按完成度从高到低（同分保持原顺序）。"""
        return sorted(self.languages.items(), key=lambda kv: kv[1].completion, reverse=True)


# =========================
# Validation Models
# =========================

class IssueLevel(str, Enum):
    WARN = "warn"
    ERROR = "error"


class IssueCode(str, Enum):
    # File identity
    RESERVED_FILE = "reserved_file"
    BAD_LANGUAGE_CODE = "bad_language_code"

    # Structure
    JSON_INVALID = "json_invalid"
    JSON_NOT_OBJECT = "json_not_object"

    # Keys
    MISSING_KEY = "missing_key"
    EXTRA_KEY = "extra_key"

    # Values
    NON_STRING = "non_string"
    EMPTY_VALUE = "empty_value"
    BLOCKED_CONTENT = "blocked_content"
    CONTROL_CHARS = "control_chars"
    PLACEHOLDER_MISSING = "placeholder_missing"
    PLACEHOLDER_EXTRA = "placeholder_extra"
    TOO_LONG = "too_long"
    SUSPICIOUS_LENGTH = "suspicious_length"


@dataclass(frozen=True)
class Issue:
    level: IssueLevel
    code: IssueCode
    message: str

    # Optional context
    key: Optional[str] = None
    details: Dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class ValidationResult:
    """
    Ordered findings for one file. errors/warnings keep the order checks ran in.
    """
    file: str
    issues: Tuple[Issue, ...] = field(default_factory=tuple)

    @property
    def errors(self) -> List[str]:
        return [i.message for i in self.issues if i.level == IssueLevel.ERROR]

    @property
    def warnings(self) -> List[str]:
        return [i.message for i in self.issues if i.level == IssueLevel.WARN]

    @property
    def ok(self) -> bool:
        return all(i.level != IssueLevel.ERROR for i in self.issues)

    def counts_by_level(self) -> Dict[str, int]:
        d: Dict[str, int] = {"warn": 0, "error": 0}
        for i in self.issues:
            d[i.level.value] = d.get(i.level.value, 0) + 1
        return d


# =========================
# Action Runtime Options
# =========================

@dataclass(frozen=True)
class RuntimeOptions:
    """
    CLI runtime options, not from YAML:
    - dry_run: don't write files
    """
    dry_run: bool = False
