from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .fs import loads_json
from .models import (
    DEFAULT_REPORT_FILE,
    DEFAULT_SOURCE_LOCALE,
    JSON_SUFFIX,
    LANGUAGE_CODE_PATTERN,
    Issue,
    IssueCode,
    IssueLevel,
)


# =========================
# Fixed tables
# =========================

@dataclass(frozen=True)
class BlockedPattern:
    label: str
    regex: re.Pattern[str]

    def found_in(self, value: str) -> bool:
        return self.regex.search(value) is not None


# 顺序即报告顺序；一个 value 命中多个时全部报出
BLOCKED_PATTERNS: Tuple[BlockedPattern, ...] = (
    BlockedPattern("script tag", re.compile(r"<script", re.IGNORECASE)),
    BlockedPattern("closing script tag", re.compile(r"</script", re.IGNORECASE)),
    BlockedPattern("javascript: URI", re.compile(r"javascript\s*:", re.IGNORECASE)),
    BlockedPattern("inline event handler (onX=)", re.compile(r"on[a-z]{2,}\s*=", re.IGNORECASE)),
    BlockedPattern("iframe tag", re.compile(r"<iframe", re.IGNORECASE)),
    BlockedPattern("img onerror injection", re.compile(r"<img[^>]+onerror", re.IGNORECASE)),
    BlockedPattern("base64 data URI", re.compile(r"data:[^,]*base64", re.IGNORECASE)),
    BlockedPattern("HTML numeric entity (potential obfuscation)", re.compile(r"&#x?[0-9a-f]+;", re.IGNORECASE)),
    BlockedPattern("right-to-left override character (U+202E)", re.compile("\u202e")),
)

PLACEHOLDER_RE = re.compile(r"\{\{[^}]+\}\}")

# 允许 \t \n \r
CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

LANGUAGE_CODE_RE = re.compile(LANGUAGE_CODE_PATTERN)

DEFAULT_MAX_LENGTH = 2000
DEFAULT_MAX_LENGTH_RATIO = 10


@dataclass(frozen=True)
class ValidationRules:
    """Immutable limits and tables handed to the validator."""
    source_file: str = DEFAULT_SOURCE_LOCALE + JSON_SUFFIX
    report_file: str = DEFAULT_REPORT_FILE
    max_length: int = DEFAULT_MAX_LENGTH
    max_length_ratio: float = DEFAULT_MAX_LENGTH_RATIO
    blocked_patterns: Tuple[BlockedPattern, ...] = BLOCKED_PATTERNS


# =========================
# Helpers
# =========================

def extract_placeholders(text: str) -> List[str]:
    return sorted(PLACEHOLDER_RE.findall(text))


def has_control_chars(text: str) -> bool:
    return CONTROL_CHARS_RE.search(text) is not None


def json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def language_code_of(file_name: str) -> str:
    if file_name.endswith(JSON_SUFFIX):
        return file_name[: -len(JSON_SUFFIX)]
    return file_name


# =========================
# Shared context
# =========================

@dataclass
class CheckContext:
    file: str
    source: Mapping[str, str]
    raw: str
    rules: ValidationRules
    parsed: Any = None
    content: Dict[str, Any] = field(default_factory=dict)
    issues: List[Issue] = field(default_factory=list)

    def error(self, code: IssueCode, message: str, key: Optional[str] = None, **details: object) -> None:
        self.issues.append(Issue(IssueLevel.ERROR, code, message, key=key, details=details))

    def warn(self, code: IssueCode, message: str, key: Optional[str] = None, **details: object) -> None:
        self.issues.append(Issue(IssueLevel.WARN, code, message, key=key, details=details))


# 返回 False：停止该文件的后续检查
FileCheck = Callable[[CheckContext], bool]
# 返回 False：跳过该 key 的后续检查
ValueCheck = Callable[[CheckContext, str, Any, str], bool]


# =========================
# File-level checks
# =========================

def check_reserved_name(ctx: CheckContext) -> bool:
    if ctx.file == ctx.rules.source_file:
        ctx.error(
            IssueCode.RESERVED_FILE,
            f"{ctx.file} is the source of truth; do not submit it as a translation.",
        )
        return False
    if ctx.file == ctx.rules.report_file:
        ctx.error(IssueCode.RESERVED_FILE, f"{ctx.file} is generated; do not submit it.")
        return False
    return True


def check_language_code(ctx: CheckContext) -> bool:
    if not LANGUAGE_CODE_RE.match(language_code_of(ctx.file)):
        ctx.error(
            IssueCode.BAD_LANGUAGE_CODE,
            f'File name "{ctx.file}" is not a valid language code (expected e.g. "de.json").',
        )
    # 文件名不合法不影响内容检查
    return True


def check_json(ctx: CheckContext) -> bool:
    try:
        ctx.parsed = loads_json(ctx.raw)
    except ValueError as e:
        ctx.error(IssueCode.JSON_INVALID, f"Invalid JSON: {e}")
        return False
    return True


def check_object(ctx: CheckContext) -> bool:
    if not isinstance(ctx.parsed, dict):
        ctx.error(IssueCode.JSON_NOT_OBJECT, "Root value must be a JSON object.")
        return False
    ctx.content = ctx.parsed
    return True


def check_missing_keys(ctx: CheckContext) -> bool:
    for key in ctx.source:
        if key not in ctx.content:
            ctx.error(IssueCode.MISSING_KEY, f'Missing key: "{key}"', key=key)
    return True


def check_extra_keys(ctx: CheckContext) -> bool:
    for key in ctx.content:
        if key not in ctx.source:
            ctx.error(IssueCode.EXTRA_KEY, f'Unknown key not in source: "{key}"', key=key)
    return True


def check_values(ctx: CheckContext) -> bool:
    for key, value in ctx.content.items():
        if key not in ctx.source:
            continue  # check_extra_keys 已报
        src_value = ctx.source[key]
        for check in VALUE_CHECKS:
            if not check(ctx, key, value, src_value):
                break
    return True


# =========================
# Per-value checks
# =========================

def check_type(ctx: CheckContext, key: str, value: Any, src_value: str) -> bool:
    if isinstance(value, str):
        return True
    ctx.error(IssueCode.NON_STRING, f"[{key}] Value must be a string, got {json_type_name(value)}.", key=key)
    return False


def check_empty(ctx: CheckContext, key: str, value: str, src_value: str) -> bool:
    if not value.strip() and src_value.strip():
        ctx.warn(IssueCode.EMPTY_VALUE, f"[{key}] Value is empty (source is not).", key=key)
    return True


def check_blocked_content(ctx: CheckContext, key: str, value: str, src_value: str) -> bool:
    for p in ctx.rules.blocked_patterns:
        if p.found_in(value):
            ctx.error(IssueCode.BLOCKED_CONTENT, f"[{key}] Contains blocked content: {p.label}.", key=key, label=p.label)
    return True


def check_control_chars(ctx: CheckContext, key: str, value: str, src_value: str) -> bool:
    if has_control_chars(value):
        ctx.error(IssueCode.CONTROL_CHARS, f"[{key}] Contains non-printable control characters.", key=key)
    return True


def check_placeholders(ctx: CheckContext, key: str, value: str, src_value: str) -> bool:
    src_ph = set(extract_placeholders(src_value))
    tgt_ph = set(extract_placeholders(value))

    missing = sorted(src_ph - tgt_ph)
    extra = sorted(tgt_ph - src_ph)
    if missing:
        ctx.error(
            IssueCode.PLACEHOLDER_MISSING,
            f"[{key}] Missing template placeholder(s): {', '.join(missing)}",
            key=key,
            placeholders=missing,
        )
    if extra:
        ctx.error(
            IssueCode.PLACEHOLDER_EXTRA,
            f"[{key}] Extra template placeholder(s) not in source: {', '.join(extra)}",
            key=key,
            placeholders=extra,
        )
    return True


def check_length(ctx: CheckContext, key: str, value: str, src_value: str) -> bool:
    n = len(value)
    cap = ctx.rules.max_length
    if n > cap:
        ctx.error(IssueCode.TOO_LONG, f"[{key}] Value exceeds hard cap of {cap} characters (got {n}).", key=key)
    elif src_value and n > len(src_value) * ctx.rules.max_length_ratio:
        times = int(n / len(src_value) + 0.5)
        ctx.warn(
            IssueCode.SUSPICIOUS_LENGTH,
            f"[{key}] Value is {times}x longer than source; looks suspicious.",
            key=key,
        )
    return True


FILE_CHECKS: Tuple[FileCheck, ...] = (
    check_reserved_name,
    check_language_code,
    check_json,
    check_object,
    check_missing_keys,
    check_extra_keys,
    check_values,
)

VALUE_CHECKS: Tuple[ValueCheck, ...] = (
    check_type,
    check_empty,
    check_blocked_content,
    check_control_chars,
    check_placeholders,
    check_length,
)
