from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from .models import (
    DEFAULT_LANGUAGES,
    DEFAULT_REPORT_FILE,
    DEFAULT_SOURCE_LOCALE,
    JSON_SUFFIX,
    LANGUAGE_CODE_PATTERN,
)
from .rules import DEFAULT_MAX_LENGTH, DEFAULT_MAX_LENGTH_RATIO, ValidationRules


CONFIG_FILE = "locale_guard.yaml"


# =========================
# Errors
# =========================

class ConfigError(RuntimeError):
    pass


# =========================
# Config model
# =========================

@dataclass(frozen=True)
class GuardConfig:
    """Normalized config loaded from locale_guard.yaml (or built-in defaults)."""
    i18n_dir: Path
    source_locale: str = DEFAULT_SOURCE_LOCALE
    languages: Tuple[str, ...] = DEFAULT_LANGUAGES
    report_file: str = DEFAULT_REPORT_FILE
    max_length: int = DEFAULT_MAX_LENGTH
    max_length_ratio: float = DEFAULT_MAX_LENGTH_RATIO

    @property
    def source_file(self) -> str:
        return f"{self.source_locale}{JSON_SUFFIX}"

    @property
    def source_path(self) -> Path:
        return self.i18n_dir / self.source_file

    @property
    def report_path(self) -> Path:
        return self.i18n_dir / self.report_file

    def language_path(self, code: str) -> Path:
        return self.i18n_dir / f"{code}{JSON_SUFFIX}"

    def validation_rules(self) -> ValidationRules:
        return ValidationRules(
            source_file=self.source_file,
            report_file=self.report_file,
            max_length=self.max_length,
            max_length_ratio=self.max_length_ratio,
        )


def default_config(root_dir: Path) -> GuardConfig:
    return GuardConfig(i18n_dir=root_dir.resolve())


def override_i18n_dir(cfg: GuardConfig, i18n_dir: Path) -> GuardConfig:
    return GuardConfig(
        i18n_dir=i18n_dir.resolve(),
        source_locale=cfg.source_locale,
        languages=cfg.languages,
        report_file=cfg.report_file,
        max_length=cfg.max_length,
        max_length_ratio=cfg.max_length_ratio,
    )


# =========================
# Helpers
# =========================

_CODE_RE = re.compile(LANGUAGE_CODE_PATTERN)


def _as_str(x: object, default: str = "") -> str:
    if x is None:
        return default
    s = str(x).strip()
    return s if s else default


def _dedupe_keep_order(items: List[str]) -> List[str]:
    seen = set()
    out = []
    for x in items:
        if x in seen:
            continue
        seen.add(x)
        out.append(x)
    return out


def _positive_number(raw: object, name: str, *, integer: bool) -> float:
    # bool 是 int 的子类，这里要排除
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ConfigError(f"{name} 必须是数字，实际是：{raw!r}")
    if integer and not isinstance(raw, int):
        raise ConfigError(f"{name} 必须是整数，实际是：{raw!r}")
    if raw <= 0:
        raise ConfigError(f"{name} 必须大于 0，实际是：{raw!r}")
    return raw


# =========================
# YAML load / validate
# =========================

def load_config_yaml(path: Path) -> Dict[str, object]:
    if not path.exists():
        raise ConfigError(f"配置文件不存在：{path}")
    try:
        obj = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML 解析失败：{e}")
    if obj is None:
        return {}
    if not isinstance(obj, dict):
        raise ConfigError("配置文件格式错误：顶层必须是 mapping/object")
    return obj


def parse_config_dict(
        *,
        root_dir: Path,
        raw: Dict[str, object],
) -> GuardConfig:
    """
    将 YAML dict 解析为强类型 Config（做基础校验，不读语言文件）。
    """
    i18n_dir = _as_str(raw.get("i18nDir"), ".")
    i18n_path = (root_dir / i18n_dir).resolve()

    src = _as_str(raw.get("source_locale"), DEFAULT_SOURCE_LOCALE)
    if not _CODE_RE.match(src):
        raise ConfigError(f"source_locale 不合法：{src!r}（需为 2~5 个小写字母）")

    langs_raw = raw.get("languages")
    if langs_raw is None:
        langs = list(DEFAULT_LANGUAGES)
    elif isinstance(langs_raw, list):
        langs = []
        for i, item in enumerate(langs_raw):
            code = _as_str(item)
            if not _CODE_RE.match(code):
                raise ConfigError(f"languages[{i}] 不合法：{item!r}（需为 2~5 个小写字母）")
            langs.append(code)
    else:
        raise ConfigError("languages 必须是数组 list")

    # source 不参与同步；重复的 code 只保留第一次出现
    langs = [c for c in _dedupe_keep_order(langs) if c != src]

    report_file = _as_str(raw.get("report_file"), DEFAULT_REPORT_FILE)
    if "/" in report_file or "\\" in report_file:
        raise ConfigError(f"report_file 只能是文件名（不含目录）：{report_file!r}")
    if report_file == f"{src}{JSON_SUFFIX}":
        raise ConfigError(f"report_file 不能与源语言文件同名：{report_file!r}")
    if report_file in {f"{c}{JSON_SUFFIX}" for c in langs}:
        raise ConfigError(f"report_file 不能与语言文件同名：{report_file!r}")

    val_raw = raw.get("validation")
    if val_raw is None:
        val_raw = {}
    if not isinstance(val_raw, dict):
        raise ConfigError("validation 必须是 object")

    max_length = _positive_number(val_raw.get("max_length", DEFAULT_MAX_LENGTH), "validation.max_length", integer=True)
    ratio = _positive_number(
        val_raw.get("max_length_ratio", DEFAULT_MAX_LENGTH_RATIO), "validation.max_length_ratio", integer=False
    )

    return GuardConfig(
        i18n_dir=i18n_path,
        source_locale=src,
        languages=tuple(langs),
        report_file=report_file,
        max_length=int(max_length),
        max_length_ratio=ratio,
    )


def read_config(cfg_path: Path, root_dir: Optional[Path] = None) -> GuardConfig:
    """
    配置文件可选：不存在时使用内置默认值（i18nDir = 当前目录）。
    """
    root = (root_dir or cfg_path.parent).resolve()
    if not cfg_path.exists():
        return default_config(root)
    raw = load_config_yaml(cfg_path)
    return parse_config_dict(root_dir=root, raw=raw)


# =========================
# init: commented YAML template generation
# =========================

def generate_commented_yaml_template(*, cfg: GuardConfig, i18n_dir: str = ".") -> str:
    """
    生成带注释的 locale_guard.yaml 文本。
    注意：这里手写 YAML 文本（而不是 yaml.dump），以便保证注释可控、可读。
    """
    lang_lines = "\n".join(f"  - {c}" for c in cfg.languages) if cfg.languages else "  []"
    ratio = cfg.max_length_ratio
    ratio_text = str(int(ratio)) if float(ratio).is_integer() else str(ratio)

    return (
        "# locale_guard.yaml\n"
        "# ---------------------------------------------\n"
        "# 多语言 JSON 同步 / 校验工具配置\n"
        "# - sync：以源语言文件为准补齐各语言 key，并生成完成度报告\n"
        "# - validate：提交前校验翻译文件（结构 / 内容安全 / 占位符）\n"
        "# ---------------------------------------------\n\n"
        "# 语言文件目录：目录下直接放 {code}.json（例如 en.json / de.json）\n"
        f"i18nDir: {i18n_dir}\n\n"
        "# 源语言（唯一真相源；validate 禁止提交该文件）\n"
        f"source_locale: {cfg.source_locale}\n\n"
        "# 需要同步的语言（2~5 个小写字母；会自动剔除与 source 重复的 code）\n"
        "languages:\n"
        f"{lang_lines}\n\n"
        "# 完成度报告文件名（自动生成，禁止手改 / 提交）\n"
        f"report_file: {cfg.report_file}\n\n"
        "# 校验阈值\n"
        "validation:\n"
        "  # 单个 value 的最大长度（超过即报错）\n"
        f"  max_length: {cfg.max_length}\n"
        "  # 译文长度超过源文本的倍数（超过仅告警）\n"
        f"  max_length_ratio: {ratio_text}\n"
    )


def init_config(cfg_path: Path, root_dir: Optional[Path] = None) -> GuardConfig:
    if cfg_path.exists():
        raise ConfigError(f"配置文件已存在：{cfg_path}（如需重建请先删除）")
    root = (root_dir or cfg_path.parent).resolve()
    cfg = default_config(root)
    cfg_path.write_text(generate_commented_yaml_template(cfg=cfg), encoding="utf-8")
    return cfg
