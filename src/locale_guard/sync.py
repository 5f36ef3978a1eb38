from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .config import GuardConfig
from .fs import load_source_or_throw, read_candidate, save_json, write_report
from .models import LanguageStats, RuntimeOptions, SyncReport


BAR_WIDTH = 20


def completion_of(translated: int, total: int) -> float:
    """百分比保留 1 位小数（四舍五入，.x5 向上）；source 为空时视为 100%。"""
    if total <= 0:
        return 100.0
    return math.floor(translated * 1000 / total + 0.5) / 10


def sync_language(source: Mapping[str, str], existing: Any) -> Tuple[Dict[str, Any], LanguageStats]:
    """
    Merge one language against the source mapping.

    - result keys == source keys (sorted); extra keys in `existing` are dropped
    - existing value kept; identical to source -> still a placeholder (untranslated)
    - absent -> source value copied as placeholder (missing AND untranslated)
    - a non-object `existing` is treated as empty
    """
    current: Mapping[str, Any] = existing if isinstance(existing, dict) else {}

    merged: Dict[str, Any] = {}
    untranslated: List[str] = []
    missing: List[str] = []

    for key in sorted(source.keys()):
        if key in current:
            merged[key] = current[key]
            if current[key] == source[key]:
                untranslated.append(key)
        else:
            merged[key] = source[key]
            missing.append(key)
            untranslated.append(key)

    total = len(merged)
    translated = total - len(untranslated)
    stats = LanguageStats(
        translated=translated,
        untranslated=len(untranslated),
        missing=len(missing),
        completion=completion_of(translated, total),
    )
    return merged, stats


def build_report(
        total_keys: int,
        stats_by_lang: Dict[str, LanguageStats],
        generated: Optional[datetime] = None,
) -> SyncReport:
    ts = (generated or datetime.now(timezone.utc)).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return SyncReport(generated=ts, total_keys=total_keys, languages=dict(stats_by_lang))


def progress_bar(pct: float) -> str:
    filled = max(0, min(BAR_WIDTH, int(pct / 5 + 0.5)))
    return "[" + "█" * filled + "░" * (BAR_WIDTH - filled) + "]"


def status_icon(completion: float) -> str:
    if completion >= 100:
        return "🟢"
    if completion >= 80:
        return "🟡"
    return "🔴"


def _print_language_line(code: str, stats: LanguageStats) -> None:
    total = stats.translated + stats.untranslated
    print(
        f"✅ {code:<3}  {progress_bar(stats.completion)}  {stats.completion:5.1f}%  "
        f"({stats.translated}/{total} keys)"
    )


def _print_summary(report: SyncReport) -> None:
    print("\n📊 翻译完成度：\n")
    for code, st in report.ranked():
        print(f"  {status_icon(st.completion)} {code:<3}  {st.completion:5.1f}%  — {st.untranslated} 个 key 仍为源语言")


def run_sync(cfg: GuardConfig, rt: Optional[RuntimeOptions] = None) -> SyncReport:
    """
    sync：
    - 读取源语言文件（缺失即 SourceError，不做任何猜测）
    - 逐个语言补齐 key（保留已有译文），写回 {code}.json
    - 生成 report.json
    """
    rt = rt or RuntimeOptions()
    print("🌍 开始同步多语言文件...\n")

    source = load_source_or_throw(cfg.source_path)
    print(f"📖 源语言 {cfg.source_file}：{len(source)} 个 key\n")

    stats_by_lang: Dict[str, LanguageStats] = {}
    for code in cfg.languages:
        path = cfg.language_path(code)
        try:
            existing = read_candidate(path)
        except ValueError as e:
            print(f"⚠️ 无法解析 {path.name}，将重新生成：{e}")
            existing = {}

        merged, stats = sync_language(source, existing)
        if not rt.dry_run:
            save_json(path, merged)
        stats_by_lang[code] = stats
        _print_language_line(code, stats)

    report = build_report(len(source), stats_by_lang)
    if not rt.dry_run:
        write_report(cfg.report_path, report)

    _print_summary(report)

    print("\n✨ 同步完成！" + ("（dry-run：未写入任何文件）" if rt.dry_run else ""))
    print(f"📝 语言文件目录：{cfg.i18n_dir}")
    print(f"📄 报告文件：{cfg.report_path}")
    return report
