from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from .config import CONFIG_FILE, ConfigError, override_i18n_dir, read_config
from .fs import SourceError, load_source_or_throw


def doctor(cfg_path: Path, i18n_dir: Optional[Path] = None) -> int:
    """
    环境诊断：
    - 配置文件（可选）能否解析
    - 语言目录 / 源语言文件
    - 各语言文件是否存在（缺失不算失败：sync 会补齐）
    """
    ok = True

    if not cfg_path.exists():
        print(f"⚠️ 未找到 {CONFIG_FILE}，使用内置默认配置（可执行 locale_guard init 生成）")
    try:
        cfg = read_config(cfg_path)
    except ConfigError as e:
        print(f"❌ {CONFIG_FILE} 解析失败：{e}")
        return 1
    if i18n_dir is not None:
        cfg = override_i18n_dir(cfg, i18n_dir)
    if cfg_path.exists():
        print(f"✅ {CONFIG_FILE} OK (source={cfg.source_locale} languages={len(cfg.languages)})")

    if not cfg.i18n_dir.is_dir():
        print(f"❌ 语言目录不存在：{cfg.i18n_dir}")
        return 1
    print(f"✅ 语言目录 OK：{cfg.i18n_dir}")

    try:
        source = load_source_or_throw(cfg.source_path)
        print(f"✅ 源语言文件 OK：{cfg.source_file}（{len(source)} 个 key）")
    except SourceError as e:
        ok = False
        print(f"❌ {e}")

    missing: List[str] = [c for c in cfg.languages if not cfg.language_path(c).exists()]
    present = len(cfg.languages) - len(missing)
    print(f"✅ 语言文件：{present}/{len(cfg.languages)} 已存在")
    if missing:
        print(f"⚠️ 缺少语言文件：{', '.join(missing)}（执行 locale_guard sync 自动生成）")

    if cfg.report_path.exists():
        print(f"✅ 报告文件：{cfg.report_file}")
    else:
        print(f"⚠️ 尚未生成报告文件：{cfg.report_file}")

    if not ok:
        return 1
    print("✅ doctor 完成")
    return 0
