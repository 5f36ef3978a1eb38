from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config import CONFIG_FILE, ConfigError, GuardConfig, init_config, override_i18n_dir, read_config
from .doctor import doctor
from .fs import SourceError, resolve_target
from .models import RuntimeOptions
from .sync import run_sync
from .validate import run_validate


EXIT_OK = 0
EXIT_FAIL = 1
EXIT_BAD = 2


BOX_TOOL = {
    "id": "i18n.locale_guard",
    "name": "locale_guard",
    "category": "i18n",
    "summary": "多语言 JSON（flat {code}.json）同步补齐 / 完成度报告 / 提交前校验",
    "usage": [
        "locale_guard",
        "locale_guard init",
        "locale_guard doctor",
        "locale_guard sync",
        "locale_guard sync --dry-run",
        "locale_guard validate de.json fr.json",
        "locale_guard validate --all",
    ],
    "options": [
        {"flag": "--config", "desc": f"配置文件路径（默认 ./{CONFIG_FILE}，不存在则用内置默认值）"},
        {"flag": "--i18n-dir", "desc": "语言文件目录（覆盖配置 i18nDir）"},
        {"flag": "--all", "desc": "validate 所有已存在的语言文件"},
        {"flag": "--dry-run", "desc": "sync 只计算不写文件"},
    ],
}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog=BOX_TOOL["name"],
        description=BOX_TOOL["summary"],
    )
    p.add_argument(
        "action",
        nargs="?",
        choices=["init", "doctor", "sync", "validate"],
        help="动作（不填则进入交互菜单）",
    )
    p.add_argument("files", nargs="*", help="validate 的目标文件（相对路径按 i18nDir 解析）")
    p.add_argument("--config", default=None, help=f"配置文件路径（默认 ./{CONFIG_FILE}，不存在则用内置默认值）")
    p.add_argument("--i18n-dir", default=None, help="语言文件目录（覆盖配置 i18nDir）")
    p.add_argument("--all", action="store_true", help="validate 所有已存在的语言文件")
    p.add_argument("--dry-run", action="store_true", help="sync 只计算不写文件")
    return p


def choose_action_interactive(cfg_path: Path) -> str:
    menu = [
        ("1", "sync", "同步补齐 + 生成报告（sync）"),
        ("2", "validate", "校验全部语言文件（validate --all）"),
        ("3", "doctor", "环境诊断（doctor）"),
        ("4", "init", "生成配置（init）"),
        ("0", "exit", "退出"),
    ]
    aliases = {k: v for k, v, _ in menu}

    default_action = "doctor"
    while True:
        print("\n== locale_guard 交互模式 ==")
        print(f"[ctx] config={'OK' if cfg_path.exists() else 'DEFAULT'}")
        print("")
        for k, _v, label in menu:
            print(f"{k}. {label}")
        print("")

        s = input(f"请选择操作（默认 {default_action}，回车采用默认）: ").strip().lower()
        if not s:
            return default_action
        if s in ("q", "quit", "exit", "0"):
            return "exit"
        if s in aliases:
            return aliases[s]
        if s in ("h", "help", "?"):
            print("输入数字选择：1/2/3/4；q/0 退出。")
            continue
        print("无效输入。")


def _existing_language_files(cfg: GuardConfig) -> List[str]:
    return [str(cfg.language_path(c)) for c in cfg.languages if cfg.language_path(c).exists()]


def _dedupe_targets(cfg: GuardConfig, files: List[str]) -> List[str]:
    # de.json 与 --all 给出的绝对路径指向同一文件时只校验一次
    seen = set()
    out = []
    for f in files:
        key = resolve_target(cfg.i18n_dir, f).resolve()
        if key in seen:
            continue
        seen.add(key)
        out.append(f)
    return out


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    args = build_parser().parse_args(argv)

    cfg_path = Path(args.config) if args.config else Path.cwd() / CONFIG_FILE
    i18n_override = Path(args.i18n_dir) if args.i18n_dir else None

    action = args.action
    validate_all = bool(args.all)
    if not action:
        action = choose_action_interactive(cfg_path)
        if action == "exit":
            return EXIT_OK
        validate_all = True

    if action == "init":
        try:
            init_config(cfg_path)
            print(f"✅ 已生成配置文件：{cfg_path}")
            return EXIT_OK
        except ConfigError as e:
            print(f"❌ {e}")
            return EXIT_BAD

    if action == "doctor":
        return doctor(cfg_path, i18n_dir=i18n_override)

    # 以下 action 需要 cfg
    try:
        cfg = read_config(cfg_path)
    except ConfigError as e:
        print(f"❌ {e}")
        return EXIT_BAD
    if i18n_override is not None:
        cfg = override_i18n_dir(cfg, i18n_override)

    if action == "sync":
        try:
            run_sync(cfg, RuntimeOptions(dry_run=bool(args.dry_run)))
            return EXIT_OK
        except SourceError as e:
            print(f"❌ {e}")
            return EXIT_FAIL

    if action == "validate":
        files = list(args.files)
        if validate_all:
            files.extend(_existing_language_files(cfg))
        files = _dedupe_targets(cfg, files)
        try:
            return run_validate(files, cfg)
        except SourceError as e:
            print(f"❌ {e}，无法在没有源语言文件的情况下校验")
            return EXIT_FAIL

    print("❌ 未知 action")
    return EXIT_BAD
