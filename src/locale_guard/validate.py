from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Optional

from .config import GuardConfig
from .fs import load_source_or_throw, resolve_target
from .models import ValidationResult
from .rules import FILE_CHECKS, CheckContext, ValidationRules


EXIT_OK = 0
EXIT_FAIL = 1


def validate(
        file: str,
        source: Mapping[str, str],
        raw: str,
        rules: Optional[ValidationRules] = None,
) -> ValidationResult:
    """
    Run the check battery over one candidate file.

    `file` is only used for its basename (reserved names / language code);
    `raw` is the unparsed file content.
    """
    ctx = CheckContext(file=Path(file).name, source=source, raw=raw, rules=rules or ValidationRules())
    for check in FILE_CHECKS:
        if not check(ctx):
            break
    return ValidationResult(file=ctx.file, issues=tuple(ctx.issues))


def print_result(result: ValidationResult) -> None:
    for w in result.warnings:
        print(f"  ⚠️ {w}")
    for e in result.errors:
        print(f"  ❌ {e}")
    if not result.issues:
        print("  ✅ 全部检查通过")


def run_validate(files: List[str], cfg: GuardConfig) -> int:
    """
    validate：逐个文件校验，汇总 error 数量决定退出码（warning 不影响退出码）。
    """
    if not files:
        print("用法：locale_guard validate <lang>.json [...]")
        return EXIT_FAIL

    source = load_source_or_throw(cfg.source_path)
    rules = cfg.validation_rules()

    total_errors = 0
    total_warnings = 0

    for f in files:
        path = resolve_target(cfg.i18n_dir, f)
        print(f"\n🔍 校验：{path.name}")

        if not path.exists():
            print(f"  ❌ 文件不存在：{path}")
            total_errors += 1
            continue

        try:
            raw = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            print(f"  ❌ 文件不是合法 UTF-8：{e}")
            total_errors += 1
            continue

        result = validate(path.name, source, raw, rules)
        print_result(result)

        total_errors += len(result.errors)
        total_warnings += len(result.warnings)

    print("\n─────────────────────────────────────────")
    print(f"结果：{len(files)} 个文件，{total_errors} 个错误，{total_warnings} 个警告")

    if total_errors > 0:
        print("\n❌ 校验未通过，请修复以上错误")
        return EXIT_FAIL

    if total_warnings > 0:
        print("\n⚠️ 校验通过（有警告）")

    print("\n✅ 所有翻译文件均合法")
    return EXIT_OK
