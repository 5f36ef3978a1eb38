from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from .models import SyncReport


class SourceError(RuntimeError):
    """源语言文件缺失或格式不合法：sync / validate 都必须拒绝执行"""
    pass


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {name}")


def loads_json(text: str) -> Any:
    """
    严格解析：NaN / Infinity / -Infinity 不是合法 JSON；
    超长整数、嵌套过深统一转成 ValueError。
    """
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except RecursionError:
        raise ValueError("nesting too deep") from None


def dump_json_text(obj: Any) -> str:
    return json.dumps(obj, ensure_ascii=False, indent=2, allow_nan=False) + "\n"


def load_json_obj(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    try:
        obj = loads_json(text)
    except ValueError as e:
        raise ValueError(f"JSON 解析失败：{path} ({e})") from None
    if not isinstance(obj, dict):
        raise ValueError(f"JSON 必须是 object：{path}")
    return obj


def load_source_or_throw(path: Path) -> Dict[str, str]:
    """
    读取源语言文件（唯一真相源）：
    - 文件必须存在
    - 顶层必须是 object
    - 所有 value 必须是 string
    """
    if not path.exists():
        raise SourceError(f"源语言文件不存在：{path}")
    try:
        obj = load_json_obj(path)
    except (ValueError, UnicodeDecodeError) as e:
        raise SourceError(str(e)) from None

    for k, v in obj.items():
        if not isinstance(v, str):
            raise SourceError(f"源语言文件仅支持平铺 string->string：{path}，key={k!r} type={type(v).__name__}")
    return obj


def read_candidate(path: Path) -> Dict[str, Any]:
    """
    读取目标语言文件：不存在 -> {}；无法解析或不是 object -> ValueError（由调用方决定如何处理）
    """
    if not path.exists():
        return {}
    try:
        return load_json_obj(path)
    except UnicodeDecodeError as e:
        raise ValueError(f"文件不是合法 UTF-8：{path} ({e})") from None


def save_json(path: Path, obj: Dict[str, Any]) -> None:
    path.write_text(dump_json_text(obj), encoding="utf-8")


def write_report(path: Path, report: SyncReport) -> None:
    path.write_text(dump_json_text(report.to_dict()), encoding="utf-8")


def resolve_target(i18n_dir: Path, file: str) -> Path:
    p = Path(file)
    return p if p.is_absolute() else i18n_dir / p
