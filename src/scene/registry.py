"""
どこで: `scene` の値型レジストリ層。
何を: `@value_type` デコレータで値クラスを既定コンストラクタ表へ登録し、取得/一覧を提供。
なぜ: 値変換（`engine.convert`）が `Vector3` 等を名前だけで構築できるようにするため。

公開 API 概要:
- `value_type`（デコレータ）: クラスを登録（既定名はクラス名）
- `get_value_type(name)` / `list_value_types()` / `is_value_type(name)`
"""

from __future__ import annotations

from typing import Callable

from engine.convert.constructors import Layout, TypeConstructor, default_registry


def value_type(
    name: str | None = None, *, layout: Layout = "positional", factory: str | None = None
) -> Callable[[type], type]:
    """値クラスを登録するデコレータ。

    使用例:
    - `@value_type()`                          → クラス名で位置構築。
    - `@value_type(layout="flat", factory="from_array")` → 平坦リストから構築。
    """
    return default_registry.value_type(name, layout=layout, factory=factory)


def get_value_type(name: str) -> TypeConstructor:
    """登録済みコンストラクタを取得。

    例外:
    - KeyError: 未登録名の場合。
    """
    return default_registry.get(name)


def list_value_types() -> list[str]:
    """登録済みの値型名をソートして返す。"""
    return sorted(ctor.name for ctor in default_registry.values())


def is_value_type(name: str) -> bool:
    return default_registry.is_registered(name)


__all__ = ["value_type", "get_value_type", "list_value_types", "is_value_type"]
