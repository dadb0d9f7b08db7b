"""
どこで: `engine.ui` のコンポーネント表。
何を: ターゲットクラスをタグ名（既定 `three-<小文字クラス名>`）で登録し、タグから要素を生成する。
なぜ: 宣言的な利用側（タグ名 + 属性文字列）から、対応するアダプタを一貫 API で解決するため。

公開 API 概要:
- `define_component(cls, tag=None)`: 定義を構築して登録（同一クラスの再登録は no-op）
- `get_component(tag)` / `list_components()` / `is_component_defined(tag)`
- `create_element(tag, **attributes)`: アダプタを生成し属性を適用
- `clear_components()`: 表をクリア（テスト用途）
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from common import settings
from common.base_registry import BaseRegistry

from .adapter import AdapterDefinition, AdapterFactory, TargetAdapter, default_factory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Component:
    tag: str
    definition: AdapterDefinition


_component_registry: BaseRegistry[Component] = BaseRegistry()


def default_tag(cls: type) -> str:
    return f"{settings.get().TAG_PREFIX}{cls.__name__.lower()}"


def define_component(
    cls: type, tag: str | None = None, *, factory: AdapterFactory | None = None
) -> Component:
    """`cls` のアダプタ定義をタグ名で登録して返す。

    例外:
    - ValueError: 同じタグに別クラスが登録済みの場合。
    - ReflectionError: メタデータ抽出に失敗した場合。
    """
    resolved = tag if tag is not None else default_tag(cls)
    existing = _component_registry.lookup(resolved)
    if existing is not None and existing.definition.target is cls:
        return existing
    if existing is not None:
        raise ValueError(
            f"tag {resolved!r} is already defined for {existing.definition.target.__qualname__}"
        )
    definition = (factory or default_factory).build(cls)
    component = Component(tag=resolved, definition=definition)
    _component_registry.add(resolved, component)
    logger.debug("component defined: %s -> %s", resolved, cls.__qualname__)
    return component


def get_component(tag: str) -> Component:
    """登録済みコンポーネントを取得。

    例外:
    - KeyError: 未登録タグの場合。
    """
    return _component_registry.get(tag)


def list_components() -> list[str]:
    """登録済みタグ名をソートして返す。"""
    return sorted(c.tag for c in _component_registry.values())


def is_component_defined(tag: str) -> bool:
    return _component_registry.is_registered(tag)


def create_element(tag: str, **attributes: Any) -> TargetAdapter:
    """タグからアダプタを生成し、属性（文字列化）を設定して返す。"""
    return get_component(tag).definition.create(**attributes)


def clear_components() -> None:
    """表をクリア（テスト用途）。"""
    _component_registry.clear()


__all__ = [
    "Component",
    "default_tag",
    "define_component",
    "get_component",
    "list_components",
    "is_component_defined",
    "create_element",
    "clear_components",
]
