"""
どこで: `engine.reflect` のメタデータ型。
何を: ターゲットクラスから抽出したメンバー情報（プロパティ/メソッド/計算プロパティ/静的/イベント）。
なぜ: リフレクション結果を不変値として共有し、アダプタ生成を純関数にするため。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from .type_grammar import ANY, TypeDescriptor


@dataclass(frozen=True)
class PropertyDescriptor:
    name: str
    type: TypeDescriptor
    description: str = ""


@dataclass(frozen=True)
class MethodDescriptor:
    name: str
    declared_param_types: tuple[TypeDescriptor, ...] = ()
    return_type: TypeDescriptor = ANY
    # `@param {T} name ...` の name 部（順序は declared_param_types と一致）
    param_names: tuple[str, ...] = ()


@dataclass(frozen=True)
class ComputedDescriptor:
    name: str
    has_getter: bool
    has_setter: bool
    type: TypeDescriptor = ANY


@dataclass(frozen=True)
class EventDescriptor:
    name: str
    type: TypeDescriptor = ANY


@dataclass(frozen=True)
class StaticDescriptor:
    name: str
    type: str
    value: Any
    description: str = ""


def _frozen(mapping: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True, eq=False)
class ClassMetadata:
    """1 クラス分のメタデータ。

    `ReflectionCache` が所有し、同一クラスに対しては常に同一インスタンスを返す
    （比較は同一性で行う前提のため `eq=False`）。
    """

    target: type
    properties: Mapping[str, PropertyDescriptor] = field(default_factory=dict)
    methods: Mapping[str, MethodDescriptor] = field(default_factory=dict)
    events: Mapping[str, EventDescriptor] = field(default_factory=dict)
    computed: Mapping[str, ComputedDescriptor] = field(default_factory=dict)
    static_members: Mapping[str, StaticDescriptor] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name in ("properties", "methods", "events", "computed", "static_members"):
            object.__setattr__(self, name, _frozen(getattr(self, name)))

    @property
    def name(self) -> str:
        return self.target.__name__

    def __repr__(self) -> str:
        return (
            f"ClassMetadata({self.name}: properties={len(self.properties)}, "
            f"methods={len(self.methods)}, computed={len(self.computed)}, "
            f"events={len(self.events)}, statics={len(self.static_members)})"
        )


__all__ = [
    "PropertyDescriptor",
    "MethodDescriptor",
    "ComputedDescriptor",
    "EventDescriptor",
    "StaticDescriptor",
    "ClassMetadata",
]
