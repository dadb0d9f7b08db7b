"""
どこで: `engine.convert` の値変換層。
何を: 文字列（属性値）または構造化済みの値を、`TypeDescriptor` が示す型の実値へ変換する。
なぜ: 弱い型付けの属性境界から、ターゲットクラスが期待する値（数値/ベクトル/レコード等）を得るため。

流れ（概要）:
- Union: 宣言順に候補を試し、最初に成功した結果を返す。全滅時のみ `ConversionError`。
- ArrayOf: トップレベルのカンマで分割し、要素ごとに変換（順序・要素数を保存）。
- ObjectOf: 文字列なら JSON として読み、宣言フィールドのみを再帰変換したレコードを返す。
- Generic: コンストラクタ表から `name` を引き、パラメータ数に分割した成分を位置構築。
- Scalar: number/boolean/string の強制、または表に登録された値型の構築。

寛容ポリシー（pass-through）:
- 未知のスカラー/ジェネリック、強制の失敗は生値を返して DEBUG ログのみ（union 外）。
- union の候補試行中は、pass-through も失敗として扱い次候補へ進む。
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Mapping

import numpy as np

from common import settings
from engine.errors import ConversionError
from engine.reflect.type_grammar import (
    ArrayOf,
    Generic,
    MalformedTypeSyntax,
    ObjectOf,
    Scalar,
    TypeDescriptor,
    Union,
    format_type,
    parse_type,
    split_top_level,
)

from .coercion import coerce_boolean, coerce_number, coerce_string
from .constructors import TypeConstructorRegistry, default_registry

logger = logging.getLogger(__name__)

_PRIMITIVES: dict[str, Callable[[Any], Any]] = {
    "number": coerce_number,
    "float": lambda v: float(coerce_number(v)),
    "int": lambda v: int(coerce_number(v)),
    "boolean": coerce_boolean,
    "bool": coerce_boolean,
    "string": coerce_string,
    "str": coerce_string,
}
_ANY_NAMES = frozenset({"any", "*", "mixed"})


class _AttemptFailed(ValueError):
    """union 候補試行中の失敗（外へは `ConversionError` として集約される）。"""


def split_value_list(text: str, maxsplit: int = -1) -> list[str]:
    """値文字列をトップレベルのカンマで分割し、各要素を trim する。

    括弧が対応しない値（自由文字列）は単純分割に退避する。空文字列は 0 要素。
    """
    if not text.strip():
        return []
    try:
        parts = split_top_level(text, ",", maxsplit)
    except MalformedTypeSyntax:
        parts = text.split(",", maxsplit)
    return [p.strip() for p in parts]


class ValueConverter:
    """`convert(value, type)` を提供する。コンストラクタ表は注入可能。"""

    def __init__(self, registry: TypeConstructorRegistry | None = None) -> None:
        self._registry = registry if registry is not None else default_registry

    @property
    def registry(self) -> TypeConstructorRegistry:
        return self._registry

    def convert(self, value: Any, type_: TypeDescriptor | str) -> Any:
        """`value` を `type_` の実値へ変換する。

        例外:
        - ConversionError: union のすべての候補で失敗した場合のみ。
        """
        descriptor = parse_type(type_) if isinstance(type_, str) else type_
        result = self._convert(value, descriptor, strict=False)
        if settings.get().DEBUG_CONVERSIONS:
            logger.debug("convert %r as %s -> %r", value, format_type(descriptor), result)
        return result

    # --- 分岐 ---
    def _convert(self, value: Any, t: TypeDescriptor, strict: bool) -> Any:
        if isinstance(t, Union):
            return self._convert_union(value, t)
        if isinstance(t, ObjectOf):
            return self._convert_object(value, t, strict)
        if value is None:
            return None
        if isinstance(t, ArrayOf):
            return self._convert_array(value, t, strict)
        if isinstance(t, Generic):
            return self._convert_generic(value, t, strict)
        if isinstance(t, Scalar):
            return self._convert_scalar(value, t, strict)
        return self._degrade(value, t, "unsupported descriptor", strict)

    def _degrade(self, value: Any, t: TypeDescriptor, reason: str, strict: bool) -> Any:
        """pass-through。union 試行中は失敗として送出する。"""
        if strict:
            raise _AttemptFailed(f"{reason}: {value!r} as {format_type(t)}")
        logger.debug("pass-through %r as %s (%s)", value, format_type(t), reason)
        return value

    def _convert_union(self, value: Any, t: Union) -> Any:
        for alternative in t.alternatives:
            try:
                return self._convert(value, alternative, strict=True)
            except Exception as exc:
                logger.debug("union branch %s failed for %r: %s", format_type(alternative), value, exc)
        raise ConversionError(value, [format_type(a) for a in t.alternatives])

    def _convert_scalar(self, value: Any, t: Scalar, strict: bool) -> Any:
        name = t.name
        if name in _ANY_NAMES:
            return value
        coerce = _PRIMITIVES.get(name)
        if coerce is not None:
            try:
                return coerce(value)
            except ValueError as exc:
                return self._degrade(value, t, str(exc), strict)
        ctor = self._registry.lookup(name)
        if ctor is None:
            return self._degrade(value, t, f"unknown type {name!r}", strict)
        try:
            return ctor.from_value(value)
        except (ValueError, TypeError) as exc:
            return self._degrade(value, t, f"{name} construction failed: {exc}", strict)

    def _convert_array(self, value: Any, t: ArrayOf, strict: bool) -> list[Any]:
        if isinstance(value, str):
            items: list[Any] = split_value_list(value)
        elif isinstance(value, (list, tuple)):
            items = list(value)
        elif isinstance(value, np.ndarray):
            items = value.tolist()
        else:
            return self._degrade(value, t, "not a list", strict)
        return [self._convert(item, t.element, strict) for item in items]

    def _convert_object(self, value: Any, t: ObjectOf, strict: bool) -> Any:
        record = value
        if isinstance(value, str):
            try:
                record = json.loads(value)
            except json.JSONDecodeError as exc:
                return self._degrade(value, t, f"invalid JSON: {exc}", strict)
            if not isinstance(record, Mapping):
                return self._degrade(value, t, "JSON value is not an object", strict)
        if record is None:
            record = {}
        if isinstance(record, Mapping):
            getter: Callable[[str], Any] = record.get
        else:
            getter = lambda key: getattr(record, key, None)  # noqa: E731
        return {key: self._convert(getter(key), ft, strict) for key, ft in t.fields.items()}

    def _convert_generic(self, value: Any, t: Generic, strict: bool) -> Any:
        ctor = self._registry.lookup(t.name)
        if ctor is None:
            return self._degrade(value, t, f"unknown generic {t.name!r}", strict)
        if ctor.accepts(value):
            return value
        if isinstance(value, str):
            # 余った成分は捨てる
            parts: list[Any] = split_value_list(value)[: len(t.params)]
        elif isinstance(value, (list, tuple)):
            parts = list(value)
        elif isinstance(value, np.ndarray):
            parts = value.ravel().tolist()
        else:
            return self._degrade(value, t, "not splittable", strict)
        args = [self._convert(part, param, strict) for part, param in zip(parts, t.params)]
        try:
            return ctor.construct(*args)
        except (ValueError, TypeError) as exc:
            return self._degrade(value, t, f"{t.name} construction failed: {exc}", strict)


# プロセス全体で共有する既定コンバータ
default_converter = ValueConverter()


def convert_value(value: Any, type_: TypeDescriptor | str) -> Any:
    """既定コンバータで変換する（`ValueConverter.convert` を参照）。"""
    return default_converter.convert(value, type_)


__all__ = ["ValueConverter", "default_converter", "convert_value", "split_value_list"]
