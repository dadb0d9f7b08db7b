"""
どこで: `engine.reflect` の型文法層。
何を: ドキュメントの型文字列（`Array.<T>`/`A|B`/`Name<P,...>`/`{k:T}`/スカラー）を
    不変の `TypeDescriptor` へ解析する。
なぜ: 属性（文字列）→ターゲット値の変換で、宣言型を構造として扱えるようにするため。

規則（評価順）:
1) 全体を包む配列ラッパ（`Array.<T>` / `Array<T>`）→ `ArrayOf`
2) トップレベルの `|` → `Union`（括弧深さを追跡して分割）。`T[]` はこの後に判定
3) `Name<P1,P2>` → `Generic`
4) `{k1:T1,k2:T2}` → `ObjectOf`
5) それ以外 → `Scalar`（trim 済み文字列）

不正な構文（括弧の不一致・空セグメント）は例外にせず、文字列全体を `Scalar` として返す。
型メタデータは best-effort であり、コンポーネント構築を妨げてはならない。
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Callable, Mapping

from common import settings

logger = logging.getLogger(__name__)

_OPEN_TO_CLOSE = {"<": ">", "{": "}", "[": "]", "(": ")"}
_CLOSE_TO_OPEN = {v: k for k, v in _OPEN_TO_CLOSE.items()}
_GENERIC_RE = re.compile(r"^([A-Za-z_$][\w$.]*)\s*<", re.DOTALL)


# ── 記述子 ───────────────────────────────────────────────


@dataclass(frozen=True)
class Scalar:
    """終端の型名（`number` / `boolean` / `string` / 値型名など）。"""

    name: str

    def __str__(self) -> str:
        return format_type(self)


@dataclass(frozen=True)
class ArrayOf:
    """区切り文字列（または列）を要素ごとに変換する配列型。"""

    element: "TypeDescriptor"

    def __str__(self) -> str:
        return format_type(self)


@dataclass(frozen=True)
class Union:
    """宣言順に試行する候補型の列。"""

    alternatives: tuple["TypeDescriptor", ...]

    def __str__(self) -> str:
        return format_type(self)


@dataclass(frozen=True)
class Generic:
    """`Name<P1,...>`。変換時は `name` のコンストラクタへ位置引数で渡す。"""

    name: str
    params: tuple["TypeDescriptor", ...]

    def __str__(self) -> str:
        return format_type(self)


@dataclass(frozen=True, eq=False)
class ObjectOf:
    """レコード型。フィールドの順序は等価性に影響しない。"""

    fields: Mapping[str, "TypeDescriptor"]

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ObjectOf):
            return NotImplemented
        return dict(self.fields) == dict(other.fields)

    def __hash__(self) -> int:
        return hash(frozenset(self.fields.items()))

    def __repr__(self) -> str:
        return f"ObjectOf(fields={dict(self.fields)!r})"

    def __str__(self) -> str:
        return format_type(self)


TypeDescriptor = Scalar | ArrayOf | Union | Generic | ObjectOf

ANY = Scalar("any")


class MalformedTypeSyntax(ValueError):
    """括弧の不一致など。`parse_type` の内部でのみ使用し、外へは出さない。"""


# ── 走査ユーティリティ ───────────────────────────────────


def split_top_level(text: str, sep: str, maxsplit: int = -1) -> list[str]:
    """括弧深さ 0 の `sep` で分割する（`"..."` 内は無視）。

    例外:
    - MalformedTypeSyntax: 括弧が対応しない場合。
    """
    parts: list[str] = []
    stack: list[str] = []
    start = 0
    in_quote = False
    for i, ch in enumerate(text):
        if ch == '"' and (i == 0 or text[i - 1] != "\\"):
            in_quote = not in_quote
            continue
        if in_quote:
            continue
        if ch in _OPEN_TO_CLOSE:
            stack.append(_OPEN_TO_CLOSE[ch])
        elif ch in _CLOSE_TO_OPEN:
            if not stack or stack.pop() != ch:
                raise MalformedTypeSyntax(f"unbalanced '{ch}' at {i} in {text!r}")
        elif ch == sep and not stack and (maxsplit < 0 or len(parts) < maxsplit):
            parts.append(text[start:i])
            start = i + 1
    if stack or in_quote:
        raise MalformedTypeSyntax(f"unclosed delimiter in {text!r}")
    parts.append(text[start:])
    return parts


def _matching_close(text: str, open_index: int) -> int:
    """`text[open_index]` の開き括弧に対応する閉じ括弧の位置（無ければ -1）。"""
    stack: list[str] = []
    for i in range(open_index, len(text)):
        ch = text[i]
        if ch in _OPEN_TO_CLOSE:
            stack.append(_OPEN_TO_CLOSE[ch])
        elif ch in _CLOSE_TO_OPEN:
            if not stack or stack.pop() != ch:
                return -1
            if not stack:
                return i
    return -1


def _wraps(text: str, open_index: int) -> bool:
    """開き括弧が文字列末尾で閉じる（= 全体を包む）か。"""
    return _matching_close(text, open_index) == len(text) - 1


# ── 解析 ─────────────────────────────────────────────────


def _parse(text: str, naive_union: bool) -> TypeDescriptor:
    s = text.strip()
    if not s:
        raise MalformedTypeSyntax("empty type segment")

    # 丸括弧のグルーピング `(A|B)`
    if s.startswith("(") and _wraps(s, 0):
        return _parse(s[1:-1], naive_union)

    # 1) 配列ラッパ
    if s.startswith("Array.<") and _wraps(s, 6):
        return ArrayOf(_parse(s[7:-1], naive_union))
    if s.startswith("Array<") and _wraps(s, 5):
        return ArrayOf(_parse(s[6:-1], naive_union))

    # 2) union
    if naive_union:
        segments = s.split("|")
    else:
        segments = split_top_level(s, "|")
    if len(segments) > 1:
        return Union(tuple(_parse(seg, naive_union) for seg in segments))

    if s.endswith("[]") and len(s) > 2:
        return ArrayOf(_parse(s[:-2], naive_union))

    # 3) ジェネリック
    m = _GENERIC_RE.match(s)
    if m and s.endswith(">") and _wraps(s, m.end() - 1):
        name = m.group(1).rstrip(".")
        inner = s[m.end() : -1]
        params = tuple(_parse(p, naive_union) for p in split_top_level(inner, ","))
        return Generic(name, params)

    # 4) オブジェクト
    if s.startswith("{") and _wraps(s, 0):
        inner = s[1:-1]
        fields: dict[str, TypeDescriptor] = {}
        if inner.strip():
            for pair in split_top_level(inner, ","):
                key, colon, value = pair.partition(":")
                key = key.strip().strip("\"'")
                if not colon or not key:
                    raise MalformedTypeSyntax(f"bad object field {pair!r}")
                fields[key] = _parse(value, naive_union)
        return ObjectOf(fields)

    # 5) スカラー（括弧が残っていれば不正）
    split_top_level(s, "|")
    return Scalar(s)


def _parse_lenient(text: str, naive_union: bool) -> TypeDescriptor:
    try:
        return _parse(text, naive_union)
    except MalformedTypeSyntax as exc:
        logger.debug("malformed type %r, treated as scalar: %s", text, exc)
        return Scalar(text.strip())


# メモ表は設定の TYPE_CACHE_MAXSIZE が変わった時点で作り直す
_parse_cached: Callable[[str, bool], TypeDescriptor] | None = None
_parse_cache_size: int | None = None


def _cached_parser() -> Callable[[str, bool], TypeDescriptor]:
    global _parse_cached, _parse_cache_size
    size = settings.get().TYPE_CACHE_MAXSIZE
    if _parse_cached is None or size != _parse_cache_size:
        _parse_cached = lru_cache(maxsize=size)(_parse_lenient)
        _parse_cache_size = size
        logger.debug("type parse cache (re)built: maxsize=%s", size)
    return _parse_cached


def parse_type(type_string: str) -> TypeDescriptor:
    """型文字列を `TypeDescriptor` へ解析する（決定的・例外なし）。

    Parameters
    ----------
    type_string : str
        ドキュメントタグ `{...}` 内の型文字列。

    Returns
    -------
    TypeDescriptor
        解析結果。不正構文は `Scalar(<trim 済み文字列>)`。
    """
    return _cached_parser()(str(type_string), settings.get().TYPE_NAIVE_UNION_SPLIT)


def clear_parse_cache() -> None:
    if _parse_cached is not None:
        _parse_cached.cache_clear()  # type: ignore[attr-defined]


def parse_cache_maxsize() -> int | None:
    """現在のメモ表の上限（未構築なら設定値）。"""
    return _parse_cache_size if _parse_cached is not None else settings.get().TYPE_CACHE_MAXSIZE


def format_type(descriptor: TypeDescriptor) -> str:
    """記述子を型文字列へ整形する（エラーメッセージ/ログ用）。"""
    if isinstance(descriptor, Scalar):
        return descriptor.name
    if isinstance(descriptor, ArrayOf):
        return f"Array.<{format_type(descriptor.element)}>"
    if isinstance(descriptor, Union):
        return "|".join(format_type(a) for a in descriptor.alternatives)
    if isinstance(descriptor, Generic):
        return f"{descriptor.name}<{', '.join(format_type(p) for p in descriptor.params)}>"
    if isinstance(descriptor, ObjectOf):
        body = ", ".join(f"{k}: {format_type(v)}" for k, v in descriptor.fields.items())
        return "{" + body + "}"
    return str(descriptor)


__all__ = [
    "Scalar",
    "ArrayOf",
    "Union",
    "Generic",
    "ObjectOf",
    "TypeDescriptor",
    "ANY",
    "MalformedTypeSyntax",
    "parse_type",
    "clear_parse_cache",
    "parse_cache_maxsize",
    "format_type",
    "split_top_level",
]
