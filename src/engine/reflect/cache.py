"""
どこで: `engine.reflect` のメタ解決層。
何を: ターゲットクラスのメンバー（プロパティ/メソッド/計算プロパティ/静的/イベント）を
    ドキュメントから解決し、クラス同一性をキーにキャッシュして `ClassMetadata` として提供。
なぜ: アダプタ生成のたびにドキュメントを再走査せず、同一クラスに対して参照安定な
    メタデータを返すため。

解決順（プロパティ型）:
1) クラスの `__member_meta__[name]["type"]`（静的宣言表）
2) メンバーのドキュメントブロック中の `@type {T}`
3) クラス注釈（クラスまたは文字列のとき）
4) プローブの実値の基本種別（boolean/number/string/undefined/登録値型名/object）

ドキュメントブロックの出所:
- 関数/property: docstring
- インスタンス属性/クラス属性: 代入直後の文字列リテラル（属性 docstring、`ast` で抽出）
- `__member_meta__[name]` が文字列ならそれ自体、Mapping なら `doc` キー
"""

from __future__ import annotations

import ast
import inspect
import logging
import numbers
import textwrap
from typing import Any, Mapping

from engine.convert.constructors import TypeConstructorRegistry, default_registry
from engine.errors import ReflectionError

from .doc_comments import EMPTY_BLOCK, DocBlock, parse_doc_block
from .metadata import (
    ClassMetadata,
    ComputedDescriptor,
    EventDescriptor,
    MethodDescriptor,
    PropertyDescriptor,
    StaticDescriptor,
)
from .type_grammar import ANY, Scalar, TypeDescriptor, parse_type

logger = logging.getLogger(__name__)

MEMBER_META_ATTR = "__member_meta__"


# ── ソースからの属性 docstring 抽出 ──────────────────────


def _assigned_name(node: ast.stmt, self_name: str | None) -> str | None:
    if isinstance(node, ast.Assign) and len(node.targets) == 1:
        target = node.targets[0]
    elif isinstance(node, ast.AnnAssign):
        target = node.target
    else:
        return None
    if self_name is None and isinstance(target, ast.Name):
        return target.id
    if (
        self_name is not None
        and isinstance(target, ast.Attribute)
        and isinstance(target.value, ast.Name)
        and target.value.id == self_name
    ):
        return target.attr
    return None


def _collect_attribute_docs(
    body: list[ast.stmt], self_name: str | None, out: dict[str, str]
) -> None:
    for prev, node in zip(body, body[1:]):
        if not (
            isinstance(node, ast.Expr)
            and isinstance(node.value, ast.Constant)
            and isinstance(node.value.value, str)
        ):
            continue
        name = _assigned_name(prev, self_name)
        if name:
            out[name] = inspect.cleandoc(node.value.value)


def attribute_docs(klass: type) -> dict[str, str]:
    """クラス本体と `__init__` の属性 docstring を `{name: doc}` で返す。

    ソースが取得できない（動的生成/REPL 等）場合は空辞書。
    """
    try:
        source = inspect.getsource(klass)
    except (OSError, TypeError):
        logger.debug("no source for %s; attribute docs skipped", klass.__qualname__)
        return {}
    try:
        tree = ast.parse(textwrap.dedent(source))
    except SyntaxError:
        logger.debug("unparsable source for %s", klass.__qualname__)
        return {}
    cls_node = next((n for n in tree.body if isinstance(n, ast.ClassDef)), None)
    if cls_node is None:
        return {}
    docs: dict[str, str] = {}
    _collect_attribute_docs(cls_node.body, None, docs)
    for node in cls_node.body:
        if isinstance(node, ast.FunctionDef) and node.name == "__init__":
            self_name = node.args.args[0].arg if node.args.args else "self"
            _collect_attribute_docs(node.body, self_name, docs)
    return docs


# ── 補助 ─────────────────────────────────────────────────


def _is_private(name: str) -> bool:
    return name.startswith("_")


def _annotation_type(annotation: Any) -> TypeDescriptor | None:
    if isinstance(annotation, str):
        return parse_type(annotation)
    if isinstance(annotation, type):
        return Scalar(annotation.__name__)
    return None


def _instance_members(probe: Any) -> dict[str, Any]:
    members = dict(getattr(probe, "__dict__", {}))
    for klass in type(probe).__mro__:
        slots = vars(klass).get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name not in members and hasattr(probe, name):
                members[name] = getattr(probe, name)
    return members


class _ClassDocs:
    """1 クラス（MRO 全体）のドキュメント源をまとめたもの。"""

    def __init__(self, cls: type) -> None:
        self.meta: dict[str, Any] = {}
        self.attr_docs: dict[str, str] = {}
        self.annotations: dict[str, Any] = {}
        # クラス docstring（基底側の `@event` も継承する）
        self.class_blocks: list[DocBlock] = []
        # 基底→派生の順に重ね、派生側の宣言を優先する
        for klass in reversed(cls.__mro__):
            if klass is object:
                continue
            own_doc = vars(klass).get("__doc__")
            if isinstance(own_doc, str):
                self.class_blocks.append(parse_doc_block(inspect.cleandoc(own_doc)))
            raw_meta = vars(klass).get(MEMBER_META_ATTR)
            if isinstance(raw_meta, Mapping):
                self.meta.update({str(k): v for k, v in raw_meta.items()})
            self.attr_docs.update(attribute_docs(klass))
            try:
                self.annotations.update(inspect.get_annotations(klass))
            except Exception:  # 注釈の評価失敗は無視（型は他経路で解決）
                logger.debug("annotations unavailable for %s", klass.__qualname__, exc_info=True)

    def meta_entry(self, name: str) -> Mapping[str, Any]:
        entry = self.meta.get(name)
        if isinstance(entry, str):
            return {"doc": entry}
        return entry if isinstance(entry, Mapping) else {}

    def block(self, name: str, obj: Any = None) -> DocBlock:
        doc = self.meta_entry(name).get("doc")
        if doc is None and obj is not None:
            doc = inspect.getdoc(obj)
        if doc is None:
            doc = self.attr_docs.get(name)
        return parse_doc_block(doc) if doc else EMPTY_BLOCK

    def declared_type(self, name: str, block: DocBlock) -> TypeDescriptor | None:
        meta_type = self.meta_entry(name).get("type")
        if meta_type:
            return parse_type(str(meta_type))
        tag = block.first("type")
        if tag is not None:
            return tag.type
        return _annotation_type(self.annotations.get(name))

    def description(self, name: str, block: DocBlock) -> str:
        meta_desc = self.meta_entry(name).get("description")
        if meta_desc:
            return str(meta_desc)
        tag = block.first("type")
        if tag is not None and tag.description:
            return tag.description
        return block.summary


# ── キャッシュ本体 ───────────────────────────────────────


class ReflectionCache:
    """クラス → `ClassMetadata` のキャッシュ（クラス同一性キー、追い出しなし）。"""

    def __init__(self, value_types: TypeConstructorRegistry | None = None) -> None:
        self._cache: dict[type, ClassMetadata] = {}
        self._value_types = value_types if value_types is not None else default_registry
        # キャッシュミス（= 抽出実行）回数
        self.extractions = 0

    def metadata_for(self, cls: type) -> ClassMetadata:
        """`cls` のメタデータを返す（初回のみ抽出し、以降は同一インスタンス）。

        例外:
        - TypeError: クラス以外を渡した場合。
        - ReflectionError: プローブを既定構築できない場合（再試行しない）。
        """
        if not isinstance(cls, type):
            raise TypeError(f"metadata_for expects a class, got {cls!r}")
        cached = self._cache.get(cls)
        if cached is not None:
            return cached
        metadata = self._extract(cls)
        self._cache[cls] = metadata
        return metadata

    def __contains__(self, cls: object) -> bool:
        return cls in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    def clear(self) -> None:
        """キャッシュをクリア（テスト用途）。"""
        self._cache.clear()
        self.extractions = 0

    # --- 抽出 ---
    def runtime_kind(self, value: Any) -> str:
        """実値の基本種別名（ドキュメントが無い場合の型）。"""
        if value is None:
            return "undefined"
        if isinstance(value, bool):
            return "boolean"
        if isinstance(value, numbers.Real):
            return "number"
        if isinstance(value, str):
            return "string"
        registered = self._value_types.name_for(type(value))
        if registered is not None:
            return registered
        if callable(value):
            return "function"
        return "object"

    def _extract(self, cls: type) -> ClassMetadata:
        logger.debug("reflecting %s", cls.__qualname__)
        try:
            probe = cls()
        except Exception as exc:
            raise ReflectionError(cls, f"default construction failed: {exc}") from exc
        self.extractions += 1

        docs = _ClassDocs(cls)
        properties: dict[str, PropertyDescriptor] = {}
        methods: dict[str, MethodDescriptor] = {}
        computed: dict[str, ComputedDescriptor] = {}
        statics: dict[str, StaticDescriptor] = {}
        events: dict[str, EventDescriptor] = {}
        for class_block in docs.class_blocks:
            self._collect_events(class_block, events)

        instance_members = _instance_members(probe)
        seen: set[str] = set()
        for klass in cls.__mro__:
            if klass is object:
                continue
            for key, raw in vars(klass).items():
                if key in seen or _is_private(key):
                    continue
                seen.add(key)
                if isinstance(raw, property):
                    block = docs.block(key, raw)
                    computed[key] = ComputedDescriptor(
                        name=key,
                        has_getter=raw.fget is not None,
                        has_setter=raw.fset is not None,
                        type=docs.declared_type(key, block) or ANY,
                    )
                elif inspect.isfunction(raw):
                    block = docs.block(key, raw)
                    methods[key] = self._method_descriptor(key, raw, block)
                elif key in instance_members or inspect.ismemberdescriptor(raw):
                    # インスタンス側で扱う（クラス既定値/スロット）
                    continue
                else:
                    block = docs.block(key, None)
                    value = raw.__func__ if isinstance(raw, (staticmethod, classmethod)) else raw
                    statics[key] = StaticDescriptor(
                        name=key,
                        type="function" if value is not raw else self.runtime_kind(value),
                        value=getattr(cls, key),
                        description=docs.description(key, block),
                    )
                self._collect_events(block, events)

        for key, value in instance_members.items():
            if _is_private(key) or key in computed:
                continue
            block = docs.block(key, None)
            self._collect_events(block, events)
            if inspect.isroutine(value):
                methods[key] = self._method_descriptor(key, value, block)
                continue
            declared = docs.declared_type(key, block)
            properties[key] = PropertyDescriptor(
                name=key,
                type=declared if declared is not None else Scalar(self.runtime_kind(value)),
                description=docs.description(key, block),
            )
        del probe

        metadata = ClassMetadata(
            target=cls,
            properties=properties,
            methods=methods,
            events=events,
            computed=computed,
            static_members=statics,
        )
        logger.debug("reflected %r", metadata)
        return metadata

    @staticmethod
    def _collect_events(block: DocBlock, events: dict[str, EventDescriptor]) -> None:
        for tag in block.all("event"):
            name = tag.description.split(None, 1)[0] if tag.description else ""
            if name:
                events[name] = EventDescriptor(name=name, type=tag.type)

    @staticmethod
    def _method_descriptor(name: str, fn: Any, block: DocBlock) -> MethodDescriptor:
        params = block.all("param")
        returns = block.first("returns") or block.first("return")
        param_types: tuple[TypeDescriptor, ...] = tuple(p.type for p in params)
        param_names = tuple(
            p.description.split(None, 1)[0] if p.description else "" for p in params
        )
        return_type = returns.type if returns is not None else None

        if not params or return_type is None:
            # タグが無い部分はシグネチャ注釈で補う
            try:
                signature = inspect.signature(fn)
            except (TypeError, ValueError):
                signature = None
            if signature is not None:
                if not params:
                    sig_params = [
                        p
                        for p in signature.parameters.values()
                        if p.name not in ("self", "cls")
                        and p.kind not in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
                    ]
                    param_types = tuple(
                        (_annotation_type(p.annotation) if p.annotation is not p.empty else None)
                        or ANY
                        for p in sig_params
                    )
                    param_names = tuple(p.name for p in sig_params)
                if return_type is None and signature.return_annotation is not signature.empty:
                    return_type = _annotation_type(signature.return_annotation)

        return MethodDescriptor(
            name=name,
            declared_param_types=param_types,
            return_type=return_type if return_type is not None else ANY,
            param_names=param_names,
        )


# プロセス全体で共有する既定キャッシュ
default_cache = ReflectionCache()


def metadata_for(cls: type) -> ClassMetadata:
    """既定キャッシュからメタデータを取得する（初回のみ抽出）。"""
    return default_cache.metadata_for(cls)


__all__ = [
    "ReflectionCache",
    "default_cache",
    "metadata_for",
    "attribute_docs",
    "MEMBER_META_ATTR",
]
