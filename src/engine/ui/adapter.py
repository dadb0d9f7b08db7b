"""
どこで: `engine.ui` のアダプタ生成層。
何を: ターゲットクラスのメタデータから `AdapterDefinition` を組み立て、1 インスタンスにつき
    1 ターゲットを専有する `TargetAdapter`（`ReactiveElement` 派生）を生成する。
なぜ: クラスごとに手書きのラッパを用意せず、属性（文字列）駆動でターゲットを操作するため。

流れ（概要）:
1) build: `ReflectionCache.metadata_for(cls)` → 能力集合・属性名・メソッド方針・静的値を確定。
2) create: ターゲットを構築し、プロパティ初期値をターゲットの現在値から複写、
   メソッド転送関数（自己返却→アダプタ返却）と計算プロパティの代理アクセサを用意。
3) connected: ターゲットの `on(name, cb)` でイベントを購読し、`<prefix><name>` として再配送。
4) update(changed): 宣言プロパティのみ変換して反映（レコード型はフィールド単位でマージ）。
5) disconnected: イベント購読を解除し、ターゲットを解放（`dispose()` があれば呼ぶ）。

状態: constructed → bound → observed ⇄ converted → disposed
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Literal, Mapping, MutableMapping

from common import settings
from engine.convert.value_converter import ValueConverter, default_converter
from engine.errors import AdapterDisposedError, ConversionError
from engine.reflect.cache import ReflectionCache, default_cache
from engine.reflect.metadata import ClassMetadata, MethodDescriptor
from engine.reflect.type_grammar import ObjectOf, Scalar, TypeDescriptor

from .element import ElementEvent, ReactiveElement

logger = logging.getLogger(__name__)

Capability = Literal["properties", "methods", "computed", "events", "statics"]
AdapterState = Literal["constructed", "bound", "observed", "converted", "disposed"]

_PRIMITIVE_RETURNS = frozenset(
    {"number", "string", "boolean", "void", "undefined", "null", "None", "int", "float", "bool", "str"}
)


def _returns_primitive(t: TypeDescriptor) -> bool:
    return isinstance(t, Scalar) and t.name in _PRIMITIVE_RETURNS


@dataclass(frozen=True)
class MethodBinding:
    """メソッド転送の方針（build 時に決定）。"""

    name: str
    return_owner_on_self: bool
    descriptor: MethodDescriptor | None = None


@dataclass(frozen=True, eq=False)
class AdapterDefinition:
    """1 ターゲットクラス分のアダプタ定義（`create()` でインスタンス化）。"""

    target: type
    metadata: ClassMetadata
    capabilities: frozenset[Capability]
    attributes: tuple[str, ...]
    methods: Mapping[str, MethodBinding]
    statics: Mapping[str, Any]
    event_prefix: str
    shadowed: tuple[str, ...] = ()
    converter: ValueConverter = field(default=default_converter, repr=False)

    @property
    def name(self) -> str:
        return self.target.__name__

    def has(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def create(self, **attributes: Any) -> "TargetAdapter":
        """アダプタを生成し、与えられた属性を文字列として設定する。"""
        adapter = TargetAdapter(self)
        for name, value in attributes.items():
            adapter.set_attribute(name, value)
        return adapter


class TargetAdapter(ReactiveElement):
    """ターゲット 1 インスタンスを専有し、属性/メソッド/イベントを橋渡しする要素。"""

    def __init__(self, definition: AdapterDefinition) -> None:
        super().__init__()
        self._definition = definition
        self._state: AdapterState = "constructed"
        self._event_handlers: list[tuple[str, Callable[[Any], None]]] = []
        self._target: Any = definition.target()

        for name in definition.attributes:
            self.declare_property(name)
        for name in definition.metadata.properties:
            if name in definition.attributes:
                self._seed_property(name, getattr(self._target, name, None))
        for binding in definition.methods.values():
            object.__setattr__(self, binding.name, self._make_forwarder(binding))
        logger.debug("adapter constructed for %s", definition.name)

    # --- 基本アクセサ ---
    @property
    def definition(self) -> AdapterDefinition:
        return self._definition

    @property
    def target(self) -> Any:
        """専有しているターゲット（破棄後は None）。"""
        return self._target

    @property
    def state(self) -> AdapterState:
        return self._state

    def _require_target(self) -> Any:
        if self._target is None:
            raise AdapterDisposedError(f"{self._definition.name} adapter is disposed")
        return self._target

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        definition = self.__dict__.get("_definition")
        if definition is None:
            raise AttributeError(name)
        if name in definition.metadata.computed and name in definition.attributes:
            return self._get_computed(name)
        if name in definition.metadata.properties and name in definition.attributes:
            return self.get_property(name)
        if name in definition.statics:
            return getattr(definition.target, name)
        raise AttributeError(f"{type(self).__name__}[{definition.name}] has no attribute {name!r}")

    def __setattr__(self, name: str, value: Any) -> None:
        definition = self.__dict__.get("_definition")
        if name.startswith("_") or definition is None or name not in definition.attributes:
            object.__setattr__(self, name, value)
            return
        self.set_property(name, value)

    def __dir__(self) -> list[str]:
        names = set(super().__dir__())
        names.update(self._definition.attributes)
        names.update(self._definition.statics)
        return sorted(names)

    # --- プロパティ（計算プロパティは代理アクセサへ） ---
    def get_property(self, name: str) -> Any:
        if name in self._definition.metadata.computed:
            return self._get_computed(name)
        return super().get_property(name)

    def set_property(self, name: str, value: Any) -> None:
        self._require_target()
        if name in self._definition.metadata.computed:
            self._set_computed(name, value)
            return
        super().set_property(name, value)

    def request_update(self, name: str | None = None, old_value: Any = None) -> None:
        super().request_update(name, old_value)
        if name is not None and self._state in ("bound", "converted"):
            self._state = "observed"

    def _get_computed(self, name: str) -> Any:
        desc = self._definition.metadata.computed[name]
        if not desc.has_getter:
            raise AttributeError(f"{name} is write-only")
        return getattr(self._require_target(), name)

    def _set_computed(self, name: str, value: Any) -> None:
        desc = self._definition.metadata.computed[name]
        if not desc.has_setter:
            raise AttributeError(f"{name} is read-only")
        target = self._require_target()
        old = getattr(target, name) if desc.has_getter else None
        converted = self._definition.converter.convert(value, desc.type)
        setattr(target, name, converted)
        self.request_update(name, old)

    # --- メソッド転送 ---
    def _make_forwarder(self, binding: MethodBinding) -> Callable[..., Any]:
        name = binding.name

        def forward(*args: Any, **kwargs: Any) -> Any:
            target = self._require_target()
            result = getattr(target, name)(*args, **kwargs)
            if binding.return_owner_on_self and result is target:
                return self
            return result

        forward.__name__ = name
        forward.__qualname__ = f"{self._definition.name}Adapter.{name}"
        forward.__doc__ = getattr(getattr(self._definition.target, name, None), "__doc__", None)
        return forward

    # --- 更新 ---
    def update(self, changed: Mapping[str, Any]) -> None:
        """宣言プロパティを変換してターゲットへ反映する（計算プロパティは対象外）。

        例外:
        - ConversionError: union の全候補が失敗した場合。バッチ内の残りのプロパティを
          反映し終えてから、最初の失敗を送出する。
        """
        super().update(changed)
        target = self._require_target()
        properties = self._definition.metadata.properties
        converter = self._definition.converter
        first_error: ConversionError | None = None
        for name in changed:
            desc = properties.get(name)
            if desc is None or name not in self._definition.attributes:
                continue
            try:
                converted = converter.convert(self._values.get(name), desc.type)
            except ConversionError as exc:
                logger.debug("%s.%s not applied: %s", self._definition.name, name, exc)
                if first_error is None:
                    first_error = exc
                continue
            if isinstance(desc.type, ObjectOf) and isinstance(converted, Mapping):
                self._merge_into(target, name, converted)
            else:
                setattr(target, name, converted)
        self._state = "converted"
        if first_error is not None:
            raise first_error

    @staticmethod
    def _merge_into(target: Any, name: str, fields: Mapping[str, Any]) -> None:
        current = getattr(target, name, None)
        if current is None:
            setattr(target, name, dict(fields))
            return
        for key, value in fields.items():
            if value is None:
                # 入力に無かったフィールドは既存値を保持
                continue
            if isinstance(current, MutableMapping):
                current[key] = value
            else:
                setattr(current, key, value)

    # --- ライフサイクル ---
    def connected_callback(self) -> None:
        target = self._require_target()
        super().connected_callback()
        if self._state == "constructed":
            self._bind_events(target)
            self._state = "bound"
        logger.debug("adapter connected: %s", self._definition.name)

    def disconnected_callback(self) -> None:
        super().disconnected_callback()
        self.dispose()
        logger.debug("adapter disconnected: %s", self._definition.name)

    def dispose(self) -> None:
        """イベント購読を解除し、ターゲットを解放する（二重呼び出しは no-op）。"""
        target = self._target
        if target is None:
            return
        self._unbind_events(target)
        dispose = getattr(target, "dispose", None)
        if callable(dispose):
            dispose()
        self._target = None
        self._state = "disposed"

    def _bind_events(self, target: Any) -> None:
        events = self._definition.metadata.events
        if not events:
            return
        subscribe = getattr(target, "on", None)
        if not callable(subscribe):
            logger.debug("%s has no on(); events not bridged", self._definition.name)
            return
        for event_name in events:
            handler = self._make_event_handler(event_name)
            subscribe(event_name, handler)
            self._event_handlers.append((event_name, handler))

    def _unbind_events(self, target: Any) -> None:
        unsubscribe = getattr(target, "off", None)
        if callable(unsubscribe):
            for event_name, handler in self._event_handlers:
                unsubscribe(event_name, handler)
        self._event_handlers.clear()

    def _make_event_handler(self, event_name: str) -> Callable[[Any], None]:
        adapter_event = f"{self._definition.event_prefix}{event_name}"

        def handler(event: Any = None) -> None:
            self.dispatch_event(ElementEvent(type=adapter_event, detail=event))

        return handler


_RESERVED_NAMES = frozenset(name for name in dir(TargetAdapter) if not name.startswith("_"))


class AdapterFactory:
    """ターゲットクラス → `AdapterDefinition`（クラスごとにメモ化）。"""

    def __init__(
        self,
        cache: ReflectionCache | None = None,
        converter: ValueConverter | None = None,
        *,
        event_prefix: str | None = None,
    ) -> None:
        self._cache = cache if cache is not None else default_cache
        self._converter = converter if converter is not None else default_converter
        self._event_prefix = event_prefix
        self._definitions: dict[type, AdapterDefinition] = {}

    def build(self, cls: type) -> AdapterDefinition:
        """`cls` のアダプタ定義を返す。

        例外:
        - ReflectionError: メタデータ抽出（プローブ構築）に失敗した場合。
        """
        cached = self._definitions.get(cls)
        if cached is not None:
            return cached
        metadata = self._cache.metadata_for(cls)

        shadowed = sorted(
            name
            for name in (*metadata.properties, *metadata.computed, *metadata.methods)
            if name in _RESERVED_NAMES
        )
        if shadowed:
            logger.debug("%s members shadowed by adapter API: %s", cls.__name__, shadowed)
        attributes = tuple(
            name for name in (*metadata.properties, *metadata.computed) if name not in shadowed
        )
        methods = {
            name: MethodBinding(
                name=name,
                return_owner_on_self=not _returns_primitive(desc.return_type),
                descriptor=desc,
            )
            for name, desc in metadata.methods.items()
            if name not in shadowed
        }
        statics = {name: desc.value for name, desc in metadata.static_members.items()}

        capabilities: set[Capability] = set()
        if metadata.properties:
            capabilities.add("properties")
        if methods:
            capabilities.add("methods")
        if metadata.computed:
            capabilities.add("computed")
        if metadata.events:
            capabilities.add("events")
        if statics:
            capabilities.add("statics")

        prefix = self._event_prefix
        if prefix is None:
            prefix = settings.get().EVENT_PREFIX
        definition = AdapterDefinition(
            target=cls,
            metadata=metadata,
            capabilities=frozenset(capabilities),
            attributes=attributes,
            methods=MappingProxyType(methods),
            statics=MappingProxyType(statics),
            event_prefix=prefix,
            shadowed=tuple(shadowed),
            converter=self._converter,
        )
        self._definitions[cls] = definition
        logger.debug("adapter definition built: %s %s", cls.__name__, sorted(capabilities))
        return definition


default_factory = AdapterFactory()


def build(cls: type) -> AdapterDefinition:
    """既定ファクトリでアダプタ定義を返す。"""
    return default_factory.build(cls)


__all__ = [
    "Capability",
    "AdapterState",
    "MethodBinding",
    "AdapterDefinition",
    "TargetAdapter",
    "AdapterFactory",
    "default_factory",
    "build",
]
