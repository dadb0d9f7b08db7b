"""
どこで: `engine.convert` の値型コンストラクタ表。
何を: 型名（`Vector3`/`Color`/`Matrix4` 等）→ 構築方法（`TypeConstructor`）の対応を管理。
なぜ: 値変換がターゲット領域のクラスを直接知らずに、名前だけで値を構築できるようにするため。

レイアウト:
- positional: 数値成分を位置引数で渡す（`Vector3(1, 2, 3)`）
- flat: 数値成分を 1 つのリストで渡す（`Matrix4.from_array([...])`）
- text: 全成分が数値なら位置引数、そうでなければ生文字列を渡す（`Color("#ff0000")`）
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Literal, Sequence

from common.base_registry import BaseRegistry

from .coercion import numeric_components

Layout = Literal["positional", "flat", "text"]


@dataclass(frozen=True)
class TypeConstructor:
    name: str
    factory: Callable[..., Any]
    layout: Layout = "positional"
    value_class: type | None = None

    def accepts(self, value: Any) -> bool:
        """既に構築済みの値か。"""
        return self.value_class is not None and isinstance(value, self.value_class)

    def construct(self, *args: Any) -> Any:
        """変換済み引数で位置構築する（ジェネリック用）。"""
        return self.factory(*args)

    def from_components(self, components: Sequence[int | float]) -> Any:
        if self.layout == "flat":
            return self.factory(list(components))
        return self.factory(*components)

    def from_value(self, value: Any) -> Any:
        """文字列/数値列から構築する。

        例外:
        - ValueError: 数値成分へ変換できない場合（text レイアウトを除く）。
        """
        if self.accepts(value):
            return value
        if self.layout == "text" and isinstance(value, str):
            try:
                components = numeric_components(value)
            except ValueError:
                return self.factory(value.strip())
            # 単一数値は 0xRRGGBB 相当の整数として factory に委ねる
            return self.factory(*components)
        return self.from_components(numeric_components(value))


class TypeConstructorRegistry(BaseRegistry[TypeConstructor]):
    """型名 → `TypeConstructor`。"""

    def __init__(self) -> None:
        super().__init__()
        self._by_class: dict[type, str] = {}

    def define(
        self,
        name: str,
        factory: Callable[..., Any],
        *,
        layout: Layout = "positional",
        value_class: type | None = None,
    ) -> TypeConstructor:
        """コンストラクタを登録して返す。"""
        if layout not in ("positional", "flat", "text"):
            raise ValueError(f"unknown layout: {layout!r}")
        ctor = TypeConstructor(name=name, factory=factory, layout=layout, value_class=value_class)
        self.add(name, ctor)
        if value_class is not None:
            self._by_class[value_class] = name
        return ctor

    def value_type(
        self,
        name: str | None = None,
        *,
        layout: Layout = "positional",
        factory: str | None = None,
    ) -> Callable[[type], type]:
        """クラスを値型として登録するデコレータ。

        - `factory` はクラス属性名（例: `"from_array"`）。省略時はクラス自身。
        """

        def decorator(cls: type) -> type:
            fn = getattr(cls, factory) if factory else cls
            self.define(name or cls.__name__, fn, layout=layout, value_class=cls)
            return cls

        return decorator

    def name_for(self, klass: type) -> str | None:
        """値クラスから登録名を逆引きする（未登録は None）。"""
        for candidate in klass.__mro__:
            name = self._by_class.get(candidate)
            if name is not None and self.lookup(name) is not None:
                return name
        return None

    def unregister(self, name: str) -> None:
        ctor = self.lookup(name)
        if ctor is not None and ctor.value_class is not None:
            self._by_class.pop(ctor.value_class, None)
        super().unregister(name)

    def clear(self) -> None:
        super().clear()
        self._by_class.clear()


# プロセス全体で共有する既定表（`scene` が `@value_type` で埋める）
default_registry = TypeConstructorRegistry()


__all__ = ["Layout", "TypeConstructor", "TypeConstructorRegistry", "default_registry"]
