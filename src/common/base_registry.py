"""
どこで: `common` の共通レジストリ基底。
何を: 名前正規化付きの登録/取得/一覧を提供（値型コンストラクタ表とコンポーネント表で共用）。
なぜ: `engine.convert` と `engine.ui` の表を同一ポリシー（重複禁止・キー正規化）で運用するため。
"""

from __future__ import annotations

import re
from typing import Any, Callable, Generic, Iterator, TypeVar

T = TypeVar("T")


class BaseRegistry(Generic[T]):
    """レジストリの基底クラス。

    - 文字列キーは正規化されます（大文字小文字・キャメル→スネーク・ハイフン→アンダースコア）。
    - デコレータは名前省略可。省略時はクラス/関数名から自動推論します。
    - 同一キーに別オブジェクトを登録すると `ValueError`。同一オブジェクトの再登録は no-op。
    """

    def __init__(self) -> None:
        self._registry: dict[str, T] = {}

    # === 内部ユーティリティ ===
    @staticmethod
    def _camel_to_snake(name: str) -> str:
        s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", name)
        s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
        return s2.lower()

    @classmethod
    def _normalize_key(cls, name: str) -> str:
        """レジストリキーの正規化（例: "PerspectiveCamera" -> "perspective_camera"）。"""
        if not isinstance(name, str):
            raise TypeError("レジストリキーは str である必要があります")
        name = name.strip()
        if not name:
            raise ValueError("レジストリキーは空であってはなりません")
        name = name.replace("-", "_")
        return cls._camel_to_snake(name) if any(c.isupper() for c in name) else name.lower()

    def add(self, name: str, obj: T) -> T:
        """`obj` を `name` で登録して返す。"""
        key = self._normalize_key(name)
        current = self._registry.get(key)
        if current is not None and current is not obj:
            raise ValueError(f"'{key}' は既に登録されています")
        self._registry[key] = obj
        return obj

    def register(self, name: str | None = None) -> Callable[[Any], Any]:
        """クラス/関数をレジストリに登録するデコレータ。"""

        def decorator(obj: Any) -> Any:
            self.add(name or obj.__name__, obj)
            return obj

        return decorator

    def get(self, name: str) -> T:
        """登録済みの値を取得（未登録は `KeyError`）。"""
        key = self._normalize_key(name)
        if key not in self._registry:
            raise KeyError(f"'{name}' は登録されていません")
        return self._registry[key]

    def lookup(self, name: str) -> T | None:
        """登録済みの値を取得（未登録や不正キーは None）。"""
        try:
            key = self._normalize_key(name)
        except (TypeError, ValueError):
            return None
        return self._registry.get(key)

    def list_all(self) -> list[str]:
        """登録されているすべての名前を取得（未ソート）。"""
        return list(self._registry.keys())

    def is_registered(self, name: str) -> bool:
        return self.lookup(name) is not None

    def unregister(self, name: str) -> None:
        """レジストリから削除（名前が存在しない場合は無視）。"""
        self._registry.pop(self._normalize_key(name), None)

    def clear(self) -> None:
        self._registry.clear()

    def values(self) -> Iterator[T]:
        return iter(list(self._registry.values()))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.is_registered(name)

    def __len__(self) -> int:
        return len(self._registry)

    @property
    def registry(self) -> dict[str, T]:
        """レジストリの読み取り専用コピー"""
        return self._registry.copy()


__all__ = ["BaseRegistry"]
