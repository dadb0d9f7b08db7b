"""
どこで: `engine.errors`。
何を: リフレクション/値変換/アダプタで送出する例外階層。
なぜ: 致命的な経路（プローブ生成失敗・union 全滅・破棄後操作）だけを型で区別し、
    それ以外の寛容な劣化（型文字列の不正・未知ジェネリック）はログのみで扱うため。
"""

from __future__ import annotations

from typing import Any, Sequence


class TreiError(Exception):
    """本パッケージの例外基底。"""


class ConversionError(TreiError, ValueError):
    """union のすべての候補型で変換に失敗した。"""

    def __init__(self, value: Any, alternatives: Sequence[str]) -> None:
        self.value = value
        self.alternatives = tuple(alternatives)
        super().__init__(f"Cannot convert {value!r} to any of {', '.join(self.alternatives)}")


class ReflectionError(TreiError):
    """ターゲットクラスのプローブを既定構築できず、メタデータを抽出できない。"""

    def __init__(self, target: type, reason: str) -> None:
        self.target = target
        name = getattr(target, "__qualname__", repr(target))
        super().__init__(f"cannot reflect {name}: {reason}")


class AdapterDisposedError(TreiError, RuntimeError):
    """破棄済みアダプタへの操作。"""


__all__ = ["TreiError", "ConversionError", "ReflectionError", "AdapterDisposedError"]
