"""
どこで: `engine.convert` サブパッケージ。
何を: 値型コンストラクタ表と、型記述子に基づく値変換を提供。
"""

from .constructors import TypeConstructor, TypeConstructorRegistry, default_registry
from .value_converter import ValueConverter, convert_value, default_converter

__all__ = [
    "TypeConstructor",
    "TypeConstructorRegistry",
    "default_registry",
    "ValueConverter",
    "convert_value",
    "default_converter",
]
