"""
どこで: `engine.reflect` サブパッケージ。
何を: 型文法・ドキュメントタグ解析・クラスメタデータとそのキャッシュを提供。
なぜ: ターゲットクラスの形をドキュメントから回収する処理を 1 か所にまとめるため。
"""

from .cache import ReflectionCache, default_cache, metadata_for
from .doc_comments import DocBlock, DocTag, parse_doc_block
from .metadata import (
    ClassMetadata,
    ComputedDescriptor,
    EventDescriptor,
    MethodDescriptor,
    PropertyDescriptor,
    StaticDescriptor,
)
from .type_grammar import (
    ArrayOf,
    Generic,
    ObjectOf,
    Scalar,
    TypeDescriptor,
    Union,
    format_type,
    parse_type,
)

__all__ = [
    "ReflectionCache",
    "default_cache",
    "metadata_for",
    "DocBlock",
    "DocTag",
    "parse_doc_block",
    "ClassMetadata",
    "ComputedDescriptor",
    "EventDescriptor",
    "MethodDescriptor",
    "PropertyDescriptor",
    "StaticDescriptor",
    "ArrayOf",
    "Generic",
    "ObjectOf",
    "Scalar",
    "TypeDescriptor",
    "Union",
    "format_type",
    "parse_type",
]
