"""
どこで: `api` 入口（高レベル公開 API）。
何を: 型文法・値変換・メタデータ・アダプタ生成・コンポーネント登録を単一名前空間から再輸出。
なぜ: 利用者がタグ名と属性文字列だけでシーンオブジェクトを組み立てられるようにするため。

Usage:
    from api import define_defaults, create_element

    define_defaults()
    cam = create_element("three-perspectivecamera", fov="75", position="0, 0, 5")
    cam.connected_callback()
    cam.flush()
    cam.target.position      # Vector3(x=0, y=0, z=5)
"""

from common.logging import setup_default_logging
from engine.convert.value_converter import ValueConverter, convert_value
from engine.errors import AdapterDisposedError, ConversionError, ReflectionError, TreiError
from engine.reflect.cache import ReflectionCache, metadata_for
from engine.reflect.type_grammar import format_type, parse_type
from engine.ui.adapter import AdapterDefinition, AdapterFactory, TargetAdapter, build
from engine.ui.components import (
    create_element,
    define_component,
    get_component,
    list_components,
)
from scene import (
    AmbientLight,
    BoxGeometry,
    CylinderGeometry,
    DirectionalLight,
    Group,
    Mesh,
    MeshBasicMaterial,
    MeshPhongMaterial,
    MeshStandardMaterial,
    Object3D,
    OrthographicCamera,
    PerspectiveCamera,
    PlaneGeometry,
    PointLight,
    Scene,
    SphereGeometry,
    SpotLight,
)

# `define_defaults()` が登録する既定ターゲット
DEFAULT_TARGETS: tuple[type, ...] = (
    Object3D,
    Group,
    Scene,
    Mesh,
    PerspectiveCamera,
    OrthographicCamera,
    AmbientLight,
    DirectionalLight,
    PointLight,
    SpotLight,
    BoxGeometry,
    SphereGeometry,
    PlaneGeometry,
    CylinderGeometry,
    MeshBasicMaterial,
    MeshStandardMaterial,
    MeshPhongMaterial,
)


def define_defaults() -> list[str]:
    """`DEFAULT_TARGETS` をすべてコンポーネント登録し、タグ名を返す（再呼び出しは no-op）。"""
    return [define_component(cls).tag for cls in DEFAULT_TARGETS]


__all__ = [
    # 型文法/変換
    "parse_type",
    "format_type",
    "convert_value",
    "ValueConverter",
    # メタデータ
    "metadata_for",
    "ReflectionCache",
    # アダプタ
    "build",
    "AdapterFactory",
    "AdapterDefinition",
    "TargetAdapter",
    # コンポーネント
    "define_component",
    "define_defaults",
    "create_element",
    "get_component",
    "list_components",
    "DEFAULT_TARGETS",
    # 例外
    "TreiError",
    "ConversionError",
    "ReflectionError",
    "AdapterDisposedError",
    # ロギング
    "setup_default_logging",
]

# バージョン情報
__version__ = "2026.10"
