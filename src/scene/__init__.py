"""
どこで: `scene` パッケージ。
何を: 値型（import 時に値変換表へ登録）とシーンオブジェクト/ジオメトリ/マテリアルを公開。
"""

from .events import EventDispatcher, SceneEvent
from .geometries import BoxGeometry, BufferGeometry, CylinderGeometry, PlaneGeometry, SphereGeometry
from .materials import Material, MeshBasicMaterial, MeshPhongMaterial, MeshStandardMaterial
from .objects import (
    AmbientLight,
    Camera,
    DirectionalLight,
    Group,
    Light,
    Mesh,
    Object3D,
    OrthographicCamera,
    PerspectiveCamera,
    PointLight,
    Scene,
    SpotLight,
)
from .registry import get_value_type, is_value_type, list_value_types, value_type
from .values import Color, Euler, Matrix3, Matrix4, Quaternion, Vector2, Vector3, Vector4

__all__ = [
    "EventDispatcher",
    "SceneEvent",
    "BufferGeometry",
    "BoxGeometry",
    "PlaneGeometry",
    "SphereGeometry",
    "CylinderGeometry",
    "Material",
    "MeshBasicMaterial",
    "MeshStandardMaterial",
    "MeshPhongMaterial",
    "Object3D",
    "Group",
    "Scene",
    "Mesh",
    "Camera",
    "PerspectiveCamera",
    "OrthographicCamera",
    "Light",
    "AmbientLight",
    "DirectionalLight",
    "PointLight",
    "SpotLight",
    "value_type",
    "get_value_type",
    "list_value_types",
    "is_value_type",
    "Vector2",
    "Vector3",
    "Vector4",
    "Euler",
    "Quaternion",
    "Matrix3",
    "Matrix4",
    "Color",
]
