"""
どこで: `scene` のシーングラフ（ノード/カメラ/ライト/メッシュ）。
何を: 位置・回転・拡縮を持つ `Object3D` と、その派生（Group/Scene/Mesh/Camera/Light）。
なぜ: ドキュメントタグ付きの既定構築可能なターゲットとして、アダプタ層から属性駆動で操作するため。

メンバーの型はドキュメントタグ（`@type`/`@param`/`@returns`/`@event`）で宣言する。
インスタンス属性は `__init__` 内の代入直後の文字列リテラルに記述する。
"""

from __future__ import annotations

import logging
from typing import Callable, Iterator

import numpy as np

from .events import EventDispatcher
from .geometries import BoxGeometry, BufferGeometry
from .materials import Material, MeshBasicMaterial
from .values import Color, Euler, Matrix4, Vector3

logger = logging.getLogger(__name__)


class Object3D(EventDispatcher):
    """シーングラフのノード。

    @event {SceneEvent} added 親ノードへ追加されたとき
    @event {SceneEvent} removed 親ノードから外されたとき
    """

    DEFAULT_UP = Vector3(0, 1, 0)
    """@type {Vector3} 新規ノードの up ベクトル"""

    DEFAULT_MATRIX_AUTO_UPDATE = True
    """@type {boolean} 新規ノードの行列自動更新フラグ"""

    def __init__(self) -> None:
        super().__init__()
        self._parent: Object3D | None = None
        self._children: list[Object3D] = []
        self.name = ""
        """@type {string} ノード名"""
        self.position = Vector3()
        """@type {Vector3} ローカル位置"""
        self.rotation = Euler()
        """@type {Euler} ローカル回転（ラジアン）"""
        self.scale = Vector3(1, 1, 1)
        """@type {Vector3} ローカル拡縮"""
        self.up = Vector3(*Object3D.DEFAULT_UP)
        """@type {Vector3} look 方向の基準となる up ベクトル"""
        self.visible = True
        """@type {boolean} 描画対象か"""
        self.matrix_auto_update = Object3D.DEFAULT_MATRIX_AUTO_UPDATE
        """@type {boolean} 行列を毎フレーム再計算するか"""
        self.render_order = 0
        """@type {number} 描画順の上書き"""
        self.user_data = {}
        """@type {Object} 任意の付帯データ"""

    # --- 階層 ---
    @property
    def parent(self) -> "Object3D | None":
        """@type {Object3D} 親ノード（読み取り専用）"""
        return self._parent

    @property
    def children(self) -> tuple["Object3D", ...]:
        """@type {Array.<Object3D>} 子ノード（読み取り専用）"""
        return tuple(self._children)

    def add(self, *objects):
        """子ノードを追加する（既存の親からは外す）。

        @param {Object3D} object 追加するノード
        @returns {this}
        """
        for obj in objects:
            if obj is self:
                logger.debug("%s: cannot add a node to itself", self.name or type(self).__name__)
                continue
            if obj._parent is not None:
                obj._parent.remove(obj)
            obj._parent = self
            self._children.append(obj)
            obj.emit("added", parent=self)
        return self

    def remove(self, *objects):
        """子ノードを外す（子でなければ無視）。

        @param {Object3D} object 外すノード
        @returns {this}
        """
        for obj in objects:
            if obj in self._children:
                self._children.remove(obj)
                obj._parent = None
                obj.emit("removed", parent=self)
        return self

    def remove_from_parent(self):
        """@returns {this}"""
        if self._parent is not None:
            self._parent.remove(self)
        return self

    def clear(self):
        """@returns {this}"""
        return self.remove(*self._children)

    def traverse(self, callback: Callable[["Object3D"], None]):
        """自身と全子孫へ深さ優先で `callback` を適用する。

        @param {Function} callback ノードを受け取る関数
        @returns {void}
        """
        for node in self.iter_nodes():
            callback(node)

    def iter_nodes(self) -> Iterator["Object3D"]:
        yield self
        for child in self._children:
            yield from child.iter_nodes()

    def get_object_by_name(self, name):
        """名前が一致する最初の子孫（自身を含む）を返す。

        @param {string} name 探す名前
        @returns {Object3D|undefined} 見つからなければ None
        """
        return next((n for n in self.iter_nodes() if n.name == name), None)

    # --- 変形 ---
    def translate_on_axis(self, axis, distance):
        """ローカル軸に沿って移動する。

        @param {Vector3} axis 正規化済みの軸
        @param {number} distance 移動量
        @returns {this}
        """
        v = Vector3(*axis).apply_euler(self.rotation).multiply_scalar(distance)
        self.position.add(v)
        return self

    def translate_x(self, distance):
        """@param {number} distance 移動量
        @returns {this}
        """
        return self.translate_on_axis(Vector3(1, 0, 0), distance)

    def translate_y(self, distance):
        """@param {number} distance 移動量
        @returns {this}
        """
        return self.translate_on_axis(Vector3(0, 1, 0), distance)

    def translate_z(self, distance):
        """@param {number} distance 移動量
        @returns {this}
        """
        return self.translate_on_axis(Vector3(0, 0, 1), distance)

    def rotate_x(self, angle):
        """@param {number} angle 角度（ラジアン）
        @returns {this}
        """
        self.rotation.x += float(angle)
        return self

    def rotate_y(self, angle):
        """@param {number} angle 角度（ラジアン）
        @returns {this}
        """
        self.rotation.y += float(angle)
        return self

    def rotate_z(self, angle):
        """@param {number} angle 角度（ラジアン）
        @returns {this}
        """
        self.rotation.z += float(angle)
        return self

    # --- 行列/方向 ---
    @property
    def matrix(self) -> Matrix4:
        """@type {Matrix4} ローカル変換行列"""
        return Matrix4.compose(self.position, self.rotation, self.scale)

    @property
    def matrix_world(self) -> Matrix4:
        """@type {Matrix4} ワールド変換行列"""
        local = self.matrix
        if self._parent is None:
            return local
        return self._parent.matrix_world.multiply(local)

    @property
    def world_direction(self) -> Vector3:
        """@type {Vector3} ワールド空間での +Z 方向（正規化済み）"""
        m = self.matrix_world.elements[:3, :3]
        return Vector3(*(m @ np.array([0.0, 0.0, 1.0]))).normalize()

    def get_world_position(self):
        """@returns {Vector3} ワールド座標での位置"""
        return self.matrix_world.translation()

    def local_to_world(self, vector):
        """@param {Vector3} vector ローカル座標
        @returns {Vector3} ワールド座標
        """
        return Vector3(*vector).apply_matrix4(self.matrix_world)

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return f"<{type(self).__name__}{label} children={len(self._children)}>"


class Group(Object3D):
    """子ノードをまとめるだけのノード。"""


class Scene(Object3D):
    """シーンのルート。"""

    def __init__(self) -> None:
        super().__init__()
        self.background = None
        """@type {Color|undefined} 背景色（None は透明）"""
        self.background_intensity = 1.0
        """@type {number} 背景の明るさ係数"""
        self.fog = {"color": Color(0xFFFFFF), "near": 1.0, "far": 1000.0}
        """@type {{color: Color, near: number, far: number}} 線形フォグの設定"""


class Mesh(Object3D):
    """ジオメトリとマテリアルの組。"""

    def __init__(self, geometry: BufferGeometry | None = None, material: Material | None = None) -> None:
        super().__init__()
        self.geometry = geometry if geometry is not None else BoxGeometry()
        """@type {BufferGeometry} 形状"""
        self.material = material if material is not None else MeshBasicMaterial()
        """@type {Material} 材質"""
        self.cast_shadow = False
        """@type {boolean} 影を落とすか"""
        self.receive_shadow = False
        """@type {boolean} 影を受けるか"""

    def world_vertices(self):
        """@returns {Object} ワールド座標の頂点配列 (N, 3)"""
        positions = self.geometry.positions
        if positions.size == 0:
            return positions.copy()
        m = self.matrix_world.elements
        homo = np.hstack([positions, np.ones((positions.shape[0], 1))])
        return (homo @ m.T)[:, :3]


class Camera(Object3D):
    """カメラの基底。"""

    def __init__(self) -> None:
        super().__init__()
        self.near = 0.1
        """@type {number} 近クリップ面"""
        self.far = 2000.0
        """@type {number} 遠クリップ面"""
        self.zoom = 1.0
        """@type {number} ズーム係数"""

    @property
    def projection_matrix(self) -> Matrix4:
        """@type {Matrix4} 射影行列"""
        return Matrix4()

    def update_projection_matrix(self):
        """射影パラメータ変更後に呼ぶ（行列は都度計算のため通知のみ）。

        @returns {void}
        """
        self.emit("projection", matrix=self.projection_matrix)


class PerspectiveCamera(Camera):
    """透視投影カメラ。

    @event {SceneEvent} projection 射影パラメータが更新されたとき
    """

    def __init__(self, fov: float = 50.0, aspect: float = 1.0, near: float = 0.1, far: float = 2000.0) -> None:
        super().__init__()
        self._fov = float(fov)
        self.near = float(near)
        self.far = float(far)
        self.aspect = float(aspect)
        """@type {number} 縦横比（幅/高さ）"""

    @property
    def fov(self) -> float:
        """@type {number} 垂直視野角（度）"""
        return self._fov

    @fov.setter
    def fov(self, value: float) -> None:
        self._fov = float(value)
        self.update_projection_matrix()

    @property
    def projection_matrix(self) -> Matrix4:
        """@type {Matrix4} 透視射影行列"""
        f = 1.0 / np.tan(np.radians(self._fov) / 2.0) * self.zoom
        near, far = self.near, self.far
        m = Matrix4()
        m.elements[:] = 0.0
        m.elements[0, 0] = f / self.aspect
        m.elements[1, 1] = f
        m.elements[2, 2] = (far + near) / (near - far)
        m.elements[2, 3] = 2.0 * far * near / (near - far)
        m.elements[3, 2] = -1.0
        return m


class OrthographicCamera(Camera):
    """平行投影カメラ。

    @event {SceneEvent} projection 射影パラメータが更新されたとき
    """

    def __init__(
        self,
        left: float = -1.0,
        right: float = 1.0,
        top: float = 1.0,
        bottom: float = -1.0,
        near: float = 0.1,
        far: float = 2000.0,
    ) -> None:
        super().__init__()
        self.left = float(left)
        """@type {number} 左クリップ面"""
        self.right = float(right)
        """@type {number} 右クリップ面"""
        self.top = float(top)
        """@type {number} 上クリップ面"""
        self.bottom = float(bottom)
        """@type {number} 下クリップ面"""
        self.near = float(near)
        self.far = float(far)

    @property
    def projection_matrix(self) -> Matrix4:
        """@type {Matrix4} 平行射影行列"""
        w = (self.right - self.left) / self.zoom
        h = (self.top - self.bottom) / self.zoom
        d = self.far - self.near
        m = Matrix4()
        m.elements[0, 0] = 2.0 / w
        m.elements[1, 1] = 2.0 / h
        m.elements[2, 2] = -2.0 / d
        m.elements[0, 3] = -(self.right + self.left) / (self.right - self.left)
        m.elements[1, 3] = -(self.top + self.bottom) / (self.top - self.bottom)
        m.elements[2, 3] = -(self.far + self.near) / d
        return m


class Light(Object3D):
    """ライトの基底。"""

    def __init__(self, color: int | str = 0xFFFFFF, intensity: float = 1.0) -> None:
        super().__init__()
        self.color = Color(color)
        """@type {Color} 光の色"""
        self.intensity = float(intensity)
        """@type {number} 強さ"""

    def dispose(self):
        """@returns {void}"""
        self.emit("dispose")


class AmbientLight(Light):
    """環境光。"""


class DirectionalLight(Light):
    """平行光源（+Y 上方から原点へ）。

    @event {SceneEvent} dispose 破棄されたとき
    """

    def __init__(self, color: int | str = 0xFFFFFF, intensity: float = 1.0) -> None:
        super().__init__(color, intensity)
        self.position.set(0, 1, 0)
        self.cast_shadow = False
        """@type {boolean} 影を落とすか"""


class PointLight(Light):
    """点光源。"""

    def __init__(
        self, color: int | str = 0xFFFFFF, intensity: float = 1.0, distance: float = 0.0, decay: float = 2.0
    ) -> None:
        super().__init__(color, intensity)
        self.distance = float(distance)
        """@type {number} 到達距離（0 は無限）"""
        self.decay = float(decay)
        """@type {number} 距離減衰の指数"""


class SpotLight(PointLight):
    """スポットライト。"""

    def __init__(
        self,
        color: int | str = 0xFFFFFF,
        intensity: float = 1.0,
        distance: float = 0.0,
        angle: float = np.pi / 3.0,
        penumbra: float = 0.0,
        decay: float = 2.0,
    ) -> None:
        super().__init__(color, intensity, distance, decay)
        self.angle = float(angle)
        """@type {number} 円錐の半角（ラジアン）"""
        self.penumbra = float(penumbra)
        """@type {number} 縁のぼかし（0–1）"""


__all__ = [
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
]
