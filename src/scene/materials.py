"""
どこで: `scene` のマテリアル。
何を: 不透明度・面の向き・色などの描画パラメータを保持するクラス群。
なぜ: メッシュの見た目をアダプタの属性から設定できるようにするため。
"""

from __future__ import annotations

from .events import EventDispatcher
from .values import Color


class Material(EventDispatcher):
    """マテリアルの基底。

    @event {SceneEvent} dispose 破棄されたとき
    """

    FRONT_SIDE = 0
    BACK_SIDE = 1
    DOUBLE_SIDE = 2

    __member_meta__ = {
        "FRONT_SIDE": "@type {number} 表面のみ描画",
        "BACK_SIDE": "@type {number} 裏面のみ描画",
        "DOUBLE_SIDE": "@type {number} 両面を描画",
        "side": {"type": "number", "description": "描画する面（FRONT_SIDE/BACK_SIDE/DOUBLE_SIDE）"},
    }

    def __init__(self) -> None:
        super().__init__()
        self._version = 0
        self.name = ""
        """@type {string} マテリアル名"""
        self.opacity = 1.0
        """@type {number} 不透明度（0–1）"""
        self.transparent = False
        """@type {boolean} 透過として扱うか"""
        self.visible = True
        """@type {boolean} 描画対象か"""
        self.side = Material.FRONT_SIDE
        self.depth_test = True
        """@type {boolean} 深度テストを行うか"""

    @property
    def version(self) -> int:
        """@type {number} 変更世代（`needs_update` の書き込みで進む）"""
        return self._version

    def _mark_dirty(self, value: bool) -> None:
        if value:
            self._version += 1

    needs_update = property(None, _mark_dirty, doc="@type {boolean} True を書くと再構築を要求する")

    def dispose(self):
        """@returns {void}"""
        self.emit("dispose")


class MeshBasicMaterial(Material):
    """ライティングの影響を受けない単色マテリアル。"""

    def __init__(self) -> None:
        super().__init__()
        self.color = Color(0xFFFFFF)
        """@type {Color} 基本色"""
        self.wireframe = False
        """@type {boolean} ワイヤーフレーム表示"""


class MeshStandardMaterial(Material):
    """PBR（metalness/roughness）マテリアル。"""

    def __init__(self) -> None:
        super().__init__()
        self.color = Color(0xFFFFFF)
        """@type {Color} 基本色"""
        self.emissive = Color(0x000000)
        """@type {Color} 自己発光色"""
        self.roughness = 1.0
        """@type {number} 粗さ（0–1）"""
        self.metalness = 0.0
        """@type {number} 金属度（0–1）"""
        self.wireframe = False
        """@type {boolean} ワイヤーフレーム表示"""


class MeshPhongMaterial(Material):
    """Phong 反射モデルのマテリアル。"""

    def __init__(self) -> None:
        super().__init__()
        self.color = Color(0xFFFFFF)
        """@type {Color} 基本色"""
        self.specular = Color(0x111111)
        """@type {Color} 鏡面反射色"""
        self.shininess = 30.0
        """@type {number} 光沢の鋭さ"""
        self.flat_shading = False
        """@type {boolean} フラットシェーディング"""


__all__ = ["Material", "MeshBasicMaterial", "MeshStandardMaterial", "MeshPhongMaterial"]
