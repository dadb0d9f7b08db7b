"""
どこで: `scene` のジオメトリ。
何を: 生成パラメータ（`parameters` レコード）から頂点配列 (N, 3) を numpy で生成する形状群。
なぜ: メッシュの形状をアダプタの属性（JSON レコード）から部分更新できるようにするため。

補足:
- `parameters` は辞書で保持し、頂点は参照のたびに再生成（パラメータの部分更新に追従）。
- 頂点は原点中心・float32。
"""

from __future__ import annotations

import numpy as np

from .events import EventDispatcher
from .values import Vector3


class BufferGeometry(EventDispatcher):
    """頂点配列を持つ形状の基底。

    @event {SceneEvent} dispose 破棄されたとき
    """

    def __init__(self) -> None:
        super().__init__()
        self.name = ""
        """@type {string} 形状名"""
        self.parameters = {}
        """@type {Object} 生成パラメータ"""

    def _build(self) -> np.ndarray:
        return np.zeros((0, 3), dtype=np.float32)

    @property
    def positions(self) -> np.ndarray:
        """@type {Object} 頂点配列 (N, 3)"""
        return self._build()

    def vertex_count(self):
        """@returns {number} 頂点数"""
        return int(self.positions.shape[0])

    def bounding_box(self):
        """@returns {Array.<Vector3>} (min, max) の 2 点"""
        p = self.positions
        if p.size == 0:
            return [Vector3(), Vector3()]
        return [Vector3(*p.min(axis=0)), Vector3(*p.max(axis=0))]

    def dispose(self):
        """@returns {void}"""
        self.emit("dispose")


class BoxGeometry(BufferGeometry):
    def __init__(self, width: float = 1.0, height: float = 1.0, depth: float = 1.0) -> None:
        super().__init__()
        self.parameters = {"width": float(width), "height": float(height), "depth": float(depth)}
        """@type {{width: number, height: number, depth: number}} 各辺の長さ"""

    def _build(self) -> np.ndarray:
        p = self.parameters
        half = np.array([p["width"], p["height"], p["depth"]], dtype=np.float32) / 2.0
        corners = np.array(
            [[sx, sy, sz] for sx in (-1, 1) for sy in (-1, 1) for sz in (-1, 1)], dtype=np.float32
        )
        return corners * half


class PlaneGeometry(BufferGeometry):
    def __init__(
        self, width: float = 1.0, height: float = 1.0, width_segments: int = 1, height_segments: int = 1
    ) -> None:
        super().__init__()
        self.parameters = {
            "width": float(width),
            "height": float(height),
            "width_segments": int(width_segments),
            "height_segments": int(height_segments),
        }
        """@type {{width: number, height: number, width_segments: number, height_segments: number}} 寸法と分割数"""

    def _build(self) -> np.ndarray:
        p = self.parameters
        nx = max(1, int(p["width_segments"]))
        ny = max(1, int(p["height_segments"]))
        xs = np.linspace(-p["width"] / 2.0, p["width"] / 2.0, nx + 1, dtype=np.float32)
        ys = np.linspace(p["height"] / 2.0, -p["height"] / 2.0, ny + 1, dtype=np.float32)
        gx, gy = np.meshgrid(xs, ys)
        return np.stack([gx.ravel(), gy.ravel(), np.zeros(gx.size, dtype=np.float32)], axis=1)


class SphereGeometry(BufferGeometry):
    def __init__(self, radius: float = 1.0, width_segments: int = 32, height_segments: int = 16) -> None:
        super().__init__()
        self.parameters = {
            "radius": float(radius),
            "width_segments": int(width_segments),
            "height_segments": int(height_segments),
        }
        """@type {{radius: number, width_segments: number, height_segments: number}} 半径と分割数"""

    def _build(self) -> np.ndarray:
        p = self.parameters
        nu = max(3, int(p["width_segments"]))
        nv = max(2, int(p["height_segments"]))
        # 緯度経度グリッド（極は経度分だけ重複）
        phi = np.linspace(0.0, 2.0 * np.pi, nu + 1, dtype=np.float64)
        theta = np.linspace(0.0, np.pi, nv + 1, dtype=np.float64)
        t, f = np.meshgrid(theta, phi, indexing="ij")
        r = p["radius"]
        x = -r * np.cos(f) * np.sin(t)
        y = r * np.cos(t)
        z = r * np.sin(f) * np.sin(t)
        return np.stack([x.ravel(), y.ravel(), z.ravel()], axis=1).astype(np.float32)


class CylinderGeometry(BufferGeometry):
    def __init__(
        self,
        radius_top: float = 1.0,
        radius_bottom: float = 1.0,
        height: float = 1.0,
        radial_segments: int = 32,
    ) -> None:
        super().__init__()
        self.parameters = {
            "radius_top": float(radius_top),
            "radius_bottom": float(radius_bottom),
            "height": float(height),
            "radial_segments": int(radial_segments),
        }
        """@type {{radius_top: number, radius_bottom: number, height: number, radial_segments: number}} 寸法と分割数"""

    def _build(self) -> np.ndarray:
        p = self.parameters
        n = max(3, int(p["radial_segments"]))
        a = np.linspace(0.0, 2.0 * np.pi, n, endpoint=False)
        half = p["height"] / 2.0
        rings = []
        for radius, y in ((p["radius_top"], half), (p["radius_bottom"], -half)):
            rings.append(np.stack([radius * np.sin(a), np.full(n, y), radius * np.cos(a)], axis=1))
        return np.vstack(rings).astype(np.float32)


__all__ = [
    "BufferGeometry",
    "BoxGeometry",
    "PlaneGeometry",
    "SphereGeometry",
    "CylinderGeometry",
]
