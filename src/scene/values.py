"""
どこで: `scene` の値型（ベクトル/回転/行列/色）。
何を: numpy 配列を保持する小さな値クラス群を定義し、`@value_type` で値変換表へ登録。
なぜ: 属性文字列（"1, 2, 3" / "#ff8800" 等）から構築でき、かつオブジェクト側で演算できる値を提供するため。

登録レイアウト:
- Vector2/3/4, Euler, Quaternion: positional（`Vector3(1, 2, 3)`）
- Matrix3/4: flat（`Matrix4.from_array([... 16 要素 ...])`、列優先）
- Color: text（"#rrggbb" / "0xrrggbb" / 色名 / "r, g, b"）
"""

from __future__ import annotations

from typing import Any, Iterator, Sequence

import numpy as np

from .registry import value_type


class _Components:
    """固定長 float64 成分の共通実装。"""

    _size = 0
    _names: tuple[str, ...] = ()

    def __init__(self, *components: float) -> None:
        if len(components) > self._size:
            raise ValueError(
                f"{type(self).__name__} takes at most {self._size} components, got {len(components)}"
            )
        data = np.zeros(self._size, dtype=np.float64)
        data[: len(components)] = [float(c) for c in components]
        self._data = data

    def __iter__(self) -> Iterator[float]:
        return iter(self._data.tolist())

    def __len__(self) -> int:
        return self._size

    def __getitem__(self, index: int) -> float:
        return float(self._data[index])

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return bool(np.array_equal(self._data, other._data))  # type: ignore[attr-defined]

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        inner = ", ".join(f"{n}={v:g}" for n, v in zip(self._names, self._data))
        return f"{type(self).__name__}({inner})"

    def to_array(self) -> list[float]:
        return self._data.tolist()

    def set(self, *components: float):
        self._data[: len(components)] = [float(c) for c in components]
        return self

    def copy(self, other: "_Components"):
        self._data[:] = other._data
        return self

    def clone(self):
        out = type(self).__new__(type(self))
        out._data = self._data.copy()
        return out


def _component(index: int) -> property:
    def fget(self: _Components) -> float:
        return float(self._data[index])

    def fset(self: _Components, value: float) -> None:
        self._data[index] = float(value)

    return property(fget, fset)


class _Vector(_Components):
    def add(self, other: "_Vector"):
        self._data += other._data
        return self

    def sub(self, other: "_Vector"):
        self._data -= other._data
        return self

    def multiply_scalar(self, s: float):
        self._data *= float(s)
        return self

    def dot(self, other: "_Vector") -> float:
        return float(np.dot(self._data, other._data))

    def length(self) -> float:
        return float(np.linalg.norm(self._data))

    def normalize(self):
        n = self.length()
        if n > 0.0:
            self._data /= n
        return self


@value_type()
class Vector2(_Vector):
    _size = 2
    _names = ("x", "y")
    x = _component(0)
    y = _component(1)


@value_type()
class Vector3(_Vector):
    _size = 3
    _names = ("x", "y", "z")
    x = _component(0)
    y = _component(1)
    z = _component(2)

    def cross(self, other: "Vector3") -> "Vector3":
        self._data = np.cross(self._data, other._data)
        return self

    def apply_euler(self, euler: "Euler") -> "Vector3":
        """X→Y→Z の順に各軸回転を適用する（右手系、ラジアン）。"""
        self._data = euler.rotation_matrix() @ self._data
        return self

    def apply_matrix4(self, m: "Matrix4") -> "Vector3":
        h = m.elements @ np.append(self._data, 1.0)
        w = h[3] if h[3] != 0.0 else 1.0
        self._data = h[:3] / w
        return self


@value_type()
class Vector4(_Vector):
    _size = 4
    _names = ("x", "y", "z", "w")
    x = _component(0)
    y = _component(1)
    z = _component(2)
    w = _component(3)


@value_type()
class Euler(_Components):
    """オイラー角（ラジアン）。適用順は X→Y→Z。"""

    _size = 3
    _names = ("x", "y", "z")
    x = _component(0)
    y = _component(1)
    z = _component(2)

    def rotation_matrix(self) -> np.ndarray:
        """3x3 回転行列 `Rz @ Ry @ Rx` を返す。"""
        x, y, z = self._data
        cx, sx = np.cos(x), np.sin(x)
        cy, sy = np.cos(y), np.sin(y)
        cz, sz = np.cos(z), np.sin(z)
        rx = np.array([[1.0, 0.0, 0.0], [0.0, cx, -sx], [0.0, sx, cx]])
        ry = np.array([[cy, 0.0, sy], [0.0, 1.0, 0.0], [-sy, 0.0, cy]])
        rz = np.array([[cz, -sz, 0.0], [sz, cz, 0.0], [0.0, 0.0, 1.0]])
        return rz @ ry @ rx


@value_type()
class Quaternion(_Components):
    _size = 4
    _names = ("x", "y", "z", "w")
    x = _component(0)
    y = _component(1)
    z = _component(2)
    w = _component(3)

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0, w: float = 1.0) -> None:
        super().__init__(x, y, z, w)

    @classmethod
    def from_euler(cls, euler: Euler) -> "Quaternion":
        hx, hy, hz = (0.5 * v for v in euler)
        c1, c2, c3 = np.cos(hx), np.cos(hy), np.cos(hz)
        s1, s2, s3 = np.sin(hx), np.sin(hy), np.sin(hz)
        # Rz @ Ry @ Rx に対応する合成
        return cls(
            s1 * c2 * c3 - c1 * s2 * s3,
            c1 * s2 * c3 + s1 * c2 * s3,
            c1 * c2 * s3 - s1 * s2 * c3,
            c1 * c2 * c3 + s1 * s2 * s3,
        )


class _Matrix:
    _order = 0

    def __init__(self) -> None:
        self.elements = np.eye(self._order, dtype=np.float64)

    @classmethod
    def from_array(cls, values: Sequence[float]):
        """列優先の平坦列から構築する（要素数は n*n）。"""
        flat = np.asarray(values, dtype=np.float64).ravel()
        if flat.size != cls._order * cls._order:
            raise ValueError(
                f"{cls.__name__} needs {cls._order * cls._order} elements, got {flat.size}"
            )
        m = cls()
        m.elements = flat.reshape(cls._order, cls._order).T.copy()
        return m

    def to_array(self) -> list[float]:
        return self.elements.T.ravel().tolist()

    def identity(self):
        self.elements = np.eye(self._order, dtype=np.float64)
        return self

    def multiply(self, other: "_Matrix"):
        self.elements = self.elements @ other.elements
        return self

    def determinant(self) -> float:
        return float(np.linalg.det(self.elements))

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return bool(np.array_equal(self.elements, other.elements))  # type: ignore[attr-defined]

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_array()})"


@value_type(layout="flat", factory="from_array")
class Matrix3(_Matrix):
    _order = 3


@value_type(layout="flat", factory="from_array")
class Matrix4(_Matrix):
    _order = 4

    @classmethod
    def compose(cls, position: Vector3, rotation: Euler, scale: Vector3) -> "Matrix4":
        m = cls()
        m.elements[:3, :3] = rotation.rotation_matrix() * np.asarray(scale.to_array())
        m.elements[:3, 3] = position.to_array()
        return m

    def translation(self) -> Vector3:
        return Vector3(*self.elements[:3, 3])


_NAMED_COLORS: dict[str, int] = {
    "black": 0x000000,
    "white": 0xFFFFFF,
    "red": 0xFF0000,
    "green": 0x008000,
    "lime": 0x00FF00,
    "blue": 0x0000FF,
    "yellow": 0xFFFF00,
    "cyan": 0x00FFFF,
    "magenta": 0xFF00FF,
    "gray": 0x808080,
    "grey": 0x808080,
    "orange": 0xFFA500,
}


def parse_hex_color_str(s: str) -> tuple[float, float, float]:
    """Hex 文字列から RGB(0–1) を返す。

    受理形式: "#RRGGBB", "0xRRGGBB", "RRGGBB", "#RGB"。大文字/小文字は不問。
    """
    t = s.strip()
    if t.startswith("#"):
        t = t[1:]
    elif t.lower().startswith("0x"):
        t = t[2:]
    if len(t) == 3:
        t = "".join(ch * 2 for ch in t)
    if len(t) != 6:
        raise ValueError(f"invalid hex color length: '{s}' (expected RRGGBB)")
    try:
        r = int(t[0:2], 16)
        g = int(t[2:4], 16)
        b = int(t[4:6], 16)
    except ValueError as e:
        raise ValueError(f"invalid hex color: '{s}'") from e
    return (r / 255.0, g / 255.0, b / 255.0)


def _hex_to_rgb(value: int) -> tuple[float, float, float]:
    value = int(value) & 0xFFFFFF
    return ((value >> 16 & 255) / 255.0, (value >> 8 & 255) / 255.0, (value & 255) / 255.0)


@value_type(layout="text")
class Color:
    """RGB(0–1) の色。

    受理:
    - `Color()` → 白
    - `Color(0xff8800)` / `Color("#ff8800")` / `Color("orange")`
    - `Color(1.0, 0.5, 0.0)`
    """

    def __init__(self, *args: Any) -> None:
        self.rgb = np.ones(3, dtype=np.float64)
        if args:
            self.set(*args)

    def set(self, *args: Any) -> "Color":
        if len(args) == 1:
            (value,) = args
            if isinstance(value, Color):
                self.rgb[:] = value.rgb
            elif isinstance(value, str):
                named = _NAMED_COLORS.get(value.strip().lower())
                rgb = _hex_to_rgb(named) if named is not None else parse_hex_color_str(value)
                self.rgb[:] = rgb
            elif isinstance(value, (int, np.integer)) and not isinstance(value, bool):
                self.rgb[:] = _hex_to_rgb(value)
            else:
                raise ValueError(f"unsupported color value: {value!r}")
        elif len(args) == 3:
            self.rgb[:] = [float(c) for c in args]
        else:
            raise ValueError(f"Color takes 1 or 3 arguments, got {len(args)}")
        return self

    r = property(lambda self: float(self.rgb[0]))
    g = property(lambda self: float(self.rgb[1]))
    b = property(lambda self: float(self.rgb[2]))

    def get_hex(self) -> int:
        r, g, b = (int(round(float(np.clip(c, 0.0, 1.0)) * 255)) for c in self.rgb)
        return (r << 16) | (g << 8) | b

    def get_hex_string(self) -> str:
        return f"{self.get_hex():06x}"

    def to_array(self) -> list[float]:
        return self.rgb.tolist()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Color):
            return NotImplemented
        return bool(np.allclose(self.rgb, other.rgb))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Color(#{self.get_hex_string()})"


__all__ = [
    "Vector2",
    "Vector3",
    "Vector4",
    "Euler",
    "Quaternion",
    "Matrix3",
    "Matrix4",
    "Color",
    "parse_hex_color_str",
]
