from __future__ import annotations

import pytest

from engine.errors import ReflectionError
from engine.reflect.cache import ReflectionCache, attribute_docs, metadata_for
from engine.reflect.type_grammar import ANY, ArrayOf, ObjectOf, Scalar, Union
from scene.values import Vector3


class Widget:
    """テスト用ターゲット。

    @event {Widget} changed 値が変わったとき
    """

    LIMIT = 10
    """@type {number} 上限"""

    __member_meta__ = {
        "weights": {"type": "Array.<number>", "description": "重み"},
        "mode": "@type {string|number} 動作モード",
    }

    def __init__(self) -> None:
        self.position = Vector3()
        """@type {Vector3} 位置"""
        self.size = 1.5
        self.label = "w"
        self.enabled = True
        self.weights = [1, 2]
        self.mode = "auto"
        self.extra = None
        self.range = {"near": 0.1, "far": 10.0}
        """@type {{near: number, far: number}} クリップ範囲"""
        self._hidden = 3

    @property
    def area(self) -> float:
        """@type {number} 面積（読み取り専用）"""
        return self.size * self.size

    @property
    def title(self):
        return self.label

    @title.setter
    def title(self, value):
        self.label = value

    def scale_by(self, factor):
        """拡大する。

        @param {number} factor 倍率
        @returns {this}
        """
        self.size *= factor
        return self

    def describe(self, prefix: str = "", *, verbose: bool = False) -> str:
        return f"{prefix}{self.label}"

    def notify(self):
        """@event {string} poked 突かれたとき
        @returns {void}
        """

    @staticmethod
    def helper():
        return 1


class SubWidget(Widget):
    """派生（イベントは基底から継承）。"""

    def __init__(self) -> None:
        super().__init__()
        self.depth = 2
        """@type {number} 奥行き"""


class NeedsArgs:
    def __init__(self, required):
        self.required = required


def test_metadata_for_caches_by_class_identity(cache: ReflectionCache) -> None:
    first = cache.metadata_for(Widget)
    second = cache.metadata_for(Widget)
    assert first is second
    assert cache.extractions == 1
    assert Widget in cache
    assert len(cache) == 1


def test_properties_from_attribute_docs_meta_and_runtime(cache: ReflectionCache) -> None:
    props = cache.metadata_for(Widget).properties
    assert props["position"].type == Scalar("Vector3")
    assert props["position"].description == "位置"
    assert props["size"].type == Scalar("number")
    assert props["label"].type == Scalar("string")
    assert props["enabled"].type == Scalar("boolean")
    assert props["extra"].type == Scalar("undefined")
    assert props["weights"].type == ArrayOf(Scalar("number"))
    assert props["weights"].description == "重み"
    assert props["mode"].type == Union((Scalar("string"), Scalar("number")))
    assert props["range"].type == ObjectOf({"near": Scalar("number"), "far": Scalar("number")})
    assert "_hidden" not in props


def test_computed_accessors(cache: ReflectionCache) -> None:
    computed = cache.metadata_for(Widget).computed
    assert computed["area"].has_getter and not computed["area"].has_setter
    assert computed["area"].type == Scalar("number")
    assert computed["title"].has_getter and computed["title"].has_setter
    assert computed["title"].type == ANY


def test_methods_from_tags_and_signature(cache: ReflectionCache) -> None:
    methods = cache.metadata_for(Widget).methods
    assert methods["scale_by"].declared_param_types == (Scalar("number"),)
    assert methods["scale_by"].param_names == ("factor",)
    assert methods["scale_by"].return_type == Scalar("this")
    # タグ無し → 注釈から補完（キーワード専用引数も含む）
    assert methods["describe"].param_names == ("prefix", "verbose")
    assert methods["describe"].declared_param_types == (Scalar("str"), Scalar("bool"))
    assert methods["describe"].return_type == Scalar("str")
    assert methods["notify"].return_type == Scalar("void")


def test_statics_and_events(cache: ReflectionCache) -> None:
    meta = cache.metadata_for(Widget)
    assert meta.static_members["LIMIT"].value == 10
    assert meta.static_members["LIMIT"].type == "number"
    assert meta.static_members["LIMIT"].description == "上限"
    assert meta.static_members["helper"].type == "function"
    assert set(meta.events) == {"changed", "poked"}
    assert meta.events["changed"].type == Scalar("Widget")


def test_subclass_inherits_docs_and_events(cache: ReflectionCache) -> None:
    meta = cache.metadata_for(SubWidget)
    assert meta.properties["depth"].type == Scalar("number")
    assert meta.properties["position"].type == Scalar("Vector3")
    assert "changed" in meta.events
    assert cache.metadata_for(Widget) is not meta


def test_probe_failure_raises_reflection_error(cache: ReflectionCache) -> None:
    with pytest.raises(ReflectionError) as ei:
        cache.metadata_for(NeedsArgs)
    assert ei.value.target is NeedsArgs
    assert NeedsArgs not in cache
    assert cache.extractions == 0


def test_metadata_for_rejects_non_classes(cache: ReflectionCache) -> None:
    with pytest.raises(TypeError):
        cache.metadata_for(Widget())  # type: ignore[arg-type]


def test_clear_resets_cache(cache: ReflectionCache) -> None:
    cache.metadata_for(Widget)
    cache.clear()
    assert len(cache) == 0
    assert cache.extractions == 0


def test_module_level_metadata_for_uses_shared_cache() -> None:
    assert metadata_for(Widget) is metadata_for(Widget)


def test_attribute_docs_without_source() -> None:
    Dynamic = type("Dynamic", (), {"__init__": lambda self: setattr(self, "x", 1)})
    assert attribute_docs(Dynamic) == {}
    meta = ReflectionCache().metadata_for(Dynamic)
    assert meta.properties["x"].type == Scalar("number")
