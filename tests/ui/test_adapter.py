from __future__ import annotations

import pytest

from engine.errors import AdapterDisposedError, ConversionError, ReflectionError
from engine.ui.adapter import AdapterFactory, TargetAdapter
from engine.ui.element import ElementEvent
from scene.events import EventDispatcher
from scene.objects import Object3D, Scene
from scene.values import Vector3


class Gadget(EventDispatcher):
    """アダプタ検証用ターゲット。

    @event {SceneEvent} moved 移動したとき
    """

    UNITS = "mm"
    """@type {string} 長さの単位"""

    def __init__(self) -> None:
        super().__init__()
        self.position = Vector3()
        """@type {Vector3} 位置"""
        self.count = 0
        """@type {number} 個数"""
        self.options = {"near": 1.0, "far": 100.0, "label": "keep"}
        """@type {{near: number, far: number}} オプション"""
        self.disposed = False
        """@type {boolean} 破棄済みか"""
        self._zoom = 1.0
        self._writes = 0

    @property
    def zoom(self):
        """@type {number} 倍率"""
        return self._zoom

    @zoom.setter
    def zoom(self, value):
        self._zoom = value

    @property
    def summary(self):
        """@type {string} 要約（読み取り専用）"""
        return f"{self.count}@{self.position}"

    def _bump(self, value):
        self._writes += 1

    dirty = property(None, _bump, doc="@type {boolean} 書き込み専用")

    def move(self, dx):
        """@param {number} dx 移動量
        @returns {this}
        """
        self.position.x += dx
        self.emit("moved", dx=dx)
        return self

    def same_but_number(self):
        """@returns {number}"""
        return self

    def twin(self):
        """@returns {Gadget} 新しいインスタンス"""
        return Gadget()

    def total(self, a, b):
        """@param {number} a
        @param {number} b
        @returns {number} 合計
        """
        return a + b

    def dispose(self):
        """@returns {void}"""
        self.disposed = True


class Plain:
    """イベント機構を持たないターゲット。

    @event {Object} never 発火しない
    """

    def __init__(self) -> None:
        self.value = 1
        """@type {number} 値"""

    def update(self):
        """アダプタ側の `update` と衝突するメソッド。"""
        return "target-update"


class Broken:
    def __init__(self, required):
        self.required = required


@pytest.fixture()
def gadget_def(factory: AdapterFactory):
    return factory.build(Gadget)


def test_build_is_memoized_and_reports_capabilities(factory: AdapterFactory, cache) -> None:
    d1 = factory.build(Gadget)
    d2 = factory.build(Gadget)
    assert d1 is d2
    assert cache.extractions == 1
    assert d1.capabilities == {"properties", "methods", "computed", "events", "statics"}
    assert d1.has("events")
    assert d1.event_prefix == "three-"
    assert set(d1.attributes) >= {"position", "count", "options", "zoom", "summary", "dirty"}
    assert d1.statics["UNITS"] == "mm"


def test_method_bindings_are_decided_at_build_time(gadget_def) -> None:
    assert gadget_def.methods["move"].return_owner_on_self is True
    assert gadget_def.methods["twin"].return_owner_on_self is True
    assert gadget_def.methods["same_but_number"].return_owner_on_self is False
    assert gadget_def.methods["total"].return_owner_on_self is False
    # アダプタ自身の API と同名のメンバーは転送しない
    assert "dispose" in gadget_def.shadowed
    assert "dispose" not in gadget_def.methods


def test_properties_are_seeded_without_pending_update(gadget_def) -> None:
    el = gadget_def.create()
    assert el.state == "constructed"
    assert el.position == Vector3()
    assert el.count == 0
    assert not el.update_pending


def test_attribute_conversion_applies_on_update(gadget_def) -> None:
    el = gadget_def.create(count="3", position="1, 2, 3")
    el.connected_callback()
    assert el.state == "bound"
    el.flush()
    assert el.state == "converted"
    assert el.target.count == 3
    assert el.target.position == Vector3(1, 2, 3)
    # アダプタ側の値は文字列のまま
    assert el.count == "3"
    el.count = "7"
    assert el.state == "observed"
    el.flush()
    assert el.target.count == 7


def test_object_type_merges_fields_and_keeps_siblings(gadget_def) -> None:
    el = gadget_def.create()
    options = el.target.options
    el.set_attribute("options", '{"near": 5}')
    el.flush()
    assert el.target.options is options
    assert options == {"near": 5, "far": 100.0, "label": "keep"}


def test_untyped_record_replaces_instead_of_merging(factory: AdapterFactory) -> None:
    el = factory.build(Object3D).create()
    el.target.user_data = {"a": 1}
    el.user_data = {"b": 2}
    el.flush()
    assert el.target.user_data == {"b": 2}


def test_failed_union_still_applies_rest_of_batch(factory: AdapterFactory) -> None:
    el = factory.build(Scene).create()
    el.background = "nope"
    el.background_intensity = "2"
    el.name = "root"
    with pytest.raises(ConversionError):
        el.flush()
    assert el.target.background is None
    assert el.target.background_intensity == 2
    assert el.target.name == "root"
    assert not el.update_pending
    assert el.state == "converted"


def test_update_complete_flushes_pending_batch(gadget_def) -> None:
    el = gadget_def.create(count="4")
    assert el.update_pending
    assert el.update_complete is True
    assert el.target.count == 4
    assert not el.update_pending


def test_chaining_returns_adapter_only_for_self_results(gadget_def) -> None:
    el = gadget_def.create()
    assert el.move(2) is el
    assert el.target.position.x == 2.0
    assert el.same_but_number() is el.target
    assert isinstance(el.twin(), Gadget)
    assert el.twin() is not el
    assert el.total(2, 3) == 5
    assert el.move.__name__ == "move"


def test_computed_proxies(gadget_def) -> None:
    el = gadget_def.create()
    el.zoom = "2.5"
    assert el.target.zoom == 2.5
    assert el.zoom == 2.5
    assert el.update_pending
    el.set_attribute("zoom", "4")
    assert el.target.zoom == 4
    with pytest.raises(AttributeError):
        el.summary = "x"
    assert el.summary == "0@Vector3(x=0, y=0, z=0)"
    el.dirty = "true"
    assert el.target._writes == 1
    with pytest.raises(AttributeError):
        el.dirty


def test_computed_writes_are_not_reapplied_on_update(gadget_def) -> None:
    el = gadget_def.create()
    el.zoom = "3"
    el.target.zoom = 9
    el.flush()
    assert el.target.zoom == 9


def test_statics_resolve_on_instances(gadget_def) -> None:
    el = gadget_def.create()
    assert el.UNITS == "mm"
    with pytest.raises(AttributeError):
        el.no_such_member
    assert "UNITS" in dir(el)


def test_events_are_bridged_with_prefix(gadget_def) -> None:
    el = gadget_def.create()
    got: list[ElementEvent] = []
    el.add_event_listener("three-moved", got.append)
    el.move(1)
    assert got == []  # 接続前は購読しない
    el.connected_callback()
    el.move(1)
    assert len(got) == 1
    assert got[0].type == "three-moved"
    assert got[0].detail.data == {"dx": 1}
    assert got[0].target is el


def test_custom_event_prefix(cache, converter) -> None:
    factory = AdapterFactory(cache=cache, converter=converter, event_prefix="x-")
    el = factory.build(Gadget).create()
    got = []
    el.add_event_listener("x-moved", got.append)
    el.connected_callback()
    el.move(1)
    assert len(got) == 1


def test_disconnect_disposes_and_blocks_further_use(gadget_def) -> None:
    el = gadget_def.create()
    target = el.target
    el.connected_callback()
    el.disconnected_callback()
    assert el.state == "disposed"
    assert el.target is None
    assert target.disposed is True
    assert not target._listeners.get("moved")
    with pytest.raises(AdapterDisposedError):
        el.count = "1"
    with pytest.raises(AdapterDisposedError):
        el.move(1)
    with pytest.raises(AdapterDisposedError):
        el.connected_callback()
    el.dispose()  # 二重破棄は no-op


def test_target_without_on_and_shadowed_members(factory: AdapterFactory) -> None:
    d = factory.build(Plain)
    assert "update" in d.shadowed
    assert "update" not in d.methods
    el = d.create(value="5")
    el.connected_callback()
    el.flush()
    assert el.target.value == 5
    assert el.target.update() == "target-update"


def test_construction_failure_propagates_from_build(factory: AdapterFactory) -> None:
    with pytest.raises(ReflectionError):
        factory.build(Broken)


def test_adapter_is_single_generic_class(factory: AdapterFactory) -> None:
    assert type(factory.build(Gadget).create()) is TargetAdapter
    assert type(factory.build(Plain).create()) is TargetAdapter
