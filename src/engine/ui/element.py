"""
どこで: `engine.ui` のリアクティブ要素基底。
何を: 宣言プロパティ・属性⇄プロパティ反映・変更のバッチ通知・接続ライフサイクル・イベント配送。
なぜ: アダプタが依存する UI コンポーネント基底の最小契約を、描画やテンプレートと切り離して提供するため。

補足:
- 更新は協調的・同期的。`request_update()` で変更を蓄積し、`perform_update()` が 1 バッチとして
  `update(changed)` → (`first_updated`) → `updated(changed)` を呼ぶ。
- `changed` は「プロパティ名 → バッチ内で最初に観測された旧値」。配送順は変更が起きた順。
- `update()` 中に発生した変更は次のバッチに入る。
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

logger = logging.getLogger(__name__)


@dataclass
class ElementEvent:
    """要素から配送されるイベント。"""

    type: str
    detail: Any = None
    target: Any = None
    bubbles: bool = True


EventListener = Callable[[ElementEvent], None]
Subscriber = Callable[[Iterable[str]], None]


def _has_changed(old: Any, new: Any) -> bool:
    if old is new:
        return False
    try:
        return bool(old != new)
    except Exception:  # ndarray 等の曖昧な比較は変更扱い
        return True


class ReactiveElement:
    """属性反映とバッチ更新を持つ要素の基底。"""

    def __init__(self) -> None:
        self._declared: dict[str, str | None] = {}
        self._values: dict[str, Any] = {}
        self._attributes: dict[str, str] = {}
        self._changed: dict[str, Any] = {}
        self._listeners: defaultdict[str, list[EventListener]] = defaultdict(list)
        self._subscribers: list[Subscriber] = []
        self._has_updated = False
        self._connected = False

    # --- 宣言 ---
    def declare_property(self, name: str, *, attribute: bool | str = True) -> None:
        """プロパティを宣言する（`attribute=True` なら小文字名の属性と反映）。"""
        if attribute is True:
            attr_name: str | None = name.lower()
        elif attribute:
            attr_name = str(attribute).lower()
        else:
            attr_name = None
        self._declared[name] = attr_name

    def declared_properties(self) -> tuple[str, ...]:
        return tuple(self._declared)

    def _property_for_attribute(self, attr_name: str) -> str | None:
        for prop, attr in self._declared.items():
            if attr == attr_name:
                return prop
        return None

    # --- プロパティ ---
    def get_property(self, name: str) -> Any:
        return self._values.get(name)

    def set_property(self, name: str, value: Any) -> None:
        """値を保存し、変化があれば更新を要求する。"""
        old = self._values.get(name)
        self._values[name] = value
        if _has_changed(old, value):
            self.request_update(name, old)

    def _seed_property(self, name: str, value: Any) -> None:
        """更新要求を出さずに初期値を置く。"""
        self._values[name] = value

    def request_update(self, name: str | None = None, old_value: Any = None) -> None:
        if name is not None and name not in self._changed:
            self._changed[name] = old_value

    @property
    def update_pending(self) -> bool:
        return bool(self._changed)

    @property
    def has_updated(self) -> bool:
        return self._has_updated

    def perform_update(self) -> bool:
        """蓄積された変更を 1 バッチとして配送する（変更なしなら False）。"""
        if not self._changed:
            return False
        changed = self._changed
        self._changed = {}
        self.update(changed)
        first = not self._has_updated
        self._has_updated = True
        if first:
            self.first_updated(changed)
        self.updated(changed)
        self._notify(changed.keys())
        return True

    def flush(self, max_rounds: int = 16) -> int:
        """変更が尽きるまで `perform_update()` を繰り返し、配送したバッチ数を返す。"""
        rounds = 0
        while rounds < max_rounds and self.perform_update():
            rounds += 1
        return rounds

    @property
    def update_complete(self) -> bool:
        """保留中の変更を配送し切ったか（読むと `flush()` を行う）。

        `update()` が変更を出し続ける場合は `flush()` の上限で打ち切られ、False を返す。
        """
        self.flush()
        return not self._changed

    # --- ライフサイクルフック（派生で上書き） ---
    def update(self, changed: Mapping[str, Any]) -> None:
        pass

    def first_updated(self, changed: Mapping[str, Any]) -> None:
        pass

    def updated(self, changed: Mapping[str, Any]) -> None:
        pass

    def connected_callback(self) -> None:
        self._connected = True

    def disconnected_callback(self) -> None:
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    # --- 属性（常に文字列） ---
    def set_attribute(self, name: str, value: Any) -> None:
        attr_name = name.lower()
        text = value if isinstance(value, str) else str(value)
        self._attributes[attr_name] = text
        prop = self._property_for_attribute(attr_name)
        if prop is not None:
            self.set_property(prop, text)

    def get_attribute(self, name: str) -> str | None:
        return self._attributes.get(name.lower())

    def has_attribute(self, name: str) -> bool:
        return name.lower() in self._attributes

    def remove_attribute(self, name: str) -> None:
        attr_name = name.lower()
        if self._attributes.pop(attr_name, None) is None:
            return
        prop = self._property_for_attribute(attr_name)
        if prop is not None:
            self.set_property(prop, None)

    # --- イベント ---
    def add_event_listener(self, event_type: str, listener: EventListener) -> None:
        self._listeners[event_type].append(listener)

    def remove_event_listener(self, event_type: str, listener: EventListener) -> None:
        try:
            self._listeners[event_type].remove(listener)
        except ValueError:
            pass

    def dispatch_event(self, event: ElementEvent | str, detail: Any = None) -> ElementEvent:
        if isinstance(event, str):
            event = ElementEvent(type=event, detail=detail)
        event.target = self
        for listener in list(self._listeners.get(event.type, ())):
            try:
                listener(event)
            except Exception:
                logger.exception("event listener failed: type=%s", event.type)
        return event

    # --- 変更購読 ---
    def subscribe(self, listener: Subscriber) -> None:
        self._subscribers.append(listener)

    def unsubscribe(self, listener: Subscriber) -> None:
        try:
            self._subscribers.remove(listener)
        except ValueError:
            pass

    def _notify(self, names: Iterable[str]) -> None:
        ids = list(names)
        if not ids:
            return
        for listener in list(self._subscribers):
            try:
                listener(ids)
            except Exception:
                logger.exception("change subscriber failed")


__all__ = ["ElementEvent", "ReactiveElement", "EventListener", "Subscriber"]
