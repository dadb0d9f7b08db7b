"""
どこで: `scene` のイベント基盤。
何を: 名前付きイベントの購読（`on`/`off`）と発火（`emit`）。
なぜ: シーンオブジェクトの変化（追加/削除/破棄）をアダプタ層へ橋渡しするため。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)


@dataclass
class SceneEvent:
    type: str
    target: Any = None
    data: dict[str, Any] = field(default_factory=dict)


Listener = Callable[[SceneEvent], None]


class EventDispatcher:
    """名前付きイベントの購読と発火。"""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def on(self, event_type, listener):
        """リスナーを登録する（同一リスナーの重複登録は無視）。

        @param {string} event_type イベント名
        @param {Function} listener `SceneEvent` を受け取る関数
        @returns {void}
        """
        bucket = self._listeners.setdefault(event_type, [])
        if listener not in bucket:
            bucket.append(listener)

    def off(self, event_type, listener):
        """リスナーを解除する（未登録なら何もしない）。

        @param {string} event_type イベント名
        @param {Function} listener 登録済みのリスナー
        @returns {void}
        """
        bucket = self._listeners.get(event_type)
        if bucket and listener in bucket:
            bucket.remove(listener)

    def has_listener(self, event_type, listener):
        """@returns {boolean} リスナーが登録済みか"""
        return listener in self._listeners.get(event_type, ())

    def emit(self, event_type, **data):
        """イベントを発火する。

        @param {string} event_type イベント名
        @returns {SceneEvent} 配送したイベント
        """
        event = SceneEvent(type=event_type, target=self, data=data)
        for listener in list(self._listeners.get(event_type, ())):
            try:
                listener(event)
            except Exception:
                logger.exception("scene listener failed: type=%s", event_type)
        return event

    # three.js 互換の別名
    add_event_listener = on
    remove_event_listener = off


__all__ = ["SceneEvent", "EventDispatcher", "Listener"]
