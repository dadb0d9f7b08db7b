"""共通フィクスチャ。

- 値型（`scene.values`）の登録を保証
- 隔離されたリフレクションキャッシュ/ファクトリ
- 環境変数に依存する設定の差し替え
"""

from __future__ import annotations

from typing import Iterator

import pytest

import scene  # noqa: F401  値型を既定コンストラクタ表へ登録
from common import settings
from engine.convert.value_converter import ValueConverter
from engine.reflect.cache import ReflectionCache
from engine.reflect.type_grammar import clear_parse_cache
from engine.ui.adapter import AdapterFactory
from engine.ui.components import clear_components


@pytest.fixture()
def cache() -> ReflectionCache:
    return ReflectionCache()


@pytest.fixture()
def converter() -> ValueConverter:
    return ValueConverter()


@pytest.fixture()
def factory(cache: ReflectionCache, converter: ValueConverter) -> AdapterFactory:
    return AdapterFactory(cache=cache, converter=converter)


@pytest.fixture()
def clean_components() -> Iterator[None]:
    clear_components()
    yield
    clear_components()


@pytest.fixture()
def env_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[object]:
    """`TREI_*` を設定して `reload()` で反映する。終了時に既定へ戻す。"""

    class _Env:
        def set(self, name: str, value: str) -> None:
            monkeypatch.setenv(name, value)

        def reload(self) -> None:
            settings.reload_from_env()
            clear_parse_cache()

    yield _Env()
    monkeypatch.undo()
    settings.reload_from_env()
    clear_parse_cache()
