"""
どこで: `common.settings`
何を: プロジェクトの環境変数（`TREI_*`）を型付きで一元管理し、起動時に読み込む。
なぜ: `os.getenv` の散在を解消し、既定値/型の一貫性とテスト容易性を高めるため。
"""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_bool, env_int, env_str


@dataclass
class _Settings:
    # アダプタ
    EVENT_PREFIX: str = "three-"
    TAG_PREFIX: str = "three-"

    # 型文法
    TYPE_NAIVE_UNION_SPLIT: bool = False
    TYPE_CACHE_MAXSIZE: int = 512

    # Misc
    DEBUG_CONVERSIONS: bool = False


_settings = _Settings()


def reload_from_env() -> None:
    """環境変数から設定を再読込。

    - bool は `env_bool`、int は `env_int`、文字列は `env_str` を使用。
    - キャッシュサイズは下限 0 に丸める。
    """
    _settings.EVENT_PREFIX = env_str("TREI_EVENT_PREFIX", "three-")
    _settings.TAG_PREFIX = env_str("TREI_TAG_PREFIX", "three-")

    _settings.TYPE_NAIVE_UNION_SPLIT = env_bool("TREI_TYPE_NAIVE_UNION_SPLIT", False)
    _settings.TYPE_CACHE_MAXSIZE = env_int("TREI_TYPE_CACHE_MAXSIZE", 512, min_value=0) or 0

    _settings.DEBUG_CONVERSIONS = env_bool("TREI_DEBUG_CONVERSIONS", False)


def get() -> _Settings:
    """現在の設定スナップショットを返す。"""
    return _settings


# 初期ロード
reload_from_env()


__all__ = ["get", "reload_from_env", "_Settings"]
