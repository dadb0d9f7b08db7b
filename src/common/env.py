"""
どこで: `common.env`
何を: 環境変数の軽量パースヘルパを提供。
なぜ: 各所に散在する `os.getenv` + 例外/境界ガードを簡素化するため。
"""

from __future__ import annotations

import os
from typing import Optional

TRUE_TOKENS = frozenset({"true", "t", "yes", "y", "on", "1"})
FALSE_TOKENS = frozenset({"false", "f", "no", "n", "off", "0", ""})


def parse_bool_token(raw: str) -> bool | None:
    """真偽トークンを解釈する（解釈不能なら None）。

    値変換（`boolean` 型）と環境変数の双方で同じ受理集合を使う。
    """
    s = raw.strip().lower()
    if s in TRUE_TOKENS:
        return True
    if s in FALSE_TOKENS:
        return False
    return None


def env_int(
    name: str, default: Optional[int] = None, *, min_value: Optional[int] = None
) -> Optional[int]:
    """整数環境変数を取得（存在しない/不正値は既定値）。

    Parameters
    ----------
    name : str
        環境変数名。
    default : Optional[int]
        既定値（`None` を渡すと `None` を許容）。
    min_value : Optional[int]
        下限（指定時、結果が下回れば下限に丸める）。

    Returns
    -------
    Optional[int]
        取得した整数値。未設定/不正時は `default` を返す。
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        val = int(raw)
    except ValueError:
        return default
    if min_value is not None and val < min_value:
        val = min_value
    return val


def env_bool(name: str, default: bool = False) -> bool:
    """真偽環境変数を取得（0/1, true/false を許容）。"""
    raw = os.getenv(name)
    if raw is None:
        return bool(default)
    try:
        # 数値優先
        return int(raw) != 0
    except ValueError:
        parsed = parse_bool_token(raw)
        return bool(default) if parsed is None else parsed


def env_str(name: str, default: str) -> str:
    """文字列環境変数を取得（未設定は既定値。空文字は有効値として扱う）。"""
    raw = os.getenv(name)
    return default if raw is None else raw


__all__ = ["env_int", "env_bool", "env_str", "parse_bool_token", "TRUE_TOKENS", "FALSE_TOKENS"]
