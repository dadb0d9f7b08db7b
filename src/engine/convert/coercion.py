"""
どこで: `engine.convert` のスカラー強制変換。
何を: `number` / `boolean` / `string` への厳密な強制と、カンマ区切り成分の数値化。
なぜ: 変換失敗を `ValueError` として明示し、union の候補試行で次候補へ進めるようにするため。
"""

from __future__ import annotations

import math
import numbers
from typing import Any, Iterable

import numpy as np

from common.env import parse_bool_token


def coerce_number(value: Any) -> int | float:
    """数値へ強制する（整数表記は int、それ以外は float）。

    例外:
    - ValueError: 数値として解釈できない場合（空文字・非数値文字列・None など）。
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real):
        return float(value)
    if not isinstance(value, str):
        raise ValueError(f"not a number: {value!r}")
    text = value.strip()
    try:
        return int(text, 10)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        raise ValueError(f"not a number: {value!r}") from None
    if math.isnan(number) and text.lower() != "nan":
        raise ValueError(f"not a number: {value!r}")
    return number


def coerce_boolean(value: Any) -> bool:
    """真偽値へ強制する（`true/1/yes/on`・`false/0/no/off/""`）。"""
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, numbers.Real):
        return value != 0
    if isinstance(value, str):
        parsed = parse_bool_token(value)
        if parsed is not None:
            return parsed
    raise ValueError(f"not a boolean: {value!r}")


def coerce_string(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def split_components(text: str) -> list[str]:
    """カンマ区切りの成分を trim して返す（空文字は 0 成分）。"""
    parts = [p.strip() for p in text.split(",")]
    return [] if parts == [""] else parts


def numeric_components(value: Any) -> list[int | float]:
    """文字列または数値列から数値成分列を得る。"""
    if isinstance(value, str):
        items: Iterable[Any] = split_components(value)
    elif isinstance(value, np.ndarray):
        items = value.ravel().tolist()
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        raise ValueError(f"cannot split {value!r} into numeric components")
    return [coerce_number(v) for v in items]


__all__ = [
    "coerce_number",
    "coerce_boolean",
    "coerce_string",
    "split_components",
    "numeric_components",
]
