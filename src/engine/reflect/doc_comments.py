"""
どこで: `engine.reflect` のドキュメント解析層。
何を: ドキュメントブロックから `@tag {type} description` を `DocTag` として抽出する。
なぜ: 実行時に型情報を持たないメンバーの形（型・イベント・戻り値）をドキュメントから回収するため。

受理する行の形:
    @type {Vector3} The position of the object.
    @param {number} distance Distance to move.
    @returns {this}
    @event {Object3D} added Fired when the object is added to a parent.

JSDoc からの貼り付けを想定し、行頭の `*` や `/**`, `*/` は無視する。
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from .type_grammar import TypeDescriptor, parse_type

_TAG_RE = re.compile(r"@(\w+)\s*\{")
_DECORATION_RE = re.compile(r"^\s*(/\*\*+|\*/|\*)?\s?")


@dataclass(frozen=True)
class DocTag:
    tag: str
    type: TypeDescriptor
    type_text: str
    description: str


@dataclass(frozen=True)
class DocBlock:
    """1 つのドキュメントブロックの解析結果。"""

    summary: str = ""
    tags: tuple[DocTag, ...] = field(default_factory=tuple)

    def first(self, tag: str) -> DocTag | None:
        for t in self.tags:
            if t.tag == tag:
                return t
        return None

    def all(self, tag: str) -> list[DocTag]:
        return [t for t in self.tags if t.tag == tag]

    def __bool__(self) -> bool:
        return bool(self.summary or self.tags)


EMPTY_BLOCK = DocBlock()


def _read_braced(line: str, open_index: int) -> tuple[str, int] | None:
    """`line[open_index] == "{"` から対応する `}` までを読み、(中身, 次位置) を返す。"""
    depth = 0
    for i in range(open_index, len(line)):
        ch = line[i]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return line[open_index + 1 : i], i + 1
    return None


def parse_tag_line(line: str) -> DocTag | None:
    """1 行から `DocTag` を取り出す（タグ行でなければ None）。"""
    m = _TAG_RE.search(line)
    if m is None:
        return None
    braced = _read_braced(line, m.end() - 1)
    if braced is None:
        return None
    type_text, rest = braced
    type_text = type_text.strip()
    return DocTag(
        tag=m.group(1),
        type=parse_type(type_text),
        type_text=type_text,
        description=line[rest:].strip(),
    )


def parse_doc_block(text: str | None) -> DocBlock:
    """ドキュメントブロック全体を解析する。

    - タグ行は出現順に `tags` へ。
    - 最初の非タグ・非空行を `summary` とする。
    """
    if not text:
        return EMPTY_BLOCK
    summary = ""
    tags: list[DocTag] = []
    for raw in text.splitlines():
        line = _DECORATION_RE.sub("", raw, count=1).rstrip()
        if not line.strip():
            continue
        tag = parse_tag_line(line)
        if tag is not None:
            tags.append(tag)
        elif not summary and not line.lstrip().startswith("@"):
            summary = line.strip()
    return DocBlock(summary=summary, tags=tuple(tags))


__all__ = ["DocTag", "DocBlock", "EMPTY_BLOCK", "parse_tag_line", "parse_doc_block"]
