from __future__ import annotations

from engine.reflect.doc_comments import EMPTY_BLOCK, parse_doc_block, parse_tag_line
from engine.reflect.type_grammar import ArrayOf, ObjectOf, Scalar, Union


def test_parse_tag_line_reads_type_and_description() -> None:
    tag = parse_tag_line("@type {Vector3} The position of the object.")
    assert tag is not None
    assert tag.tag == "type"
    assert tag.type == Scalar("Vector3")
    assert tag.type_text == "Vector3"
    assert tag.description == "The position of the object."


def test_parse_tag_line_balances_nested_braces() -> None:
    tag = parse_tag_line("@type {{near: number, far: number}} clipping range")
    assert tag is not None
    assert tag.type == ObjectOf({"near": Scalar("number"), "far": Scalar("number")})
    assert tag.description == "clipping range"


def test_non_tag_and_unclosed_lines_are_ignored() -> None:
    assert parse_tag_line("just prose") is None
    assert parse_tag_line("@type {number") is None


def test_parse_doc_block_strips_jsdoc_decoration() -> None:
    block = parse_doc_block(
        """/**
         * Moves the object.
         * @param {number} distance Distance to move.
         * @returns {this}
         */"""
    )
    assert block.summary == "Moves the object."
    assert [t.tag for t in block.tags] == ["param", "returns"]
    assert block.first("returns").type == Scalar("this")
    # 引数名は description の先頭語として残る
    assert block.first("param").description == "distance Distance to move."


def test_parse_doc_block_collects_repeated_tags_in_order() -> None:
    block = parse_doc_block(
        "@event {Object3D} added when added\n"
        "@event {Object3D} removed when removed\n"
        "@type {Array.<number>|string} values"
    )
    assert [t.description.split()[0] for t in block.all("event")] == ["added", "removed"]
    assert block.first("type").type == Union((ArrayOf(Scalar("number")), Scalar("string")))
    assert block.first("missing") is None


def test_empty_block() -> None:
    assert parse_doc_block(None) is EMPTY_BLOCK
    assert parse_doc_block("") is EMPTY_BLOCK
    assert not EMPTY_BLOCK
