"""ソースデータから PartialValue を構築する。

ソースアダプターが読み込んだ辞書（TOML / JSON / YAML / 環境変数 / リテラル）を
スキーマの形状に沿って部分値へ変換する。値の型検証は確定時に行い、
ここでは形状（マッピング・シーケンスの区別と未知キー）のみを検査する。
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import replace
from typing import Final

from kasane.errors import KasaneError, ShapeError
from kasane.partial._slot import FieldSlot, SlotState
from kasane.partial._value import (
    KeyedPartial,
    PartialNode,
    PartialValue,
    UnkeyedPartial,
)
from kasane.schema import FieldDescriptor, FieldKind, SchemaDescriptor

_JSON_CONTAINER_PREFIXES: Final[tuple[str, ...]] = ("[", "{")


def parse_partial(schema: SchemaDescriptor, data: object) -> PartialValue:
    """ソースデータを部分値に変換する。

    データに現れないフィールドは未設定のまま残る。

    Args:
        schema: ターゲットモデルの記述子テーブル。
        data: ソースから読み込んだ辞書。

    Returns:
        ソース 1 つ分の部分値。origin_secure はすべて False で、
        マージ時にソースの secure フラグで上書きされる。

    Raises:
        ShapeError: 未知のキー、またはマッピング・シーケンスの形状不一致。
    """
    if not isinstance(data, Mapping):
        raise ShapeError(f"expected a mapping, got {type(data).__name__}")
    nodes: dict[str, PartialNode] = {}
    for key, raw in data.items():
        descriptor = schema.lookup(str(key))
        if descriptor is None:
            raise ShapeError(
                f"unknown field for {schema.model.__name__}", path=(str(key),)
            )
        try:
            nodes[descriptor.name] = parse_node(descriptor, raw)
        except KasaneError as exc:
            exc.prepend(key)
            raise
    return PartialValue.empty(schema).updated(**nodes)


def parse_node(descriptor: FieldDescriptor, raw: object) -> PartialNode:
    """1 フィールド分のソースデータをノードに変換する。

    Raises:
        ShapeError: Skip フィールドへの書き込み、または形状不一致。
    """
    if descriptor.skip:
        raise ShapeError("field cannot be set from a source")
    if raw is None and descriptor.nullable:
        return FieldSlot.of(None)

    match descriptor.kind:
        case FieldKind.LEAF:
            return FieldSlot.of(raw)
        case FieldKind.AGGREGATE:
            value = parse_partial(descriptor.schema, _decode_json_text(raw))
            # nullable な集約への空マッピングは None ではなく値として扱う
            return replace(value, present=True) if descriptor.nullable else value
        case FieldKind.KEYED:
            return _parse_keyed(descriptor, _decode_json_text(raw))
        case FieldKind.UNKEYED:
            return _parse_unkeyed(descriptor, _decode_json_text(raw))
    raise AssertionError(f"Unhandled field kind: {descriptor.kind}")


def _parse_keyed(descriptor: FieldDescriptor, raw: object) -> KeyedPartial:
    """キー付きコレクションを変換する。"""
    if not isinstance(raw, Mapping):
        raise ShapeError(f"expected a mapping, got {type(raw).__name__}")
    entries: dict[object, PartialNode] = {}
    for key, value in raw.items():
        try:
            entries[key] = parse_node(descriptor.element, value)
        except KasaneError as exc:
            exc.prepend(key)
            raise
    return KeyedPartial(state=SlotState.SET, entries=entries)


def _parse_unkeyed(descriptor: FieldDescriptor, raw: object) -> UnkeyedPartial:
    """キーなしコレクションを変換する。文字列・マッピングはシーケンスとして扱わない。"""
    if isinstance(raw, (str, bytes, Mapping)) or not isinstance(raw, Iterable):
        raise ShapeError(f"expected a sequence, got {type(raw).__name__}")
    items: list[PartialNode] = []
    for index, value in enumerate(raw):
        try:
            items.append(parse_node(descriptor.element, value))
        except KasaneError as exc:
            exc.prepend(index)
            raise
    return UnkeyedPartial(state=SlotState.SET, items=tuple(items))


def _decode_json_text(raw: object) -> object:
    """複合フィールドに文字列が渡された場合、JSON 配列・オブジェクトとして解釈する。

    環境変数のように値が常に文字列になるソースのため。JSON として解釈できない
    文字列はそのまま返し、呼び出し側の形状検査に委ねる。
    """
    if not isinstance(raw, str):
        return raw
    text = raw.strip()
    if not text.startswith(_JSON_CONTAINER_PREFIXES):
        return raw
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return raw


__all__ = ["parse_node", "parse_partial"]
