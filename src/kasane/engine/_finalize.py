"""Finalizer — デフォルト解決済みの部分値を不変の設定モデルへ確定する。

エラーはフィールド宣言順で最初に見つかったものを送出する。各階層を巻き戻る際に
パスセグメントが先頭へ追加される。
"""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, ValidationError

from kasane.errors import ConversionError, KasaneError, MissingValueError
from kasane.partial import (
    FieldSlot,
    KeyedPartial,
    PartialNode,
    PartialValue,
    UnkeyedPartial,
)
from kasane.schema import FieldDescriptor, FieldKind


def finalize(value: PartialValue) -> BaseModel:
    """部分値から設定モデルを構築する。

    Args:
        value: デフォルト解決済みの部分値。

    Returns:
        value.schema.model のインスタンス。

    Raises:
        MissingValueError: 未設定のまま残った必須フィールドがある場合。
        ConversionError: 変換ルールまたはモデル検証が失敗した場合。
    """
    data: dict[str, object] = {}
    for descriptor in value.schema:
        try:
            data[descriptor.input_key] = _finalize_node(descriptor, value[descriptor.name])
        except KasaneError as exc:
            exc.prepend(descriptor.name)
            raise
    try:
        return value.schema.model.model_validate(data)
    except ValidationError as exc:
        raise _from_validation_error(exc) from exc


def _finalize_node(descriptor: FieldDescriptor, node: PartialNode) -> object:
    if isinstance(node, FieldSlot):
        if not node.is_set:
            raise MissingValueError()
        if node.materialized or (node.value is None and descriptor.nullable):
            return node.value
        if descriptor.kind is not FieldKind.LEAF:
            raise AssertionError(
                f"Unexpected slot for {descriptor.kind} field: {node!r}"
            )
        return _convert(descriptor, node.value)

    if isinstance(node, PartialValue):
        return _convert(descriptor, finalize(node))

    if isinstance(node, KeyedPartial):
        if not node.is_set:
            raise MissingValueError()
        return _convert(descriptor, _finalize_entries(descriptor, node.entries))

    if isinstance(node, UnkeyedPartial):
        if not node.is_set:
            raise MissingValueError()
        items: list[object] = []
        for index, item in enumerate(node.items):
            try:
                items.append(_finalize_node(descriptor.element, item))
            except KasaneError as exc:
                exc.prepend(index)
                raise
        container = descriptor.container or list
        return _convert(descriptor, container(items))

    raise AssertionError(f"Unknown partial node: {node!r}")


def _finalize_entries(
    descriptor: FieldDescriptor, entries: Mapping[object, PartialNode]
) -> dict[object, object]:
    result: dict[object, object] = {}
    for key, entry in entries.items():
        try:
            result[key] = _finalize_node(descriptor.element, entry)
        except KasaneError as exc:
            exc.prepend(key)
            raise
    return result


def _convert(descriptor: FieldDescriptor, raw: object) -> object:
    """変換ルールがあれば適用する。リーフのみ中間型で検証してから変換する。"""
    if descriptor.converter is None:
        return raw
    try:
        return descriptor.converter.apply(
            raw, validate=descriptor.kind is FieldKind.LEAF
        )
    except Exception as exc:
        raise ConversionError(str(exc) or type(exc).__name__) from exc


def _from_validation_error(exc: ValidationError) -> ConversionError:
    """pydantic の検証エラーを、最初のエラー位置をパスとする ConversionError に変換する。"""
    errors = exc.errors()
    if not errors:
        return ConversionError(str(exc))
    first = errors[0]
    return ConversionError(first["msg"], path=(str(part) for part in first["loc"]))


__all__ = ["finalize"]
