"""MergeEngine — 部分値のマージとシークレットゲート。

後から適用したソースが常に優先される（last write wins）。呼び出し側は
低優先度のソースから順に適用する。マージは入力を変更せず新しい部分値を返すため、
失敗時に蓄積側が中途半端に更新されることはない。

シークレットゲートはスロット上書きの直前で判定する:
シークレットスコープ内（自身または祖先に Secret が付与されている）のスロットに、
secure でないソースから値が届いた場合は SecretViolationError を送出する。
"""

from __future__ import annotations

from kasane.errors import KasaneError, SecretViolationError
from kasane.partial import (
    FieldSlot,
    KeyedPartial,
    PartialNode,
    PartialValue,
    SlotState,
    UnkeyedPartial,
    empty_node,
    is_touched,
)
from kasane.schema import FieldDescriptor, FieldKind


def merge(
    accumulated: PartialValue,
    incoming: PartialValue,
    incoming_secure: bool,
) -> PartialValue:
    """incoming を accumulated に重ねた新しい部分値を返す。

    Args:
        accumulated: これまでのソースをマージした部分値。
        incoming: 今回のソースから構築した部分値。
        incoming_secure: 今回のソースが secure か。

    Returns:
        マージ済みの部分値。

    Raises:
        SecretViolationError: シークレットフィールドへの insecure な書き込み。
            パスは違反したスロット（キー・インデックスを含む）を指す。
        ValueError: 異なるモデルの部分値同士をマージしようとした場合。
    """
    if accumulated.schema.model is not incoming.schema.model:
        raise ValueError(
            f"Cannot merge {incoming.schema.model.__name__} into "
            f"{accumulated.schema.model.__name__}"
        )
    return _merge_aggregate(accumulated, incoming, incoming_secure, in_secret=False)


def _merge_aggregate(
    accumulated: PartialValue,
    incoming: PartialValue,
    secure: bool,
    *,
    in_secret: bool,
) -> PartialValue:
    nodes: dict[str, PartialNode] = {}
    for descriptor in accumulated.schema:
        try:
            nodes[descriptor.name] = _merge_node(
                descriptor,
                accumulated[descriptor.name],
                incoming[descriptor.name],
                secure,
                in_secret=in_secret or descriptor.is_secret,
            )
        except KasaneError as exc:
            exc.prepend(descriptor.name)
            raise
    return PartialValue(
        schema=accumulated.schema,
        fields=nodes,
        present=accumulated.present or incoming.present,
    )


def _merge_node(
    descriptor: FieldDescriptor,
    accumulated: PartialNode,
    incoming: PartialNode,
    secure: bool,
    *,
    in_secret: bool,
) -> PartialNode:
    """1 フィールド分のノードをマージする。"""
    if not is_touched(incoming):
        return accumulated

    # リーフの値、または nullable な複合フィールドへの明示的 None
    if isinstance(incoming, FieldSlot):
        if in_secret and not secure:
            raise SecretViolationError()
        return incoming.with_origin(secure)

    match descriptor.kind:
        case FieldKind.AGGREGATE:
            assert isinstance(incoming, PartialValue)
            # 明示的な空の集約もデータとして扱う
            if in_secret and not secure and not _has_set_child(incoming):
                raise SecretViolationError()
            base = (
                accumulated
                if isinstance(accumulated, PartialValue)
                else PartialValue.empty(descriptor.schema)
            )
            return _merge_aggregate(base, incoming, secure, in_secret=in_secret)
        case FieldKind.KEYED:
            assert isinstance(incoming, KeyedPartial)
            base = accumulated if isinstance(accumulated, KeyedPartial) else KeyedPartial()
            return _merge_keyed(descriptor, base, incoming, secure, in_secret=in_secret)
        case FieldKind.UNKEYED:
            assert isinstance(incoming, UnkeyedPartial)
            return _replace_unkeyed(descriptor, incoming, secure, in_secret=in_secret)
    raise AssertionError(f"Unexpected node for {descriptor.kind} field: {incoming!r}")


def _has_set_child(value: PartialValue) -> bool:
    return any(is_touched(child) for child in value.fields.values())


def _merge_keyed(
    descriptor: FieldDescriptor,
    accumulated: KeyedPartial,
    incoming: KeyedPartial,
    secure: bool,
    *,
    in_secret: bool,
) -> KeyedPartial:
    """キー単位の和集合を取り、両側にあるキーは再帰的にマージする。"""
    # 明示的な空マップもデータとして扱う
    if in_secret and not secure and not incoming.entries:
        raise SecretViolationError()
    element = descriptor.element
    entries = dict(accumulated.entries)
    for key, node in incoming.entries.items():
        current = entries.get(key)
        try:
            entries[key] = _merge_node(
                element,
                current if current is not None else empty_node(element),
                node,
                secure,
                in_secret=in_secret or element.is_secret,
            )
        except KasaneError as exc:
            exc.prepend(key)
            raise
    return KeyedPartial(state=SlotState.SET, entries=entries)


def _replace_unkeyed(
    descriptor: FieldDescriptor,
    incoming: UnkeyedPartial,
    secure: bool,
    *,
    in_secret: bool,
) -> UnkeyedPartial:
    """incoming で丸ごと置換する。

    要素は識別子を持たないため要素単位のマージは行わない。各要素を空ノードへ
    マージし直すことで、要素内のシークレット検査と origin の付け替えを行う。
    """
    if in_secret and not secure and not incoming.items:
        raise SecretViolationError()
    element = descriptor.element
    items: list[PartialNode] = []
    for index, node in enumerate(incoming.items):
        try:
            items.append(
                _merge_node(
                    element,
                    empty_node(element),
                    node,
                    secure,
                    in_secret=in_secret or element.is_secret,
                )
            )
        except KasaneError as exc:
            exc.prepend(index)
            raise
    return UnkeyedPartial(state=SlotState.SET, items=tuple(items), origin_secure=secure)


__all__ = ["merge"]
