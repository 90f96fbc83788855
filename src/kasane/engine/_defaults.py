"""DefaultResolver — 全ソースのマージ後に未設定フィールドへデフォルトを適用する。

デフォルトはどのソースにも触れられていないフィールドにのみ適用される。
一部だけ設定された集約には集約全体のデフォルトを適用せず、配下へ再帰して
子フィールドのデフォルトを適用する。不足分は確定時に MissingValueError として
子のパスで報告される。
"""

from __future__ import annotations

from kasane.partial import (
    FieldSlot,
    KeyedPartial,
    PartialNode,
    PartialValue,
    UnkeyedPartial,
    is_touched,
)
from kasane.schema import FieldDescriptor


def apply_defaults(value: PartialValue) -> PartialValue:
    """デフォルト宣言を持つ未設定フィールドを埋めた部分値を返す。

    失敗しない。デフォルトを持たない未設定フィールドは未設定のまま残る。
    """
    return PartialValue(
        schema=value.schema,
        fields={
            descriptor.name: _apply_node(descriptor, value[descriptor.name])
            for descriptor in value.schema
        },
        present=value.present,
    )


def _apply_node(descriptor: FieldDescriptor, node: PartialNode) -> PartialNode:
    if not is_touched(node):
        if descriptor.default is not None:
            return FieldSlot.resolved(descriptor.default.materialize())
        if descriptor.nullable:
            return FieldSlot.resolved(None)

    if isinstance(node, PartialValue):
        return apply_defaults(node)
    if isinstance(node, KeyedPartial) and node.is_set:
        return KeyedPartial(
            state=node.state,
            entries={
                key: _apply_node(descriptor.element, entry)
                for key, entry in node.entries.items()
            },
        )
    if isinstance(node, UnkeyedPartial) and node.is_set:
        return UnkeyedPartial(
            state=node.state,
            items=tuple(_apply_node(descriptor.element, item) for item in node.items),
            origin_secure=node.origin_secure,
        )
    return node


__all__ = ["apply_defaults"]
