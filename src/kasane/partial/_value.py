"""PartialValue とコレクションの部分状態。

部分値はターゲットモデルと同型の木構造で、各ノードは次のいずれか:

- FieldSlot: リーフ（および nullable な複合フィールドの明示的 None）
- PartialValue: ネストした集約
- KeyedPartial: キー付きコレクション（マップ）
- UnkeyedPartial: キーなしコレクション（シーケンス・集合）

ノードは不変で、マージは新しい木を構築する。
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TypeAlias

from kasane.partial._slot import UNSET_SLOT, FieldSlot, SlotState
from kasane.schema import FieldDescriptor, FieldKind, SchemaDescriptor


@dataclass(frozen=True)
class PartialValue:
    """集約の部分状態。フィールド構成は生成後に変化しない。

    Attributes:
        schema: 対応するモデルの記述子テーブル。
        fields: フィールド名から子ノードへの読み取り専用マッピング。
        present: ソースが集約を明示的に与えたか。nullable な集約への空マッピングは
            子が未設定でも値（None ではない）として扱われる。
    """

    schema: SchemaDescriptor
    fields: Mapping[str, PartialNode]
    present: bool = False

    def __post_init__(self) -> None:
        missing = set(self.schema.names) - set(self.fields)
        if missing:
            raise ValueError(
                f"Partial value for {self.schema.model.__name__} is missing "
                f"fields: {', '.join(sorted(missing))}"
            )
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @classmethod
    def empty(cls, schema: SchemaDescriptor) -> PartialValue:
        """全フィールドが未設定の部分値を生成する。"""
        return cls(
            schema=schema,
            fields={descriptor.name: empty_node(descriptor) for descriptor in schema},
        )

    def __getitem__(self, name: str) -> PartialNode:
        return self.fields[name]

    def updated(self, **nodes: PartialNode) -> PartialValue:
        """指定フィールドのノードを差し替えた部分値を返す。

        Raises:
            KeyError: スキーマに存在しないフィールド名が指定された場合。
        """
        for name in nodes:
            if name not in self.fields:
                raise KeyError(name)
        return replace(self, fields={**self.fields, **nodes})


@dataclass(frozen=True)
class KeyedPartial:
    """キー付きコレクションの部分状態。

    明示的に空のマップが与えられた場合も SET となり、デフォルト適用を抑止する。
    """

    state: SlotState = SlotState.UNSET
    entries: Mapping[object, PartialNode] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))

    @property
    def is_set(self) -> bool:
        """値が設定されているか。"""
        return self.state is SlotState.SET


@dataclass(frozen=True)
class UnkeyedPartial:
    """キーなしコレクションの部分状態。マージ時は丸ごと置換される。"""

    state: SlotState = SlotState.UNSET
    items: tuple[PartialNode, ...] = ()
    origin_secure: bool = False

    @property
    def is_set(self) -> bool:
        """値が設定されているか。"""
        return self.state is SlotState.SET


PartialNode: TypeAlias = "FieldSlot | PartialValue | KeyedPartial | UnkeyedPartial"


def empty_node(descriptor: FieldDescriptor) -> PartialNode:
    """フィールドの未設定ノードを生成する。

    nullable な複合フィールドは、自己参照モデルの無限展開を避けるため
    未設定スロットとして生成し、データが届いた時点で展開する。
    """
    if descriptor.kind is FieldKind.LEAF or descriptor.nullable:
        return UNSET_SLOT
    match descriptor.kind:
        case FieldKind.AGGREGATE:
            return PartialValue.empty(descriptor.schema)
        case FieldKind.KEYED:
            return KeyedPartial()
        case FieldKind.UNKEYED:
            return UnkeyedPartial()
    raise AssertionError(f"Unhandled field kind: {descriptor.kind}")


def is_touched(node: PartialNode) -> bool:
    """ノードがいずれかのソースから値を受け取っているか判定する。

    集約は明示的に与えられたか、配下のいずれかのフィールドが設定されていれば
    touched とみなす。
    """
    if isinstance(node, PartialValue):
        return node.present or any(is_touched(child) for child in node.fields.values())
    return node.is_set


__all__ = [
    "KeyedPartial",
    "PartialNode",
    "PartialValue",
    "UnkeyedPartial",
    "empty_node",
    "is_touched",
]
