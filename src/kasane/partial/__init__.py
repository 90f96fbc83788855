"""部分値（ビルダー）モデル。"""

from kasane.partial._parse import parse_node, parse_partial
from kasane.partial._slot import UNSET_SLOT, FieldSlot, SlotState
from kasane.partial._value import (
    KeyedPartial,
    PartialNode,
    PartialValue,
    UnkeyedPartial,
    empty_node,
    is_touched,
)

__all__ = [
    "FieldSlot",
    "KeyedPartial",
    "PartialNode",
    "PartialValue",
    "SlotState",
    "UNSET_SLOT",
    "UnkeyedPartial",
    "empty_node",
    "is_touched",
    "parse_node",
    "parse_partial",
]
