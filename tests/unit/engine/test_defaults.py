"""DefaultResolver のテスト。"""

from __future__ import annotations

from pydantic import Field

from kasane.engine import apply_defaults
from kasane.models import KasaneBaseModel
from kasane.partial import (
    FieldSlot,
    PartialValue,
    UnkeyedPartial,
    parse_partial,
)
from kasane.schema import describe


class Limits(KasaneBaseModel):
    soft: int
    hard: int = 100


class Worker(KasaneBaseModel):
    name: str
    threads: int = 4
    limits: Limits = Field(default_factory=lambda: Limits(soft=1, hard=2))
    required_limits: Limits
    queues: list[str] = Field(default_factory=lambda: ["default"])
    comment: str | None
    parent: Limits | None = None


def _resolved(data: dict[str, object]) -> PartialValue:
    return apply_defaults(parse_partial(describe(Worker), data))


class TestApplyDefaults:
    """未設定フィールドへのデフォルト適用。"""

    def test_untouched_leaf_gets_default(self) -> None:
        assert _resolved({})["threads"] == FieldSlot.resolved(4)

    def test_untouched_leaf_without_default_stays_unset(self) -> None:
        assert _resolved({})["name"].is_set is False

    def test_set_leaf_is_not_overridden(self) -> None:
        assert _resolved({"threads": 8})["threads"] == FieldSlot.of(8)

    def test_untouched_aggregate_gets_whole_default(self) -> None:
        assert _resolved({})["limits"] == FieldSlot.resolved(Limits(soft=1, hard=2))

    def test_partially_set_aggregate_is_not_replaced(self) -> None:
        """一部だけ設定された集約には集約のデフォルトを適用しない。"""
        limits = _resolved({"limits": {"hard": 50}})["limits"]
        assert isinstance(limits, PartialValue)
        assert limits["hard"] == FieldSlot.of(50)
        assert limits["soft"].is_set is False

    def test_aggregate_without_default_gets_child_defaults(self) -> None:
        required_limits = _resolved({})["required_limits"]
        assert isinstance(required_limits, PartialValue)
        assert required_limits["hard"] == FieldSlot.resolved(100)
        assert required_limits["soft"].is_set is False

    def test_untouched_collection_gets_default(self) -> None:
        assert _resolved({})["queues"] == FieldSlot.resolved(["default"])

    def test_explicit_empty_collection_suppresses_default(self) -> None:
        queues = _resolved({"queues": []})["queues"]
        assert isinstance(queues, UnkeyedPartial)
        assert queues.is_set is True
        assert queues.items == ()

    def test_nullable_without_default_resolves_to_none(self) -> None:
        assert _resolved({})["comment"] == FieldSlot.resolved(None)

    def test_nullable_aggregate_default(self) -> None:
        assert _resolved({})["parent"] == FieldSlot.resolved(None)

    def test_nullable_aggregate_with_data_gets_child_defaults(self) -> None:
        parent = _resolved({"parent": {"soft": 5}})["parent"]
        assert isinstance(parent, PartialValue)
        assert parent["hard"] == FieldSlot.resolved(100)

    def test_explicit_empty_nullable_aggregate_is_not_defaulted(self) -> None:
        parent = _resolved({"parent": {}})["parent"]
        assert isinstance(parent, PartialValue)
        assert parent.present is True
        assert parent["soft"].is_set is False
        assert parent["hard"] == FieldSlot.resolved(100)

    def test_defaults_are_fresh_per_call(self) -> None:
        first = _resolved({})["queues"]
        second = _resolved({})["queues"]
        assert isinstance(first, FieldSlot)
        assert isinstance(second, FieldSlot)
        assert first.value is not second.value

    def test_input_is_not_mutated(self) -> None:
        value = parse_partial(describe(Worker), {})
        apply_defaults(value)
        assert value["threads"].is_set is False
