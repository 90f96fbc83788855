"""FieldSlot — 1 フィールド分の部分状態。"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum


class SlotState(StrEnum):
    """スロットの設定状態。

    UNSET はどのソースからも値が与えられていないことを表し、
    空文字列や空コレクションなど「偽値が設定された」状態とは区別される。
    """

    UNSET = "unset"
    SET = "set"


@dataclass(frozen=True, slots=True)
class FieldSlot:
    """リーフフィールドの部分状態。

    値と origin_secure は常に一体で更新される。

    Attributes:
        state: 設定状態。
        value: ソースから読み込んだ値（変換前の生の値）。
        origin_secure: 最後に値を設定したソースが secure だったか。
        materialized: デフォルト解決で設定された値か。目的の型に確定済みのため
            変換ルールを適用しない。
    """

    state: SlotState = SlotState.UNSET
    value: object = None
    origin_secure: bool = False
    materialized: bool = False

    @classmethod
    def of(cls, value: object, *, secure: bool = False) -> FieldSlot:
        """ソース由来の値を持つスロットを生成する。"""
        return cls(state=SlotState.SET, value=value, origin_secure=secure)

    @classmethod
    def resolved(cls, value: object) -> FieldSlot:
        """デフォルト値を持つスロットを生成する。デフォルトは常に secure 扱い。"""
        return cls(
            state=SlotState.SET, value=value, origin_secure=True, materialized=True
        )

    @property
    def is_set(self) -> bool:
        """値が設定されているか。"""
        return self.state is SlotState.SET

    def with_origin(self, secure: bool) -> FieldSlot:
        """origin_secure を差し替えたスロットを返す。"""
        return replace(self, origin_secure=secure)


UNSET_SLOT = FieldSlot()
"""未設定スロットの共有インスタンス。"""


__all__ = ["FieldSlot", "SlotState", "UNSET_SLOT"]
