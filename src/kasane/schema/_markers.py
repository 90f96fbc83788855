"""スキーマ宣言用の Annotated マーカー。

``Annotated[str, Secret()]`` のようにフィールド型に付与して使用する。
pydantic は未知のメタデータを無視するため、モデル定義自体の検証には影響しない。
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from functools import cached_property
from typing import Any

from pydantic import TypeAdapter


@dataclass(frozen=True)
class Secret:
    """secure なソースからのみ書き込みを許可するフィールド。

    集約やコレクションに付与した場合、配下の全フィールドが対象になる。
    """


@dataclass(frozen=True)
class Skip:
    """ソースから読み込まないフィールド。常にデフォルト値を取る。"""


@dataclass(frozen=True)
class Convert:
    """中間型としてパースし、確定時に目的の型へ変換するルール。

    Attributes:
        raw_type: ソースから読み込む中間型。フィールドの形状はこの型で決まる。
        func: 中間値を目的の値へ変換する関数。送出した例外はすべて
            ConversionError として報告される。
    """

    raw_type: Any
    func: Callable[[Any], Any]

    @cached_property
    def adapter(self) -> TypeAdapter[Any]:
        """中間型の TypeAdapter。"""
        return TypeAdapter(self.raw_type)

    def apply(self, raw: object, *, validate: bool) -> object:
        """中間値を変換する。

        Args:
            raw: 中間値。
            validate: True の場合、変換前に中間型として検証する。
                集約・コレクションは確定時に検証済みのため False を渡す。

        Raises:
            pydantic.ValidationError: 中間型の検証に失敗した場合。
            Exception: 変換関数が送出した例外をそのまま伝播する。
        """
        value = self.adapter.validate_python(raw) if validate else raw
        return self.func(value)


__all__ = ["Convert", "Secret", "Skip"]
