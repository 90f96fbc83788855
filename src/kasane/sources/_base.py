"""Source — 外部媒体から部分値を供給するアダプターの基底クラス。"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Self

from kasane.errors import ShapeError, SourceError
from kasane.partial import PartialValue, parse_partial
from kasane.schema import SchemaDescriptor


class Source(ABC):
    """設定ソースの基底クラス。

    サブクラスは provide() で生の設定辞書を返し、describe() でエラーメッセージ用の
    説明を返す。ターゲットの形状に応じて辞書を整形する場合は shape() を上書きする。シークレットを含めてよいソースは secure=True で生成するか
    allow_secrets() を呼び出して明示的に許可する。
    """

    def __init__(self, *, secure: bool = False) -> None:
        self._secure = secure

    def allow_secrets(self) -> Self:
        """このソースをシークレットの供給元として許可する。"""
        self._secure = True
        return self

    def is_secure(self) -> bool:
        """シークレットフィールドへの書き込みが許可されているか。"""
        return self._secure

    @abstractmethod
    def provide(self) -> Mapping[str, object]:
        """外部媒体から設定辞書を読み込む。

        Raises:
            OSError: 読み込みに失敗した場合。
            ValueError: パースに失敗した場合。
        """

    @abstractmethod
    def describe(self) -> str:
        """エラーメッセージ・ログ用のソース説明。"""

    def shape(
        self, document: Mapping[str, object], schema: SchemaDescriptor
    ) -> Mapping[str, object]:
        """provide() の結果をパース前に整形する。既定では何もしない。"""
        return document

    def apply(self, schema: SchemaDescriptor) -> PartialValue:
        """ターゲットの形状に沿って部分値を構築する。

        Args:
            schema: ターゲットモデルの記述子テーブル。

        Returns:
            このソース 1 つ分の部分値。

        Raises:
            SourceError: 読み込み・パース・形状照合のいずれかに失敗した場合。
                元の例外は ``__cause__`` に保持される。
        """
        try:
            return parse_partial(schema, self.shape(self.provide(), schema))
        except (OSError, ValueError, ShapeError) as e:
            raise SourceError(self.describe(), str(e)) from e

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.describe()} secure={self.is_secure()}>"
