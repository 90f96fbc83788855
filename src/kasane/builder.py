"""ConfigBuilder — ソースを順に重ねて設定モデルを構築するドライバー。

ソースは override_with() を呼んだ順に適用され、後から適用したものが優先される。
最も優先度の低いソース（共有のデフォルトファイル等）から順に渡すこと。
"""

from __future__ import annotations

import logging
from typing import Generic, Self, TypeVar, cast

from pydantic import BaseModel

from kasane.engine import apply_defaults, finalize, merge
from kasane.errors import SecretViolationError
from kasane.partial import PartialValue
from kasane.schema import SchemaDescriptor, describe
from kasane.sources import Source

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class ConfigBuilder(Generic[M]):
    """複数ソースから設定モデル M を構築するビルダー。

    Example:
        config = (
            ConfigBuilder(AppConfig)
            .override_with(FileSource("app.toml"))
            .override_with(EnvSource("APP_", secure=True))
            .try_build()
        )
    """

    def __init__(self, model: type[M]) -> None:
        self._model = model
        self._schema = describe(model)
        self._partial = PartialValue.empty(self._schema)

    @property
    def schema(self) -> SchemaDescriptor:
        """ターゲットモデルの記述子テーブル。"""
        return self._schema

    @property
    def partial(self) -> PartialValue:
        """これまでに適用したソースをマージした部分値。"""
        return self._partial

    def override_with(self, source: Source) -> Self:
        """ソースを読み込み、蓄積済みの部分値に重ねる。

        失敗した場合、蓄積済みの部分値は変更されない。

        Args:
            source: 適用するソース。

        Returns:
            メソッドチェーン用に self を返す。

        Raises:
            SourceError: ソースの読み込み・パースに失敗した場合。
            SecretViolationError: secure でないソースがシークレットフィールドを含む場合。
        """
        incoming = source.apply(self._schema)
        secure = source.is_secure()
        try:
            self._partial = merge(self._partial, incoming, secure)
        except SecretViolationError as e:
            e.source = source.describe()
            raise
        logger.debug(
            "Applied %s to %s (secure=%s)",
            source.describe(),
            self._model.__name__,
            secure,
        )
        return self

    def try_build(self) -> M:
        """デフォルトを適用し、設定モデルを確定する。

        ビルダーの状態は変更しないため、ソースを追加して再度呼び出すことができる。

        Raises:
            MissingValueError: 必須フィールドが未設定の場合。
            ConversionError: 変換ルールまたはモデル検証が失敗した場合。
        """
        resolved = apply_defaults(self._partial)
        return cast(M, finalize(resolved))


def builder(model: type[M]) -> ConfigBuilder[M]:
    """model の空のビルダーを生成する。"""
    return ConfigBuilder(model)


def build_from_sources(model: type[M], *sources: Source) -> M:
    """sources を順に適用して model を構築する。後のソースほど優先される。

    Raises:
        KasaneError: いずれかのソースの適用、または確定に失敗した場合。
    """
    config_builder = ConfigBuilder(model)
    for source in sources:
        config_builder.override_with(source)
    return config_builder.try_build()


__all__ = ["ConfigBuilder", "build_from_sources", "builder"]
