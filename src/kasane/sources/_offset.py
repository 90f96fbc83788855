"""OffsetSource — 別ソースの内容をネストした位置に配置する。"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Self

from kasane.schema import FieldKind, SchemaDescriptor
from kasane.sources._base import Source


class OffsetSource(Source):
    """inner の設定辞書を path の位置に配置する。

    例えばデータベース設定だけを持つファイルを ``database`` フィールドへ読み込む場合、
    ``OffsetSource(FileSource("db.toml"), "database")`` とする。
    secure フラグは inner のものを引き継ぐ。inner の整形（shape）は path が指す
    位置の子スキーマに対して行われる。

    Raises:
        ValueError: path が空の場合。
    """

    def __init__(self, inner: Source, *path: str) -> None:
        if not path:
            raise ValueError("OffsetSource requires at least one path segment")
        super().__init__(secure=inner.is_secure())
        self.inner = inner
        self.path = path

    def allow_secrets(self) -> Self:
        self.inner.allow_secrets()
        return self

    def is_secure(self) -> bool:
        return self.inner.is_secure()

    def provide(self) -> Mapping[str, object]:
        return self._nest(self.inner.provide())

    def shape(
        self, document: Mapping[str, object], schema: SchemaDescriptor
    ) -> Mapping[str, object]:
        target = schema
        inner_document = document
        for segment in self.path:
            descriptor = target.lookup(segment)
            child = inner_document.get(segment)
            # 形状の不一致はパース時に ShapeError として報告される
            if (
                descriptor is None
                or descriptor.kind is not FieldKind.AGGREGATE
                or not isinstance(child, Mapping)
            ):
                return document
            target = descriptor.schema
            inner_document = child
        return self._nest(self.inner.shape(inner_document, target))

    def describe(self) -> str:
        return f"{self.inner.describe()} at '{'.'.join(self.path)}'"

    def _nest(self, document: Mapping[str, object]) -> Mapping[str, object]:
        for segment in reversed(self.path):
            document = {segment: document}
        return document
