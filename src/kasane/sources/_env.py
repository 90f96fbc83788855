"""環境変数の設定ソース。

``APP_DATABASE__HOST=db`` のような変数を、プレフィックス ``APP_`` と区切り文字 ``__``
で ``{"database": {"host": "db"}}`` に変換する。変数名は小文字化される。
値は常に文字列で、型の変換は確定時の検証に委ねる。コレクションには JSON 文字列を渡せる。
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import Final

from kasane.schema import SchemaDescriptor
from kasane.sources._base import Source

logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR: Final[str] = "__"


class EnvSource(Source):
    """環境変数を読み込むソース。

    Args:
        prefix: 対象とする変数名のプレフィックス（大文字小文字を区別しない）。
            マッチした変数のみが読み込まれ、プレフィックスは取り除かれる。
        separator: ネストしたフィールドの区切り文字。
        environ: 読み込む環境。None の場合は os.environ。
        secure: シークレットの供給を許可するか。
    """

    def __init__(
        self,
        prefix: str = "",
        separator: str = DEFAULT_SEPARATOR,
        *,
        environ: Mapping[str, str] | None = None,
        secure: bool = False,
    ) -> None:
        if not separator:
            raise ValueError("separator must not be empty")
        super().__init__(secure=secure)
        self.prefix = prefix
        self.separator = separator
        self._environ = environ

    def provide(self) -> Mapping[str, object]:
        environ = self._environ if self._environ is not None else os.environ
        prefix = self.prefix.lower()
        document: dict[str, object] = {}
        for name, value in sorted(environ.items()):
            lowered = name.lower()
            if not lowered.startswith(prefix):
                continue
            path = lowered[len(prefix) :].split(self.separator.lower())
            if not all(path):
                logger.debug("Ignoring malformed environment variable %s", name)
                continue
            _insert(document, path, value, name)
        return document

    def shape(
        self, document: Mapping[str, object], schema: SchemaDescriptor
    ) -> Mapping[str, object]:
        """スキーマのトップレベルに存在しない変数を除外する。

        プレフィックスなしで使用した場合に PATH などの無関係な変数を無視するため、
        トップレベルのみ未知キーを許容する。ネストした位置の未知キーはエラーになる。
        """
        known: dict[str, object] = {}
        for key, value in document.items():
            if schema.lookup(key) is None:
                logger.debug("Ignoring environment key '%s' not in schema", key)
                continue
            known[key] = value
        return known

    def describe(self) -> str:
        if self.prefix:
            return f"environment (prefix '{self.prefix}')"
        return "environment"


def _insert(document: dict[str, object], path: list[str], value: str, name: str) -> None:
    """ネストした辞書にパスで値を挿入する。

    Raises:
        ValueError: 同じパスに値とテーブルの両方が指定された場合。
    """
    current = document
    for segment in path[:-1]:
        child = current.setdefault(segment, {})
        if not isinstance(child, dict):
            raise ValueError(
                f"Environment variable {name} conflicts with a value set at '{segment}'"
            )
        current = child
    leaf = path[-1]
    if isinstance(current.get(leaf), dict):
        raise ValueError(
            f"Environment variable {name} conflicts with nested variables under '{leaf}'"
        )
    current[leaf] = value
