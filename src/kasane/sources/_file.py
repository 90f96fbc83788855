"""ファイルベースの設定ソース。"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from kasane.sources._base import Source
from kasane.sources._loader import load_document, load_pyproject_section
from kasane.sources._locator import find_config_file

logger = logging.getLogger(__name__)


class FileSource(Source):
    """設定ファイルを読み込むソース。形式は拡張子で判定する。

    対応形式: ``.toml``, ``.json``, ``.yaml`` / ``.yml``

    Args:
        path: 設定ファイルのパス。
        required: False の場合、ファイルが存在しなければ空の設定として扱う。
        secure: シークレットの供給を許可するか。
    """

    def __init__(
        self, path: Path | str, *, required: bool = True, secure: bool = False
    ) -> None:
        super().__init__(secure=secure)
        self.path = Path(path)
        self.required = required

    @classmethod
    def discover(
        cls,
        name: str,
        start: Path | None = None,
        *,
        secure: bool = False,
    ) -> FileSource | None:
        """start から親方向に name を探索し、見つかったファイルのソースを返す。

        Returns:
            見つかったファイルの FileSource。見つからなければ None。

        Raises:
            OSError: 探索パス上のアクセス権限エラー等。
        """
        path = find_config_file(name, start)
        if path is None:
            return None
        return cls(path, secure=secure)

    def provide(self) -> Mapping[str, object]:
        try:
            return load_document(self.path)
        except FileNotFoundError:
            if self.required:
                raise
            logger.debug("Optional config file %s does not exist", self.path)
            return {}

    def describe(self) -> str:
        return f"file '{self.path}'"


class PyprojectSource(Source):
    """pyproject.toml の [tool.<section>] テーブルを読み込むソース。

    pyproject.toml はリポジトリにコミットされるため secure にすべきではない。
    """

    def __init__(self, path: Path | str, section: str, *, secure: bool = False) -> None:
        super().__init__(secure=secure)
        self.path = Path(path)
        self.section = section

    def provide(self) -> Mapping[str, object]:
        return load_pyproject_section(self.path, self.section)

    def describe(self) -> str:
        return f"[tool.{self.section}] in '{self.path}'"
