"""インラインのリテラル・テキストソース。"""

from __future__ import annotations

import copy
from collections.abc import Mapping

from kasane.sources._base import Source
from kasane.sources._loader import load_json_text, load_toml_text, load_yaml_text


class LiteralSource(Source):
    """Python の辞書をそのまま設定ソースとして使用する。"""

    def __init__(
        self, data: Mapping[str, object], *, name: str = "literal", secure: bool = False
    ) -> None:
        super().__init__(secure=secure)
        self._data = data
        self._name = name

    def provide(self) -> Mapping[str, object]:
        return copy.deepcopy(dict(self._data))

    def describe(self) -> str:
        return self._name


class TomlSource(Source):
    """TOML テキストの設定ソース。"""

    def __init__(self, text: str, *, secure: bool = False) -> None:
        super().__init__(secure=secure)
        self._text = text

    def provide(self) -> Mapping[str, object]:
        return load_toml_text(self._text)

    def describe(self) -> str:
        # 内容はシークレットを含みうるため表示しない
        return "TOML text"


class JsonSource(Source):
    """JSON テキストの設定ソース。"""

    def __init__(self, text: str, *, secure: bool = False) -> None:
        super().__init__(secure=secure)
        self._text = text

    def provide(self) -> Mapping[str, object]:
        return load_json_text(self._text)

    def describe(self) -> str:
        return "JSON text"


class YamlSource(Source):
    """YAML テキストの設定ソース。"""

    def __init__(self, text: str, *, secure: bool = False) -> None:
        super().__init__(secure=secure)
        self._text = text

    def provide(self) -> Mapping[str, object]:
        return load_yaml_text(self._text)

    def describe(self) -> str:
        return "YAML text"
