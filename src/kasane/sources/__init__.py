"""設定ソースアダプター。

公開 API:
    Source: 全ソースの基底クラス。
    LiteralSource, TomlSource, JsonSource, YamlSource: インラインのデータ・テキスト。
    FileSource, PyprojectSource: ファイル。
    EnvSource: 環境変数。
    OffsetSource: 別ソースをネストした位置に配置する。
"""

from kasane.sources._base import Source
from kasane.sources._env import EnvSource
from kasane.sources._file import FileSource, PyprojectSource
from kasane.sources._locator import find_config_file
from kasane.sources._offset import OffsetSource
from kasane.sources._text import JsonSource, LiteralSource, TomlSource, YamlSource

__all__ = [
    "EnvSource",
    "FileSource",
    "JsonSource",
    "LiteralSource",
    "OffsetSource",
    "PyprojectSource",
    "Source",
    "TomlSource",
    "YamlSource",
    "find_config_file",
]
