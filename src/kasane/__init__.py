"""kasane — 型付きスキーマに複数のソースを重ねて設定を構築するライブラリ。

公開 API:
    ConfigBuilder, builder, build_from_sources: ビルドドライバー。
    KasaneBaseModel: 設定モデルの基底クラス。
    Secret, Convert, Skip: フィールドマーカー。
    各種 Source とエラー型。
"""

from kasane.builder import ConfigBuilder, build_from_sources, builder
from kasane.errors import (
    ConversionError,
    KasaneError,
    MissingValueError,
    SecretViolationError,
    ShapeError,
    SourceError,
)
from kasane.models import KasaneBaseModel
from kasane.schema import Convert, Secret, Skip, describe
from kasane.sources import (
    EnvSource,
    FileSource,
    JsonSource,
    LiteralSource,
    OffsetSource,
    PyprojectSource,
    Source,
    TomlSource,
    YamlSource,
)


def main() -> None:
    """パッケージエントリポイント。cli.main() に委譲する。

    pyproject.toml の [project.scripts] は kasane.cli:main を直接参照するため、
    この関数はプログラムから kasane.main() として呼び出す場合の互換用。
    """
    from kasane.cli import main as cli_main

    cli_main()


__all__ = [
    "ConfigBuilder",
    "ConversionError",
    "Convert",
    "EnvSource",
    "FileSource",
    "JsonSource",
    "KasaneBaseModel",
    "KasaneError",
    "LiteralSource",
    "MissingValueError",
    "OffsetSource",
    "PyprojectSource",
    "Secret",
    "SecretViolationError",
    "ShapeError",
    "Skip",
    "Source",
    "SourceError",
    "TomlSource",
    "YamlSource",
    "build_from_sources",
    "builder",
    "describe",
    "main",
]
