"""設定ドキュメントのパーサー。

TOML / JSON / YAML のテキストを辞書として読み込む。スキーマとの照合は
kasane.partial.parse_partial が担当する。
"""

from __future__ import annotations

import json
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Final

import yaml

_TOOL_SECTION_KEY: Final[str] = "tool"

TOML_SUFFIXES: Final[frozenset[str]] = frozenset({".toml"})
JSON_SUFFIXES: Final[frozenset[str]] = frozenset({".json"})
YAML_SUFFIXES: Final[frozenset[str]] = frozenset({".yaml", ".yml"})


def load_toml_text(text: str) -> dict[str, object]:
    """TOML テキストを辞書として読み込む。

    Raises:
        tomllib.TOMLDecodeError: TOML 構文エラーの場合。
    """
    return tomllib.loads(text)


def load_json_text(text: str) -> dict[str, object]:
    """JSON テキストを辞書として読み込む。空文字列は空辞書として扱う。

    Raises:
        json.JSONDecodeError: JSON 構文エラーの場合。
        ValueError: ルートがオブジェクトでない場合。
    """
    if not text.strip():
        return {}
    return _as_document(json.loads(text), "JSON")


def load_yaml_text(text: str) -> dict[str, object]:
    """YAML テキストを辞書として読み込む。空ドキュメントは空辞書として扱う。

    Raises:
        ValueError: YAML 構文エラー、またはルートがマッピングでない場合。
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML: {e}") from e
    if data is None:
        return {}
    return _as_document(data, "YAML")


def load_document(path: Path) -> dict[str, object]:
    """拡張子に応じて設定ファイルを読み込む。

    Args:
        path: 設定ファイルのパス。

    Returns:
        パースされた設定辞書。

    Raises:
        FileNotFoundError: ファイルが存在しない場合。
        PermissionError: 読み取り権限がない場合。
        ValueError: 未知の拡張子、構文エラー、ルートがマッピングでない場合。
    """
    suffix = path.suffix.lower()
    if suffix in TOML_SUFFIXES:
        with path.open("rb") as f:
            return tomllib.load(f)
    text = path.read_text(encoding="utf-8")
    if suffix in JSON_SUFFIXES:
        return load_json_text(text)
    if suffix in YAML_SUFFIXES:
        return load_yaml_text(text)
    raise ValueError(f"Unknown file extension: '{path.suffix}'")


def load_pyproject_section(path: Path, section: str) -> dict[str, object]:
    """pyproject.toml から [tool.<section>] を読み込む。

    セクションが存在しない場合は空辞書を返す。

    Raises:
        tomllib.TOMLDecodeError: TOML 構文エラーの場合。
        FileNotFoundError: ファイルが存在しない場合。
        PermissionError: 読み取り権限がない場合。
    """
    with path.open("rb") as f:
        data = tomllib.load(f)
    tool = data.get(_TOOL_SECTION_KEY)
    if not isinstance(tool, dict):
        return {}
    table = tool.get(section)
    if not isinstance(table, dict):
        return {}
    return table


def _as_document(data: object, format_name: str) -> dict[str, object]:
    """パース結果のルートがマッピングであることを確認する。"""
    if not isinstance(data, Mapping):
        raise ValueError(
            f"{format_name} document root must be a mapping, got {type(data).__name__}"
        )
    return dict(data)
