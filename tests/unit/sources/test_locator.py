"""設定ファイル探索のテスト。

find_config_file — カレント, 親, 見つからない, ディレクトリは対象外
"""

from __future__ import annotations

from pathlib import Path

import pytest

from kasane.sources import find_config_file

# 探索がファイルシステムのルートまで到達しても衝突しない名前
_CONFIG_NAME = "kasane-locator-test.toml"


def _create_config(base: Path) -> Path:
    """base に設定ファイルを作成し、そのパスを返す。"""
    path = base / _CONFIG_NAME
    path.write_text("a = 1\n", encoding="utf-8")
    return path


class TestFindConfigFile:
    """親方向への探索。"""

    def test_in_current_directory(self, tmp_path: Path) -> None:
        _create_config(tmp_path)
        assert find_config_file(_CONFIG_NAME, tmp_path) == tmp_path.resolve() / _CONFIG_NAME

    def test_in_parent_directory(self, tmp_path: Path) -> None:
        _create_config(tmp_path)
        child = tmp_path / "src" / "pkg"
        child.mkdir(parents=True)
        assert find_config_file(_CONFIG_NAME, child) == tmp_path.resolve() / _CONFIG_NAME

    def test_nearest_wins(self, tmp_path: Path) -> None:
        _create_config(tmp_path)
        child = tmp_path / "nested"
        child.mkdir()
        _create_config(child)
        assert find_config_file(_CONFIG_NAME, child) == child.resolve() / _CONFIG_NAME

    def test_not_found(self, tmp_path: Path) -> None:
        assert find_config_file(_CONFIG_NAME, tmp_path) is None

    def test_directory_with_same_name_is_ignored(self, tmp_path: Path) -> None:
        (tmp_path / _CONFIG_NAME).mkdir()
        assert find_config_file(_CONFIG_NAME, tmp_path) is None

    def test_defaults_to_current_directory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _create_config(tmp_path)
        monkeypatch.chdir(tmp_path)
        assert find_config_file(_CONFIG_NAME) == tmp_path.resolve() / _CONFIG_NAME
