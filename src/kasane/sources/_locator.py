"""設定ファイルの探索。"""

from __future__ import annotations

import logging
import stat as stat_module
from collections.abc import Callable
from pathlib import Path

logger = logging.getLogger(__name__)


def _find_ancestor(
    start: Path,
    target_name: str,
    check: Callable[[int], bool],
) -> Path | None:
    """start から親方向に target_name を探索し、最初にマッチした候補パスを返す。

    Args:
        start: 探索開始ディレクトリ。
        target_name: 探索対象の名前（例: "app.toml", "pyproject.toml"）。
        check: stat.st_mode に適用する種別チェック関数（例: stat.S_ISREG）。

    Returns:
        最初にマッチした候補パス（start/…/target_name）。見つからなければ None。

    Raises:
        OSError: 探索パス上のアクセス権限エラー等。
    """
    current = start.resolve()
    while True:
        candidate = current / target_name
        try:
            st = candidate.stat()
        except FileNotFoundError:
            pass
        else:
            if check(st.st_mode):
                return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def find_config_file(name: str, start: Path | None = None) -> Path | None:
    """start ディレクトリから親方向に設定ファイルを探索する。

    Args:
        name: 設定ファイル名。
        start: 探索開始ディレクトリ。None の場合はカレントディレクトリ。

    Returns:
        最初に見つかったファイルのフルパス。見つからなければ None。

    Raises:
        OSError: 探索パス上のアクセス権限エラー等。
    """
    origin = start if start is not None else Path.cwd()
    found = _find_ancestor(origin, name, stat_module.S_ISREG)
    if found is None:
        logger.debug("No %s found above %s", name, origin)
    else:
        logger.debug("Discovered %s", found)
    return found
