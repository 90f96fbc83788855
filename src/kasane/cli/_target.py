"""MODULE:MODEL 形式のターゲット指定を設定モデルクラスに解決する。"""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

from pydantic import BaseModel

_TARGET_SEPARATOR = ":"


class InputError(Exception):
    """CLI 入力の解決に失敗した。"""


def import_model(target: str, app_dir: Path | None = None) -> type[BaseModel]:
    """``package.module:ClassName`` をインポートしてモデルクラスを返す。

    Args:
        target: ``MODULE:MODEL`` 形式の文字列。
        app_dir: モジュール探索パスの先頭に追加するディレクトリ。
            None の場合はカレントディレクトリ。

    Returns:
        pydantic モデルクラス。

    Raises:
        InputError: 形式が不正、インポート失敗、またはモデルクラスでない場合。
    """
    module_name, sep, attr = target.partition(_TARGET_SEPARATOR)
    if not sep or not module_name or not attr:
        raise InputError(
            f"Invalid target '{target}'. Expected the form 'package.module:ModelName'."
        )

    search_dir = str((app_dir if app_dir is not None else Path.cwd()).resolve())
    if search_dir not in sys.path:
        sys.path.insert(0, search_dir)

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise InputError(f"Cannot import module '{module_name}': {e}") from e

    model: object = module
    for part in attr.split("."):
        try:
            model = getattr(model, part)
        except AttributeError:
            raise InputError(
                f"Module '{module_name}' has no attribute '{attr}'"
            ) from None

    if not (isinstance(model, type) and issubclass(model, BaseModel)):
        raise InputError(f"'{target}' is not a pydantic model class")
    return model
