"""ExitCode — CLI の終了コードの定義。"""

from enum import IntEnum


class ExitCode(IntEnum):
    """プロセス終了コード。

    1-3 はビルドエラーの種別に対応し、4 は CLI 層固有の入力エラー。
    """

    SUCCESS = 0
    CONFIG_ERROR = 1
    SECRET_ERROR = 2
    SOURCE_ERROR = 3
    INPUT_ERROR = 4
