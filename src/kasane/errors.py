"""kasane の例外階層。

ビルド中に発生する全エラーは KasaneError を基底とする。
マージ・確定処理で発生するエラーはパス情報を持ち、ネストした集約・コレクションを
巻き戻る過程で外側のパスセグメントが先頭に追加される。
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final

ROOT_PATH_DISPLAY: Final[str] = "<root>"
"""空パス（ルート）の表示文字列。"""


def format_path(path: Iterable[str]) -> str:
    """パスセグメント列をドット区切りの表示文字列に変換する。

    Args:
        path: パスセグメント列（外側から内側の順）。

    Returns:
        ``db.password`` 形式の文字列。空の場合は ``<root>``。
    """
    segments = tuple(path)
    if not segments:
        return ROOT_PATH_DISPLAY
    return ".".join(segments)


class KasaneError(Exception):
    """kasane が送出する全例外の基底クラス。

    Attributes:
        detail: エラーの詳細メッセージ。
        path: エラー発生位置のパスセグメント（外側から内側の順）。
    """

    def __init__(self, detail: str = "", *, path: Iterable[str] = ()) -> None:
        super().__init__(detail)
        self.detail = detail
        self.path: tuple[str, ...] = tuple(path)

    @property
    def path_display(self) -> str:
        """パスの表示文字列。"""
        return format_path(self.path)

    def prepend(self, segment: object) -> None:
        """呼び出し元へ巻き戻る際に外側のパスセグメントを追加する。

        キーやインデックスも表示文字列として追加される。
        """
        self.path = (str(segment), *self.path)

    def __str__(self) -> str:
        return self.detail


class MissingValueError(KasaneError):
    """確定時に必須フィールドが未設定のまま残っている。"""

    def __str__(self) -> str:
        return f"Missing value for path `{self.path_display}`"


class SecretViolationError(KasaneError):
    """シークレットフィールドが secure でないソースから書き込まれようとした。

    Attributes:
        source: 違反を起こしたソースの説明。ビルダーが付与する。
    """

    def __init__(
        self,
        detail: str = "",
        *,
        path: Iterable[str] = (),
        source: str | None = None,
    ) -> None:
        super().__init__(detail, path=path)
        self.source = source

    def __str__(self) -> str:
        message = f"Found secret at path `{self.path_display}`"
        if self.source is not None:
            message += f" in source {self.source} that does not permit secrets"
        return message


class ConversionError(KasaneError):
    """変換ルールまたは型検証が失敗した。元の例外は ``__cause__`` に保持される。"""

    def __str__(self) -> str:
        return f"Failed conversion for path `{self.path_display}`: {self.detail}"


class ShapeError(KasaneError):
    """ソースデータの形状がスキーマと一致しない。

    ソースアダプターによって SourceError に包まれて呼び出し元へ届く。
    """

    def __str__(self) -> str:
        return f"Unexpected data at path `{self.path_display}`: {self.detail}"


class SourceError(KasaneError):
    """ソースアダプターの読み込み・パースに失敗した。

    ソース自身が内部位置情報を持つため、パスは付与しない。

    Attributes:
        source: 失敗したソースの説明。
    """

    def __init__(self, source: str, detail: str) -> None:
        super().__init__(detail)
        self.source = source

    def prepend(self, segment: object) -> None:
        # ソースエラーはパス修飾の対象外
        return None

    def __str__(self) -> str:
        return f"Source {self.source} returned an error: {self.detail}"


__all__ = [
    "ConversionError",
    "KasaneError",
    "MissingValueError",
    "ROOT_PATH_DISPLAY",
    "SecretViolationError",
    "ShapeError",
    "SourceError",
    "format_path",
]
