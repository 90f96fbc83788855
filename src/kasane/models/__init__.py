"""共通モデル。"""

from kasane.models._base import KasaneBaseModel
from kasane.models.exit_code import ExitCode

__all__ = ["ExitCode", "KasaneBaseModel"]
