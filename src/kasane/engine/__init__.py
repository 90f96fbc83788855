"""ビルドエンジン: マージ（シークレットゲート込み）、デフォルト解決、確定。"""

from kasane.engine._defaults import apply_defaults
from kasane.engine._finalize import finalize
from kasane.engine._merge import merge

__all__ = ["apply_defaults", "finalize", "merge"]
