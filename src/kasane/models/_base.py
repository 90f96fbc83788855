"""設定モデルの基底クラス。"""

from pydantic import BaseModel, ConfigDict


class KasaneBaseModel(BaseModel):
    """設定モデルの基底クラス。extra="forbid" と frozen=True で不変の厳格モデルにする。

    kasane は任意の pydantic モデルを扱えるが、確定後の設定を不変に保つため
    この基底クラスの継承を推奨する。
    """

    model_config = ConfigDict(extra="forbid", frozen=True)
