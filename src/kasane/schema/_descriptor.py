"""スキーマ記述子テーブル。

pydantic モデルの model_fields を走査し、マージ・デフォルト解決・確定処理が参照する
フィールドメタデータ（種別、シークレット、デフォルト、変換ルール）を構築する。
記述子は不変で、モデルクラス単位でキャッシュされる。
"""

from __future__ import annotations

import collections.abc
import types
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from enum import StrEnum
from functools import cache, partial
from typing import Annotated, Any, Final, Union, get_args, get_origin

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from kasane.schema._markers import Convert, Secret, Skip

ITEM_FIELD_NAME: Final[str] = "<item>"
"""コレクション要素の記述子に付与する名前。"""

_KEYED_ORIGINS: Final[frozenset[object]] = frozenset(
    {
        dict,
        collections.abc.Mapping,
        collections.abc.MutableMapping,
    }
)

_UNKEYED_ORIGINS: Final[frozenset[object]] = frozenset(
    {
        list,
        set,
        frozenset,
        collections.abc.Sequence,
        collections.abc.MutableSequence,
        collections.abc.Set,
        collections.abc.MutableSet,
    }
)

# 確定時にコレクションを組み立てるコンテナ型
_UNKEYED_CONTAINERS: Final[Mapping[object, type]] = {
    list: list,
    set: set,
    frozenset: frozenset,
    tuple: tuple,
    collections.abc.Sequence: tuple,
    collections.abc.MutableSequence: list,
    collections.abc.Set: frozenset,
    collections.abc.MutableSet: set,
}


class FieldKind(StrEnum):
    """フィールドの種別。マージ・デフォルト・確定の各ルールはこの種別で分岐する。"""

    LEAF = "leaf"
    AGGREGATE = "aggregate"
    KEYED = "keyed"
    UNKEYED = "unkeyed"


@dataclass(frozen=True)
class DefaultDeclaration:
    """フィールドのデフォルト宣言。評価は全ソースのマージ後まで遅延される。"""

    factory: Callable[[], object]

    def materialize(self) -> object:
        """デフォルト値を生成する。呼び出しごとに新しい値を返す。"""
        return self.factory()


@dataclass(frozen=True)
class FieldDescriptor:
    """1 フィールド分のメタデータ。

    Attributes:
        name: モデル上のフィールド名。
        kind: フィールド種別。
        annotation: 形状判定に用いた型（Convert 指定時は中間型）。
        input_key: モデル構築時に使用するキー（エイリアスがあればエイリアス）。
        is_secret: Secret マーカーの有無。
        nullable: ``T | None`` として宣言されているか。
        skip: Skip マーカーの有無。
        default: デフォルト宣言。なければ None。
        converter: 変換ルール。なければ None。
        model: 集約フィールドのモデルクラス。
        item: コレクションの要素（キー付きの場合は値）の記述子。
        key_annotation: キー付きコレクションのキー型。
        container: キーなしコレクションの確定時コンテナ型。
    """

    name: str
    kind: FieldKind
    annotation: Any
    input_key: str
    is_secret: bool = False
    nullable: bool = False
    skip: bool = False
    default: DefaultDeclaration | None = None
    converter: Convert | None = None
    model: type[BaseModel] | None = None
    item: FieldDescriptor | None = None
    key_annotation: Any = None
    container: type | None = None

    @property
    def schema(self) -> SchemaDescriptor:
        """集約フィールドの子スキーマ。自己参照モデルに備えて遅延解決する。

        Raises:
            TypeError: 集約フィールドでない場合。
        """
        if self.model is None:
            raise TypeError(f"Field '{self.name}' is not an aggregate")
        return describe(self.model)

    @property
    def element(self) -> FieldDescriptor:
        """コレクション要素の記述子。

        Raises:
            TypeError: コレクションフィールドでない場合。
        """
        if self.item is None:
            raise TypeError(f"Field '{self.name}' is not a collection")
        return self.item


@dataclass(frozen=True)
class SchemaDescriptor:
    """モデル 1 つ分の記述子テーブル。フィールドは宣言順に並ぶ。"""

    model: type[BaseModel]
    fields: tuple[FieldDescriptor, ...]

    def __iter__(self) -> Iterator[FieldDescriptor]:
        return iter(self.fields)

    def __getitem__(self, name: str) -> FieldDescriptor:
        for descriptor in self.fields:
            if descriptor.name == name:
                return descriptor
        raise KeyError(name)

    @property
    def names(self) -> tuple[str, ...]:
        """フィールド名の一覧。"""
        return tuple(descriptor.name for descriptor in self.fields)

    def lookup(self, key: str) -> FieldDescriptor | None:
        """ソースデータのキーからフィールドを引く。フィールド名とエイリアスの両方を受け付ける。"""
        for descriptor in self.fields:
            if key in (descriptor.name, descriptor.input_key):
                return descriptor
        return None


@cache
def describe(model: type[BaseModel]) -> SchemaDescriptor:
    """pydantic モデルから記述子テーブルを構築する。

    Args:
        model: 設定モデルクラス。

    Returns:
        モデルの記述子テーブル。同じクラスに対しては同じインスタンスを返す。

    Raises:
        TypeError: model が BaseModel のサブクラスでない場合、または
            Skip フィールドにデフォルトが宣言されていない場合。
    """
    if not (isinstance(model, type) and issubclass(model, BaseModel)):
        raise TypeError(f"Expected a pydantic model class, got {model!r}")
    fields = tuple(
        _describe_model_field(name, info) for name, info in model.model_fields.items()
    )
    return SchemaDescriptor(model=model, fields=fields)


def _describe_model_field(name: str, info: FieldInfo) -> FieldDescriptor:
    """model_fields の 1 エントリから記述子を構築する。"""
    input_key = info.alias if isinstance(info.alias, str) else name
    descriptor = _describe_type(
        name,
        info.annotation,
        tuple(info.metadata),
        input_key=input_key,
        default=_default_from_field_info(info),
    )
    if descriptor.skip and descriptor.default is None and not descriptor.nullable:
        raise TypeError(f"Skipped field '{name}' must declare a default")
    return descriptor


def _default_from_field_info(info: FieldInfo) -> DefaultDeclaration | None:
    """FieldInfo のデフォルト指定を DefaultDeclaration に変換する。"""
    if info.is_required():
        return None
    return DefaultDeclaration(partial(info.get_default, call_default_factory=True))


def _describe_type(
    name: str,
    annotation: Any,
    metadata: tuple[object, ...],
    *,
    input_key: str,
    default: DefaultDeclaration | None = None,
) -> FieldDescriptor:
    """型注釈とメタデータから記述子を構築する。コレクション要素にも再帰的に使用する。"""
    annotation, nested_metadata = _strip_annotated(annotation)
    metadata = (*metadata, *nested_metadata)
    annotation, nullable = _strip_optional(annotation)
    annotation, optional_metadata = _strip_annotated(annotation)
    metadata = (*metadata, *optional_metadata)

    converter = next((m for m in metadata if isinstance(m, Convert)), None)
    shape = converter.raw_type if converter is not None else annotation
    shape, shape_metadata = _strip_annotated(shape)
    metadata = (*metadata, *shape_metadata)

    common: dict[str, Any] = {
        "name": name,
        "input_key": input_key,
        "is_secret": any(isinstance(m, Secret) for m in metadata),
        "nullable": nullable,
        "skip": any(isinstance(m, Skip) for m in metadata),
        "default": default,
        "converter": converter,
    }

    if isinstance(shape, type) and issubclass(shape, BaseModel):
        return FieldDescriptor(
            kind=FieldKind.AGGREGATE, annotation=shape, model=shape, **common
        )

    origin = get_origin(shape)
    args = get_args(shape)

    if origin in _KEYED_ORIGINS or shape in (dict, collections.abc.Mapping):
        key_type, value_type = args if len(args) == 2 else (Any, Any)
        return FieldDescriptor(
            kind=FieldKind.KEYED,
            annotation=shape,
            key_annotation=key_type,
            item=_describe_type(ITEM_FIELD_NAME, value_type, (), input_key=ITEM_FIELD_NAME),
            **common,
        )

    if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
        return _unkeyed(shape, tuple, args[0], common)
    if origin in _UNKEYED_ORIGINS:
        return _unkeyed(shape, _UNKEYED_CONTAINERS[origin], args[0] if args else Any, common)
    if shape in (list, set, frozenset):
        return _unkeyed(shape, _UNKEYED_CONTAINERS[shape], Any, common)

    return FieldDescriptor(kind=FieldKind.LEAF, annotation=shape, **common)


def _unkeyed(
    shape: Any, container: type, item_type: Any, common: dict[str, Any]
) -> FieldDescriptor:
    """キーなしコレクションの記述子を構築する。"""
    return FieldDescriptor(
        kind=FieldKind.UNKEYED,
        annotation=shape,
        container=container,
        item=_describe_type(ITEM_FIELD_NAME, item_type, (), input_key=ITEM_FIELD_NAME),
        **common,
    )


def _strip_annotated(annotation: Any) -> tuple[Any, tuple[object, ...]]:
    """``Annotated[T, ...]`` を T とメタデータに分解する。"""
    if get_origin(annotation) is Annotated:
        inner, *extras = get_args(annotation)
        inner, more = _strip_annotated(inner)
        return inner, (*extras, *more)
    return annotation, ()


def _strip_optional(annotation: Any) -> tuple[Any, bool]:
    """``T | None`` を T と nullable フラグに分解する。

    None 以外の候補が複数ある Union はそのまま返す（リーフとして扱われる）。
    """
    if get_origin(annotation) not in (Union, types.UnionType):
        return annotation, False
    args = get_args(annotation)
    if type(None) not in args:
        return annotation, False
    remaining = tuple(arg for arg in args if arg is not type(None))
    if len(remaining) == 1:
        return remaining[0], True
    return Union[remaining], True  # noqa: UP007


__all__ = [
    "DefaultDeclaration",
    "FieldDescriptor",
    "FieldKind",
    "ITEM_FIELD_NAME",
    "SchemaDescriptor",
    "describe",
]
