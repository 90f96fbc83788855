"""確定済み設定と記述子テーブルの表示。

シークレットフィールドの値は常にマスクして出力する。
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping
from typing import Final

from pydantic import BaseModel
from rich.table import Table

from kasane.schema import FieldDescriptor, FieldKind, SchemaDescriptor, describe

SECRET_MASK: Final[str] = "********"


def mask_secrets(config: BaseModel) -> dict[str, object]:
    """設定モデルを辞書に変換し、シークレットフィールドの値をマスクする。

    シークレットが付与された集約・コレクションは配下全体をマスクする。
    """
    return _mask_model(describe(type(config)), config)


def _mask_model(schema: SchemaDescriptor, model: BaseModel) -> dict[str, object]:
    return {
        descriptor.name: _mask_value(descriptor, getattr(model, descriptor.name))
        for descriptor in schema
    }


def _mask_value(descriptor: FieldDescriptor, value: object) -> object:
    if value is None:
        return None
    if descriptor.is_secret:
        return SECRET_MASK
    # 変換後の値は中間型の形状と一致しないため走査しない
    if descriptor.converter is not None:
        return value
    match descriptor.kind:
        case FieldKind.AGGREGATE if isinstance(value, BaseModel):
            return _mask_model(describe(type(value)), value)
        case FieldKind.KEYED if isinstance(value, Mapping):
            return {
                key: _mask_value(descriptor.element, item) for key, item in value.items()
            }
        case FieldKind.UNKEYED if isinstance(value, Iterable):
            return [_mask_value(descriptor.element, item) for item in value]
    return value


def render_json(config: BaseModel) -> str:
    """マスク済みの設定を JSON 文字列にする。"""
    return json.dumps(mask_secrets(config), indent=2, ensure_ascii=False, default=str)


def render_table(config: BaseModel) -> Table:
    """マスク済みの設定をフィールドパスと値の表にする。"""
    table = Table(title=type(config).__name__)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value")
    for path, value in _flatten(mask_secrets(config), ()):
        table.add_row(path, _display(value))
    return table


def _flatten(value: object, prefix: tuple[str, ...]) -> Iterator[tuple[str, object]]:
    """ネストした辞書・リストをドット区切りパスと値の組に展開する。"""
    if isinstance(value, Mapping) and value:
        for key, item in value.items():
            yield from _flatten(item, (*prefix, str(key)))
    elif isinstance(value, list) and value:
        for index, item in enumerate(value):
            yield from _flatten(item, (*prefix, str(index)))
    else:
        yield ".".join(prefix), value


def _display(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, (Mapping, list)):
        return json.dumps(value)
    return str(value)


def render_fields(schema: SchemaDescriptor) -> Table:
    """記述子テーブルを表にする。自己参照モデルは 1 段のみ展開する。"""
    table = Table(title=schema.model.__name__)
    for column in ("Field", "Kind", "Secret", "Default", "Converter"):
        table.add_column(column)
    for path, descriptor in _walk_fields(schema, (), frozenset()):
        table.add_row(
            path,
            descriptor.kind.value + ("?" if descriptor.nullable else ""),
            "yes" if descriptor.is_secret else "",
            _describe_default(descriptor),
            getattr(descriptor.converter.func, "__name__", "yes")
            if descriptor.converter is not None
            else "",
        )
    return table


def _walk_fields(
    schema: SchemaDescriptor,
    prefix: tuple[str, ...],
    visiting: frozenset[type[BaseModel]],
) -> Iterator[tuple[str, FieldDescriptor]]:
    visiting = visiting | {schema.model}
    for descriptor in schema:
        path = (*prefix, descriptor.name)
        yield ".".join(path), descriptor
        if descriptor.kind is FieldKind.AGGREGATE and descriptor.model not in visiting:
            yield from _walk_fields(descriptor.schema, path, visiting)


def _describe_default(descriptor: FieldDescriptor) -> str:
    if descriptor.default is None:
        return "None" if descriptor.nullable else "(required)"
    if descriptor.is_secret:
        return SECRET_MASK
    return repr(descriptor.default.materialize())
