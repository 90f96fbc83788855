"""スキーマ記述子とフィールドマーカー。"""

from kasane.schema._descriptor import (
    DefaultDeclaration,
    FieldDescriptor,
    FieldKind,
    SchemaDescriptor,
    describe,
)
from kasane.schema._markers import Convert, Secret, Skip

__all__ = [
    "Convert",
    "DefaultDeclaration",
    "FieldDescriptor",
    "FieldKind",
    "SchemaDescriptor",
    "Secret",
    "Skip",
    "describe",
]
