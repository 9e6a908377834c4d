"""
Excel列マッピングユーティリティ

対象クラスのプロパティから列定義（ColumnDescriptor）を組み立てるヘルパー
"""

import dataclasses
import datetime
import enum
import logging
import types
import typing
from collections.abc import Callable, Iterable
from decimal import Decimal
from typing import Any

from src.error_messages import UnsupportedTypeError

logger = logging.getLogger(__name__)

# dataclassフィールドのmetadataで使用するキー
EXPORTABLE_KEY = "exportable"
HEADER_KEY = "header"

SUPPORTED_KINDS: tuple[type, ...] = (
    str,
    bool,
    int,
    float,
    Decimal,
    datetime.datetime,
    datetime.date,
    datetime.time,
)


def excel_field(
    *, exportable: bool = True, header: str | None = None, **kwargs: Any
) -> Any:
    """
    列情報付きのdataclassフィールドを作成

    Args:
        exportable: Falseの場合は列として扱わない
        header: ヘッダー行に出力する列名（省略時はフィールド名）
        **kwargs: dataclasses.field に渡す引数
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[EXPORTABLE_KEY] = exportable
    if header is not None:
        metadata[HEADER_KEY] = header
    return dataclasses.field(metadata=metadata, **kwargs)


@dataclasses.dataclass(frozen=True)
class ColumnDescriptor:
    """スプレッドシートの列位置とプロパティの対応"""

    name: str
    type: type
    accessor: Callable[[Any], Any]
    mutator: Callable[[Any, Any], None]
    optional: bool = False
    attribute: str = ""

    @classmethod
    def for_attribute(
        cls,
        attribute: str,
        value_type: type,
        header: str | None = None,
        optional: bool = False,
    ) -> "ColumnDescriptor":
        """属性名から getattr/setattr ベースの列定義を作成"""
        return cls(
            name=header or attribute,
            type=value_type,
            accessor=lambda obj: getattr(obj, attribute),
            mutator=lambda obj, value: setattr(obj, attribute, value),
            optional=optional,
            attribute=attribute,
        )


def is_supported_kind(value_type: Any) -> bool:
    """列として扱える型かどうか"""
    # list[str] 等のジェネリック型は対象外
    if typing.get_origin(value_type) is not None:
        return False
    if not isinstance(value_type, type):
        return False
    if issubclass(value_type, enum.Enum):
        return True
    return issubclass(value_type, SUPPORTED_KINDS)


def unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """
    Optional[X] / X | None を (X, True) に分解

    Noneとの2要素Union以外はそのまま (annotation, False) を返す
    """
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(args) == 1 and len(typing.get_args(annotation)) == 2:
            return (args[0], True)
    return (annotation, False)


class ColumnRegistry:
    """
    クラスごとの列定義を保持するレジストリ

    register() で明示登録された列定義を優先し、未登録のクラスは
    dataclassフィールドまたはクラスアノテーションから宣言順で導出する。
    導出結果はクラスごとに一度だけ構築してキャッシュする。
    """

    def __init__(self):
        self._columns: dict[type, tuple[ColumnDescriptor, ...]] = {}
        self._explicit: set[type] = set()

    def register(
        self, cls: type, columns: Iterable[ColumnDescriptor]
    ) -> tuple[ColumnDescriptor, ...]:
        """列定義を明示的に登録"""
        registered = tuple(columns)
        if not registered:
            raise UnsupportedTypeError(cls, "No columns were registered.")
        for column in registered:
            if not is_supported_kind(column.type):
                raise UnsupportedTypeError(
                    cls,
                    f"Column '{column.name}' declares unsupported type '{column.type!r}'.",
                )
        self._columns[cls] = registered
        self._explicit.add(cls)
        logger.debug(f"Registered {len(registered)} columns for {cls.__name__}")
        return registered

    def is_explicit(self, cls: type) -> bool:
        """register() で明示登録されたクラスかどうか"""
        return cls in self._explicit

    def columns_for(self, cls: type) -> tuple[ColumnDescriptor, ...]:
        """
        対象クラスの列定義を取得

        Args:
            cls: 対象クラス

        Returns:
            ColumnDescriptorのタプル（列順）

        Raises:
            UnsupportedTypeError: 列として扱えるプロパティが1つもない場合
        """
        columns = self._columns.get(cls)
        if columns is None:
            columns = self._derive_columns(cls)
            self._columns[cls] = columns
        return columns

    def _derive_columns(self, cls: type) -> tuple[ColumnDescriptor, ...]:
        if not isinstance(cls, type):
            raise UnsupportedTypeError(cls, "Target must be a class.")

        try:
            hints = typing.get_type_hints(cls)
        except Exception as e:
            # 前方参照が解決できない等
            raise UnsupportedTypeError(
                cls, f"Type annotations could not be resolved: {e}"
            ) from e

        if dataclasses.is_dataclass(cls):
            candidates = [
                (f.name, hints.get(f.name, f.type), f.metadata)
                for f in dataclasses.fields(cls)
                if f.init
            ]
        else:
            candidates = [
                (name, annotation, {})
                for name, annotation in hints.items()
                if typing.get_origin(annotation) is not typing.ClassVar
            ]

        columns = []
        for name, annotation, metadata in candidates:
            if name.startswith("_"):
                continue
            if not metadata.get(EXPORTABLE_KEY, True):
                continue

            value_type, optional = unwrap_optional(annotation)
            if not is_supported_kind(value_type):
                logger.debug(
                    f"Skipping {cls.__name__}.{name}: unsupported type {annotation!r}"
                )
                continue

            columns.append(
                ColumnDescriptor.for_attribute(
                    name,
                    value_type,
                    header=metadata.get(HEADER_KEY),
                    optional=optional,
                )
            )

        if not columns:
            raise UnsupportedTypeError(cls)

        return tuple(columns)
