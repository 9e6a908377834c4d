"""
Excel変換モジュール（オブジェクト ⇄ openpyxlワークブック）
"""

import dataclasses
import logging
from collections.abc import Callable, Sequence
from io import BytesIO
from typing import Any, TypeVar

from openpyxl import Workbook, load_workbook
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from src.config import ExcelServiceConfig
from src.error_messages import (
    CellCoercionError,
    ErrorCategory,
    ExcelConversionError,
    ExcelServiceError,
    UnsupportedValueError,
)
from src.excel import (
    ColumnDescriptor,
    ColumnRegistry,
    ExcelCellCoercion,
    SheetLookupPolicy,
    resolve,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ExcelConverter:
    """ドメインオブジェクトのリストとExcelファイルの相互変換"""

    def __init__(self, registry: ColumnRegistry, config: ExcelServiceConfig):
        """
        Args:
            registry: 列定義レジストリ
            config: シート名や取り込み上限などの設定
        """
        self.registry = registry
        self.config = config

    def write(self, cls: type[T], objects: Sequence[T]) -> bytes:
        """
        オブジェクトのリストをxlsxのバイト列に変換

        1行目はヘッダー（列名）、2行目以降が入力順のオブジェクト1件ずつ。

        Args:
            cls: 対象クラス
            objects: 出力するオブジェクト

        Returns:
            xlsxファイルのバイト列

        Raises:
            ExcelConversionError: 列定義の導出や値の変換に失敗した場合
        """
        logger.info(f"Writing {len(objects)} {cls.__name__} objects to workbook")

        try:
            columns = self.registry.columns_for(cls)
        except ExcelServiceError as e:
            raise ExcelConversionError(
                f"Could not derive columns for {cls.__name__}.", original_error=e
            ) from e

        workbook = Workbook()
        sheet = workbook.active
        sheet.title = self.config.sheet_title_for(cls)

        self._append_row(sheet, [column.name for column in columns])

        for index, obj in enumerate(objects):
            if not isinstance(obj, cls):
                raise ExcelConversionError(
                    f"Object at index {index} is a {type(obj).__name__}, not a {cls.__name__}.",
                    category=ErrorCategory.UNSUPPORTED_VALUE,
                )
            self._append_row(sheet, self._to_row(obj, columns, index))

        output = BytesIO()
        workbook.save(output)
        data = output.getvalue()

        logger.info(f"Wrote {sheet.max_row} rows ({len(data)} bytes)")
        return data

    def _append_row(self, sheet: Worksheet, values: list[Any]) -> None:
        """行を追加し、"=" で始まる文字列を数式ではなく文字列として保存する"""
        sheet.append(values)
        for cell in sheet[sheet.max_row]:
            if isinstance(cell.value, str) and cell.value.startswith("="):
                cell.data_type = "s"

    def _to_row(
        self, obj: Any, columns: Sequence[ColumnDescriptor], index: int
    ) -> list[Any]:
        row = []
        for column in columns:
            try:
                row.append(ExcelCellCoercion.to_cell(column.accessor(obj)))
            except UnsupportedValueError as e:
                error = UnsupportedValueError(e.value, column.name, e.reason)
                raise ExcelConversionError(
                    f"Object at index {index}: {error.message}", original_error=error
                ) from e
        return row

    def read(
        self,
        cls: type[T],
        data: bytes,
        policy: SheetLookupPolicy,
        factory: Callable[[], T] | None = None,
    ) -> list[T]:
        """
        xlsxのバイト列を読み込み、データ行ごとに新しいオブジェクトを作成

        1行目はヘッダーとして読み飛ばし、列の対応は位置で決まる（ヘッダー文字列は照合しない）。
        全セルが空の行はスキップする。

        Args:
            cls: 対象クラス
            data: xlsxファイルのバイト列
            policy: シート検索ポリシー
            factory: インスタンス生成関数（省略時はclsから生成）

        Returns:
            行順のオブジェクトのリスト

        Raises:
            ExcelConversionError: シート未検出・列定義・値変換のいずれかに失敗した場合
        """
        logger.info(f"Reading {cls.__name__} objects from {len(data)} bytes")

        # BytesIOでメモリ上に展開（数式はキャッシュ値のみ使用）
        workbook = load_workbook(BytesIO(data), data_only=True)

        try:
            sheet = resolve(workbook, policy)
            columns = self.registry.columns_for(cls)
        except ExcelServiceError as e:
            raise ExcelConversionError(e.message, original_error=e) from e

        logger.info(f"Reading sheet '{sheet.title}' with {len(columns)} columns")

        rows = sheet.iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            logger.info("Sheet is empty; no objects imported")
            return []

        if self.config.warn_header_mismatch:
            self._check_header(header, columns, sheet.title)

        results: list[T] = []
        data_rows = 0
        for row_number, values in enumerate(rows, start=2):
            row = self._normalize_row(values, len(columns))
            if all(ExcelCellCoercion.is_empty(value) for value in row):
                continue

            data_rows += 1
            if data_rows > self.config.max_import_rows:
                raise ExcelConversionError(
                    f"Sheet '{sheet.title}' has more than {self.config.max_import_rows} data rows.",
                    category=ErrorCategory.LIMIT_EXCEEDED,
                )

            results.append(self._to_object(cls, columns, row, row_number, factory))

        logger.info(f"Imported {len(results)} {cls.__name__} objects")
        return results

    def _normalize_row(self, values: tuple[Any, ...], width: int) -> tuple[Any, ...]:
        """行のセル数を列数に揃える（不足分はNone、超過分は切り捨て）"""
        if len(values) >= width:
            return tuple(values[:width])
        return tuple(values) + (None,) * (width - len(values))

    def _check_header(
        self,
        header: tuple[Any, ...],
        columns: Sequence[ColumnDescriptor],
        sheet_title: str,
    ) -> None:
        """ヘッダー文字列と列名が異なる場合に警告する（取り込みは位置で行う）"""
        header = self._normalize_row(header, len(columns))
        for position, (text, column) in enumerate(zip(header, columns), start=1):
            if text is None or str(text).strip() != column.name:
                logger.warning(
                    f"Header mismatch in sheet '{sheet_title}' column "
                    f"{get_column_letter(position)}: expected '{column.name}', found {text!r}"
                )

    def _to_object(
        self,
        cls: type[T],
        columns: Sequence[ColumnDescriptor],
        row: tuple[Any, ...],
        row_number: int,
        factory: Callable[[], T] | None,
    ) -> T:
        values = []
        for position, (column, value) in enumerate(zip(columns, row), start=1):
            try:
                values.append(
                    ExcelCellCoercion.from_cell(value, column.type, column.optional)
                )
            except CellCoercionError as e:
                coordinate = f"{get_column_letter(position)}{row_number}"
                raise ExcelConversionError(
                    f"Row {row_number}, column '{column.name}' ({coordinate}): {e.message}",
                    original_error=e,
                ) from e

        try:
            return self._instantiate(cls, columns, values, factory)
        except ExcelServiceError:
            raise
        except Exception as e:
            raise ExcelConversionError(
                f"Could not create {cls.__name__} from row {row_number}: {e}",
                original_error=e,
            ) from e

    def _instantiate(
        self,
        cls: type[T],
        columns: Sequence[ColumnDescriptor],
        values: list[Any],
        factory: Callable[[], T] | None,
    ) -> T:
        """
        新しいインスタンスを作成して列の値を設定

        - factory指定時: factory() で作成後、列順にmutatorで設定
        - 未登録のdataclass: キーワード引数でコンストラクタを呼ぶ
        - それ以外: cls() で作成後、列順にmutatorで設定
        """
        if (
            factory is None
            and dataclasses.is_dataclass(cls)
            and not self.registry.is_explicit(cls)
        ):
            kwargs = {
                column.attribute: value for column, value in zip(columns, values)
            }
            return cls(**kwargs)

        obj = factory() if factory is not None else cls()
        for column, value in zip(columns, values):
            column.mutator(obj, value)
        return obj
