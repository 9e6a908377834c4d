"""
Excel処理ヘルパーモジュール

列マッピング・セル値変換・シート解決を担当するヘルパー群
"""

from src.excel.cell_coercion import ExcelCellCoercion
from src.excel.field_mapper import ColumnDescriptor, ColumnRegistry, excel_field
from src.excel.sheet_resolver import ByName, First, SheetLookupPolicy, resolve

__all__ = [
    "ByName",
    "ColumnDescriptor",
    "ColumnRegistry",
    "ExcelCellCoercion",
    "First",
    "SheetLookupPolicy",
    "excel_field",
    "resolve",
]
