"""
設定管理モジュール
"""

import logging
import os

from dotenv import load_dotenv

# .envファイルを読み込み
load_dotenv()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Excelのシート名の最大文字数
MAX_SHEET_TITLE_LENGTH = 31

_TRUE_STRINGS = ("1", "true", "yes", "on")


class ExcelServiceConfig:
    """Excelインポート/エクスポート設定クラス"""

    def __init__(self):
        # エクスポート設定
        self.sheet_name = os.getenv("EXCEL_SHEET_NAME", "")  # 空ならクラス名
        self.media_type = os.getenv("EXCEL_MEDIA_TYPE", XLSX_MEDIA_TYPE)
        self.file_extension = os.getenv("EXCEL_FILE_EXTENSION", ".xlsx")

        # インポート設定
        self.max_import_rows = int(os.getenv("EXCEL_MAX_IMPORT_ROWS", "100000"))
        self.warn_header_mismatch = self._parse_bool(
            os.getenv("EXCEL_WARN_HEADER_MISMATCH", "true")
        )

        # ログ設定
        self.log_level = os.getenv("EXCEL_LOG_LEVEL", "INFO").upper()

    def _parse_bool(self, value: str) -> bool:
        """真偽値文字列をboolに変換"""
        return value.strip().lower() in _TRUE_STRINGS

    def sheet_title_for(self, cls: type) -> str:
        """エクスポート時のシート名を取得（未設定ならクラス名）"""
        title = self.sheet_name or cls.__name__
        return title[:MAX_SHEET_TITLE_LENGTH]

    def file_name_for(self, file_name: str) -> str:
        """拡張子が無ければ付与したファイル名を返す"""
        if not self.file_extension:
            return file_name
        if file_name.lower().endswith(self.file_extension.lower()):
            return file_name
        return f"{file_name}{self.file_extension}"

    def validate(self) -> list[str]:
        """設定の検証を行い、エラーメッセージのリストを返す"""
        errors = []

        if not self.media_type:
            errors.append("EXCEL_MEDIA_TYPE must not be empty")

        if self.file_extension and not self.file_extension.startswith("."):
            errors.append(
                f"EXCEL_FILE_EXTENSION must start with '.': {self.file_extension}"
            )

        if self.max_import_rows <= 0:
            errors.append("EXCEL_MAX_IMPORT_ROWS must be a positive integer")

        if len(self.sheet_name) > MAX_SHEET_TITLE_LENGTH:
            errors.append(
                f"EXCEL_SHEET_NAME must be at most {MAX_SHEET_TITLE_LENGTH} characters"
            )

        if self.log_level not in logging.getLevelNamesMapping():
            errors.append(f"Invalid EXCEL_LOG_LEVEL: {self.log_level}")

        return errors

    @property
    def is_valid(self) -> bool:
        """設定が有効かどうかを返す"""
        return len(self.validate()) == 0


# グローバル設定インスタンス
config = ExcelServiceConfig()
