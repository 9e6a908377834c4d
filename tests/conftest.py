import datetime
import os
from decimal import Decimal
from io import BytesIO
from unittest.mock import Mock, patch

import pytest
from openpyxl import Workbook

from src.config import XLSX_MEDIA_TYPE, ExcelServiceConfig
from tests.models import Employee, Status


@pytest.fixture
def mock_config():
    """Mock Excel service configuration for testing"""
    config = Mock(spec=ExcelServiceConfig)
    config.sheet_name = ""
    config.media_type = XLSX_MEDIA_TYPE
    config.file_extension = ".xlsx"
    config.max_import_rows = 100000
    config.warn_header_mismatch = True
    config.log_level = "INFO"
    config.sheet_title_for.side_effect = lambda cls: cls.__name__[:31]
    config.file_name_for.side_effect = (
        lambda name: name if name.endswith(".xlsx") else f"{name}.xlsx"
    )
    config.validate.return_value = []
    return config


@pytest.fixture
def mock_env_vars():
    """Mock environment variables for testing"""
    env_vars = {
        "EXCEL_SHEET_NAME": "Export",
        "EXCEL_MAX_IMPORT_ROWS": "500",
        "EXCEL_WARN_HEADER_MISMATCH": "false",
        "EXCEL_LOG_LEVEL": "debug",
    }

    with patch.dict(os.environ, env_vars, clear=True):
        yield env_vars


@pytest.fixture
def employees():
    """テスト用の社員リスト"""
    return [
        Employee(
            name="Alice",
            age=34,
            salary=5200.5,
            active=True,
            hired=datetime.date(2018, 4, 1),
            last_login=datetime.datetime(2024, 1, 15, 9, 30),
            status=Status.ACTIVE,
            bonus=Decimal("120.25"),
        ),
        Employee(
            name="Bob",
            age=58,
            salary=4100.0,
            active=False,
            hired=datetime.date(1999, 10, 12),
            status=Status.RETIRED,
        ),
    ]


@pytest.fixture
def make_workbook():
    """シート名 -> 行のリスト からxlsxのバイト列を作成するファクトリ"""

    def _make(sheets: dict[str, list[list]]) -> bytes:
        wb = Workbook()
        ws = wb.active
        for index, (title, rows) in enumerate(sheets.items()):
            if index > 0:
                ws = wb.create_sheet()
            ws.title = title
            for row in rows:
                ws.append(row)

        # BytesIOに保存
        excel_bytes = BytesIO()
        wb.save(excel_bytes)
        excel_bytes.seek(0)
        return excel_bytes.getvalue()

    return _make
