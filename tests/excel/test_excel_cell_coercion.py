"""
ExcelCellCoercion（セル値変換）のテスト
"""

import datetime
from decimal import Decimal

import pytest

from src.error_messages import CellCoercionError, ErrorCategory, UnsupportedValueError
from src.excel import ExcelCellCoercion
from tests.models import Status


class TestToCell:
    """to_cell のテスト"""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value",
        [
            "text",
            42,
            3.5,
            True,
            Decimal("1.25"),
            datetime.datetime(2024, 1, 1, 12, 0),
            datetime.date(2024, 1, 1),
            datetime.time(8, 15),
        ],
    )
    def test_native_values_pass_through(self, value):
        """openpyxlがそのまま書ける値は変換しないこと"""
        assert ExcelCellCoercion.to_cell(value) == value

    @pytest.mark.unit
    def test_none_is_empty_cell(self):
        assert ExcelCellCoercion.to_cell(None) is None

    @pytest.mark.unit
    def test_enum_is_written_by_name(self):
        """Enumはメンバー名で出力されること"""
        assert ExcelCellCoercion.to_cell(Status.RETIRED) == "RETIRED"

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [[1, 2], {"a": 1}, object(), b"bytes"])
    def test_unsupported_values(self, value):
        """表現できない値はUnsupportedValueError"""
        with pytest.raises(UnsupportedValueError) as exc_info:
            ExcelCellCoercion.to_cell(value)

        assert exc_info.value.category == ErrorCategory.UNSUPPORTED_VALUE
        assert type(value).__name__ in str(exc_info.value)

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "value",
        [
            datetime.datetime(2024, 1, 1, 12, 0, tzinfo=datetime.timezone.utc),
            datetime.time(8, 15, tzinfo=datetime.timezone(datetime.timedelta(hours=9))),
        ],
    )
    def test_timezone_aware_values(self, value):
        """タイムゾーン付きの日時・時刻は書き込めないこと"""
        with pytest.raises(UnsupportedValueError) as exc_info:
            ExcelCellCoercion.to_cell(value)

        assert "Time zone" in str(exc_info.value)


class TestFromCellEmpty:
    """空セルの変換テスト"""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "target_type, expected",
        [
            (str, ""),
            (int, 0),
            (float, 0.0),
            (bool, False),
            (Decimal, Decimal("0")),
            (datetime.date, None),
            (datetime.datetime, None),
            (Status, None),
        ],
    )
    def test_empty_maps_to_zero_value(self, target_type, expected):
        """空セルは型ごとのゼロ値になること"""
        assert ExcelCellCoercion.from_cell(None, target_type) == expected
        assert ExcelCellCoercion.from_cell("   ", target_type) == expected

    @pytest.mark.unit
    @pytest.mark.parametrize("target_type", [str, int, float, bool])
    def test_empty_optional_is_none(self, target_type):
        """Optionalなプロパティでは空セルはNoneになること"""
        assert ExcelCellCoercion.from_cell(None, target_type, optional=True) is None
        assert ExcelCellCoercion.from_cell("", target_type, optional=True) is None


class TestFromCellText:
    """文字列プロパティへの変換テスト"""

    @pytest.mark.unit
    def test_text_kept(self):
        assert ExcelCellCoercion.from_cell(" abc ", str) == " abc "

    @pytest.mark.unit
    def test_numbers_are_stringified(self):
        """数値セルは文字列化されること（整数値のfloatは .0 なし）"""
        assert ExcelCellCoercion.from_cell(42, str) == "42"
        assert ExcelCellCoercion.from_cell(42.0, str) == "42"
        assert ExcelCellCoercion.from_cell(1.5, str) == "1.5"

    @pytest.mark.unit
    def test_bool_and_date_are_stringified(self):
        assert ExcelCellCoercion.from_cell(True, str) == "TRUE"
        assert ExcelCellCoercion.from_cell(datetime.date(2024, 2, 3), str) == "2024-02-03"


class TestFromCellNumbers:
    """数値プロパティへの変換テスト"""

    @pytest.mark.unit
    def test_int_from_int_and_integral_float(self):
        """整数値のfloatはintとして読まれること"""
        assert ExcelCellCoercion.from_cell(7, int) == 7
        result = ExcelCellCoercion.from_cell(7.0, int)
        assert result == 7
        assert isinstance(result, int)

    @pytest.mark.unit
    def test_int_from_fractional_float_fails(self):
        """小数部を持つ値は切り捨てずにエラーにすること"""
        with pytest.raises(CellCoercionError) as exc_info:
            ExcelCellCoercion.from_cell(7.5, int)

        assert isinstance(exc_info.value.original_error, ValueError)

    @pytest.mark.unit
    def test_int_from_fractional_decimal_fails(self):
        with pytest.raises(CellCoercionError) as exc_info:
            ExcelCellCoercion.from_cell(Decimal("1.5"), int)

        assert isinstance(exc_info.value.original_error, ValueError)

    @pytest.mark.unit
    def test_int_from_text(self):
        assert ExcelCellCoercion.from_cell(" 12 ", int) == 12

    @pytest.mark.unit
    def test_int_from_invalid_text(self):
        """数値に変換できない文字列はCellCoercionError"""
        with pytest.raises(CellCoercionError) as exc_info:
            ExcelCellCoercion.from_cell("abc", int)

        error = exc_info.value
        assert error.category == ErrorCategory.CELL_COERCION
        assert error.value == "abc"
        assert error.target_type is int
        assert isinstance(error.original_error, ValueError)

    @pytest.mark.unit
    def test_float_conversions(self):
        assert ExcelCellCoercion.from_cell(3, float) == 3.0
        assert ExcelCellCoercion.from_cell("2.5", float) == 2.5
        with pytest.raises(CellCoercionError):
            ExcelCellCoercion.from_cell("two", float)

    @pytest.mark.unit
    def test_decimal_conversions(self):
        """floatの2進誤差を持ち込まないこと"""
        assert ExcelCellCoercion.from_cell(0.1, Decimal) == Decimal("0.1")
        assert ExcelCellCoercion.from_cell("10.50", Decimal) == Decimal("10.50")
        with pytest.raises(CellCoercionError):
            ExcelCellCoercion.from_cell("ten", Decimal)


class TestFromCellBool:
    """真偽値（フラグ）への変換テスト"""

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [True, 1, 2.5, "true", "YES", "y", "1", "x", "On"])
    def test_true_flags(self, value):
        assert ExcelCellCoercion.from_cell(value, bool) is True

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [False, 0, 0.0, "false", "No", "n", "0", "off"])
    def test_false_flags(self, value):
        assert ExcelCellCoercion.from_cell(value, bool) is False

    @pytest.mark.unit
    def test_unknown_flag(self):
        with pytest.raises(CellCoercionError):
            ExcelCellCoercion.from_cell("maybe", bool)


class TestFromCellDates:
    """日付・時刻への変換テスト"""

    @pytest.mark.unit
    def test_date_from_datetime(self):
        """openpyxlは日付をdatetimeで返すためdateに変換すること"""
        value = datetime.datetime(2024, 5, 6, 0, 0)
        assert ExcelCellCoercion.from_cell(value, datetime.date) == datetime.date(2024, 5, 6)

    @pytest.mark.unit
    def test_datetime_from_date(self):
        value = datetime.date(2024, 5, 6)
        assert ExcelCellCoercion.from_cell(value, datetime.datetime) == datetime.datetime(
            2024, 5, 6
        )

    @pytest.mark.unit
    def test_dates_from_iso_text(self):
        assert ExcelCellCoercion.from_cell("2024-05-06", datetime.date) == datetime.date(
            2024, 5, 6
        )
        assert ExcelCellCoercion.from_cell(
            "2024-05-06T10:20:30", datetime.datetime
        ) == datetime.datetime(2024, 5, 6, 10, 20, 30)
        assert ExcelCellCoercion.from_cell("10:20", datetime.time) == datetime.time(10, 20)

    @pytest.mark.unit
    def test_date_from_excel_serial(self):
        """数値セルはExcelのシリアル値として解釈すること"""
        assert ExcelCellCoercion.from_cell(45000, datetime.date) == datetime.date(
            2023, 3, 15
        )

    @pytest.mark.unit
    def test_invalid_date_text(self):
        with pytest.raises(CellCoercionError):
            ExcelCellCoercion.from_cell("not a date", datetime.date)

    @pytest.mark.unit
    def test_bool_is_not_a_date(self):
        with pytest.raises(CellCoercionError):
            ExcelCellCoercion.from_cell(True, datetime.date)


class TestFromCellEnum:
    """Enumへの変換テスト"""

    @pytest.mark.unit
    def test_enum_by_name(self):
        assert ExcelCellCoercion.from_cell("ACTIVE", Status) is Status.ACTIVE

    @pytest.mark.unit
    def test_enum_by_value(self):
        assert ExcelCellCoercion.from_cell("retired", Status) is Status.RETIRED

    @pytest.mark.unit
    def test_unknown_member(self):
        with pytest.raises(CellCoercionError):
            ExcelCellCoercion.from_cell("FIRED", Status)


class TestFromCellUnsupportedTarget:
    """サポート外の型への変換テスト"""

    @pytest.mark.unit
    def test_unsupported_target_type(self):
        with pytest.raises(CellCoercionError) as exc_info:
            ExcelCellCoercion.from_cell("a", bytes)

        assert isinstance(exc_info.value.original_error, TypeError)
