"""
Excelセル値変換ユーティリティ

プロパティ値とセル値の相互変換を担当するヘルパークラス
"""

import datetime
import enum
from decimal import Decimal, InvalidOperation
from typing import Any

from openpyxl.utils.datetime import from_excel

from src.error_messages import CellCoercionError, UnsupportedValueError

# フラグとして解釈する文字列（小文字で比較）
TRUE_FLAGS = frozenset({"true", "yes", "y", "1", "x", "on"})
FALSE_FLAGS = frozenset({"false", "no", "n", "0", "off"})

# 空セルに対応するゼロ値（日付・時刻・Enumはゼロ値なし = None）
ZERO_VALUES: dict[type, Any] = {
    str: "",
    bool: False,
    int: 0,
    float: 0.0,
    Decimal: Decimal("0"),
}

NATIVE_CELL_TYPES = (
    bool,
    int,
    float,
    Decimal,
    str,
    datetime.datetime,
    datetime.date,
    datetime.time,
)


class ExcelCellCoercion:
    """セル値とプロパティ値の変換（全て staticmethod）"""

    @staticmethod
    def to_cell(value: Any) -> Any:
        """
        プロパティ値をセルに書き込める値に変換

        Args:
            value: プロパティ値

        Returns:
            openpyxlがそのまま書き込めるセル値（Noneは空セル）

        Raises:
            UnsupportedValueError: スプレッドシートで表現できない値の場合
        """
        if value is None:
            return None

        # Enumはメンバー名で出力（str/intを継承したEnumもここで処理）
        if isinstance(value, enum.Enum):
            return value.name

        # Excelはタイムゾーンを保持できない
        if (
            isinstance(value, (datetime.datetime, datetime.time))
            and value.tzinfo is not None
        ):
            raise UnsupportedValueError(
                value, reason="Time zone aware values are not supported."
            )

        if isinstance(value, NATIVE_CELL_TYPES):
            return value

        raise UnsupportedValueError(value)

    @staticmethod
    def is_empty(value: Any) -> bool:
        """空セル（None または空白のみの文字列）かどうか"""
        if value is None:
            return True
        return isinstance(value, str) and value.strip() == ""

    @staticmethod
    def zero_value(target_type: type) -> Any:
        """空セルに対応する値を返す"""
        for kind, zero in ZERO_VALUES.items():
            if target_type is kind:
                return zero
        # 派生型（Enum等）や日付型はゼロ値を持たない
        return None

    @staticmethod
    def from_cell(value: Any, target_type: type, optional: bool = False) -> Any:
        """
        セル値を対象プロパティの型に変換

        Args:
            value: セル値
            target_type: プロパティの宣言型
            optional: Trueの場合、空セルはNoneになる

        Returns:
            変換後の値

        Raises:
            CellCoercionError: 変換できない場合
        """
        if ExcelCellCoercion.is_empty(value):
            if optional:
                return None
            return ExcelCellCoercion.zero_value(target_type)

        try:
            if issubclass(target_type, enum.Enum):
                return ExcelCellCoercion._to_enum(value, target_type)
            # boolはintのサブクラスのため先に判定
            if target_type is bool:
                return ExcelCellCoercion._to_bool(value)
            if issubclass(target_type, str):
                return ExcelCellCoercion._to_text(value)
            if issubclass(target_type, int):
                return ExcelCellCoercion._to_int(value)
            if issubclass(target_type, float):
                return ExcelCellCoercion._to_float(value)
            if issubclass(target_type, Decimal):
                return ExcelCellCoercion._to_decimal(value)
            # datetimeはdateのサブクラスのため先に判定
            if issubclass(target_type, datetime.datetime):
                return ExcelCellCoercion._to_datetime(value)
            if issubclass(target_type, datetime.date):
                return ExcelCellCoercion._to_date(value)
            if issubclass(target_type, datetime.time):
                return ExcelCellCoercion._to_time(value)
            raise TypeError(f"unsupported target type {target_type!r}")
        except (ValueError, TypeError, KeyError, OverflowError, InvalidOperation) as e:
            # 失敗の原因は常に original_error に保持する
            raise CellCoercionError(value, target_type, original_error=e) from e

    @staticmethod
    def _to_text(value: Any) -> str:
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "TRUE" if value else "FALSE"
        if isinstance(value, float) and value.is_integer():
            # 整数値のfloatは ".0" を付けない
            return str(int(value))
        if isinstance(value, (datetime.date, datetime.time)):
            return value.isoformat()
        return str(value)

    @staticmethod
    def _to_int(value: Any) -> int:
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        # 小数部を持つ数値は切り捨てずにエラーにする
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueError(f"{value!r} has a fractional part")
            return int(value)
        if isinstance(value, Decimal):
            if value != value.to_integral_value():
                raise ValueError(f"{value!r} has a fractional part")
            return int(value)
        if isinstance(value, str):
            return int(value.strip())
        raise TypeError(f"unsupported cell value {value!r}")

    @staticmethod
    def _to_float(value: Any) -> float:
        if isinstance(value, (bool, int, float, Decimal)):
            return float(value)
        if isinstance(value, str):
            return float(value.strip())
        raise TypeError(f"unsupported cell value {value!r}")

    @staticmethod
    def _to_decimal(value: Any) -> Decimal:
        if isinstance(value, Decimal):
            return value
        if isinstance(value, bool):
            return Decimal(int(value))
        if isinstance(value, (int, float)):
            # floatの2進誤差を持ち込まないよう文字列経由
            return Decimal(str(value))
        if isinstance(value, str):
            return Decimal(value.strip())
        raise TypeError(f"unsupported cell value {value!r}")

    @staticmethod
    def _to_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float, Decimal)):
            return value != 0
        if isinstance(value, str):
            flag = value.strip().lower()
            if flag in TRUE_FLAGS:
                return True
            if flag in FALSE_FLAGS:
                return False
        raise ValueError(f"{value!r} is not a recognized flag")

    @staticmethod
    def _to_datetime(value: Any) -> datetime.datetime:
        if isinstance(value, datetime.datetime):
            return value
        if isinstance(value, datetime.date):
            return datetime.datetime.combine(value, datetime.time())
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            # Excelのシリアル値
            converted = from_excel(value)
            if isinstance(converted, datetime.datetime):
                return converted
        if isinstance(value, str):
            return datetime.datetime.fromisoformat(value.strip())
        raise TypeError(f"unsupported cell value {value!r}")

    @staticmethod
    def _to_date(value: Any) -> datetime.date:
        if isinstance(value, datetime.datetime):
            return value.date()
        if isinstance(value, datetime.date):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            converted = from_excel(value)
            if isinstance(converted, datetime.datetime):
                return converted.date()
        if isinstance(value, str):
            text = value.strip()
            try:
                return datetime.date.fromisoformat(text)
            except ValueError:
                return datetime.datetime.fromisoformat(text).date()
        raise TypeError(f"unsupported cell value {value!r}")

    @staticmethod
    def _to_time(value: Any) -> datetime.time:
        if isinstance(value, datetime.datetime):
            return value.time()
        if isinstance(value, datetime.time):
            return value
        if isinstance(value, str):
            return datetime.time.fromisoformat(value.strip())
        raise TypeError(f"unsupported cell value {value!r}")

    @staticmethod
    def _to_enum(value: Any, target_type: type[enum.Enum]) -> enum.Enum:
        if isinstance(value, target_type):
            return value
        if isinstance(value, str):
            name = value.strip()
            if name in target_type.__members__:
                return target_type[name]
        # メンバー名で見つからなければ値で検索
        return target_type(value)
