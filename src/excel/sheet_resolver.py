"""
Excelシート解決ユーティリティ

シート検索ポリシー（名前指定 / 先頭シート）に従って読み込むシートを決定する
"""

import logging
from dataclasses import dataclass

from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from src.error_messages import SheetNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ByName:
    """候補名を順に試し、最初に完全一致したシートを使う"""

    names: tuple[str, ...]

    def __post_init__(self):
        # listで渡されても不変にする
        object.__setattr__(self, "names", tuple(self.names))


@dataclass(frozen=True)
class First:
    """常に先頭（index 0）のシートを使う"""


SheetLookupPolicy = ByName | First


def by_name(*names: str) -> ByName:
    return ByName(names)


def first() -> First:
    return First()


def resolve(workbook: Workbook, policy: SheetLookupPolicy) -> Worksheet:
    """
    ポリシーに従ってシートを取得

    Args:
        workbook: openpyxl Workbook
        policy: ByName または First

    Returns:
        openpyxl Worksheet

    Raises:
        SheetNotFoundError: 該当するシートが無い場合（ByNameはFirstにフォールバックしない）
    """
    sheetnames = workbook.sheetnames

    if isinstance(policy, ByName):
        for name in policy.names:
            # 大文字小文字を区別した完全一致のみ
            if name in sheetnames:
                logger.debug(f"Resolved sheet by name: {name}")
                return workbook[name]
        raise SheetNotFoundError(list(policy.names), sheetnames)

    if isinstance(policy, First):
        if not workbook.worksheets:
            raise SheetNotFoundError([], sheetnames)
        return workbook.worksheets[0]

    raise TypeError(f"Unknown sheet lookup policy: {policy!r}")
