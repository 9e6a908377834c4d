"""
Excelインポート/エクスポートサービス（公開エントリーポイント）
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TypeVar

from src.config import ExcelServiceConfig
from src.config import config as default_config
from src.error_messages import handle_excel_error
from src.excel import ColumnRegistry, SheetLookupPolicy
from src.excel_converter import ExcelConverter

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Blob:
    """ファイル名・メディアタイプ付きのバイト列"""

    name: str
    media_type: str
    data: bytes


class ExcelService:
    """
    ドメインオブジェクトとExcelファイルの相互変換サービス

    インポートで返されるオブジェクトは常に新しく作成される（既存インスタンスとの
    マージは行わない）。失敗時は方向ごとに1種類の例外（ExcelExportError /
    ExcelImportError）に変換し、original_error に原因を保持する。
    """

    def __init__(
        self,
        config: ExcelServiceConfig | None = None,
        registry: ColumnRegistry | None = None,
    ):
        self.config = config or default_config
        self.registry = registry or ColumnRegistry()

    def _new_converter(self) -> ExcelConverter:
        return ExcelConverter(self.registry, self.config)

    def to_excel(
        self,
        objects: Sequence[T],
        cls: type[T],
        file_name: str,
    ) -> Blob:
        """
        オブジェクトのリストからスプレッドシートのBlobを作成

        Args:
            objects: 出力するオブジェクト
            cls: 対象クラス
            file_name: ファイル名（拡張子が無ければ付与）

        Returns:
            Blob

        Raises:
            ExcelExportError: 列定義・値変換・書き込みのいずれかに失敗した場合
        """
        name = self.config.file_name_for(file_name)
        logger.info(f"Exporting {len(objects)} objects to {name}")

        try:
            data = self._new_converter().write(cls, objects)
        except Exception as e:
            error = handle_excel_error(e, "export")
            logger.error(f"Failed to export {name}: {error}")
            raise error from e

        return Blob(name=name, media_type=self.config.media_type, data=data)

    def from_excel(
        self,
        blob: Blob,
        cls: type[T],
        policy: SheetLookupPolicy,
        factory: Callable[[], T] | None = None,
    ) -> list[T]:
        """
        スプレッドシートの各データ行から指定クラスのオブジェクトを作成

        Args:
            blob: 読み込むBlob
            cls: 対象クラス
            policy: シート検索ポリシー（ByName / First）
            factory: インスタンス生成関数（省略時はclsから生成）

        Returns:
            行順のオブジェクトのリスト

        Raises:
            ExcelImportError: 読み込み・シート未検出・値変換のいずれかに失敗した場合
        """
        logger.info(f"Importing {cls.__name__} objects from {blob.name}")

        if blob.media_type != self.config.media_type:
            logger.debug(f"Unexpected media type for {blob.name}: {blob.media_type}")

        try:
            return self._new_converter().read(cls, blob.data, policy, factory)
        except Exception as e:
            error = handle_excel_error(e, "import")
            logger.error(f"Failed to import {blob.name}: {error}")
            raise error from e
