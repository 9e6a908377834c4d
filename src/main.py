import importlib
import json
import logging
import sys
from pathlib import Path
from typing import Any

import typer

from .config import config
from .error_messages import ExcelServiceError
from .excel import ByName, ExcelCellCoercion, First
from .excel_service import Blob, ExcelService

# typerアプリケーションを作成
app = typer.Typer(help="ドメインオブジェクトとExcelファイルを相互変換します。")


def setup_logging(level: str | None = None):
    """
    すべてのログ出力をstderrに向けるロギングを設定します。
    これにより、importコマンドのJSON出力（stdout）が汚染されるのを防ぎます。
    """
    log_formatter = logging.Formatter("%(asctime)s [%(levelname)s] - %(message)s")
    root_logger = logging.getLogger()
    root_logger.setLevel(level or config.log_level)

    # stdoutへの出力を防ぐため、既存のハンドラをクリア
    root_logger.handlers.clear()

    # stderrにログを出力するハンドラを追加
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(log_formatter)
    root_logger.addHandler(stream_handler)

    logging.debug("Logging configured to output to stderr.")


def load_model(path: str) -> type:
    """'package.module:ClassName' 形式の文字列からクラスを読み込む"""
    module_name, _, class_name = path.partition(":")
    if not module_name or not class_name:
        raise typer.BadParameter(
            f"Model must be given as 'module:ClassName', got '{path}'"
        )
    try:
        module = importlib.import_module(module_name)
        cls = getattr(module, class_name)
    except (ImportError, AttributeError) as e:
        raise typer.BadParameter(f"Could not load model '{path}': {e}") from e
    if not isinstance(cls, type):
        raise typer.BadParameter(f"'{path}' is not a class")
    return cls


def build_objects(service: ExcelService, cls: type, items: list[dict]) -> list:
    """JSONの各要素を列の型に変換してオブジェクトを作成"""
    columns = service.registry.columns_for(cls)
    objects = []
    for item in items:
        obj_values = {
            column.attribute or column.name: ExcelCellCoercion.from_cell(
                item.get(column.name), column.type, column.optional
            )
            for column in columns
        }
        objects.append(cls(**obj_values))
    return objects


def serialize_value(value: Any) -> Any:
    """セル値をJSONシリアライズ可能な形式に変換"""
    if value is None:
        return None

    # 基本的な型（JSONシリアライズ可能）はそのまま
    if isinstance(value, (str, int, float, bool)):
        return value

    # その他の型（datetime, Decimal, Enum等）はセル表現を文字列化
    return str(ExcelCellCoercion.to_cell(value))


@app.command("export")
def export_command(
    model: str = typer.Argument(..., help="対象クラス（'module:ClassName'）。"),
    input_file: Path = typer.Argument(..., help="オブジェクトのリストを含むJSONファイル。"),
    output_file: Path = typer.Argument(..., help="出力するxlsxファイル。"),
):
    """
    JSONのオブジェクトリストをExcelファイルに書き出します。
    """
    setup_logging()
    service = ExcelService(config=config)
    cls = load_model(model)

    items = json.loads(input_file.read_text(encoding="utf-8"))
    if not isinstance(items, list):
        logging.error(f"{input_file} must contain a JSON list")
        raise typer.Exit(code=1)

    try:
        objects = build_objects(service, cls, items)
        blob = service.to_excel(objects, cls, output_file.name)
    except ExcelServiceError as e:
        logging.error(str(e))
        raise typer.Exit(code=1) from e

    output_path = output_file.with_name(blob.name)
    output_path.write_bytes(blob.data)
    logging.info(f"Wrote {len(objects)} rows to {output_path}")


@app.command("import")
def import_command(
    model: str = typer.Argument(..., help="対象クラス（'module:ClassName'）。"),
    input_file: Path = typer.Argument(..., help="読み込むxlsxファイル。"),
    sheet: list[str] = typer.Option(
        None,
        "--sheet",
        help="読み込むシート名の候補（複数指定可、先に指定したものを優先）。省略時は先頭シート。",
    ),
    output_file: Path | None = typer.Option(
        None, "--output", help="JSONの出力先（省略時は標準出力）。"
    ),
):
    """
    Excelファイルの各行をオブジェクトとして読み込み、JSONで出力します。
    """
    setup_logging()
    service = ExcelService(config=config)
    cls = load_model(model)
    policy = ByName(tuple(sheet)) if sheet else First()

    blob = Blob(
        name=input_file.name,
        media_type=config.media_type,
        data=input_file.read_bytes(),
    )

    try:
        objects = service.from_excel(blob, cls, policy)
        columns = service.registry.columns_for(cls)
    except ExcelServiceError as e:
        logging.error(str(e))
        raise typer.Exit(code=1) from e

    rows = [
        {column.name: serialize_value(column.accessor(obj)) for column in columns}
        for obj in objects
    ]
    output = json.dumps(rows, ensure_ascii=False, indent=2)

    if output_file is None:
        typer.echo(output)
    else:
        output_file.write_text(output, encoding="utf-8")
        logging.info(f"Wrote {len(rows)} objects to {output_file}")


if __name__ == "__main__":
    app()
