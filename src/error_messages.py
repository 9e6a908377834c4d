"""
Error message definitions for the Excel object import/export service
Provides error types with a category, a readable message and a suggested solution
"""

from enum import Enum
from typing import Any
from zipfile import BadZipFile

from openpyxl.utils.exceptions import InvalidFileException


class ErrorCategory(Enum):
    """Error category definitions"""

    UNSUPPORTED_TYPE = "unsupported_type"
    UNSUPPORTED_VALUE = "unsupported_value"
    CELL_COERCION = "cell_coercion"
    SHEET_NOT_FOUND = "sheet_not_found"
    INVALID_FILE = "invalid_file"
    IO = "io"
    LIMIT_EXCEEDED = "limit_exceeded"
    CONVERSION = "conversion"
    UNKNOWN = "unknown"


class ExcelServiceError(Exception):
    """Base exception class for Excel import/export operations"""

    def __init__(
        self,
        category: ErrorCategory,
        message: str,
        solution: str,
        original_error: Exception | None = None,
    ):
        self.category = category
        self.message = message
        self.solution = solution
        self.original_error = original_error
        super().__init__(self.get_formatted_message())

    def get_formatted_message(self) -> str:
        """Get formatted error message"""
        return f"{self.message} {self.solution}"

    @property
    def root_cause(self) -> Exception:
        """Innermost error in the original_error chain (self if there is none)"""
        error: Exception = self
        while isinstance(error, ExcelServiceError) and error.original_error is not None:
            error = error.original_error
        return error

    @property
    def service_cause(self) -> "ExcelServiceError":
        """Innermost ExcelServiceError in the original_error chain (self if there is none)"""
        found: ExcelServiceError = self
        current = self.original_error
        while isinstance(current, ExcelServiceError):
            found = current
            current = current.original_error
        return found


class UnsupportedTypeError(ExcelServiceError):
    """The target type exposes no mappable properties"""

    def __init__(self, cls: type, reason: str = ""):
        self.cls = cls
        message = f"Type '{getattr(cls, '__name__', cls)}' has no properties that can be mapped to spreadsheet columns."
        if reason:
            message = f"{message} {reason}"
        super().__init__(
            category=ErrorCategory.UNSUPPORTED_TYPE,
            message=message,
            solution="Declare the type as a dataclass or annotated class with text, number, boolean or date fields, or register its columns explicitly.",
        )


class UnsupportedValueError(ExcelServiceError):
    """A property value has no spreadsheet representation"""

    def __init__(self, value: Any, column: str | None = None, reason: str = ""):
        self.value = value
        self.column = column
        self.reason = reason
        location = f" in column '{column}'" if column else ""
        message = f"Value of type '{type(value).__name__}'{location} cannot be written to a spreadsheet cell."
        if reason:
            message = f"{message} {reason}"
        super().__init__(
            category=ErrorCategory.UNSUPPORTED_VALUE,
            message=message,
            solution="Only text, numbers, booleans, dates, times, enums and empty values can be exported.",
        )


class CellCoercionError(ExcelServiceError):
    """A cell's content cannot be coerced to the target property type"""

    def __init__(
        self,
        value: Any,
        target_type: type,
        original_error: Exception | None = None,
    ):
        self.value = value
        self.target_type = target_type
        super().__init__(
            category=ErrorCategory.CELL_COERCION,
            message=f"Cell value {value!r} cannot be converted to '{getattr(target_type, '__name__', target_type)}'.",
            solution="Please correct the cell content so that it matches the column's expected type.",
            original_error=original_error,
        )


class SheetNotFoundError(ExcelServiceError):
    """The sheet lookup policy found no matching sheet"""

    def __init__(
        self,
        attempted_names: list[str],
        available_names: list[str] | None = None,
    ):
        self.attempted_names = list(attempted_names)
        self.available_names = list(available_names or [])
        if self.attempted_names:
            message = f"Could not locate sheet named any of: {self.attempted_names}"
        else:
            message = "The workbook does not contain any sheets."
        if self.available_names:
            message = f"{message} (available sheets: {self.available_names})"
        super().__init__(
            category=ErrorCategory.SHEET_NOT_FOUND,
            message=message,
            solution="Please check the sheet names in the workbook or use the FIRST lookup policy.",
        )


class ExcelConversionError(ExcelServiceError):
    """Failure inside the converter, wrapping the originating cause"""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        category: ErrorCategory | None = None,
    ):
        if category is None:
            if isinstance(original_error, ExcelServiceError):
                category = original_error.category
            else:
                category = ErrorCategory.CONVERSION
        solution = (
            original_error.solution
            if isinstance(original_error, ExcelServiceError)
            else "Please check the spreadsheet contents and the target type definition."
        )
        super().__init__(
            category=category,
            message=message,
            solution=solution,
            original_error=original_error,
        )


class ExcelExportError(ExcelServiceError):
    """Caller-facing error for the export direction"""


class ExcelImportError(ExcelServiceError):
    """Caller-facing error for the import direction"""


def get_invalid_file_error(
    original_error: Exception, context: str
) -> ExcelServiceError:
    """Generate invalid file error message"""
    error_class = ExcelImportError if context == "import" else ExcelExportError
    return error_class(
        category=ErrorCategory.INVALID_FILE,
        message="The file is not a valid spreadsheet.",
        solution="Please provide an Office Open XML workbook (.xlsx or .xlsm).",
        original_error=original_error,
    )


def get_io_error(original_error: Exception, context: str) -> ExcelServiceError:
    """Generate I/O error message"""
    error_class = ExcelImportError if context == "import" else ExcelExportError
    action = "reading" if context == "import" else "writing"
    return error_class(
        category=ErrorCategory.IO,
        message=f"An I/O error occurred while {action} the spreadsheet.",
        solution="Please check that the file is accessible and try again.",
        original_error=original_error,
    )


def get_unknown_error(original_error: Exception, context: str) -> ExcelServiceError:
    """Generate unknown error message"""
    error_class = ExcelImportError if context == "import" else ExcelExportError
    return error_class(
        category=ErrorCategory.UNKNOWN,
        message=f"An unexpected error occurred during {context}: {original_error}",
        solution="Please check the input data or contact your administrator.",
        original_error=original_error,
    )


def handle_excel_error(error: Exception, context: str) -> ExcelServiceError:
    """
    Translate any failure into the single caller-facing error type for one direction

    Args:
        error: The exception that occurred
        context: "export" or "import"

    Returns:
        ExcelExportError or ExcelImportError carrying the original error
    """
    error_class = ExcelImportError if context == "import" else ExcelExportError

    # Already translated
    if isinstance(error, error_class):
        return error

    # Classification by the innermost service error
    if isinstance(error, ExcelServiceError):
        inner = error.service_cause
        return error_class(
            category=inner.category,
            message=f"Failed to {context} spreadsheet: {inner.message}",
            solution=inner.solution,
            original_error=error,
        )

    # Classification by low-level exception type
    if isinstance(error, (BadZipFile, InvalidFileException)):
        return get_invalid_file_error(error, context)
    elif isinstance(error, OSError):
        return get_io_error(error, context)
    else:
        return get_unknown_error(error, context)
