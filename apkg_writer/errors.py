"""
Error handling for the Anki package writer.

This module provides the typed exceptions raised by the package assembly
pipeline together with structured error records and actionable messages.
"""

import errno
import logging
from enum import Enum
from typing import List, Optional, Dict, Any
from dataclasses import dataclass


class ErrorSeverity(Enum):
    """Error severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Categories of errors that can occur while writing a package."""
    INPUT_VALIDATION = "input_validation"
    PATH_FORMAT = "path_format"
    IO = "io"
    DATABASE = "database"
    ARCHIVE = "archive"
    ENCODING = "encoding"


@dataclass
class ProcessingError:
    """Represents a processing error with context and guidance."""
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    details: str
    suggested_actions: List[str]
    error_code: str
    context: Dict[str, Any] = None

    def __post_init__(self):
        if self.context is None:
            self.context = {}


class ApkgWriterError(Exception):
    """Base exception for Anki package writer errors."""

    def __init__(self, processing_error: ProcessingError):
        self.processing_error = processing_error
        super().__init__(processing_error.message)

    @property
    def error_code(self) -> str:
        return self.processing_error.error_code


class PathFormatError(ApkgWriterError):
    """Raised when a media path cannot be used as a file path."""
    pass


class PackageIOError(ApkgWriterError):
    """Raised when reading inputs or writing the output fails."""
    pass


class DatabaseError(ApkgWriterError):
    """Raised when building the collection database fails."""
    pass


class ArchiveError(ApkgWriterError):
    """Raised when writing or finalizing the zip archive fails."""
    pass


class EncodingError(ApkgWriterError):
    """Raised when a media name or the media manifest cannot be encoded."""
    pass


class InputValidationError(ApkgWriterError):
    """Raised when note input or the build timestamp is malformed."""
    pass


class ErrorHandler:
    """
    Centralized error handling and reporting system.

    Translates low-level failures into ProcessingError records with stable
    error codes, and collects them for summary reporting.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self.errors: List[ProcessingError] = []
        self.warnings: List[ProcessingError] = []

    def add_error(self, error: ProcessingError) -> None:
        """Add an error to the collection."""
        if error.severity in [ErrorSeverity.ERROR, ErrorSeverity.CRITICAL]:
            self.errors.append(error)
        elif error.severity == ErrorSeverity.WARNING:
            self.warnings.append(error)

        log_level = {
            ErrorSeverity.INFO: logging.INFO,
            ErrorSeverity.WARNING: logging.WARNING,
            ErrorSeverity.ERROR: logging.ERROR,
            ErrorSeverity.CRITICAL: logging.CRITICAL
        }[error.severity]

        self.logger.log(log_level, f"[{error.error_code}] {error.message}")
        if error.details:
            self.logger.log(log_level, f"Details: {error.details}")

    def has_errors(self) -> bool:
        """Check if any errors have been recorded."""
        return len(self.errors) > 0

    def has_warnings(self) -> bool:
        """Check if any warnings have been recorded."""
        return len(self.warnings) > 0

    def get_error_summary(self) -> Dict[str, Any]:
        """Get a summary of all errors and warnings."""
        return {
            'error_count': len(self.errors),
            'warning_count': len(self.warnings),
            'errors': [self._format_error_for_summary(e) for e in self.errors],
            'warnings': [self._format_error_for_summary(e) for e in self.warnings]
        }

    def _format_error_for_summary(self, error: ProcessingError) -> Dict[str, Any]:
        """Format error for summary display."""
        return {
            'code': error.error_code,
            'category': error.category.value,
            'severity': error.severity.value,
            'message': error.message,
            'suggested_actions': error.suggested_actions
        }

    def clear_errors(self) -> None:
        """Clear all recorded errors and warnings."""
        self.errors.clear()
        self.warnings.clear()

    def handle_path_error(self, path: Any, reason: str,
                          context: Dict[str, Any] = None) -> ProcessingError:
        """Handle a media path that cannot be parsed or has no file name."""
        return ProcessingError(
            category=ErrorCategory.PATH_FORMAT,
            severity=ErrorSeverity.ERROR,
            message="Invalid media file path",
            details=f"{reason}: {path!r}",
            suggested_actions=[
                "Pass media files as strings or os.PathLike objects",
                "Make sure each path names a file, not a directory"
            ],
            error_code="PATH_001",
            context=context
        )

    def handle_io_error(self, error: OSError, context: Dict[str, Any] = None) -> ProcessingError:
        """Handle file system errors."""
        filename = getattr(error, 'filename', None)

        if error.errno == errno.ENOENT:
            return ProcessingError(
                category=ErrorCategory.IO,
                severity=ErrorSeverity.ERROR,
                message="File not found",
                details=f"No such file: {filename}",
                suggested_actions=[
                    "Check that every media file exists before writing the package",
                    "Use absolute paths if the working directory may differ"
                ],
                error_code="IO_001",
                context=context
            )

        if error.errno in (errno.EACCES, errno.EPERM):
            return ProcessingError(
                category=ErrorCategory.IO,
                severity=ErrorSeverity.ERROR,
                message="Permission denied",
                details=f"Cannot access {filename}: {error}",
                suggested_actions=[
                    "Check file and directory permissions",
                    "Choose an output location you can write to"
                ],
                error_code="IO_002",
                context=context
            )

        return ProcessingError(
            category=ErrorCategory.IO,
            severity=ErrorSeverity.ERROR,
            message="File system operation failed",
            details=str(error),
            suggested_actions=[
                "Check available disk space",
                "Verify the input and output paths"
            ],
            error_code="IO_003",
            context=context
        )

    def handle_database_error(self, error: Exception, context: Dict[str, Any] = None) -> ProcessingError:
        """Handle collection database errors."""
        error_str = str(error).lower()

        if 'constraint' in error_str or 'unique' in error_str:
            return ProcessingError(
                category=ErrorCategory.DATABASE,
                severity=ErrorSeverity.ERROR,
                message="Collection database constraint violated",
                details=f"A row could not be inserted: {error}",
                suggested_actions=[
                    "Check for duplicate note or deck identifiers",
                    "Avoid adding the same note to a deck twice"
                ],
                error_code="DB_002",
                context=context
            )

        return ProcessingError(
            category=ErrorCategory.DATABASE,
            severity=ErrorSeverity.ERROR,
            message="Collection database write failed",
            details=str(error),
            suggested_actions=[
                "Check that the temporary directory is writable",
                "Check available disk space"
            ],
            error_code="DB_001",
            context=context
        )

    def handle_archive_error(self, error: Exception, context: Dict[str, Any] = None) -> ProcessingError:
        """Handle zip archive errors."""
        return ProcessingError(
            category=ErrorCategory.ARCHIVE,
            severity=ErrorSeverity.ERROR,
            message="Package archive write failed",
            details=str(error),
            suggested_actions=[
                "Make sure the output stream is open for binary writing",
                "Do not reuse an output stream that was already closed"
            ],
            error_code="ZIP_001",
            context=context
        )

    def handle_encoding_error(self, error: Exception, context: Dict[str, Any] = None) -> ProcessingError:
        """Handle media name and manifest encoding errors."""
        return ProcessingError(
            category=ErrorCategory.ENCODING,
            severity=ErrorSeverity.ERROR,
            message="Media name cannot be encoded as UTF-8",
            details=str(error),
            suggested_actions=[
                "Rename media files so their names are valid Unicode text"
            ],
            error_code="ENC_001",
            context=context
        )

    def handle_timestamp_error(self, timestamp: Any, context: Dict[str, Any] = None) -> ProcessingError:
        """Handle a build timestamp that cannot seed identifiers."""
        return ProcessingError(
            category=ErrorCategory.INPUT_VALIDATION,
            severity=ErrorSeverity.ERROR,
            message="Invalid build timestamp",
            details=f"Timestamp must be a finite number of seconds, got {timestamp!r}",
            suggested_actions=[
                "Pass seconds since the epoch, e.g. 1600000000",
                "Omit the timestamp to use the current time"
            ],
            error_code="TIME_001",
            context=context
        )

    def handle_cleanup_warning(self, path: Any, error: OSError,
                               context: Dict[str, Any] = None) -> ProcessingError:
        """Handle a partial output file that could not be removed."""
        return ProcessingError(
            category=ErrorCategory.IO,
            severity=ErrorSeverity.WARNING,
            message="Could not remove partial package",
            details=f"{path}: {error}",
            suggested_actions=[
                "Delete the file manually; it is not a complete package"
            ],
            error_code="IO_004",
            context=context
        )

    def handle_validation_error(self, validation_errors: List[str],
                                context: Dict[str, Any] = None) -> ProcessingError:
        """Handle malformed note input rows."""
        error_count = len(validation_errors)

        return ProcessingError(
            category=ErrorCategory.INPUT_VALIDATION,
            severity=ErrorSeverity.ERROR,
            message="Validation failed for note input",
            details=f"{error_count} validation error(s) found: {', '.join(validation_errors[:3])}{'...' if error_count > 3 else ''}",
            suggested_actions=[
                "Use one note per line as front<TAB>back[<TAB>media file]",
                "Fill in missing front or back text"
            ],
            error_code="VALID_001",
            context=context
        )


# Global error handler instance
error_handler = ErrorHandler()


def path_format_error(path: Any, reason: str) -> PathFormatError:
    """Build a PathFormatError for ``path``."""
    return PathFormatError(error_handler.handle_path_error(path, reason, {'path': path}))


def io_error(error: OSError, context: Optional[Dict[str, Any]] = None) -> PackageIOError:
    """Wrap an OSError into a PackageIOError."""
    return PackageIOError(error_handler.handle_io_error(error, context))


def database_error(error: Exception, context: Optional[Dict[str, Any]] = None) -> DatabaseError:
    """Wrap a sqlite3 error into a DatabaseError."""
    return DatabaseError(error_handler.handle_database_error(error, context))


def archive_error(error: Exception, context: Optional[Dict[str, Any]] = None) -> ArchiveError:
    """Wrap a zipfile error into an ArchiveError."""
    return ArchiveError(error_handler.handle_archive_error(error, context))


def encoding_error(error: Exception, context: Optional[Dict[str, Any]] = None) -> EncodingError:
    """Wrap a unicode or JSON error into an EncodingError."""
    return EncodingError(error_handler.handle_encoding_error(error, context))


def timestamp_error(timestamp: Any) -> InputValidationError:
    """Build an InputValidationError for a non-finite build timestamp."""
    return InputValidationError(error_handler.handle_timestamp_error(timestamp, {'timestamp': timestamp}))
