"""Domain models for the spreadsheet -> SQLite converter.

All models are transient and scoped to one conversion (or one batch run).
"""

from .conversion_result import BatchResult, ConversionResult, ConversionStatus
from .error_record import ErrorRecord
from .header import HeaderOrigin, ResolvedHeader
from .source import SourceDescriptor, SourceFormat

__all__ = [
    # Source models
    "SourceDescriptor",
    "SourceFormat",
    # Header models
    "HeaderOrigin",
    "ResolvedHeader",
    # Result models
    "BatchResult",
    "ConversionResult",
    "ConversionStatus",
    "ErrorRecord",
]
