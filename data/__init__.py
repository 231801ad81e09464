"""
Data module — модели, нормализация значений, чтение файлов.
"""

from data.models import (
    DealType,
    ReportFormat,
    ParsedDeal,
    ColumnRoleMap,
    ParsedReport,
)
from data.parser import (
    ReportReadError,
    ReportTooLargeError,
    read_report,
    detect_format,
    sniff_formats,
    decode_text,
)
from data.cleaner import (
    parse_number,
    parse_volume,
    parse_date,
    normalize_direction,
    direction_of,
    is_plausible_symbol,
    clean_header,
)

__all__ = [
    # Models
    "DealType",
    "ReportFormat",
    "ParsedDeal",
    "ColumnRoleMap",
    "ParsedReport",
    # Parser
    "ReportReadError",
    "ReportTooLargeError",
    "read_report",
    "detect_format",
    "sniff_formats",
    "decode_text",
    # Cleaner
    "parse_number",
    "parse_volume",
    "parse_date",
    "normalize_direction",
    "direction_of",
    "is_plausible_symbol",
    "clean_header",
]
