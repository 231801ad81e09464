"""
Чтение файла отчёта и определение формата.

Функции:
- read_report(): читает файл целиком в память
- detect_format(): формат по расширению
- sniff_formats(): порядок форматов для файла без известного расширения
- decode_text(): bytes -> str с учётом BOM и кодировок
"""

from pathlib import Path
from typing import BinaryIO, Union
import logging

from config import settings
from data.models import ReportFormat

logger = logging.getLogger(__name__)


ReportSource = Union[str, Path, BinaryIO]

EXTENSION_FORMATS = {
    ".xlsx": ReportFormat.SPREADSHEET,
    ".xls": ReportFormat.SPREADSHEET,
    ".xml": ReportFormat.XML,
    ".htm": ReportFormat.HTML,
    ".html": ReportFormat.HTML,
}

# Кодировки, которые пробуем по очереди (после проверки BOM)
TEXT_ENCODINGS = ["utf-8", "cp1251"]


class ReportReadError(Exception):
    """Файл отчёта не удалось прочитать"""
    pass


class ReportTooLargeError(ReportReadError):
    """Файл больше допустимого размера"""
    pass


def read_report(source: ReportSource) -> bytes:
    """
    Читает файл отчёта целиком.

    Args:
        source: путь к файлу или бинарный file-like объект

    Returns:
        bytes с содержимым файла

    Raises:
        ReportReadError: если файл не читается или слишком большой
    """
    max_bytes = settings.max_file_size_mb * 1024 * 1024

    try:
        if isinstance(source, (str, Path)):
            path = Path(source)
            if not path.is_file():
                raise ReportReadError(f"Файл не найден: {path}")
            if path.stat().st_size > max_bytes:
                raise ReportTooLargeError(
                    f"Файл {path.name} больше {settings.max_file_size_mb} МБ"
                )
            data = path.read_bytes()
        else:
            data = source.read(max_bytes + 1)
    except ReportReadError:
        raise
    except Exception as e:
        logger.error(f"Ошибка при чтении файла: {e}")
        raise ReportReadError(f"Не удалось прочитать файл: {e}") from e

    if data is None:
        raise ReportReadError("Не удалось прочитать файл: пустой поток")

    if isinstance(data, str):
        data = data.encode("utf-8")

    if len(data) > max_bytes:
        raise ReportTooLargeError(f"Файл больше {settings.max_file_size_mb} МБ")

    logger.debug(f"Файл прочитан: {len(data)} байт")
    return data


def source_name(source: ReportSource) -> str:
    """Имя файла для определения формата."""
    if isinstance(source, (str, Path)):
        return Path(source).name
    return Path(str(getattr(source, "name", "") or "")).name


def detect_format(filename: str) -> ReportFormat:
    """
    Формат по расширению файла.

    - .xlsx / .xls -> spreadsheet
    - .xml -> xml
    - .htm / .html -> html
    - остальное -> unknown (смотрим на содержимое)
    """
    suffix = Path(filename or "").suffix.lower()
    return EXTENSION_FORMATS.get(suffix, ReportFormat.UNKNOWN)


def sniff_formats(text: str) -> list[ReportFormat]:
    """
    Порядок разбора для файла с нераспознанным расширением.

    Если содержимое начинается с '<' (включая '<?xml') — сначала XML,
    потом HTML. Некоторые терминалы сохраняют HTML с расширением .txt.
    """
    if text.lstrip().startswith("<"):
        return [ReportFormat.XML, ReportFormat.HTML]
    return [ReportFormat.HTML]


def decode_text(data: bytes) -> str:
    """
    Декодирует текстовый отчёт.

    MT5 сохраняет HTML отчёты в UTF-16 с BOM, поэтому сначала смотрим BOM,
    затем пробуем кодировки по очереди.
    """
    if data.startswith(b"\xef\xbb\xbf"):
        return data.decode("utf-8-sig", errors="replace")
    if data.startswith((b"\xff\xfe", b"\xfe\xff")):
        return data.decode("utf-16", errors="replace")

    for encoding in TEXT_ENCODINGS:
        try:
            text = data.decode(encoding)
            logger.debug(f"Текст декодирован в {encoding}")
            return text
        except UnicodeDecodeError:
            continue

    # latin-1 декодирует любые байты
    return data.decode("latin-1")
