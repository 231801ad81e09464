"""
Точка входа парсера — связывает чтение файла, определение формата и экстракторы.

Пайплайн:
1. Чтение файла целиком в память
2. Определение формата (расширение, затем содержимое)
3. Экстракторы по очереди, пока один не найдёт сделки
4. Результат: список сделок (возможно пустой)
"""

import asyncio
from typing import Callable, Optional, Union
import logging

from data.models import ParsedDeal, ParsedReport, ReportFormat
from data.parser import (
    ReportSource,
    decode_text,
    detect_format,
    read_report,
    sniff_formats,
    source_name,
)
from extractors.html_report import extract_html_deals
from extractors.xlsx_report import extract_xlsx_deals
from extractors.xml_report import parse_xml_report

logger = logging.getLogger(__name__)


def _extract_xml(text: str) -> tuple[list[ParsedDeal], Optional[str]]:
    deals = parse_xml_report(text)
    return deals, ("positions" if deals else None)


# Текстовые форматы -> экстрактор
TEXT_EXTRACTORS: dict[ReportFormat, Callable[[str], tuple[list[ParsedDeal], Optional[str]]]] = {
    ReportFormat.XML: _extract_xml,
    ReportFormat.HTML: extract_html_deals,
}


def parse_report_content(content: Union[bytes, str], filename: str = "") -> ParsedReport:
    """
    Разбор уже прочитанного содержимого отчёта (без I/O).

    Args:
        content: bytes (любой формат) или str (HTML/XML)
        filename: имя файла, по расширению выбирается формат

    Returns:
        ParsedReport; deals пустой, если ничего не распознано
    """
    fmt = detect_format(filename)
    logger.info(f"Парсинг отчёта: {filename or '<без имени>'} (формат: {fmt.value})")

    if fmt == ReportFormat.SPREADSHEET:
        data = content.encode("utf-8") if isinstance(content, str) else content
        deals, strategy = extract_xlsx_deals(data)
        return _report(deals, filename, fmt, strategy)

    text = content if isinstance(content, str) else decode_text(content)
    candidates = [fmt] if fmt != ReportFormat.UNKNOWN else sniff_formats(text)

    for candidate in candidates:
        deals, strategy = TEXT_EXTRACTORS[candidate](text)
        if deals:
            return _report(deals, filename, candidate, strategy)
        logger.debug(f"Формат {candidate.value} не дал сделок")

    return _report([], filename, None, None)


def _report(
    deals: list[ParsedDeal],
    filename: str,
    fmt: Optional[ReportFormat],
    strategy: Optional[str]
) -> ParsedReport:
    if deals:
        logger.info(f"Найдено {len(deals)} сделок ({fmt.value}/{strategy})")
    else:
        logger.info(f"В отчёте {filename or '<без имени>'} сделок не найдено")
    return ParsedReport(
        deals=deals,
        filename=filename,
        source_format=fmt if deals else None,
        strategy=strategy if deals else None,
    )


def parse_report_file(source: ReportSource, filename: Optional[str] = None) -> ParsedReport:
    """
    Читает и разбирает файл отчёта.

    Args:
        source: путь к файлу или бинарный file-like объект
        filename: имя файла (если не задано — берётся из source)

    Returns:
        ParsedReport

    Raises:
        ReportReadError: если файл не читается
    """
    name = filename if filename is not None else source_name(source)
    data = read_report(source)
    return parse_report_content(data, name)


async def parse_broker_report(source: ReportSource, filename: Optional[str] = None) -> list[ParsedDeal]:
    """
    Асинхронный разбор отчёта брокера (HTML, XML или XLSX).

    Чтение и разбор выполняются в отдельном потоке, чтобы не блокировать
    event loop на больших файлах.

    Returns:
        list[ParsedDeal] для предзаполнения формы сделки

    Raises:
        ReportReadError: если файл не читается
    """
    report = await asyncio.to_thread(parse_report_file, source, filename)
    return report.deals
