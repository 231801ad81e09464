"""
Парсер Excel отчётов (выгрузка MT5 в XLSX и похожие).

Листы смотрим по порядку, останавливаемся на первом, где нашлись сделки.
Внутри листа две стратегии:
1. header_scan — заголовок таблицы позиций где-то в первых строках
2. section_probe — строка "Positions", а заголовок на 1-4 строки ниже
   (между ними бывают пустые и объединённые строки)
"""

import io
import re
from typing import Callable, Optional
import logging

import numpy as np
import pandas as pd

from config import settings
from data.cleaner import clean_header
from data.models import ParsedDeal
from extractors.columns import is_positions_header, looks_like_loose_header, parse_positions_rows

logger = logging.getLogger(__name__)


_SECTION_TITLE_RE = re.compile(r'\bpositions?\b')

SheetStrategy = tuple[str, Callable[[list[list[str]]], list[ParsedDeal]]]


def parse_xlsx_report(data: bytes) -> list[ParsedDeal]:
    """
    Ищет таблицу позиций в книге Excel.

    Args:
        data: содержимое файла .xlsx / .xls

    Returns:
        list[ParsedDeal]; пустой список, если книга не читается или позиций нет
    """
    deals, _ = extract_xlsx_deals(data)
    return deals


def extract_xlsx_deals(data: bytes) -> tuple[list[ParsedDeal], Optional[str]]:
    """
    То же, что parse_xlsx_report(), но возвращает ещё и имя сработавшей стратегии.
    """
    try:
        sheets = _read_sheets(data)

        for sheet_name, rows in sheets:
            if len(rows) < 2:
                continue

            for name, extract in SHEET_STRATEGIES:
                deals = extract(rows)
                if deals:
                    logger.info(
                        f"Excel: лист '{sheet_name}', стратегия {name}: {len(deals)} сделок"
                    )
                    return deals, name

            logger.debug(f"Excel: на листе '{sheet_name}' таблица позиций не найдена")

    except Exception as e:
        logger.warning(f"Не удалось прочитать Excel файл: {e}")

    return [], None


def _read_sheets(data: bytes) -> list[tuple[str, list[list[str]]]]:
    """
    Все листы книги в порядке файла, каждая ячейка — строка.
    """
    frames = pd.read_excel(io.BytesIO(data), sheet_name=None, header=None, dtype=object)
    logger.debug(f"Excel прочитан, листов: {len(frames)}")

    sheets = []
    for name, df in frames.items():
        rows = [[_cell_text(v) for v in row] for row in df.itertuples(index=False, name=None)]
        sheets.append((str(name), rows))
    return sheets


def _cell_text(value) -> str:
    """Ячейка -> строка; пустые ячейки (NaN/None) -> ''."""
    if value is None:
        return ""
    if not isinstance(value, str) and pd.isna(value):
        return ""
    # str() даёт 1.234e-05 для мелких цен, parse_number такое не читает
    if isinstance(value, (float, np.floating)):
        return np.format_float_positional(value, trim="-")
    return str(value).strip()


def scan_for_header(rows: list[list[str]]) -> list[ParsedDeal]:
    """Первая строка, похожая на заголовок позиций, под которой есть сделки."""
    max_scan = min(len(rows) - 1, settings.spreadsheet_max_scan_rows)

    for r in range(max_scan):
        if not is_positions_header(rows[r]):
            continue
        deals = parse_positions_rows(rows[r:])
        if deals:
            return deals

    return []


def probe_after_section_title(rows: list[list[str]]) -> list[ParsedDeal]:
    """
    Ищет строку-заголовок секции "Positions" и пробует следующие
    несколько строк как заголовок таблицы.
    """
    max_scan = min(len(rows) - 1, settings.spreadsheet_max_scan_rows)

    for r in range(max_scan):
        if not _SECTION_TITLE_RE.search(clean_header(" ".join(rows[r]))):
            continue

        for k in range(1, settings.section_header_probe_rows + 1):
            h_idx = r + k
            if h_idx >= len(rows) - 1:
                break
            if not looks_like_loose_header(rows[h_idx]):
                continue
            deals = parse_positions_rows(rows[h_idx:])
            if deals:
                return deals

    return []


SHEET_STRATEGIES: list[SheetStrategy] = [
    ("header_scan", scan_for_header),
    ("section_probe", probe_after_section_title),
]
