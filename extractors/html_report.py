"""
Парсер HTML отчётов (MT4/MT5 ReportHistory и похожие).

Две стратегии, по порядку:
1. mt5_positions — фиксированная разметка таблицы Positions в MT5
2. generic_positions — эвристика по заголовку любой таблицы
"""

import re
from typing import Callable, Optional
import logging

from bs4 import BeautifulSoup
from bs4.element import Tag
from pydantic import ValidationError

from config import settings
from data.cleaner import (
    clean_header,
    clean_symbol,
    is_plausible_symbol,
    normalize_direction,
    parse_date,
    parse_number,
    parse_volume,
)
from data.models import ParsedDeal
from extractors.columns import is_positions_header, parse_positions_rows

logger = logging.getLogger(__name__)


# Заголовок секции, на котором таблица Positions заканчивается
_SECTION_END_RE = re.compile(r'(orders|deals|results|balance graph)')
_DIRECTION_TOKEN_RE = re.compile(r'(buy|sell|long|short|0|1)', re.IGNORECASE)
_HEADER_WORDS_RE = re.compile(r'^(symbol|time|type|volume|price|profit)$', re.IGNORECASE)
_POSITION_ID_RE = re.compile(r'^\d+$')

HtmlStrategy = tuple[str, Callable[[list[Tag]], list[ParsedDeal]]]


def parse_html_report(html: str) -> list[ParsedDeal]:
    """
    Ищет таблицу позиций в HTML отчёте.

    Args:
        html: текст HTML документа

    Returns:
        list[ParsedDeal] (пустой, если ничего не найдено)
    """
    deals, _ = extract_html_deals(html)
    return deals


def extract_html_deals(html: str) -> tuple[list[ParsedDeal], Optional[str]]:
    """
    То же, что parse_html_report(), но возвращает ещё и имя сработавшей стратегии.
    """
    try:
        soup = BeautifulSoup(html.replace('\x00', ''), 'lxml')
    except Exception as e:
        logger.warning(f"Не удалось разобрать HTML: {e}")
        return [], None

    tables = soup.find_all('table')
    logger.debug(f"HTML: найдено таблиц: {len(tables)}")

    for name, extract in HTML_STRATEGIES:
        deals = extract(tables)
        if deals:
            logger.info(f"HTML: стратегия {name} нашла {len(deals)} сделок")
            return deals, name
        logger.debug(f"HTML: стратегия {name} ничего не нашла")

    return [], None


def _cell_texts(row: Tag, names=('th', 'td')) -> list[str]:
    return [(c.get_text() or '').strip() for c in row.find_all(list(names))]


# =============================================================================
# Стратегия 1: фиксированная разметка MT5
# =============================================================================

def _is_mt5_header(row: Tag) -> bool:
    cells = [clean_header(c) for c in _cell_texts(row)]
    return (
        'position' in cells
        and 'symbol' in cells
        and 'type' in cells
        and any('volume' in c for c in cells)
        and any('profit' in c for c in cells)
    )


def extract_mt5_positions(tables: list[Tag]) -> list[ParsedDeal]:
    """Первая таблица с разметкой MT5 Positions, давшая хотя бы одну сделку."""
    for table in tables:
        deals = parse_mt5_positions_table(table)
        if deals:
            return deals
    return []


def parse_mt5_positions_table(table: Tag) -> list[ParsedDeal]:
    """
    Таблица Positions из отчёта MT5.

    Строки позиций содержат скрытые ячейки с colspan, а Profit лежит
    в объединённой последней ячейке (colspan="2"). Начало строки
    меняется между версиями терминала, конец — нет, поэтому поля
    читаем с конца.
    """
    rows = table.find_all('tr')
    if len(rows) < 2:
        return []

    header_idx = next((i for i, row in enumerate(rows) if _is_mt5_header(row)), None)
    if header_idx is None:
        return []

    deals = []
    for i in range(header_idx + 1, len(rows)):
        row = rows[i]

        # Дошли до следующей секции отчёта
        if row.find('th') and _SECTION_END_RE.search(clean_header(row.get_text())):
            break

        tds = row.find_all('td')
        if len(tds) < settings.mt5_min_cells:
            continue
        if not row.find('td', attrs={'colspan': '2'}):
            continue

        deal = _parse_mt5_row([(td.get_text() or '').strip() for td in tds], i)
        if deal is not None:
            deals.append(deal)

    return deals


def _parse_mt5_row(values: list[str], row_no: int) -> Optional[ParsedDeal]:
    symbol = clean_symbol(values[2])
    if not symbol or not is_plausible_symbol(symbol) or _HEADER_WORDS_RE.match(symbol):
        return None

    # Номер позиции
    position_id = values[1].strip()
    if not _POSITION_ID_RE.match(position_id):
        return None

    raw_type = values[3]
    if not _DIRECTION_TOKEN_RE.search(raw_type):
        return None

    n = len(values)
    volume = parse_volume(values[n - 9]) or 0.0
    entry_price = parse_number(values[n - 8]) or 0.0
    if volume <= 0 or entry_price <= 0:
        return None

    entry_time = parse_date(values[0])
    exit_time = parse_date(values[n - 5])

    try:
        return ParsedDeal(
            symbol=symbol,
            type=normalize_direction(raw_type),
            quantity=volume,
            entry_price=entry_price,
            exit_price=parse_number(values[n - 4]),
            pnl=parse_number(values[n - 1]) or 0.0,
            entry_time=entry_time,
            exit_time=exit_time or entry_time,
            stop_loss=parse_number(values[n - 7]),
            take_profit=parse_number(values[n - 6]),
            comment=None,
            deal_id=position_id or str(row_no),
        )
    except ValidationError as e:
        logger.debug(f"MT5 строка {row_no} пропущена: {e}")
        return None


# =============================================================================
# Стратегия 2: эвристика по заголовку
# =============================================================================

def extract_generic_positions(tables: list[Tag]) -> list[ParsedDeal]:
    """
    Первая таблица, у которой одна из первых строк похожа на заголовок
    таблицы позиций и под ней нашлась хотя бы одна сделка.

    Результаты разных таблиц не объединяются.
    """
    for table in tables:
        rows = [_cell_texts(tr) for tr in table.find_all('tr')]
        if len(rows) < 2:
            continue

        for r in range(min(len(rows) - 1, settings.html_header_probe_rows)):
            if not is_positions_header(rows[r]):
                continue
            deals = parse_positions_rows(rows[r:])
            if deals:
                return deals

    return []


HTML_STRATEGIES: list[HtmlStrategy] = [
    ("mt5_positions", extract_mt5_positions),
    ("generic_positions", extract_generic_positions),
]
