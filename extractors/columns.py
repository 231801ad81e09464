"""
Распознавание таблицы позиций по строке заголовка.

Общая часть для HTML (эвристическая стратегия) и Excel:
- ROLE_PATTERNS: какие заголовки соответствуют какой роли колонки
- is_positions_header(): строгий предикат "это заголовок таблицы позиций"
- looks_like_loose_header(): мягкий предикат (без времени и цены)
- build_column_map(): ColumnRoleMap по заголовку
- parse_positions_rows(): строки под заголовком -> ParsedDeal
"""

import re
from typing import Optional
import logging

from pydantic import ValidationError

from data.cleaner import (
    clean_header,
    clean_symbol,
    is_plausible_symbol,
    normalize_direction,
    parse_date,
    parse_number,
    parse_volume,
)
from data.models import ColumnRoleMap, ParsedDeal

logger = logging.getLogger(__name__)


# === Паттерны ролей колонок ===
# Ключ — роль, значение — регулярка по нормализованному заголовку
ROLE_PATTERNS = {
    'symbol': re.compile(r'symbol|instrument|pair|asset|ticker'),
    'direction': re.compile(r'(^|\s)(type|direction|action)(\s|$)'),
    'volume': re.compile(r'volume|lots|size|quantity|vol'),
    'profit': re.compile(r'profit|p/l|pl|result'),
    'stop_loss': re.compile(r's\s*/\s*l|stop loss|^sl$|stop\s*loss|stop'),
    'take_profit': re.compile(r't\s*/\s*p|take profit|^tp$|take\s*profit|target'),
    'time': re.compile(r'time|date'),
    'price': re.compile(r'price|rate|entry|exit'),
}

# В мягком предикате направление ищем без границ слова
_LOOSE_DIRECTION_RE = re.compile(r'type|direction|action', re.IGNORECASE)

# Значения, которые означают повтор заголовка внутри данных
_HEADER_WORDS_RE = re.compile(r'^(symbol|time|type|volume|price|profit|s/l|t/p)$', re.IGNORECASE)
_DIRECTION_HEADER_RE = re.compile(r'^(type|direction|action)$', re.IGNORECASE)


def _matching(headers: list[str], role: str) -> list[int]:
    """Индексы всех колонок, подходящих под роль."""
    pattern = ROLE_PATTERNS[role]
    return [i for i, h in enumerate(headers) if pattern.search(h)]


def _first(headers: list[str], role: str) -> Optional[int]:
    found = _matching(headers, role)
    return found[0] if found else None


def is_positions_header(row: list[str]) -> bool:
    """
    Похожа ли строка на заголовок таблицы позиций.

    Нужны: символ, направление, объём, прибыль,
    хотя бы одна колонка времени и одна колонка цены.
    """
    headers = [clean_header(c) for c in row]
    return (
        all(_matching(headers, role) for role in ('symbol', 'direction', 'volume', 'profit'))
        and len(_matching(headers, 'time')) >= 1
        and len(_matching(headers, 'price')) >= 1
    )


def looks_like_loose_header(row: list[str]) -> bool:
    """
    Мягкая проверка заголовка: символ, направление, объём, прибыль.

    Время и цену здесь не требуем — их проверит build_column_map().
    """
    return (
        any(ROLE_PATTERNS['symbol'].search(c.lower()) for c in row)
        and any(_LOOSE_DIRECTION_RE.search(c) for c in row)
        and any(ROLE_PATTERNS['volume'].search(c.lower()) for c in row)
        and any(ROLE_PATTERNS['profit'].search(c.lower()) for c in row)
    )


def build_column_map(row: list[str]) -> Optional[ColumnRoleMap]:
    """
    Сопоставляет колонки заголовка с ролями.

    Первая колонка времени — вход, вторая — выход; так же с ценами.
    Прибыль — ПОСЛЕДНЯЯ подходящая колонка ("Take Profit" тоже содержит "profit").

    Колонка времени здесь не обязательна: её наличие проверяет
    is_positions_header(), а после заголовка секции "Positions"
    принимаем и таблицы без времени.

    Returns:
        ColumnRoleMap или None, если это не таблица позиций
    """
    headers = [clean_header(c) for c in row]

    symbol = _first(headers, 'symbol')
    direction = _first(headers, 'direction')
    volume = _first(headers, 'volume')
    profits = _matching(headers, 'profit')
    times = _matching(headers, 'time')
    prices = _matching(headers, 'price')

    if symbol is None or direction is None or volume is None or not profits:
        return None
    if not prices:
        logger.debug(f"Нет колонки цены в заголовке: {headers}")
        return None

    return ColumnRoleMap(
        symbol=symbol,
        direction=direction,
        volume=volume,
        profit=profits[-1],
        entry_price=prices[0],
        exit_price=prices[1] if len(prices) > 1 else None,
        entry_time=times[0] if times else None,
        exit_time=times[1] if len(times) > 1 else None,
        stop_loss=_first(headers, 'stop_loss'),
        take_profit=_first(headers, 'take_profit'),
    )


def cell(row: list[str], idx: Optional[int]) -> str:
    """Значение ячейки или '' если колонки нет / строка короче."""
    if idx is None or idx < 0 or idx >= len(row):
        return ''
    return str(row[idx] or '').strip()


def parse_positions_rows(rows: list[list[str]]) -> list[ParsedDeal]:
    """
    Парсит таблицу позиций: первая строка — заголовок, дальше данные.

    Битые строки (нет символа, нулевой объём, повтор заголовка) пропускаются.
    """
    if len(rows) < 2:
        return []

    columns = build_column_map(rows[0])
    if columns is None:
        return []

    deals = []
    for i, values in enumerate(rows[1:], start=1):
        deal = _parse_row(values, columns, i)
        if deal is not None:
            deals.append(deal)

    return deals


def _parse_row(values: list[str], columns: ColumnRoleMap, row_no: int) -> Optional[ParsedDeal]:
    """Одна строка данных -> ParsedDeal или None."""
    if not values or len(values) < 3:
        return None

    symbol = clean_symbol(cell(values, columns.symbol))
    if not symbol or not is_plausible_symbol(symbol) or _HEADER_WORDS_RE.match(symbol):
        return None

    raw_type = cell(values, columns.direction)
    if _DIRECTION_HEADER_RE.match(raw_type):
        return None

    quantity = parse_volume(cell(values, columns.volume)) or 0.0
    if quantity <= 0:
        return None

    pnl = parse_number(cell(values, columns.profit))
    if pnl is None:
        pnl = 0.0

    exit_price = parse_number(cell(values, columns.exit_price))
    entry_price = parse_number(cell(values, columns.entry_price))
    if entry_price is None:
        entry_price = exit_price
    if entry_price is None:
        # Цены нет совсем: ставим заглушку, если сделка хоть что-то заработала
        entry_price = 1.0 if pnl != 0 else 0.0
    if entry_price <= 0:
        return None

    entry_time = parse_date(cell(values, columns.entry_time))
    if columns.exit_time is not None:
        exit_time = parse_date(cell(values, columns.exit_time))
    else:
        exit_time = entry_time

    try:
        return ParsedDeal(
            symbol=symbol,
            type=normalize_direction(raw_type or 'buy'),
            quantity=quantity,
            entry_price=entry_price,
            exit_price=exit_price,
            pnl=pnl,
            entry_time=entry_time,
            exit_time=exit_time,
            stop_loss=parse_number(cell(values, columns.stop_loss)),
            take_profit=parse_number(cell(values, columns.take_profit)),
            comment=None,
            deal_id=str(row_no),
        )
    except ValidationError as e:
        logger.debug(f"Строка {row_no} пропущена: {e}")
        return None
