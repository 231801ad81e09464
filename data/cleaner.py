"""
Очистка грязных значений из отчётов брокеров.

Реальные выгрузки MT4/MT5 и других платформ содержат:
- "1.234,56" (европейский формат) и "1,234.56" (US формат)
- Объём в виде "0.10/1.00" (закрыто/открыто)
- Даты вида "2024.01.15 10:30:45"
- Направление как "Buy", "SHORT", "0", "1"
- Номера тикетов в колонке символа
"""

import math
import re
from datetime import datetime
from typing import Optional
import logging

import pandas as pd

from data.models import DealType

logger = logging.getLogger(__name__)


# Европейский формат: 1.234,56 -> 1234.56
EUROPEAN_NUMBER_RE = re.compile(r'^-?\d{1,3}(\.\d{3})*,\d+$')

# Начало числа, как его понимает parseFloat: "12.5abc" -> 12.5
_FLOAT_PREFIX_RE = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)')

_SYMBOL_RE = re.compile(r'^[A-Za-z0-9._-]+$')

# Форматы дат, которые встречаются в отчётах терминалов
DATE_FORMATS = [
    '%Y.%m.%d %H:%M:%S',   # 2024.01.15 10:30:45 (MT4/MT5)
    '%Y.%m.%d %H:%M',      # 2024.01.15 10:30
    '%Y.%m.%d',            # 2024.01.15
    '%Y-%m-%d %H:%M:%S',   # 2024-01-15 10:30:45
    '%Y-%m-%dT%H:%M:%S',   # 2024-01-15T10:30:45
    '%Y-%m-%d',            # 2024-01-15
    '%d.%m.%Y %H:%M:%S',   # 15.01.2024 10:30:45
    '%d.%m.%Y',            # 15.01.2024
]

# Без четырёхзначного года pandas подставляет сегодняшнюю дату ("now", "12:00")
_YEAR_RE = re.compile(r'\d{4}')


def parse_number(value) -> Optional[float]:
    """
    Число из ячейки отчёта.

    Примеры:
    - "1.234,56" -> 1234.56
    - "1,234.56" -> 1234.56
    - "-12.50 USD" -> -12.5
    - "" -> None
    - "n/a" -> None

    Порядок важен: европейский формат проверяем ДО удаления запятых,
    иначе "1.234,56" превратится в 1.23456.
    """
    if value is None:
        return None

    if isinstance(value, bool):
        return None

    # Если уже число
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None

    s = str(value).strip()
    if not s:
        return None

    if EUROPEAN_NUMBER_RE.match(s):
        s = s.replace('.', '').replace(',', '.')
    else:
        # Запятая — разделитель тысяч
        s = s.replace(',', '')

    # Убираем всё, кроме цифр, точки и минуса
    s = re.sub(r'[^\d.\-]', '', s)

    match = _FLOAT_PREFIX_RE.match(s)
    if not match:
        return None

    result = float(match.group(0))
    return result if math.isfinite(result) else None


def parse_volume(value) -> Optional[float]:
    """
    Объём сделки.

    MT5 пишет частичное закрытие как "0.10/1.00" (закрыто/открыто) —
    берём левую часть.
    """
    if value is None:
        return None

    s = str(value).strip()
    if not s:
        return None

    left, _, _ = s.partition('/')
    return parse_number(left.strip())


def parse_date(value) -> Optional[datetime]:
    """
    Дата/время из ячейки отчёта.

    Сначала пробуем известные форматы терминалов, затем pandas.
    Никогда не бросает исключений.

    Returns:
        datetime или None если не удалось распарсить
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return value

    s = str(value).strip()
    if not s:
        return None

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue

    if not _YEAR_RE.search(s):
        return None

    # Последняя попытка — pandas с dateutil
    try:
        result = pd.to_datetime(s)
    except (ValueError, TypeError, OverflowError):
        return None

    if pd.isna(result):
        return None
    return result.to_pydatetime()


def normalize_direction(value) -> DealType:
    """
    Направление сделки: buy или sell.

    - "buy", "long", "0" -> buy
    - "sell", "short", "1" -> sell
    - всё остальное -> buy (по умолчанию)
    """
    lower = str(value or '').strip().lower()

    if 'buy' in lower or 'long' in lower or lower == '0':
        return DealType.BUY
    if 'sell' in lower or 'short' in lower or lower == '1':
        return DealType.SELL

    logger.debug(f"Нераспознанное направление '{value}', считаем buy")
    return DealType.BUY


def direction_of(deal_type: DealType) -> DealType:
    """Сводит long/short к buy/sell для сравнения."""
    if deal_type in (DealType.SELL, DealType.SHORT):
        return DealType.SELL
    return DealType.BUY


def clean_symbol(value) -> str:
    """Тикер без пробелов и '#' (MT5 помечает так некоторые инструменты)."""
    return re.sub(r'[\s#]', '', str(value or ''))


def is_plausible_symbol(value) -> bool:
    """
    Похоже ли значение на торговый символ (EURUSD, AAPL, BTC-USD).

    Отсекает номера тикетов (одни цифры) и большинство заголовков.
    """
    t = clean_symbol(value)
    return (
        2 <= len(t) <= 20
        and bool(_SYMBOL_RE.match(t))
        and any(c.isalpha() for c in t)
    )


def clean_header(value) -> str:
    """
    Нормализация текста ячейки заголовка.

    Пример: "  Open\xa0 Time " -> "open time"
    """
    s = str(value or '').lower().replace('\xa0', ' ')
    return re.sub(r'\s+', ' ', s).strip()
