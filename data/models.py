"""
Pydantic модели данных парсера брокерских отчётов.

Модели:
- DealType: направление сделки
- ReportFormat: формат контейнера отчёта
- ParsedDeal: одна сделка/позиция из отчёта
- ColumnRoleMap: роли колонок найденной таблицы позиций
- ParsedReport: результат разбора файла целиком
"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from enum import Enum
from typing import Optional


class DealType(str, Enum):
    """Направление сделки"""
    BUY = "buy"
    SELL = "sell"
    LONG = "long"
    SHORT = "short"


class ReportFormat(str, Enum):
    """Формат контейнера отчёта"""
    HTML = "html"
    XML = "xml"
    SPREADSHEET = "spreadsheet"    # .xlsx / .xls, читается как бинарный буфер
    UNKNOWN = "unknown"            # Расширение не распознано, определяем по содержимому


class ParsedDeal(BaseModel):
    """
    Одна сделка (или частичное закрытие) из отчёта брокера.

    Обязательные поля: symbol, type, quantity, entry_price
    Опциональные: всё остальное

    После создания не меняется.
    """
    model_config = ConfigDict(frozen=True)

    symbol: str = Field(..., min_length=1, description="Тикер (EURUSD, AAPL, ...)")
    type: DealType
    quantity: float = Field(..., gt=0, description="Объём (должен быть > 0)")
    entry_price: float = Field(..., ge=0, description="Цена входа (0 — цены в источнике нет)")
    exit_price: Optional[float] = None
    pnl: float = 0.0
    entry_time: Optional[datetime] = None
    exit_time: Optional[datetime] = None
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    comment: Optional[str] = None
    deal_id: Optional[str] = Field(None, description="Номер строки/позиции в источнике (для отображения)")


class ColumnRoleMap(BaseModel):
    """
    Индексы колонок по смысловым ролям.

    Строится один раз на таблицу по строке заголовка.
    None — колонки с такой ролью нет.
    """
    symbol: int
    direction: int
    volume: int
    profit: int
    entry_price: int

    entry_time: Optional[int] = None
    exit_price: Optional[int] = None
    exit_time: Optional[int] = None
    stop_loss: Optional[int] = None
    take_profit: Optional[int] = None


class ParsedReport(BaseModel):
    """
    Результат разбора файла — сделки + откуда они взялись.
    """
    deals: list[ParsedDeal] = Field(default_factory=list)
    filename: str = ""
    source_format: Optional[ReportFormat] = None   # Формат, чей экстрактор нашёл строки
    strategy: Optional[str] = None                 # Стратегия, которая сработала
