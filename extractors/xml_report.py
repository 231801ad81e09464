"""
Парсер XML отчётов (MT5 XML 2007 и похожие выгрузки позиций).

Ищем элементы <Position>/<position>, поля достаём по списку
допустимых имён тегов (или атрибутов).
"""

import re
from typing import Optional
import logging

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as ET
from pydantic import ValidationError

from data.cleaner import (
    is_plausible_symbol,
    normalize_direction,
    parse_date,
    parse_number,
    parse_volume,
)
from data.models import ParsedDeal

logger = logging.getLogger(__name__)


POSITION_TAGS = ("Position", "position")

# Текст уже декодирован, объявление кодировки только мешает парсеру
_XML_DECLARATION_RE = re.compile(r"^\s*<\?xml[^>]*\?>")

# Логическое поле -> допустимые имена тегов, по приоритету
FIELD_ALIASES = {
    "symbol": ["Symbol", "symbol"],
    "type": ["Type", "type", "Action"],
    "volume": ["Volume", "volume", "Lots"],
    "entry_price": ["OpenPrice", "open_price", "Price"],
    "exit_price": ["ClosePrice", "close_price"],
    "profit": ["Profit", "profit"],
    "entry_time": ["OpenTime", "open_time", "Time"],
    "exit_time": ["CloseTime", "close_time"],
    "stop_loss": ["StopLoss", "sl"],
    "take_profit": ["TakeProfit", "tp"],
    "comment": ["Comment", "comment"],
    "deal_id": ["Deal", "Position"],
}


def _local_name(tag) -> str:
    """Имя тега без namespace: '{urn:x}Position' -> 'Position'."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _node_text(node, name: str) -> str:
    """Текст первого потомка с таким именем, иначе значение атрибута."""
    for child in node.iter():
        if child is node:
            continue
        if _local_name(child.tag) == name:
            return "".join(child.itertext())
    return node.get(name) or ""


def _field(node, field: str) -> str:
    """Первое непустое значение среди алиасов поля."""
    for name in FIELD_ALIASES[field]:
        value = _node_text(node, name)
        if value:
            return value
    return ""


def parse_xml_report(xml_text: str) -> list[ParsedDeal]:
    """
    Извлекает позиции из XML отчёта.

    Args:
        xml_text: текст XML документа

    Returns:
        list[ParsedDeal]; пустой список, если XML битый или позиций нет
    """
    try:
        root = ET.fromstring(_XML_DECLARATION_RE.sub("", xml_text, count=1).strip())
    except (ET.ParseError, DefusedXmlException, ValueError) as e:
        logger.warning(f"Не удалось разобрать XML: {e}")
        return []

    nodes = [el for el in root.iter() if _local_name(el.tag) in POSITION_TAGS]
    logger.debug(f"XML: найдено узлов Position: {len(nodes)}")

    deals = []
    for i, node in enumerate(nodes):
        deal = _parse_position(node, i)
        if deal is not None:
            deals.append(deal)

    if deals:
        logger.info(f"XML: найдено {len(deals)} сделок")
    return deals


def _parse_position(node, index: int) -> Optional[ParsedDeal]:
    """Один узел <Position> -> ParsedDeal или None."""
    symbol = _field(node, "symbol").strip()
    if not symbol or not is_plausible_symbol(symbol):
        return None

    volume = parse_volume(_field(node, "volume")) or 0.0
    if volume <= 0:
        return None

    entry_price = parse_number(_field(node, "entry_price"))
    exit_price = parse_number(_field(node, "exit_price"))
    entry_time = parse_date(_field(node, "entry_time"))
    exit_time = parse_date(_field(node, "exit_time"))

    if entry_price is None:
        entry_price = exit_price if exit_price is not None else 0.0

    try:
        return ParsedDeal(
            symbol=symbol,
            type=normalize_direction(_field(node, "type") or "buy"),
            quantity=volume,
            entry_price=entry_price,
            exit_price=exit_price,
            pnl=parse_number(_field(node, "profit")) or 0.0,
            entry_time=entry_time,
            exit_time=exit_time or entry_time,
            stop_loss=parse_number(_field(node, "stop_loss")),
            take_profit=parse_number(_field(node, "take_profit")),
            comment=_field(node, "comment").strip() or None,
            deal_id=_field(node, "deal_id").strip() or None,
        )
    except ValidationError as e:
        logger.debug(f"XML узел {index} пропущен: {e}")
        return None
