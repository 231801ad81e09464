"""
Склейка частичных закрытий в одну сделку.

Одна позиция, закрытая в несколько приёмов, приходит из отчёта
несколькими строками с одним символом и направлением.
"""

from typing import Optional
import logging

from data.cleaner import direction_of
from data.models import ParsedDeal

logger = logging.getLogger(__name__)


def combine_parsed_deals(deals: list[ParsedDeal]) -> Optional[ParsedDeal]:
    """
    Объединяет частичные сделки (один символ, одно направление) в одну.

    - Объём и P&L суммируются
    - Вход (цена/время) — из первой сделки, выход — из последней
    - S/L и T/P — из первой сделки

    Args:
        deals: сделки в порядке отчёта

    Returns:
        ParsedDeal или None, если список пуст или символы/направления разные
    """
    if not deals:
        return None

    first = deals[0]
    last = deals[-1]
    symbol = first.symbol
    direction = direction_of(first.type)

    for d in deals:
        if d.symbol != symbol or direction_of(d.type) != direction:
            logger.debug(f"Нельзя объединить: {d.symbol}/{d.type.value} vs {symbol}/{direction.value}")
            return None

    entry_price = first.entry_price or last.exit_price or 1.0
    exit_price = last.exit_price if last.exit_price is not None else first.exit_price

    deal_ids = [d.deal_id for d in deals if d.deal_id]

    return ParsedDeal(
        symbol=symbol,
        type=first.type,
        quantity=sum(d.quantity for d in deals),
        entry_price=entry_price,
        exit_price=exit_price,
        pnl=sum(d.pnl for d in deals),
        entry_time=first.entry_time or last.exit_time,
        exit_time=last.exit_time or first.exit_time,
        stop_loss=first.stop_loss,
        take_profit=first.take_profit,
        comment=f"Combined {len(deals)} partials" if len(deals) > 1 else first.comment,
        deal_id=",".join(deal_ids) or None,
    )


def group_partial_deals(deals: list[ParsedDeal]) -> list[ParsedDeal]:
    """
    Группирует сделки по (символ, направление) и склеивает каждую группу.

    Порядок групп — по первому появлению в отчёте.
    """
    groups: dict[tuple[str, str], list[ParsedDeal]] = {}
    for d in deals:
        groups.setdefault((d.symbol, direction_of(d.type).value), []).append(d)

    combined = []
    for group in groups.values():
        trade = combine_parsed_deals(group)
        if trade is not None:
            combined.append(trade)

    logger.info(f"Склеено {len(deals)} сделок в {len(combined)}")
    return combined
