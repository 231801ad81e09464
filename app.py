"""
Парсер брокерских отчётов — просмотр результата из командной строки.

Использование:
    python app.py ReportHistory.html
    python app.py positions.xlsx --combine
"""

import argparse
import asyncio
import logging
import sys

# Настройка логирования
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)s | %(name)s | %(message)s',
    datefmt='%H:%M:%S',
    handlers=[
        logging.StreamHandler(sys.stderr)
    ]
)

# Уменьшаем шум от библиотек
logging.getLogger("openpyxl").setLevel(logging.WARNING)
logging.getLogger("bs4").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def _format_deal(deal) -> str:
    """Одна строка таблицы для вывода."""
    entry_time = deal.entry_time.strftime('%Y-%m-%d %H:%M') if deal.entry_time else "—"
    exit_price = f"{deal.exit_price:g}" if deal.exit_price is not None else "—"
    return (
        f"{deal.deal_id or '':<12} {deal.symbol:<12} {deal.type.value:<5} "
        f"{deal.quantity:>10g} {deal.entry_price:>12g} {exit_price:>12} "
        f"{deal.pnl:>12.2f}  {entry_time}"
    )


def main(argv=None) -> int:
    """Запуск парсера для одного файла."""
    from config import settings
    from core.combiner import group_partial_deals
    from core.dispatcher import parse_broker_report
    from data.parser import ReportReadError

    parser = argparse.ArgumentParser(description="Разбор отчёта брокера (HTML, XML, XLSX)")
    parser.add_argument("report", help="путь к файлу отчёта")
    parser.add_argument("--combine", action="store_true", help="склеить частичные закрытия")
    parser.add_argument("--debug", action="store_true", help="подробный лог")
    args = parser.parse_args(argv)

    if args.debug or settings.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        deals = asyncio.run(parse_broker_report(args.report))
    except ReportReadError as e:
        logger.error(f"{e}")
        return 1

    if args.combine:
        deals = group_partial_deals(deals)

    if not deals:
        print("Сделки не найдены")
        return 0

    print(
        f"{'ID':<12} {'Symbol':<12} {'Type':<5} {'Volume':>10} "
        f"{'Entry':>12} {'Exit':>12} {'P&L':>12}  Open time"
    )
    for deal in deals:
        print(_format_deal(deal))
    print(f"\nВсего: {len(deals)}, P&L: {sum(d.pnl for d in deals):.2f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
