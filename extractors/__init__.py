"""
Extractors module — поиск таблицы позиций в HTML, XML и Excel.
"""

from extractors.html_report import parse_html_report
from extractors.xml_report import parse_xml_report
from extractors.xlsx_report import parse_xlsx_report

__all__ = [
    "parse_html_report",
    "parse_xml_report",
    "parse_xlsx_report",
]
