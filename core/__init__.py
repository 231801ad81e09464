"""
Core module — оркестрация разбора и склейка частичных сделок.
"""

from core.combiner import combine_parsed_deals, group_partial_deals
from core.dispatcher import parse_broker_report, parse_report_file, parse_report_content

__all__ = [
    "combine_parsed_deals",
    "group_partial_deals",
    "parse_broker_report",
    "parse_report_file",
    "parse_report_content",
]
