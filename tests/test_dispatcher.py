"""
Тесты точки входа: определение формата, чтение файла, async-граница.
"""

import asyncio
import io

import pytest

from config import settings
from core.dispatcher import parse_broker_report, parse_report_content, parse_report_file
from data.models import ReportFormat
from data.parser import ReportReadError, ReportTooLargeError


class TestParseReportContent:

    def test_html_by_extension(self, mt5_html):
        report = parse_report_content(mt5_html.encode("utf-8"), "ReportHistory.htm")

        assert report.source_format == ReportFormat.HTML
        assert report.strategy == "mt5_positions"
        assert len(report.deals) == 2

    def test_xml_by_extension(self, positions_xml):
        report = parse_report_content(positions_xml, "positions.xml")

        assert report.source_format == ReportFormat.XML
        assert len(report.deals) == 2

    def test_spreadsheet_by_extension(self, positions_workbook):
        report = parse_report_content(positions_workbook, "report.xlsx")

        assert report.source_format == ReportFormat.SPREADSHEET
        assert len(report.deals) == 2

    def test_txt_with_html_falls_back_from_xml(self, generic_html):
        report = parse_report_content(generic_html.encode("utf-8"), "export.txt")

        assert report.source_format == ReportFormat.HTML
        assert [d.symbol for d in report.deals] == ["GBPUSD", "AAPL"]

    def test_unknown_extension_with_xml(self, positions_xml):
        report = parse_report_content(positions_xml.encode("utf-8"), "export")

        assert report.source_format == ReportFormat.XML

    def test_utf16_html(self, mt5_html):
        report = parse_report_content(mt5_html.encode("utf-16"), "ReportHistory.html")
        assert len(report.deals) == 2

    def test_nothing_recognizable(self, unrelated_html):
        report = parse_report_content(unrelated_html.encode("utf-8"), "summary.html")

        assert report.deals == []
        assert report.source_format is None
        assert report.strategy is None

    def test_xml_extension_does_not_try_html(self, mt5_html):
        assert parse_report_content(mt5_html, "report.xml").deals == []


class TestParseBrokerReport:
    """Async-граница и ошибки чтения."""

    def test_reads_file_from_disk(self, tmp_path, mt5_html):
        path = tmp_path / "ReportHistory.html"
        path.write_text(mt5_html, encoding="utf-8")

        deals = asyncio.run(parse_broker_report(path))

        assert [d.symbol for d in deals] == ["EURUSD", "GBPUSD"]

    def test_reads_file_like_object(self, positions_workbook):
        deals = asyncio.run(parse_broker_report(io.BytesIO(positions_workbook), "report.xlsx"))
        assert len(deals) == 2

    def test_corrupt_xml_resolves_to_empty_list(self, tmp_path, corrupt_xml):
        path = tmp_path / "positions.xml"
        path.write_text(corrupt_xml, encoding="utf-8")

        assert asyncio.run(parse_broker_report(path)) == []

    def test_unrelated_html_resolves_to_empty_list(self, tmp_path, unrelated_html):
        path = tmp_path / "summary.htm"
        path.write_text(unrelated_html, encoding="utf-8")

        assert asyncio.run(parse_broker_report(path)) == []

    def test_missing_file_rejects(self, tmp_path):
        with pytest.raises(ReportReadError):
            asyncio.run(parse_broker_report(tmp_path / "missing.html"))

    def test_unreadable_stream_rejects(self):
        class BrokenStream:
            name = "report.html"

            def read(self, size=-1):
                raise OSError("device not ready")

        with pytest.raises(ReportReadError):
            asyncio.run(parse_broker_report(BrokenStream()))

    def test_too_large_file_rejects(self, tmp_path, monkeypatch, mt5_html):
        path = tmp_path / "ReportHistory.html"
        path.write_text(mt5_html, encoding="utf-8")
        monkeypatch.setattr(settings, "max_file_size_mb", 0)

        with pytest.raises(ReportTooLargeError):
            parse_report_file(path)
