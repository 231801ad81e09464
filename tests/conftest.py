"""
Общие фикстуры: образцы отчётов MT5 (HTML, XML) и сборка книг Excel в памяти.
"""

import io

import pytest
from openpyxl import Workbook


MT5_HTML_REPORT = """<!DOCTYPE html>
<html>
<head><title>Trade History Report</title></head>
<body>
<table>
  <tr><th colspan="14"><div><b>Trade History Report</b></div></th></tr>
  <tr><td colspan="3">Name:</td><td colspan="11"><b>Demo Account</b></td></tr>
  <tr><th colspan="14"><div><b>Positions</b></div></th></tr>
  <tr bgcolor="#E5F0FC">
    <td>Time</td><td>Position</td><td>Symbol</td><td>Type</td>
    <td class="hidden" colspan="8"></td>
    <td>Volume</td><td>Price</td><td>S / L</td><td>T / P</td>
    <td>Time</td><td>Price</td><td>Commission</td><td>Swap</td><td colspan="2">Profit</td>
  </tr>
  <tr bgcolor="#FFFFFF" align="right">
    <td>2024.01.15 10:30:45</td><td>123456</td><td>EURUSD</td><td>buy</td>
    <td class="hidden" colspan="8"></td>
    <td>0.1</td><td>1.09500</td><td>1.09000</td><td>1.10000</td>
    <td>2024.01.15 12:00:00</td><td>1.09800</td><td>0.00</td><td>0.00</td><td colspan="2">30.00</td>
  </tr>
  <tr bgcolor="#F7F7F7" align="right">
    <td>2024.01.16 09:00:00</td><td>123457</td><td>GBPUSD</td><td>sell</td>
    <td class="hidden" colspan="8"></td>
    <td>0.05 / 0.10</td><td>1.27000</td><td></td><td></td>
    <td>2024.01.16 11:15:00</td><td>1.27250</td><td>-0.35</td><td>0.00</td><td colspan="2">-12.50</td>
  </tr>
  <tr bgcolor="#FFFFFF" align="right">
    <td>2024.01.17 09:00:00</td><td>123458</td><td>12345</td><td>buy</td>
    <td class="hidden" colspan="8"></td>
    <td>0.1</td><td>1.00000</td><td></td><td></td>
    <td>2024.01.17 11:15:00</td><td>1.10000</td><td>0.00</td><td>0.00</td><td colspan="2">5.00</td>
  </tr>
  <tr bgcolor="#F7F7F7" align="right">
    <td>2024.01.17 12:00:00</td><td>123459</td><td>AUDUSD</td><td>balance</td>
    <td class="hidden" colspan="8"></td>
    <td>0.2</td><td>0.65000</td><td></td><td></td>
    <td>2024.01.17 13:00:00</td><td>0.65500</td><td>0.00</td><td>0.00</td><td colspan="2">10.00</td>
  </tr>
  <tr bgcolor="#FFFFFF" align="right">
    <td>2024.01.17 14:00:00</td><td>P-77</td><td>USDCHF</td><td>buy</td>
    <td class="hidden" colspan="8"></td>
    <td>0.3</td><td>0.88000</td><td></td><td></td>
    <td>2024.01.17 15:00:00</td><td>0.88200</td><td>0.00</td><td>0.00</td><td colspan="2">6.00</td>
  </tr>
  <tr><th colspan="14"><div><b>Orders</b></div></th></tr>
  <tr bgcolor="#FFFFFF" align="right">
    <td>2024.01.18 09:00:00</td><td>223344</td><td>USDJPY</td><td>buy</td>
    <td class="hidden" colspan="8"></td>
    <td>1.0</td><td>145.000</td><td></td><td></td>
    <td>2024.01.18 11:15:00</td><td>146.000</td><td>0.00</td><td>0.00</td><td colspan="2">100.00</td>
  </tr>
</table>
</body>
</html>
"""


GENERIC_HTML_REPORT = """<html><body>
<table>
  <tr><td>Account</td><td>1234567</td></tr>
  <tr><td>Currency</td><td>USD</td></tr>
</table>
<table>
  <tr><th>Ticket</th><th>Open Time</th><th>Type</th><th>Size</th><th>Symbol</th>
      <th>Open Price</th><th>S/L</th><th>T/P</th><th>Close Time</th><th>Close Price</th><th>Profit</th></tr>
  <tr><td>1001</td><td>2024.02.01 09:00</td><td>Sell</td><td>1.00</td><td>GBPUSD</td>
      <td>1.2700</td><td>1.2800</td><td>1.2600</td><td>2024.02.01 15:00</td><td>1.2650</td><td>50.00</td></tr>
  <tr><th>Ticket</th><th>Open Time</th><th>Type</th><th>Size</th><th>Symbol</th>
      <th>Open Price</th><th>S/L</th><th>T/P</th><th>Close Time</th><th>Close Price</th><th>Profit</th></tr>
  <tr><td>1002</td><td>2024.02.02 10:00</td><td>Buy</td><td>0,50</td><td>#AAPL</td>
      <td>185,20</td><td></td><td></td><td>2024.02.03 16:00</td><td>190,00</td><td>2,40</td></tr>
  <tr><td>1003</td><td>2024.02.04 10:00</td><td>Buy</td><td>0</td><td>EURUSD</td>
      <td>1.0800</td><td></td><td></td><td>2024.02.04 12:00</td><td>1.0850</td><td>0.00</td></tr>
  <tr><td></td><td></td><td></td><td></td><td>Total</td><td></td><td></td><td></td><td></td><td></td><td>52.40</td></tr>
</table>
</body></html>
"""


UNRELATED_HTML = """<html><body>
<h1>Account summary</h1>
<table>
  <tr><th>Balance</th><th>Equity</th><th>Margin</th></tr>
  <tr><td>10 000.00</td><td>10 250.00</td><td>0.00</td></tr>
</table>
<table><tr><td>Nothing to see here</td></tr></table>
</body></html>
"""


POSITIONS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<Report>
  <Positions>
    <Position>
      <Symbol>EURUSD</Symbol>
      <Type>Sell</Type>
      <Volume>0.50</Volume>
      <OpenPrice>1.1000</OpenPrice>
      <ClosePrice>1.0950</ClosePrice>
      <Profit>250.00</Profit>
      <OpenTime>2024.03.01 10:00:00</OpenTime>
      <CloseTime>2024.03.01 18:00:00</CloseTime>
      <StopLoss>1.1100</StopLoss>
      <Comment>tp hit</Comment>
      <Deal>555</Deal>
    </Position>
    <position>
      <symbol>XAUUSD</symbol>
      <type>buy</type>
      <volume>0.10</volume>
      <open_price>2000.5</open_price>
      <profit>-15</profit>
    </position>
    <Position>
      <Symbol></Symbol>
      <Volume>1</Volume>
    </Position>
    <Position>
      <Symbol>USDJPY</Symbol>
      <Volume>0</Volume>
    </Position>
  </Positions>
</Report>
"""


CORRUPT_XML = """<?xml version="1.0"?>
<Report><Positions><Position><Symbol>EURUSD</Symbol><Volume>0.1"""


MT5_HEADER = [
    "Time", "Position", "Symbol", "Type", "Volume", "Price", "S / L", "T / P",
    "Time", "Price", "Commission", "Swap", "Profit",
]


def build_workbook(sheets: dict) -> bytes:
    """
    Книга Excel в памяти.

    Args:
        sheets: {имя листа: список строк}
    """
    wb = Workbook()
    wb.remove(wb.active)
    for name, rows in sheets.items():
        ws = wb.create_sheet(title=name)
        for row in rows:
            ws.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


@pytest.fixture
def mt5_html() -> str:
    return MT5_HTML_REPORT


@pytest.fixture
def generic_html() -> str:
    return GENERIC_HTML_REPORT


@pytest.fixture
def unrelated_html() -> str:
    return UNRELATED_HTML


@pytest.fixture
def positions_xml() -> str:
    return POSITIONS_XML


@pytest.fixture
def corrupt_xml() -> str:
    return CORRUPT_XML


@pytest.fixture
def positions_workbook() -> bytes:
    """Первый лист без таблицы позиций, второй — с таблицей."""
    return build_workbook({
        "Summary": [
            ["Trade History Report"],
            ["Account", 1234567],
            ["Balance", 10000],
        ],
        "Trades": [
            MT5_HEADER,
            ["2024.01.15 10:30:45", 123456, "EURUSD", "buy", 0.1, 1.095, 1.09, 1.1,
             "2024.01.15 12:00:00", 1.098, 0, 0, 30],
            ["2024.01.15 13:00:00", 123457, "EURUSD", "buy", 0.2, 1.096, None, None,
             "2024.01.15 14:00:00", 1.097, 0, 0, 20],
            ["", "", "", "", "", "", "", "", "", "", "", "", "50"],
        ],
    })
