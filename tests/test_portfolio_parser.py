"""
Unit tests for portfolio_parser module and Leg.from_row.
"""

from datetime import date

import pytest

from legmatch.models.leg import InstrumentType, Leg
from legmatch.portfolio_parser import (
    PortfolioParser,
    get_root_symbol,
    is_future_type,
    is_stock_type,
    parse_currency,
    parse_expiration,
)


class TestParseCurrency:
    """Test currency parsing utility."""

    def test_parse_currency_handles_commas(self):
        assert parse_currency("$1,234.56") == 1234.56

    def test_parse_currency_handles_parentheses(self):
        assert parse_currency("(100.00)") == -100.0

    def test_parse_currency_handles_dash(self):
        assert parse_currency("--") == 0.0

    def test_parse_currency_handles_none(self):
        assert parse_currency(None) == 0.0

    def test_parse_currency_handles_invalid(self):
        assert parse_currency("abc") == 0.0


class TestParseExpiration:
    @pytest.mark.parametrize(
        "raw", ["2025-01-17", "01/17/2025", "1/17/25", "Jan 17, 2025", "17 Jan 2025"]
    )
    def test_known_layouts(self, raw):
        assert parse_expiration(raw) == date(2025, 1, 17)

    @pytest.mark.parametrize("raw", [None, "", "--"])
    def test_empty_values(self, raw):
        assert parse_expiration(raw) is None

    def test_unknown_layout_warns(self, caplog):
        assert parse_expiration("next friday") is None
        assert "Unrecognized expiration" in caplog.text


class TestGetRootSymbol:
    """Test root symbol extraction."""

    def test_get_root_symbol_futures_standard(self):
        assert get_root_symbol("/ESZ24") == "/ES"

    def test_get_root_symbol_futures_with_dot(self):
        assert get_root_symbol("./CLG6") == "/CL"

    def test_get_root_symbol_occ_option(self):
        assert get_root_symbol("SPY   250117C00450000") == "SPY"

    def test_get_root_symbol_underscore(self):
        assert get_root_symbol("MSFT_2025-01-17_400_P") == "MSFT"

    def test_get_root_symbol_empty(self):
        assert get_root_symbol(None) == ""


class TestTypeChecks:
    def test_is_stock_type(self):
        assert is_stock_type("Stock")
        assert is_stock_type(" equity ")
        assert not is_stock_type("Option")
        assert not is_stock_type(None)

    def test_is_future_type(self):
        assert is_future_type("Future")
        assert not is_future_type("Future Option")


class TestLegFromRow:
    def test_call_option(self):
        leg = Leg.from_row(
            {
                "Symbol": "SPY 250117C450",
                "Type": "Option",
                "Quantity": "-2",
                "Strike Price": "450",
                "Exp Date": "2025-01-17",
                "Call/Put": "Call",
            }
        )
        assert leg == Leg(InstrumentType.CALL, -2.0, 450.0, date(2025, 1, 17), "SPY 250117C450")

    def test_stock(self):
        leg = Leg.from_row({"Symbol": "AAPL", "Type": "Stock", "Quantity": "100"})
        assert leg.type is InstrumentType.UNDERLYING
        assert leg.ratio == 100.0
        assert leg.expiration == date.min

    def test_future_and_future_option(self):
        assert Leg.from_row({"Type": "Future", "Quantity": "1"}).type is InstrumentType.FUTURE
        assert Leg.from_row({"Type": "Future Option", "Quantity": "1"}).type is InstrumentType.OTHER_OPTION
        assert (
            Leg.from_row({"Type": "Future Option", "Call/Put": "P", "Quantity": "1"}).type
            is InstrumentType.PUT
        )

    def test_unknown(self):
        assert Leg.from_row({"Type": "Crypto"}).type is InstrumentType.UNKNOWN


class TestPortfolioParser:
    def test_normalize_row_uses_aliases(self):
        row = PortfolioParser.normalize_row({"Ticker": "QQQ", "Qty": "3", "C/P": "put", "Strike": "400"})
        assert row["Symbol"] == "QQQ"
        assert row["Quantity"] == "3"
        assert row["Call/Put"] == "Put"
        assert row["Strike Price"] == "400"
        assert row["Exp Date"] == ""

    def test_parse_legs(self, tmp_path):
        csv_path = tmp_path / "positions.csv"
        csv_path.write_text(
            "\ufeffSymbol,Type,Quantity,Exp Date,Strike Price,Call/Put\n"
            "SPY,Option,1,2025-01-17,450,CALL\n"
            ",,,,,\n"
            "SPY,Option,-1,2025-01-17,460,CALL\n",
            encoding="utf-8",
        )
        legs = PortfolioParser.parse_legs(str(csv_path))
        assert [(leg.type, leg.ratio, leg.strike) for leg in legs] == [
            (InstrumentType.CALL, 1.0, 450.0),
            (InstrumentType.CALL, -1.0, 460.0),
        ]

    def test_parse_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PortfolioParser.parse(str(tmp_path / "missing.csv"))
