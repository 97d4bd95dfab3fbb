import logging

import pandas as pd
import yfinance as yf

from fairvalue_engine import MarketFundamentals, as_number

from fairvalue_service.errors import UpstreamUnavailableError

from .base import BaseConnector, ConnectorFactory

logger = logging.getLogger(__name__)


class YahooFinanceConnector(BaseConnector):
    """Connector for fetching live quotes and statement data from Yahoo Finance."""

    def get_fundamentals(self, ticker: str) -> MarketFundamentals:
        try:
            stock = yf.Ticker(ticker)
            info = stock.info or {}
            bal = stock.balance_sheet
            inc = stock.income_stmt
        except Exception as e:
            raise UpstreamUnavailableError(f"Yahoo Finance lookup failed for {ticker}: {e}") from e

        price = info.get("currentPrice") or info.get("regularMarketPrice")

        # Statement figures are the most recent fiscal year (first column);
        # info fields cover tickers whose statements are missing.
        cash = self._get_mrq_value(bal, "Cash And Cash Equivalents") or as_number(info.get("totalCash"))
        net_income = self._get_mrq_value(inc, "Net Income") or as_number(info.get("netIncomeToCommon"))
        sales = self._get_mrq_value(inc, "Total Revenue") or as_number(info.get("totalRevenue"))

        return MarketFundamentals(
            price=as_number(price),
            enterprise_value=as_number(info.get("enterpriseValue")),
            shares_outstanding=as_number(info.get("sharesOutstanding")),
            cash=cash,
            long_term_debt=self._get_mrq_value(bal, "Long Term Debt"),
            forward_pe=as_number(info.get("forwardPE")),
            net_income=net_income,
            price_to_sales=as_number(info.get("priceToSalesTrailing12Months")),
            sales=sales,
            book_value_per_share=as_number(info.get("bookValue")),
            gross_margin=as_number(info.get("grossMargins")),
            profit_margin=as_number(info.get("profitMargins")),
            operating_margin=as_number(info.get("operatingMargins")),
        )

    # --- Helpers ---
    def _get_mrq_value(self, df: pd.DataFrame, row_name: str) -> float:
        """Gets the value from the most recent period (first column)."""
        if not isinstance(df, pd.DataFrame) or df.empty or row_name not in df.index:
            return 0.0
        val = df.loc[row_name].iloc[0]
        return as_number(float(val)) if pd.notna(val) else 0.0


# Register the connector
ConnectorFactory.register("yahoo", YahooFinanceConnector)
