"""
Report Service
==============

Thin orchestration layer: load a persisted dataset, run the metrics engine,
optionally attach an LLM narrative, and return an API-friendly dict.

All numeric logic lives in **fairvalue_engine**.
"""

import logging
from typing import Any, Dict, Optional

from fairvalue_engine import build_chart_series, compute_fair_value_per_year, compute_growth

from fairvalue_service.narrative import NarrativeClient, generate_narrative
from fairvalue_service.storage import DatasetStore

logger = logging.getLogger(__name__)


class ReportService:
    def __init__(self, store: DatasetStore, narrative_client: Optional[NarrativeClient] = None):
        self.store = store
        self.narrative_client = narrative_client

    def build_report(self, ticker: str, exchange: str, target_multiple: float) -> Dict[str, Any]:
        """
        1. Load the dataset (raises DatasetNotFoundError).
        2. Compute growth, per-year fair values and chart series.
        3. Attach a narrative when an LLM is configured (None otherwise).
        """
        dataset = self.store.load(exchange, ticker)
        rows = dataset.rows

        growth = compute_growth(rows)
        fair_values = compute_fair_value_per_year(rows, target_multiple)

        narrative = generate_narrative(self.narrative_client, ticker, exchange, rows, growth, target_multiple)

        return {
            "meta": {"ticker": ticker, "exchange": exchange, "targetPE": target_multiple},
            "rows": [r.to_dict() for r in rows],
            "charts": build_chart_series(rows),
            "growth": [g.to_dict() for g in growth],
            "fairValues": [f.to_dict() for f in fair_values],
            "aiNarrative": narrative,
        }
