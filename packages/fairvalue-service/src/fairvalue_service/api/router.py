"""
API Router — all endpoint definitions for the fair value service.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from fairvalue_service.api.schemas import AIFairValueRequest, ReportRequest
from fairvalue_service.config import Settings, get_settings
from fairvalue_service.connectors import ConnectorFactory
from fairvalue_service.errors import DatasetNotFoundError
from fairvalue_service.narrative import NarrativeClient, estimate_fair_value
from fairvalue_service.services.report import ReportService
from fairvalue_service.storage import DatasetStore
from fairvalue_service.utils.json import sanitize_for_json

logger = logging.getLogger(__name__)
router = APIRouter()

NOT_FOUND_DETAIL = "Data not found. Ingest Excel first."


def get_store(settings: Settings = Depends(get_settings)) -> DatasetStore:
    return DatasetStore(settings.DATA_DIR)


def get_narrative_client(settings: Settings = Depends(get_settings)) -> NarrativeClient:
    return NarrativeClient.from_settings(settings)


@router.get("/health", summary="Health Check")
def health():
    return {"ok": True}


@router.post(
    "/report",
    summary="Company Report",
    description="Loads an ingested dataset and returns rows, chart series, YoY growth, "
    "per-year fair values and an optional AI narrative.",
    response_description="Report bundle for one company.",
)
def create_report(
    request: ReportRequest,
    settings: Settings = Depends(get_settings),
    store: DatasetStore = Depends(get_store),
    narrative_client: NarrativeClient = Depends(get_narrative_client),
):
    target_multiple = request.target_multiple if request.target_multiple is not None else settings.TARGET_PE
    try:
        service = ReportService(store, narrative_client)
        result = service.build_report(request.ticker, request.exchange, target_multiple)
        return sanitize_for_json(result)
    except DatasetNotFoundError as e:
        logger.info(f"Not Found: {e}")
        raise HTTPException(status_code=404, detail=NOT_FOUND_DETAIL)
    except ValueError as e:
        logger.warning(f"Bad Request for {request.exchange}:{request.ticker}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Internal Error building report for {request.exchange}:{request.ticker}: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get(
    "/companies",
    summary="Dataset Catalog",
    description="All ingested companies with their normalized rows.",
    response_description="Catalog document: {companies: [{ticker, exchange, rows}, ...]}.",
)
def list_companies(store: DatasetStore = Depends(get_store)):
    try:
        return sanitize_for_json(store.build_catalog())
    except Exception as e:
        logger.error(f"Internal Error building catalog: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.get(
    "/valuation/live/{ticker}",
    summary="Live Valuation Snapshot",
    description="Current price, EV/PE/PS-derived fair values per share and their weighted blend. "
    "Unavailable market data yields a zeroed snapshot.",
    response_description="Snapshot with per-share fair values and the weighted fair value.",
)
def get_live_valuation(
    ticker: str,
    source: str = Query("twelvedata", description="Market data connector"),
    currency: str = Query("USD", description="Quote currency"),
):
    ticker = ticker.upper()
    try:
        connector = ConnectorFactory.get_connector(source)
        snapshot = connector.get_snapshot(ticker, currency=currency)
        return sanitize_for_json({"ticker": ticker, **snapshot.to_dict()})
    except ValueError as e:
        logger.warning(f"Bad Request for {ticker}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Internal Error fetching snapshot for {ticker}: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")


@router.post(
    "/valuation/ai-fair-value",
    summary="AI Fair Value",
    description="Asks the LLM for a per-share fair value from the snapshot; "
    "falls back to the weighted formula when no LLM answer is usable.",
    response_description="Fair value per share and the method that produced it.",
)
def get_ai_fair_value(
    request: AIFairValueRequest,
    narrative_client: NarrativeClient = Depends(get_narrative_client),
):
    try:
        if request.snapshot is not None:
            snapshot = request.snapshot.to_snapshot()
        else:
            connector = ConnectorFactory.get_connector(request.source)
            snapshot = connector.get_snapshot(request.ticker, currency=request.currency)

        fv, method = estimate_fair_value(narrative_client, snapshot)
        return sanitize_for_json({"ticker": request.ticker, "fv": fv, "method": method, "snapshot": snapshot})
    except ValueError as e:
        logger.warning(f"Bad Request for {request.ticker}: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Internal Error estimating fair value for {request.ticker}: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")
