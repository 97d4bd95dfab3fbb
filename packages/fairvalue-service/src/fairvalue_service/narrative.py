"""
LLM narrative and AI fair-value estimate.

Both are best-effort enrichments computed after the deterministic metrics:
any failure (no API key, SDK or network error, unusable reply) degrades to
``None`` for the narrative and to the formula value for the fair-value
estimate. ``NarrativeClient.complete`` raises ``UpstreamUnavailableError``;
``generate_narrative`` and ``estimate_fair_value`` never raise it.
"""

import json
import logging
import math
import re
from typing import Any, Dict, Optional, Sequence, Tuple

import openai
from openai import OpenAI

from fairvalue_engine import (
    FinancialRecord,
    GrowthPoint,
    ValuationSnapshot,
    compute_blended_fair_value,
)

from fairvalue_service.config import Settings
from fairvalue_service.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)

REPORT_SYSTEM_PROMPT = "You are a financial analyst. Be concise and numeric-first."
FAIR_VALUE_SYSTEM_PROMPT = 'Output strict JSON with only {"fv": number}. No prose.'

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)


class NarrativeClient:
    """Thin wrapper around the OpenAI chat completions API."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        timeout: float = 30.0,
    ):
        self.model = model
        self._client = OpenAI(api_key=api_key, base_url=base_url, timeout=timeout) if api_key else None

    @classmethod
    def from_settings(cls, settings: Settings) -> "NarrativeClient":
        return cls(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_MODEL,
            base_url=settings.OPENAI_BASE_URL,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def complete(self, system: str, user: str, temperature: float = 0.3, max_tokens: Optional[int] = None) -> str:
        if self._client is None:
            raise UpstreamUnavailableError("OPENAI_API_KEY is not configured")

        kwargs: Dict[str, Any] = {}
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        try:
            chat = self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                temperature=temperature,
                **kwargs,
            )
        except openai.OpenAIError as e:
            raise UpstreamUnavailableError(f"LLM request failed: {e}") from e

        content = chat.choices[0].message.content if chat.choices else None
        if not content:
            raise UpstreamUnavailableError("LLM returned an empty response")
        return content


def _join(values: Sequence[Optional[float]]) -> str:
    return ", ".join("n/a" if v is None else f"{v:g}" for v in values)


def build_report_prompt(
    ticker: str,
    exchange: str,
    rows: Sequence[FinancialRecord],
    growth: Sequence[GrowthPoint],
    target_pe: float,
) -> str:
    growth_text = ", ".join(f"{g.year}:{(g.growth or 0.0):.3f}" for g in growth)
    return (
        f"Ticker {ticker} on {exchange}. Years: {', '.join(str(r.year) for r in rows)}.\n"
        f"Revenue: {_join([r.revenue for r in rows])}.\n"
        f"Operating Income: {_join([r.operating_income for r in rows])}.\n"
        f"Net Income: {_join([r.net_income for r in rows])}.\n"
        f"Revenue growth by year (yoy from 2nd year): {growth_text}.\n"
        f"Fair Value (equity) per year = NetIncome * PE({target_pe:g}). "
        "Provide a short bullet report with insights, risks, and whether valuation trends are improving."
    )


def generate_narrative(
    client: Optional[NarrativeClient],
    ticker: str,
    exchange: str,
    rows: Sequence[FinancialRecord],
    growth: Sequence[GrowthPoint],
    target_pe: float,
) -> Optional[str]:
    """Free-text commentary on the numbers, or ``None`` if unavailable."""
    if client is None or not client.enabled:
        return None
    prompt = build_report_prompt(ticker, exchange, rows, growth, target_pe)
    try:
        return client.complete(REPORT_SYSTEM_PROMPT, prompt, temperature=0.3)
    except UpstreamUnavailableError as e:
        logger.warning(f"Narrative unavailable for {exchange}:{ticker}: {e}")
        return None


def extract_json(text: Optional[str]) -> Optional[Any]:
    """Parse JSON from an LLM reply, fenced (```json ... ```) or raw.

    Falls back to the last ``{...}`` span in the text.
    """
    if not text:
        return None
    fence = _FENCE_RE.search(text)
    raw = fence.group(1) if fence else text
    try:
        return json.loads(raw)
    except ValueError:
        pass
    start, end = raw.rfind("{"), raw.rfind("}")
    if start >= 0 and end > start:
        try:
            return json.loads(raw[start : end + 1])
        except ValueError:
            return None
    return None


def build_fair_value_prompt(snapshot: ValuationSnapshot) -> str:
    return (
        'Compute FV = 0.5*EV + 0.25*PE + 0.25*PS. Return {"fv": number}.\n'
        f"EV={snapshot.fair_ev:.2f}, PE={snapshot.fair_pe:.2f}, PS={snapshot.fair_ps:.2f}, "
        f"Book={snapshot.book_value:.2f}, Price={snapshot.price:.2f}"
    )


def estimate_fair_value(client: Optional[NarrativeClient], snapshot: ValuationSnapshot) -> Tuple[float, str]:
    """
    Ask the LLM for a per-share fair value; fall back to the blend formula.

    Returns ``(fv, source)`` where ``source`` is ``"llm"`` or ``"formula"``.
    """
    if client is not None and client.enabled:
        try:
            reply = client.complete(
                FAIR_VALUE_SYSTEM_PROMPT,
                build_fair_value_prompt(snapshot),
                temperature=0.2,
                max_tokens=20,
            )
            parsed = extract_json(reply)
            fv = parsed.get("fv") if isinstance(parsed, dict) else None
            if isinstance(fv, (int, float)) and not isinstance(fv, bool) and math.isfinite(fv):
                return float(fv), "llm"
            logger.warning(f"LLM fair value reply unusable: {reply!r}")
        except UpstreamUnavailableError as e:
            logger.warning(f"LLM fair value unavailable: {e}")

    return round(compute_blended_fair_value(snapshot), 2), "formula"
