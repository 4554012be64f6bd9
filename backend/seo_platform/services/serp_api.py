"""
SerpApi client used to estimate keyword metrics
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel

from seo_platform.core.config import settings

logger = logging.getLogger(__name__)

SERP_API_URL = "https://serpapi.com/search"
MAX_SEARCH_VOLUME = 1000000

TRANSACTIONAL_TERMS = ("buy", "price", "shop", "order", "purchase")
INFORMATIONAL_TERMS = ("how to", "what is", "guide", "tutorial", "learn")
COMMERCIAL_TERMS = ("best", "top", "review", "compare", "vs")


class KeywordMetrics(BaseModel):
    term: str
    search_volume: Optional[int] = None
    difficulty: Optional[int] = None
    cpc: Optional[float] = None
    intent: Optional[str] = None


def infer_search_intent(term: str, data: Dict[str, Any]) -> str:
    """Guess intent from the phrase, then from whether the results page has ads"""
    lower_term = term.lower()

    if any(word in lower_term for word in TRANSACTIONAL_TERMS):
        return "transactional"
    if any(word in lower_term for word in INFORMATIONAL_TERMS):
        return "informational"
    if any(word in lower_term for word in COMMERCIAL_TERMS):
        return "commercial"
    if data.get("ads"):
        return "commercial"
    return "informational"


def metrics_from_serp(term: str, data: Dict[str, Any]) -> KeywordMetrics:
    ads = data.get("ads") or []
    organic = data.get("organic_results") or []
    total_results = (data.get("search_information") or {}).get("total_results")

    return KeywordMetrics(
        term=term,
        search_volume=min(total_results, MAX_SEARCH_VOLUME) if total_results else None,
        difficulty=min(100, (len(ads) * 15 + len(organic) * 2) // 2),
        cpc=1.5 if ads else 0.5,
        intent=infer_search_intent(term, data),
    )


async def _fetch_term(client: httpx.AsyncClient, term: str, api_key: str) -> KeywordMetrics:
    params = {
        "engine": "google",
        "q": term,
        "api_key": api_key,
        "gl": "us",
        "hl": "en",
    }
    try:
        response = await client.get(SERP_API_URL, params=params)
        if response.status_code != 200:
            logger.warning(f"SERP API error for '{term}': {response.status_code}")
            return KeywordMetrics(term=term)
        return metrics_from_serp(term, response.json())
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Error fetching metrics for '{term}': {e}")
        return KeywordMetrics(term=term)


async def fetch_keyword_metrics(
    terms: List[str],
    api_key: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> List[KeywordMetrics]:
    """
    Look up every term concurrently

    Terms that fail come back with null metrics; ordering matches the input.
    """
    effective_key = api_key or settings.SERP_API_KEY
    if not effective_key:
        logger.warning("SERP API: No API key provided - returning null metrics")
        return [KeywordMetrics(term=term) for term in terms]

    if client is None:
        async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS) as http:
            return list(await asyncio.gather(*(_fetch_term(http, term, effective_key) for term in terms)))

    return list(await asyncio.gather(*(_fetch_term(client, term, effective_key) for term in terms)))
