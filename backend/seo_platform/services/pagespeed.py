"""
Google PageSpeed Insights client
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel

from seo_platform.core.config import settings
from seo_platform.services.seo_analyzer import SEOIssue

logger = logging.getLogger(__name__)

PAGESPEED_URL = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"
CATEGORIES = ["performance", "seo", "accessibility", "best-practices"]


class PageSpeedResult(BaseModel):
    performance_score: Optional[int] = None
    seo_score: Optional[int] = None
    accessibility_score: Optional[int] = None
    best_practices_score: Optional[int] = None
    mobile_friendly: bool = False
    load_time: Optional[float] = None
    issues: List[SEOIssue] = []


def basic_audit(url: str) -> PageSpeedResult:
    """Estimated scores used when the API is unavailable"""
    logger.info(f"Running basic audit for: {url}")
    return PageSpeedResult(
        performance_score=75,
        seo_score=80,
        accessibility_score=85,
        best_practices_score=80,
        mobile_friendly=True,
        load_time=2,
        issues=[SEOIssue(
            type="info",
            category="Performance",
            message="PageSpeed API not configured - using estimated scores",
        )],
    )


def _score(categories: Dict[str, Any], name: str) -> int:
    return round(((categories.get(name) or {}).get("score") or 0) * 100)


def _audit_score(audits: Dict[str, Any], name: str) -> Optional[float]:
    return (audits.get(name) or {}).get("score")


def parse_lighthouse(data: Dict[str, Any]) -> PageSpeedResult:
    """Map a runPagespeed response body to a PageSpeedResult"""
    lighthouse = data.get("lighthouseResult") or {}
    categories = lighthouse.get("categories") or {}
    audits = lighthouse.get("audits") or {}

    issues: List[SEOIssue] = []

    for audit_name, message in (
        ("first-contentful-paint", "Slow First Contentful Paint"),
        ("largest-contentful-paint", "Slow Largest Contentful Paint"),
        ("cumulative-layout-shift", "High Cumulative Layout Shift"),
    ):
        score = _audit_score(audits, audit_name)
        if score is not None and score < 0.5:
            issues.append(SEOIssue(type="warning", category="Performance", message=message))

    if _audit_score(audits, "meta-description") == 0:
        issues.append(SEOIssue(type="error", category="Meta Description", message="Missing meta description"))
    if _audit_score(audits, "document-title") == 0:
        issues.append(SEOIssue(type="error", category="Title Tag", message="Missing title tag"))

    performance = (categories.get("performance") or {}).get("score") or 0
    speed_index_ms = (audits.get("speed-index") or {}).get("numericValue") or 0

    return PageSpeedResult(
        performance_score=_score(categories, "performance"),
        seo_score=_score(categories, "seo"),
        accessibility_score=_score(categories, "accessibility"),
        best_practices_score=_score(categories, "best-practices"),
        mobile_friendly=performance > 0.5,
        load_time=round(speed_index_ms / 1000),
        issues=issues,
    )


async def run_pagespeed_audit(
    url: str,
    api_key: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> PageSpeedResult:
    """
    Run a mobile Lighthouse audit through PageSpeed Insights

    Never raises: any failure returns basic_audit() instead.
    """
    effective_key = api_key or settings.PAGESPEED_API_KEY
    if not effective_key:
        logger.warning("PageSpeed API: No API key provided - returning basic audit")
        return basic_audit(url)

    params = [("url", url), ("key", effective_key), ("strategy", "mobile")]
    params.extend(("category", category) for category in CATEGORIES)

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=60.0) as http:
                response = await http.get(PAGESPEED_URL, params=params)
        else:
            response = await client.get(PAGESPEED_URL, params=params)

        if response.status_code != 200:
            logger.error(f"PageSpeed API error: {response.status_code} {response.reason_phrase}")
            return basic_audit(url)

        return parse_lighthouse(response.json())

    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"PageSpeed API error: {e}")
        return basic_audit(url)
