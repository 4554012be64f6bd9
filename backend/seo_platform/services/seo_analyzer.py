"""
On-page SEO analyzer

Fetches a page and scores it against a fixed checklist. Scoring starts at 100
and every failed check deducts a fixed amount; the result is clamped to 0-100.
"""

import logging
from typing import List, Optional

import httpx
from bs4 import BeautifulSoup
from pydantic import BaseModel, Field

from seo_platform.core.config import settings

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; SEOPlatformBot/1.0; +https://seo-platform.app)"


class SEOAnalyzerError(Exception):
    """Raised when a URL cannot be fetched or parsed"""
    pass


class SEOIssue(BaseModel):
    type: str = Field(..., description="error, warning or info")
    category: str
    message: str


class SEOAnalysisResult(BaseModel):
    url: str
    status_code: int
    title: Optional[str] = None
    title_length: int = 0
    meta_description: Optional[str] = None
    meta_description_length: int = 0
    h1_tags: List[str] = []
    h1_count: int = 0
    h2_count: int = 0
    word_count: int = 0
    issues: List[SEOIssue] = []
    score: int = 100


def analyze_html(url: str, status_code: int, html: str) -> SEOAnalysisResult:
    """
    Score an already fetched page

    Args:
        url: Page URL, echoed in the result
        status_code: HTTP status of the fetch
        html: Response body

    Returns:
        SEOAnalysisResult with issues and the final score
    """
    issues: List[SEOIssue] = []
    score = 100

    def add(issue_type: str, category: str, message: str, penalty: int) -> None:
        nonlocal score
        issues.append(SEOIssue(type=issue_type, category=category, message=message))
        score -= penalty

    if status_code != 200:
        add("error", "HTTP Status", f"Page returned status code {status_code}. Expected 200.", 30)

    soup = BeautifulSoup(html or "", "html.parser")

    # Title
    title_el = soup.find("title")
    title = title_el.get_text().strip() if title_el else ""
    title = title or None
    title_length = len(title) if title else 0

    if not title:
        add("error", "Title Tag", "Missing <title> tag. This is critical for SEO.", 15)
    elif title_length < 30:
        add("warning", "Title Tag", f"Title is too short ({title_length} chars). Aim for 50-60 characters.", 5)
    elif title_length > 70:
        add("warning", "Title Tag", f"Title is too long ({title_length} chars). May be truncated in search results.", 5)

    # Meta description
    meta_el = soup.find("meta", attrs={"name": "description"})
    meta_description = (meta_el.get("content") or "").strip() if meta_el else ""
    meta_description = meta_description or None
    meta_length = len(meta_description) if meta_description else 0

    if not meta_description:
        add("error", "Meta Description", "Missing meta description. This affects click-through rates.", 15)
    elif meta_length < 120:
        add("warning", "Meta Description",
            f"Meta description is short ({meta_length} chars). Aim for 150-160 characters.", 3)
    elif meta_length > 160:
        add("info", "Meta Description", f"Meta description is long ({meta_length} chars). May be truncated.", 2)

    # Headings
    h1_tags = [h1.get_text().strip() for h1 in soup.find_all("h1")]
    h1_count = len(h1_tags)
    h2_count = len(soup.find_all("h2"))

    if h1_count == 0:
        add("error", "H1 Tag", "No H1 tag found. Every page should have exactly one H1.", 10)
    elif h1_count > 1:
        add("warning", "H1 Tag", f"Multiple H1 tags found ({h1_count}). Best practice is one H1 per page.", 5)

    # Content length
    body = soup.body
    word_count = 0
    if body is not None:
        for tag in body(["script", "style", "noscript"]):
            tag.decompose()
        word_count = len(body.get_text(separator=" ").split())

    if word_count < 300:
        add("warning", "Content Length",
            f"Low word count ({word_count} words). Aim for at least 300 words for better rankings.", 10)
    elif word_count < 600:
        add("info", "Content Length",
            f"Moderate word count ({word_count} words). Consider expanding for more comprehensive coverage.", 3)

    # Images without alt text (an empty alt counts as missing)
    missing_alt = [img for img in soup.find_all("img") if not img.get("alt")]
    if missing_alt:
        add("warning", "Images",
            f"{len(missing_alt)} image(s) missing alt attributes. Add descriptive alt text.",
            min(len(missing_alt) * 2, 10))

    # Canonical
    canonical = soup.find("link", rel=lambda value: value and "canonical" in value)
    if canonical is None:
        add("info", "Canonical Tag",
            "No canonical tag found. Consider adding one to prevent duplicate content issues.", 2)

    score = max(0, min(100, score))

    return SEOAnalysisResult(
        url=url,
        status_code=status_code,
        title=title,
        title_length=title_length,
        meta_description=meta_description,
        meta_description_length=meta_length,
        h1_tags=h1_tags,
        h1_count=h1_count,
        h2_count=h2_count,
        word_count=word_count,
        issues=issues,
        score=score,
    )


async def analyze_seo(url: str, client: Optional[httpx.AsyncClient] = None) -> SEOAnalysisResult:
    """
    Fetch a URL and run the on-page checks

    Args:
        url: Page to analyze
        client: Optional shared HTTP client

    Returns:
        SEOAnalysisResult

    Raises:
        SEOAnalyzerError: if the page cannot be fetched or parsed
    """
    try:
        if client is None:
            async with httpx.AsyncClient(
                timeout=settings.HTTP_TIMEOUT_SECONDS,
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT},
            ) as http:
                response = await http.get(url)
        else:
            response = await client.get(url, headers={"User-Agent": USER_AGENT}, follow_redirects=True)

        return analyze_html(url, response.status_code, response.text)

    except Exception as e:
        logger.error(f"SEO analysis error for {url}: {e}")
        raise SEOAnalyzerError(f"Failed to analyze URL: {e}")
