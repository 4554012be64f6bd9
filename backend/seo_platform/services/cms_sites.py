"""
WordPress and Wix REST clients for connected sites
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx
from pydantic import BaseModel

from seo_platform.core.config import settings
from seo_platform.models.connected_site import SiteType

logger = logging.getLogger(__name__)

WIX_PAGES_URL = "https://www.wixapis.com/v1/sites/{site_id}/pages"

PLATFORM_NAMES = {
    SiteType.WORDPRESS: "WordPress",
    SiteType.WIX: "Wix",
}

CONNECT_FAILURE = {
    SiteType.WORDPRESS: "Failed to connect - check URL and API token",
    SiteType.WIX: "Failed to connect - check Site ID and API token",
}

MISSING_CREDENTIALS = {
    SiteType.WORDPRESS: "No API token configured",
    SiteType.WIX: "No Wix credentials configured",
}

REQUIRED_CREDENTIALS = {
    SiteType.WORDPRESS: ("apiToken",),
    SiteType.WIX: ("siteId", "apiToken"),
}


class SitePage(BaseModel):
    id: str
    title: str
    url: Optional[str] = None
    status: Optional[str] = None
    modified: Optional[str] = None


def has_credentials(site_type: SiteType, credentials: Dict[str, Any]) -> bool:
    return all(credentials.get(key) for key in REQUIRED_CREDENTIALS[site_type])


def _request(site_type: SiteType, site_url: str, credentials: Dict[str, Any],
             path: str, params: Dict[str, Any]) -> Tuple[str, Dict[str, Any], Dict[str, str]]:
    if site_type == SiteType.WORDPRESS:
        url = f"{site_url.rstrip('/')}/wp-json/wp/v2/{path}"
        return url, params, {"Authorization": f"Bearer {credentials['apiToken']}"}
    # Wix takes the raw token, without a scheme
    return WIX_PAGES_URL.format(site_id=credentials["siteId"]), {}, {"Authorization": credentials["apiToken"]}


async def _get(url: str, params: Dict[str, Any], headers: Dict[str, str],
               client: Optional[httpx.AsyncClient]) -> Optional[httpx.Response]:
    """GET that returns None on network failure"""
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS) as http:
                return await http.get(url, params=params, headers=headers)
        return await client.get(url, params=params, headers=headers)
    except httpx.HTTPError as e:
        logger.warning(f"Site request to {url} failed: {e}")
        return None


async def verify_site(
    site_type: SiteType,
    site_url: str,
    credentials: Dict[str, Any],
    client: Optional[httpx.AsyncClient] = None,
) -> bool:
    """
    Check that the site answers an authenticated API request

    WordPress is asked for one post, Wix for its page list.
    """
    site_type = SiteType(site_type)
    url, params, headers = _request(site_type, site_url, credentials, "posts", {"per_page": 1})
    response = await _get(url, params, headers, client)
    return response is not None and response.is_success


def _wordpress_page(page: Dict[str, Any]) -> SitePage:
    return SitePage(
        id=str(page.get("id")),
        title=(page.get("title") or {}).get("rendered") or "Untitled",
        url=page.get("link"),
        status=page.get("status"),
        modified=page.get("modified"),
    )


def _wix_page(page: Dict[str, Any], site_url: str) -> SitePage:
    return SitePage(
        id=str(page.get("id")),
        title=page.get("title") or "Untitled",
        url=page.get("url") or f"{site_url}{page.get('slug') or ''}",
        status="published",
        modified=page.get("lastModified"),
    )


async def fetch_site_pages(
    site_type: SiteType,
    site_url: str,
    credentials: Dict[str, Any],
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[List[SitePage]]:
    """
    List the site's pages

    Returns:
        Pages in the site's order, or None when the site cannot be reached
    """
    site_type = SiteType(site_type)
    url, params, headers = _request(site_type, site_url, credentials, "pages", {"per_page": 50})
    response = await _get(url, params, headers, client)
    if response is None or not response.is_success:
        return None

    try:
        data = response.json()
    except ValueError:
        logger.warning(f"{PLATFORM_NAMES[site_type]} returned a non-JSON page list for {site_url}")
        return None

    if site_type == SiteType.WORDPRESS:
        return [_wordpress_page(page) for page in data or []]
    return [_wix_page(page, site_url) for page in (data or {}).get("pages") or []]
