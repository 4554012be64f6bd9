"""
Connection tests for workspace integration credentials
"""

import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx
import stripe
from pydantic import BaseModel
from sqlalchemy.orm import Session

from seo_platform.core.config import settings
from seo_platform.core.encryption import decrypt_credentials
from seo_platform.models.integration import IntegrationConfig, IntegrationType
from seo_platform.services.pagespeed import PAGESPEED_URL

logger = logging.getLogger(__name__)

SERP_ACCOUNT_URL = "https://serpapi.com/account.json"
OPENAI_MODELS_URL = "https://api.openai.com/v1/models"
ANTHROPIC_MODELS_URL = "https://api.anthropic.com/v1/models"
GEMINI_MODELS_URL = "https://generativelanguage.googleapis.com/v1beta/models"


class IntegrationTestResult(BaseModel):
    success: bool
    message: str


def _result(success: bool, message: str) -> IntegrationTestResult:
    return IntegrationTestResult(success=success, message=message)


def _error_message(response: httpx.Response, default: str) -> str:
    try:
        data = response.json()
    except ValueError:
        return default
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict):
        return error.get("message") or default
    return error or default


async def _test_serp_api(client: httpx.AsyncClient, credentials: Dict[str, Any]) -> IntegrationTestResult:
    api_key = credentials.get("apiKey")
    if not api_key:
        return _result(False, "API key is required")
    try:
        response = await client.get(SERP_ACCOUNT_URL, params={"api_key": api_key})
        data = response.json()
    except (httpx.HTTPError, ValueError):
        return _result(False, "Failed to connect to SERP API")

    if response.is_success and data.get("account_id"):
        return _result(True, "SERP API connection successful")
    return _result(False, data.get("error") or "Invalid API key")


async def _test_openai(client: httpx.AsyncClient, credentials: Dict[str, Any]) -> IntegrationTestResult:
    api_key = credentials.get("apiKey")
    if not api_key:
        return _result(False, "API key is required")
    try:
        response = await client.get(OPENAI_MODELS_URL, headers={"Authorization": f"Bearer {api_key}"})
    except httpx.HTTPError:
        return _result(False, "Failed to connect to OpenAI")

    if response.is_success:
        return _result(True, "OpenAI connection successful")
    return _result(False, "Invalid API key")


async def _test_anthropic(client: httpx.AsyncClient, credentials: Dict[str, Any]) -> IntegrationTestResult:
    api_key = credentials.get("apiKey")
    if not api_key:
        return _result(False, "API key is required")
    try:
        response = await client.get(
            ANTHROPIC_MODELS_URL,
            headers={"x-api-key": api_key, "anthropic-version": "2023-06-01"},
        )
    except httpx.HTTPError:
        return _result(False, "Failed to connect to Anthropic")

    if response.is_success:
        return _result(True, "Anthropic connection successful")
    return _result(False, _error_message(response, "Invalid API key"))


async def _test_gemini(client: httpx.AsyncClient, credentials: Dict[str, Any]) -> IntegrationTestResult:
    api_key = credentials.get("apiKey")
    if not api_key:
        return _result(False, "API key is required")
    try:
        response = await client.get(GEMINI_MODELS_URL, params={"key": api_key})
    except httpx.HTTPError:
        return _result(False, "Failed to connect to Gemini")

    if response.is_success:
        return _result(True, "Gemini connection successful")
    return _result(False, _error_message(response, "Invalid API key"))


async def _test_pagespeed(client: httpx.AsyncClient, credentials: Dict[str, Any]) -> IntegrationTestResult:
    api_key = credentials.get("apiKey")
    if not api_key:
        return _result(False, "API key is required")
    try:
        response = await client.get(PAGESPEED_URL, params={"url": "https://example.com", "key": api_key})
    except httpx.HTTPError:
        return _result(False, "Failed to connect to PageSpeed Insights")

    if response.is_success:
        return _result(True, "PageSpeed Insights connection successful")
    return _result(False, _error_message(response, "Invalid API key"))


async def _test_stripe(client: httpx.AsyncClient, credentials: Dict[str, Any]) -> IntegrationTestResult:
    secret_key = credentials.get("secretKey") or credentials.get("apiKey")
    if not secret_key:
        return _result(True, "Stripe validation not implemented yet")
    try:
        stripe.Balance.retrieve(api_key=secret_key)
    except stripe.StripeError as e:
        return _result(False, str(e) or "Failed to connect to Stripe")
    return _result(True, "Stripe connection successful")


async def _test_ga4(client: httpx.AsyncClient, credentials: Dict[str, Any]) -> IntegrationTestResult:
    return _result(True, "GA4 validation not implemented yet")


async def _test_gsc(client: httpx.AsyncClient, credentials: Dict[str, Any]) -> IntegrationTestResult:
    return _result(True, "GSC validation not implemented yet")


TESTERS: Dict[IntegrationType, Callable[[httpx.AsyncClient, Dict[str, Any]], Awaitable[IntegrationTestResult]]] = {
    IntegrationType.GA4: _test_ga4,
    IntegrationType.GSC: _test_gsc,
    IntegrationType.SERP_API: _test_serp_api,
    IntegrationType.OPENAI: _test_openai,
    IntegrationType.ANTHROPIC: _test_anthropic,
    IntegrationType.GEMINI: _test_gemini,
    IntegrationType.STRIPE: _test_stripe,
    IntegrationType.PAGESPEED: _test_pagespeed,
}


async def run_integration_test(
    db: Session,
    config: IntegrationConfig,
    client: Optional[httpx.AsyncClient] = None,
) -> IntegrationTestResult:
    """
    Decrypt the config's credentials, run the provider check and record
    the outcome on the config row
    """
    credentials = decrypt_credentials(config.encrypted_credentials)
    tester = TESTERS[IntegrationType(config.type)]

    if client is None:
        async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS) as own_client:
            result = await tester(own_client, credentials)
    else:
        result = await tester(client, credentials)

    config.last_tested_at = datetime.now(timezone.utc)
    config.last_test_status = "success" if result.success else "error"
    config.last_test_error = None if result.success else result.message
    db.commit()

    logger.info(f"Tested {config.type} integration {config.id}: {config.last_test_status}")
    return result
