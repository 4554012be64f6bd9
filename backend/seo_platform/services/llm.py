"""
Multi-provider LLM access

A workspace can bring its own OpenAI, Anthropic or Gemini key through an
integration config. Without one, the platform key from settings is used.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union
from uuid import UUID

import httpx
from openai import AsyncOpenAI
from pydantic import BaseModel
from sqlalchemy.orm import Session

from seo_platform.core.config import settings
from seo_platform.models.integration import IntegrationConfig, IntegrationType
from seo_platform.services.integration_credentials import get_workspace_integration_credentials

logger = logging.getLogger(__name__)

ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


class LLMError(Exception):
    """Provider call failed"""
    pass


class LLMConfigurationError(LLMError):
    """No usable API key for the requested provider"""
    pass


class LLMProvider(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"
    SHARED = "shared"


class LLMProfile(str, Enum):
    FAST = "fast"
    BALANCED = "balanced"
    DEEP = "deep"


PROFILE_MODELS: Dict[LLMProfile, Dict[LLMProvider, str]] = {
    LLMProfile.FAST: {
        LLMProvider.OPENAI: "gpt-4o-mini",
        LLMProvider.ANTHROPIC: "claude-3-haiku-20240307",
        LLMProvider.GEMINI: "gemini-1.5-flash",
    },
    LLMProfile.BALANCED: {
        LLMProvider.OPENAI: "gpt-4o",
        LLMProvider.ANTHROPIC: "claude-3-5-sonnet-20241022",
        LLMProvider.GEMINI: "gemini-1.5-pro",
    },
    LLMProfile.DEEP: {
        LLMProvider.OPENAI: "gpt-4o",
        LLMProvider.ANTHROPIC: "claude-3-5-sonnet-20241022",
        LLMProvider.GEMINI: "gemini-2.0-flash-exp",
    },
}

_ENV_KEYS = {
    LLMProvider.OPENAI: "OPENAI_API_KEY",
    LLMProvider.ANTHROPIC: "ANTHROPIC_API_KEY",
    LLMProvider.GEMINI: "GEMINI_API_KEY",
}

_INTEGRATION_TYPES = {
    LLMProvider.OPENAI: IntegrationType.OPENAI,
    LLMProvider.ANTHROPIC: IntegrationType.ANTHROPIC,
    LLMProvider.GEMINI: IntegrationType.GEMINI,
}


class LLMMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class LLMGenerateOptions(BaseModel):
    prompt: str
    system: Optional[str] = None
    history: List[LLMMessage] = []
    max_tokens: int = 2000
    temperature: float = 0.7
    model: Optional[str] = None


class LLMUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class LLMResponse(BaseModel):
    content: str
    usage: LLMUsage
    provider: str
    model: str


class LLMConfig(BaseModel):
    provider: LLMProvider
    api_key: str
    is_shared: bool


def _conversation(options: LLMGenerateOptions) -> List[Dict[str, str]]:
    """Earlier turns followed by the prompt as the latest user turn"""
    turns = [{"role": message.role, "content": message.content} for message in options.history]
    turns.append({"role": "user", "content": options.prompt})
    return turns


def _env_key(provider: LLMProvider) -> Optional[str]:
    return getattr(settings, _ENV_KEYS[provider]) or None


def get_workspace_llm_config(
    db: Session,
    workspace_id: Union[UUID, str],
    provider: LLMProvider = LLMProvider.OPENAI,
) -> LLMConfig:
    """
    Resolve which key to use for a provider

    Raises:
        LLMConfigurationError: when neither a workspace key nor a platform key exists
    """
    provider = LLMProvider(provider)

    if provider == LLMProvider.SHARED:
        if not settings.OPENAI_API_KEY:
            raise LLMConfigurationError("No API key configured for shared provider")
        return LLMConfig(provider=LLMProvider.OPENAI, api_key=settings.OPENAI_API_KEY, is_shared=True)

    credentials = get_workspace_integration_credentials(db, workspace_id, _INTEGRATION_TYPES[provider])
    if credentials and credentials.get("apiKey"):
        return LLMConfig(provider=provider, api_key=credentials["apiKey"], is_shared=False)

    fallback_key = _env_key(provider)
    if fallback_key:
        return LLMConfig(provider=provider, api_key=fallback_key, is_shared=True)

    raise LLMConfigurationError(f"No API key configured for {provider.value}")


async def generate_with_openai(api_key: str, options: LLMGenerateOptions, profile: LLMProfile) -> LLMResponse:
    model = options.model or PROFILE_MODELS[profile][LLMProvider.OPENAI]

    messages: List[Dict[str, str]] = []
    if options.system:
        messages.append({"role": "system", "content": options.system})
    messages.extend(_conversation(options))

    try:
        async with AsyncOpenAI(api_key=api_key) as client:
            response = await client.chat.completions.create(
                model=model,
                messages=messages,
                max_tokens=options.max_tokens,
                temperature=options.temperature,
            )
    except Exception as e:
        logger.error(f"OpenAI API error: {e}")
        raise LLMError(f"OpenAI API error: {e}")

    content = response.choices[0].message.content if response.choices else ""
    usage = response.usage
    return LLMResponse(
        content=content or "",
        usage=LLMUsage(
            prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
            total_tokens=getattr(usage, "total_tokens", 0) or 0,
        ),
        provider=LLMProvider.OPENAI.value,
        model=model,
    )


async def generate_with_anthropic(
    api_key: str,
    options: LLMGenerateOptions,
    profile: LLMProfile,
    client: Optional[httpx.AsyncClient] = None,
) -> LLMResponse:
    model = options.model or PROFILE_MODELS[profile][LLMProvider.ANTHROPIC]

    payload: Dict[str, Any] = {
        "model": model,
        "max_tokens": options.max_tokens,
        "messages": _conversation(options),
        "temperature": options.temperature,
    }
    if options.system:
        payload["system"] = options.system

    headers = {
        "Content-Type": "application/json",
        "x-api-key": api_key,
        "anthropic-version": ANTHROPIC_VERSION,
    }

    data = await _post_json(ANTHROPIC_URL, payload, headers, "Anthropic", client)

    blocks = data.get("content") or []
    usage = data.get("usage") or {}
    input_tokens = usage.get("input_tokens") or 0
    output_tokens = usage.get("output_tokens") or 0

    return LLMResponse(
        content=(blocks[0].get("text") if blocks else "") or "",
        usage=LLMUsage(
            prompt_tokens=input_tokens,
            completion_tokens=output_tokens,
            total_tokens=input_tokens + output_tokens,
        ),
        provider=LLMProvider.ANTHROPIC.value,
        model=model,
    )


async def generate_with_gemini(
    api_key: str,
    options: LLMGenerateOptions,
    profile: LLMProfile,
    client: Optional[httpx.AsyncClient] = None,
) -> LLMResponse:
    model = options.model or PROFILE_MODELS[profile][LLMProvider.GEMINI]

    payload: Dict[str, Any] = {
        "contents": [
            {"role": "model" if turn["role"] == "assistant" else "user", "parts": [{"text": turn["content"]}]}
            for turn in _conversation(options)
        ],
        "generationConfig": {
            "maxOutputTokens": options.max_tokens,
            "temperature": options.temperature,
        },
    }
    if options.system:
        payload["systemInstruction"] = {"parts": [{"text": options.system}]}

    url = f"{GEMINI_URL.format(model=model)}?key={api_key}"
    data = await _post_json(url, payload, {"Content-Type": "application/json"}, "Gemini", client)

    candidates = data.get("candidates") or []
    content = ""
    if candidates:
        parts = (candidates[0].get("content") or {}).get("parts") or []
        if parts:
            content = parts[0].get("text") or ""

    usage = data.get("usageMetadata") or {}
    return LLMResponse(
        content=content,
        usage=LLMUsage(
            prompt_tokens=usage.get("promptTokenCount") or 0,
            completion_tokens=usage.get("candidatesTokenCount") or 0,
            total_tokens=usage.get("totalTokenCount") or 0,
        ),
        provider=LLMProvider.GEMINI.value,
        model=model,
    )


async def _post_json(
    url: str,
    payload: Dict[str, Any],
    headers: Dict[str, str],
    provider_name: str,
    client: Optional[httpx.AsyncClient],
) -> Dict[str, Any]:
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS * 2) as http:
                response = await http.post(url, json=payload, headers=headers)
        else:
            response = await client.post(url, json=payload, headers=headers)
    except httpx.HTTPError as e:
        logger.error(f"{provider_name} API request failed: {e}")
        raise LLMError(f"{provider_name} API error: {e}")

    if response.status_code >= 400:
        logger.error(f"{provider_name} API error: {response.status_code} {response.text[:200]}")
        raise LLMError(f"{provider_name} API error: {response.reason_phrase}")

    return response.json()


async def generate_text(
    db: Session,
    workspace_id: Union[UUID, str],
    options: LLMGenerateOptions,
    profile: LLMProfile = LLMProfile.BALANCED,
    preferred_provider: LLMProvider = LLMProvider.OPENAI,
    client: Optional[httpx.AsyncClient] = None,
) -> LLMResponse:
    """
    Generate text with the workspace's preferred provider

    Args:
        db: Database session used for the key lookup
        workspace_id: Workspace whose key should be used
        options: Prompt and generation parameters
        profile: Speed/quality tier selecting the model
        preferred_provider: Provider to use
        client: Optional HTTP client for the Anthropic and Gemini calls

    Returns:
        LLMResponse with content, usage and the model that produced it
    """
    profile = LLMProfile(profile)
    config = get_workspace_llm_config(db, workspace_id, preferred_provider)

    if config.provider == LLMProvider.OPENAI:
        return await generate_with_openai(config.api_key, options, profile)
    if config.provider == LLMProvider.ANTHROPIC:
        return await generate_with_anthropic(config.api_key, options, profile, client)
    if config.provider == LLMProvider.GEMINI:
        return await generate_with_gemini(config.api_key, options, profile, client)

    raise LLMConfigurationError(f"Unsupported provider: {config.provider.value}")


def get_available_providers(db: Session, workspace_id: Union[UUID, str]) -> List[str]:
    """Providers with an enabled workspace key or a platform key"""
    workspace_uuid = workspace_id if isinstance(workspace_id, UUID) else UUID(str(workspace_id))
    configs = db.query(IntegrationConfig).filter(
        IntegrationConfig.workspace_id == workspace_uuid,
        IntegrationConfig.type.in_([t.value for t in _INTEGRATION_TYPES.values()]),
        IntegrationConfig.is_enabled.is_(True),
    ).all()

    providers: List[str] = []
    for provider, integration_type in _INTEGRATION_TYPES.items():
        if any(config.type == integration_type.value for config in configs):
            providers.append(provider.value)

    for provider in _INTEGRATION_TYPES:
        if _env_key(provider) and provider.value not in providers:
            providers.append(provider.value)

    return providers or [LLMProvider.OPENAI.value]
