"""
OpenAI-backed content helpers: briefs and audit recommendations
"""

import json
import logging
from typing import List, Optional

from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from seo_platform.core.config import settings
from seo_platform.services.llm import LLMConfigurationError, LLMError
from seo_platform.services.seo_analyzer import SEOIssue

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
NOT_CONFIGURED = "OpenAI API not configured. Please add your OpenAI API key in Integrations."


class OutlineSection(BaseModel):
    level: int = 2
    heading: str
    description: str = ""


class ContentBriefData(BaseModel):
    title: str = ""
    metaDescription: str = ""
    h1: str = ""
    outline: List[OutlineSection] = []
    talkingPoints: List[str] = []
    targetWordCount: int = 1500
    keywords: List[str] = []


def _resolve_key(api_key: Optional[str]) -> str:
    effective_key = api_key or settings.OPENAI_API_KEY
    if not effective_key:
        raise LLMConfigurationError(NOT_CONFIGURED)
    return effective_key


async def _complete(api_key: Optional[str], model: str, system: str, prompt: str,
                    max_tokens: int, temperature: float = 0.7) -> Optional[str]:
    """One chat completion on a client that is closed afterwards"""
    effective_key = _resolve_key(api_key)
    try:
        async with AsyncOpenAI(api_key=effective_key) as client:
            response = await client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
    except Exception as e:
        logger.error(f"OpenAI request failed: {e}")
        raise LLMError(f"OpenAI request failed: {e}")

    if not response.choices:
        return None
    return response.choices[0].message.content


def build_brief_prompt(target_keyword: str, target_url: Optional[str] = None, notes: Optional[str] = None) -> str:
    lines = [
        "You are an expert SEO content strategist. Create a detailed content brief for the following:",
        "",
        f'Target Keyword: "{target_keyword}"',
    ]
    if target_url:
        lines.append(f"Target URL/Topic: {target_url}")
    if notes:
        lines.append(f"Additional Notes: {notes}")
    lines.extend([
        "",
        "Generate a comprehensive content brief in JSON format with the following structure:",
        "{",
        '  "title": "Compelling, SEO-optimized title (60-70 characters)",',
        '  "metaDescription": "Engaging meta description (150-160 characters)",',
        '  "h1": "Main H1 heading",',
        '  "outline": [{"level": 2, "heading": "H2 heading text", "description": "What this section covers"}],',
        '  "talkingPoints": ["Key point 1", "Key point 2"],',
        '  "targetWordCount": 1500,',
        '  "keywords": ["primary keyword", "secondary keyword 1"]',
        "}",
        "",
        "Focus on search intent alignment, comprehensive topic coverage, a clear H2/H3 structure,",
        "actionable talking points and related keywords.",
        "",
        "Return ONLY valid JSON, no additional text.",
    ])
    return "\n".join(lines)


async def generate_content_brief(
    target_keyword: str,
    target_url: Optional[str] = None,
    notes: Optional[str] = None,
    model: str = DEFAULT_MODEL,
    api_key: Optional[str] = None,
) -> ContentBriefData:
    """
    Ask the model for a structured content brief

    Raises:
        LLMConfigurationError: no OpenAI key available
        LLMError: empty or unparseable response
    """
    content = await _complete(
        api_key,
        model,
        "You are an expert SEO content strategist. Always respond with valid JSON only.",
        build_brief_prompt(target_keyword, target_url, notes),
        max_tokens=2000,
    )
    if not content:
        raise LLMError("No response from OpenAI")

    try:
        return ContentBriefData.model_validate(json.loads(content))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.error(f"Failed to parse OpenAI response: {content[:200]}")
        raise LLMError(f"Failed to parse content brief from OpenAI response: {e}")


def fallback_recommendations(issues: List[SEOIssue]) -> List[str]:
    return [f"Fix: {issue.message}" for issue in issues]


async def enhance_seo_recommendations(
    url: str,
    issues: List[SEOIssue],
    score: int,
    model: str = DEFAULT_MODEL,
    api_key: Optional[str] = None,
) -> List[str]:
    """
    Turn audit issues into 3-5 prioritized recommendations

    Falls back to one "Fix: ..." line per issue when no key is configured or
    the model output cannot be used.
    """
    if not (api_key or settings.OPENAI_API_KEY):
        return fallback_recommendations(issues)

    issue_lines = "\n".join(f"{i}. {issue.type}: {issue.message}" for i, issue in enumerate(issues, start=1))
    prompt = (
        "As an SEO expert, provide 3-5 specific, actionable recommendations to improve this page:\n\n"
        f"URL: {url}\n"
        f"Current SEO Score: {score}/100\n\n"
        f"Issues Found:\n{issue_lines}\n\n"
        "Provide recommendations as a JSON array of strings. Each recommendation should be "
        "specific and actionable, prioritized by impact, and explain why it matters.\n\n"
        "Return ONLY a JSON array of recommendation strings, no additional text."
    )

    try:
        content = await _complete(
            api_key,
            model,
            "You are an SEO expert. Always respond with valid JSON only.",
            prompt,
            max_tokens=800,
        )
    except LLMError as e:
        logger.warning(f"Recommendation generation failed, using fallback: {e}")
        return fallback_recommendations(issues)

    if not content:
        return [f"Address: {issue.message}" for issue in issues]

    try:
        recommendations = json.loads(content)
    except json.JSONDecodeError:
        logger.error(f"Failed to parse OpenAI recommendations: {content[:200]}")
        return fallback_recommendations(issues)

    if not isinstance(recommendations, list):
        return fallback_recommendations(issues)
    return [str(item) for item in recommendations]
