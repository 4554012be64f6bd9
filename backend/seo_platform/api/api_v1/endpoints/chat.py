"""
In-app help assistant
"""

import logging

from fastapi import APIRouter, HTTPException, Depends, status
from sqlalchemy.orm import Session

from seo_platform.api.deps import get_current_workspace, rate_limit
from seo_platform.core.database import get_db
from seo_platform.models.workspace import Workspace
from seo_platform.schemas.site import ChatRequest
from seo_platform.services.llm import (
    LLMConfigurationError,
    LLMError,
    LLMGenerateOptions,
    LLMMessage,
    LLMProfile,
    generate_text,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Only the most recent turns are sent to the model
MAX_CHAT_MESSAGES = 10

SYSTEM_PROMPT = """You are a helpful assistant for SEO Platform, a multi-tenant SEO management platform.

You can help users with:
1. Understanding how to use the platform's features (projects, clients, keywords, audits, content briefs, documents)
2. Explaining SEO concepts and best practices
3. Answering questions about the platform's privacy policy, terms of service and data processing

Key platform features:
- Clients & Projects: Organize SEO work by client with multiple projects per client
- Keyword Research: Track search volume, difficulty and search intent
- SEO Audits: On-page analysis with scores and recommendations
- Content Briefs: AI-generated content outlines for target keywords
- Documents: Store notes, reports and strategy docs per client or project
- Integrations: Connect analytics tools, LLM providers and WordPress or Wix sites

Privacy & Data:
- Credentials are encrypted at rest
- Third-party integrations only access what you authorize

Important: Provide general guidance only. Do not provide legal advice or SEO guarantees. Recommend that users consult professionals for specific legal or strategic decisions.

Be concise, helpful and professional in your responses."""


@router.post("/chat", dependencies=[Depends(rate_limit)])
async def chat(
    payload: ChatRequest,
    workspace: Workspace = Depends(get_current_workspace),
    db: Session = Depends(get_db),
):
    """
    Answer the latest user message with the recent conversation as context

    The workspace's own LLM key is used when it has one, otherwise the
    platform key. The last message must come from the user.
    """
    messages = payload.messages[-MAX_CHAT_MESSAGES:]
    latest = messages[-1]
    if latest.role != "user":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="The last message must come from the user")

    history = [LLMMessage(role=message.role, content=message.content) for message in messages[:-1]]
    # Providers expect the conversation to open with a user turn
    while history and history[0].role != "user":
        history.pop(0)

    options = LLMGenerateOptions(
        prompt=latest.content,
        system=SYSTEM_PROMPT,
        history=history,
        max_tokens=500,
        temperature=0.7,
    )

    try:
        response = await generate_text(db, workspace.id, options, profile=LLMProfile.FAST)
    except LLMConfigurationError as e:
        logger.warning(f"Chat unavailable for workspace {workspace.id}: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Chat feature is not configured")
    except LLMError as e:
        logger.error(f"Chat request failed for workspace {workspace.id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to process chat request")

    if not response.content:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="No response from AI")

    return {"message": {"role": "assistant", "content": response.content}}
