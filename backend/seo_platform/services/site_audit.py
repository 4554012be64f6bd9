"""
Full page audit: on-page analysis, PageSpeed and AI recommendations
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import httpx
from sqlalchemy.orm import Session

from seo_platform.core.config import settings
from seo_platform.models.project import Project
from seo_platform.models.seo_audit import SeoAudit
from seo_platform.services.content_ai import enhance_seo_recommendations
from seo_platform.services.integration_credentials import (
    get_or_fallback_openai_key,
    get_or_fallback_pagespeed_key,
)
from seo_platform.services.pagespeed import run_pagespeed_audit
from seo_platform.services.seo_analyzer import analyze_seo

logger = logging.getLogger(__name__)


def count_recent_audits(db: Session, workspace_id: UUID, days: int = 7) -> int:
    since = datetime.now(timezone.utc) - timedelta(days=days)
    return db.query(SeoAudit).join(Project).filter(
        Project.workspace_id == workspace_id,
        SeoAudit.created_at >= since,
    ).count()


async def run_site_audit(
    db: Session,
    project: Project,
    url: str,
    model: str,
    client: Optional[httpx.AsyncClient] = None,
) -> SeoAudit:
    """
    Audit a URL for a project and store the result

    The analyzer and PageSpeed run concurrently. SEOAnalyzerError propagates;
    PageSpeed and recommendation failures degrade to defaults.
    """
    pagespeed_key = get_or_fallback_pagespeed_key(db, project.workspace_id)
    openai_key = get_or_fallback_openai_key(db, project.workspace_id)

    if client is None:
        async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS) as http:
            analysis, pagespeed = await asyncio.gather(
                analyze_seo(url, client=http),
                run_pagespeed_audit(url, pagespeed_key),
            )
    else:
        analysis, pagespeed = await asyncio.gather(
            analyze_seo(url, client=client),
            run_pagespeed_audit(url, pagespeed_key, client=client),
        )

    recommendations = await enhance_seo_recommendations(
        url=url,
        issues=analysis.issues,
        score=analysis.score,
        model=model,
        api_key=openai_key,
    )

    combined_issues = [issue.model_dump() for issue in analysis.issues + pagespeed.issues]

    audit = SeoAudit(
        project_id=project.id,
        url=url,
        overall_score=round((analysis.score + (pagespeed.performance_score or 0)) / 2),
        seo_score=pagespeed.seo_score,
        performance_score=pagespeed.performance_score,
        accessibility_score=pagespeed.accessibility_score,
        best_practices_score=pagespeed.best_practices_score,
        mobile_friendly=pagespeed.mobile_friendly,
        title=analysis.title,
        meta_description=analysis.meta_description,
        h1_count=analysis.h1_count,
        h2_count=analysis.h2_count,
        word_count=analysis.word_count,
        load_time=pagespeed.load_time,
        issues=combined_issues,
        recommendations=recommendations,
    )
    db.add(audit)
    db.commit()
    db.refresh(audit)

    logger.info(f"Audit {audit.id} for {url}: score {audit.overall_score}")
    return audit
