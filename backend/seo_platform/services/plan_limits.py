"""
Plan tiers and usage limits
"""

from typing import Optional, Union
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy.orm import Session

from seo_platform.models.subscription import Plan, Subscription

ACTIVE_STATUSES = ("active", "trialing")


class PlanLimits(BaseModel):
    """None means unlimited"""
    max_projects: Optional[int]
    max_keywords_per_project: Optional[int]
    max_briefs_per_project: Optional[int]
    max_audits_per_week: Optional[int]
    integrations_allowed: bool
    openai_model: str


PLAN_LIMITS = {
    Plan.FREE: PlanLimits(
        max_projects=2,
        max_keywords_per_project=10,
        max_briefs_per_project=3,
        max_audits_per_week=3,
        integrations_allowed=False,
        openai_model="gpt-4o-mini",
    ),
    Plan.PRO: PlanLimits(
        max_projects=10,
        max_keywords_per_project=100,
        max_briefs_per_project=20,
        max_audits_per_week=10,
        integrations_allowed=True,
        openai_model="gpt-4o-mini",
    ),
    Plan.AGENCY: PlanLimits(
        max_projects=None,
        max_keywords_per_project=None,
        max_briefs_per_project=None,
        max_audits_per_week=None,
        integrations_allowed=True,
        openai_model="gpt-4o",
    ),
}


class LimitCheckResult(BaseModel):
    allowed: bool
    reason: Optional[str] = None
    current: Optional[int] = None
    limit: Optional[int] = None


class PlanLimitExceeded(Exception):
    """Raised when creating a resource would go past the plan limit"""

    def __init__(self, check: LimitCheckResult):
        super().__init__(check.reason)
        self.check = check


def get_limits_for_plan(plan: Union[Plan, str, None]) -> PlanLimits:
    try:
        return PLAN_LIMITS[Plan(plan)]
    except ValueError:
        return PLAN_LIMITS[Plan.FREE]


def check_limit(current: int, limit: Optional[int], resource_name: str) -> LimitCheckResult:
    """
    Compare a usage count against a plan limit

    A None limit always allows.
    """
    if limit is None:
        return LimitCheckResult(allowed=True)

    if current >= limit:
        return LimitCheckResult(
            allowed=False,
            reason=f"You've reached your {resource_name} limit of {limit}. Upgrade your plan to create more.",
            current=current,
            limit=limit,
        )

    return LimitCheckResult(allowed=True, current=current, limit=limit)


def get_workspace_plan(db: Session, workspace_id: UUID) -> Plan:
    """Plan of the workspace's active subscription, FREE otherwise"""
    subscription = db.query(Subscription).filter(Subscription.workspace_id == workspace_id).first()
    if subscription and subscription.status in ACTIVE_STATUSES:
        return Plan(subscription.plan)
    return Plan.FREE
