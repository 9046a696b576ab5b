"""Membership plan catalog shown on the pricing page and charged at checkout."""
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Plan:
    key: str
    name: str
    price: int
    tier: str
    description: str
    daily_task_limit: Optional[int]  # None means unlimited
    features: List[str] = field(default_factory=list)
    cta: str = ""
    popular: bool = False
    period: str = "month"


PLANS: Dict[str, Plan] = {
    "regular": Plan(
        key="regular",
        name="Regular",
        price=15,
        tier="regular",
        description="Perfect for getting started",
        daily_task_limit=4,
        features=[
            "Access to Regular tier jobs",
            "Up to 4 tasks per day",
            "Standard review time",
            "Email support",
            "Basic earnings dashboard",
            "Weekly payouts",
        ],
        cta="Start Regular",
    ),
    "pro": Plan(
        key="pro",
        name="Pro",
        price=25,
        tier="pro",
        description="Most popular for professionals",
        daily_task_limit=6,
        features=[
            "Access to Regular + Pro jobs",
            "Up to 6 tasks per day",
            "Priority review (24h)",
            "Priority email support",
            "Advanced analytics",
            "Bi-weekly payouts",
            "Skill badges & reputation",
        ],
        cta="Go Pro",
        popular=True,
    ),
    "vip": Plan(
        key="vip",
        name="VIP",
        price=49,
        tier="vip",
        description="For serious professionals",
        daily_task_limit=None,
        features=[
            "Access to ALL job tiers",
            "Unlimited tasks per day",
            "Express review (12h)",
            "24/7 priority support",
            "Premium analytics & insights",
            "Weekly instant payouts",
            "Featured profile badge",
            "Early access to new jobs",
        ],
        cta="Become VIP",
    ),
}

# Tier order used for job gating; a member sees jobs at or below their tier
TIER_RANK = {"none": 0, "regular": 1, "pro": 2, "vip": 3}


def get_plan(key: Optional[str]) -> Optional[Plan]:
    if not key:
        return None
    return PLANS.get(key.lower())


def tier_allows(member_tier: Optional[str], required_tier: Optional[str]) -> bool:
    return TIER_RANK.get(member_tier or "none", 0) >= TIER_RANK.get(required_tier or "none", 0)
