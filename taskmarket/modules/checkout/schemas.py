from pydantic import BaseModel
from typing import Optional, List, Dict, Any
from taskmarket.modules.auth.schemas import Profile


class PlanResponse(BaseModel):
    key: str
    name: str
    price: int
    period: str
    tier: str
    description: str
    daily_task_limit: Optional[int] = None
    features: List[str]
    cta: str
    popular: bool = False
    is_current: bool = False


class PaymentPreview(BaseModel):
    plan: PlanResponse
    amount_usdt: float
    receiving_address: str
    network: str


class SideEffectOutcome(BaseModel):
    step: str
    outcome: str
    error: Optional[str] = None


class PaymentInstructions(BaseModel):
    plan: PlanResponse
    amount_usdt: float
    receiving_address: str
    network: str
    reference_id: str
    membership_expires_at: str
    message: str = (
        "Please send USDT to the address shown. "
        "Your membership will be activated after verification."
    )
    side_effects: List[SideEffectOutcome]
    profile: Optional[Profile] = None
    redirect_to: str
    redirect_after_seconds: int

    @property
    def refresh_header(self) -> str:
        return f"{self.redirect_after_seconds}; url={self.redirect_to}"


def plan_response(plan, current_tier: Optional[str] = None) -> PlanResponse:
    data: Dict[str, Any] = {
        "key": plan.key,
        "name": plan.name,
        "price": plan.price,
        "period": plan.period,
        "tier": plan.tier,
        "description": plan.description,
        "daily_task_limit": plan.daily_task_limit,
        "features": list(plan.features),
        "cta": plan.cta,
        "popular": plan.popular,
        "is_current": current_tier == plan.tier,
    }
    return PlanResponse(**data)
