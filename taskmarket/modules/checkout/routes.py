from fastapi import APIRouter, Depends, Response
from taskmarket.database.supabase_client import get_request_supabase
from taskmarket.modules.auth.service import AuthService
from taskmarket.modules.checkout.plans import PLANS
from taskmarket.modules.checkout.schemas import PlanResponse, PaymentPreview, PaymentInstructions, plan_response
from taskmarket.modules.checkout.service import CheckoutService
from taskmarket.core.dependencies import get_auth_service, get_current_user, get_optional_user
from supabase import Client
from typing import Dict, List, Optional

router = APIRouter(tags=["checkout"])


def get_checkout_service(supabase: Client = Depends(get_request_supabase)) -> CheckoutService:
    return CheckoutService(supabase)


@router.get("/pricing/plans", response_model=List[PlanResponse])
async def list_plans(
    current_user: Optional[Dict] = Depends(get_optional_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Membership plans; the caller's current tier is flagged when signed in"""
    current_tier = None
    if current_user:
        profile = auth_service.get_profile(current_user["id"])
        current_tier = profile.membership_tier if profile else None
    return [plan_response(plan, current_tier) for plan in PLANS.values()]


@router.get("/checkout/{plan_key}", response_model=PaymentPreview)
async def preview_checkout(
    plan_key: str,
    current_user: Dict = Depends(get_current_user),
    service: CheckoutService = Depends(get_checkout_service),
):
    """Amount and receiving address for a plan, before anything is recorded"""
    return service.preview(service.require_plan(plan_key))


@router.post("/checkout/{plan_key}", response_model=PaymentInstructions)
async def initiate_checkout(
    plan_key: str,
    response: Response,
    current_user: Dict = Depends(get_current_user),
    service: CheckoutService = Depends(get_checkout_service),
):
    """
    Record a pending USDT payment and put the membership in pending_payment.
    The response carries a Refresh header so the payment screen moves on
    after a fixed delay whether or not anything was paid.
    """
    plan = service.require_plan(plan_key)
    instructions = service.initiate_payment(current_user["id"], plan)
    response.headers["Refresh"] = instructions.refresh_header
    return instructions
