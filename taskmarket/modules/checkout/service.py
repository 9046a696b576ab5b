import calendar
import logging
import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import HTTPException
from supabase import Client

from taskmarket.config import settings
from taskmarket.core.results import SideEffectResult, best_effort
from taskmarket.modules.auth.schemas import Profile
from taskmarket.modules.auth.service import fetch_profile_row
from taskmarket.modules.checkout.plans import Plan, get_plan
from taskmarket.modules.checkout.schemas import (
    PaymentInstructions, PaymentPreview, SideEffectOutcome, plan_response
)

logger = logging.getLogger(__name__)


def add_one_month(moment: datetime) -> datetime:
    """Same day next month, clamped to the month's last day (Jan 31 -> Feb 28/29)."""
    year = moment.year + (1 if moment.month == 12 else 0)
    month = 1 if moment.month == 12 else moment.month + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def build_reference_id(user_id: str, now: Optional[float] = None) -> str:
    millis = int((time.time() if now is None else now) * 1000)
    return f"usdt_{millis}_{user_id}"


class CheckoutService:
    """Records the intent to pay for a plan and grants pending access.

    Nothing is verified here. Both writes are best effort: if either fails
    the user still gets the payment instructions. There is no rollback and
    no duplicate guard, so every call writes a new pending transaction.
    """

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def require_plan(self, plan_key: str) -> Plan:
        plan = get_plan(plan_key)
        if plan is None:
            raise HTTPException(status_code=404, detail=f"Unknown plan: {plan_key}")
        return plan

    def preview(self, plan: Plan) -> PaymentPreview:
        # USDT is priced 1:1 with USD
        return PaymentPreview(
            plan=plan_response(plan),
            amount_usdt=float(plan.price),
            receiving_address=settings.payment_receiving_address,
            network=settings.payment_network,
        )

    def record_transaction(self, user_id: str, plan: Plan, reference_id: str) -> SideEffectResult:
        def insert():
            result = self.supabase.table("transactions").insert({
                "user_id": user_id,
                "type": "subscription",
                "amount": -plan.price,
                "status": "pending",
                "description": f"{plan.name} Membership - USDT Payment Pending",
                "reference_id": reference_id,
            }).execute()
            return result.data

        return best_effort("transaction_insert", insert)

    def mark_pending_membership(self, user_id: str, plan: Plan, expires_at: datetime) -> SideEffectResult:
        def update():
            result = self.supabase.table("profiles")\
                .update({
                    "membership_tier": plan.tier,
                    "membership_expires_at": expires_at.isoformat(),
                    "daily_tasks_used": 0,
                    "membership_status": "pending_payment",
                })\
                .eq("id", user_id)\
                .execute()
            return result.data

        return best_effort("profile_update", update)

    def _reload_profile(self, user_id: str) -> Optional[Profile]:
        try:
            row = fetch_profile_row(self.supabase, user_id)
            return Profile(**row) if row else None
        except Exception as e:
            logger.warning(f"Profile refresh after checkout failed: {e}")
            return None

    def check_intent(self, user_id: str, plan: Plan) -> SideEffectResult:
        """Preconditions for recording anything; a failure here aborts before any write."""
        if not user_id:
            return SideEffectResult.hard_failure("intent_check", "No signed-in user")
        if plan.price <= 0:
            return SideEffectResult.hard_failure("intent_check", f"Plan {plan.key} has no price")
        return SideEffectResult.success("intent_check")

    def initiate_payment(self, user_id: str, plan: Plan, now: Optional[datetime] = None) -> PaymentInstructions:
        check = self.check_intent(user_id, plan)
        if check.should_abort:
            logger.error(f"Checkout aborted: {check.error}")
            raise HTTPException(
                status_code=400,
                detail="There was an issue setting up your payment. Please try again or contact support.",
            )

        now = now or datetime.now(timezone.utc)
        reference_id = build_reference_id(user_id, now.timestamp())
        expires_at = add_one_month(now)

        steps = [
            self.record_transaction(user_id, plan, reference_id),
            self.mark_pending_membership(user_id, plan, expires_at),
        ]
        for step in steps:
            if step.ok:
                logger.info(f"Checkout {reference_id}: {step.step} done")

        preview = self.preview(plan)
        return PaymentInstructions(
            plan=preview.plan,
            amount_usdt=preview.amount_usdt,
            receiving_address=preview.receiving_address,
            network=preview.network,
            reference_id=reference_id,
            membership_expires_at=expires_at.isoformat(),
            side_effects=[SideEffectOutcome(**step.as_dict()) for step in steps],
            profile=self._reload_profile(user_id),
            redirect_to=settings.checkout_redirect_path,
            redirect_after_seconds=settings.checkout_redirect_seconds,
        )
