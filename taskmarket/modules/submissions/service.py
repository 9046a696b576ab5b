from supabase import Client
from taskmarket.config import settings
from taskmarket.core.results import SideEffectResult, best_effort
from taskmarket.modules.submissions.schemas import ReviewResponse, SubmissionResponse
from typing import Any, Dict, Iterable, List, Optional
from datetime import datetime, timezone
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)

SUBMISSIONS_VIEW = "admin_submissions_view"
TABLE_COLUMNS = "*, job:jobs(title), profile:profiles(email, full_name)"
EARNINGS_COLUMNS = "approved_earnings, total_earnings, tasks_completed"


def normalize_submission(row: Dict[str, Any], source: str = "view") -> SubmissionResponse:
    """One shape for rows from the admin view and from the joined table"""
    data = dict(row)
    if source == "table":
        job = data.pop("job", None) or {}
        profile = data.pop("profile", None) or {}
        data["job_title"] = job.get("title")
        data["user_email"] = profile.get("email")
        data["user_name"] = profile.get("full_name")
    data["payment_amount"] = data.get("payment_amount") or 0
    return SubmissionResponse(**data)


def filter_submissions(
    submissions: Iterable[SubmissionResponse],
    search: Optional[str] = None,
    status: str = "all",
) -> List[SubmissionResponse]:
    needle = (search or "").lower()

    def matches(sub: SubmissionResponse) -> bool:
        if status != "all" and sub.status != status:
            return False
        if not needle:
            return True
        haystack = (sub.job_title, sub.user_email, sub.user_name, sub.submission_content)
        return any(needle in value.lower() for value in haystack if value)

    return [sub for sub in submissions if matches(sub)]


def apply_approval(earnings: Dict[str, Any], amount: float) -> Dict[str, Any]:
    """Profile columns after crediting one approved submission worth amount"""
    return {
        "approved_earnings": (earnings.get("approved_earnings") or 0) + amount,
        "total_earnings": (earnings.get("total_earnings") or 0) + amount,
        "tasks_completed": (earnings.get("tasks_completed") or 0) + 1,
    }


class SubmissionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_submissions(self, source: str = "view", limit: Optional[int] = None) -> List[SubmissionResponse]:
        """Newest submissions from the admin view or the joined table"""
        limit = limit or settings.submissions_page_size
        try:
            if source == "view":
                query = self.supabase.table(SUBMISSIONS_VIEW).select("*")
            else:
                query = self.supabase.table("job_submissions").select(TABLE_COLUMNS)
            result = query.order("created_at", desc=True).limit(limit).execute()
        except Exception as e:
            logger.error(f"Error fetching submissions: {e}")
            raise HTTPException(status_code=500, detail="Failed to load data")
        return [normalize_submission(row, source) for row in result.data or []]

    def get_submission(self, submission_id: str) -> SubmissionResponse:
        try:
            result = self.supabase.table("job_submissions")\
                .select(TABLE_COLUMNS)\
                .eq("id", submission_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result or not result.data:
            raise HTTPException(status_code=404, detail="Submission not found")
        return normalize_submission(result.data, "table")

    def credit_earnings(self, user_id: str, amount: float) -> SideEffectResult:
        def credit():
            result = self.supabase.table("profiles")\
                .select(EARNINGS_COLUMNS)\
                .eq("id", user_id)\
                .single()\
                .execute()
            if not result.data:
                raise LookupError(f"No profile for user {user_id}")
            self.supabase.table("profiles")\
                .update(apply_approval(result.data, amount))\
                .eq("id", user_id)\
                .execute()

        return best_effort("earnings_update", credit)

    def review_submission(
        self,
        submission_id: str,
        decision: str,
        feedback: Optional[str],
        reviewer_id: str,
    ) -> ReviewResponse:
        """Move a pending submission to approved or rejected. Reviews are final."""
        submission = self.get_submission(submission_id)
        if submission.status != "pending":
            raise HTTPException(status_code=409, detail=f"Submission already {submission.status}")

        update_data = {
            "status": decision,
            "admin_feedback": feedback or None,
            "reviewed_at": datetime.now(timezone.utc).isoformat(),
            "reviewed_by": reviewer_id,
        }
        try:
            # The status guard makes concurrent reviews of one submission lose cleanly
            result = self.supabase.table("job_submissions")\
                .update(update_data)\
                .eq("id", submission_id)\
                .eq("status", "pending")\
                .execute()
        except Exception as e:
            logger.error(f"Review error: {e}")
            raise HTTPException(status_code=500, detail=str(e) or "Failed to review submission")
        if not result.data:
            raise HTTPException(status_code=409, detail="Submission was reviewed by someone else")

        earnings_updated = False
        if decision == "approved":
            earnings_updated = self.credit_earnings(submission.user_id, submission.payment_amount).ok

        return ReviewResponse(
            submission_id=submission_id,
            status=decision,
            earnings_updated=earnings_updated,
            message=f"Submission {decision}",
        )
