from typing import Sequence

from taskmarket.modules.admin.schemas import OverviewStats
from taskmarket.modules.jobs.schemas import JobResponse
from taskmarket.modules.submissions.schemas import SubmissionResponse


def overview_stats(jobs: Sequence[JobResponse], submissions: Sequence[SubmissionResponse]) -> OverviewStats:
    return OverviewStats(
        total_jobs=len(jobs),
        active_jobs=sum(1 for job in jobs if job.is_active),
        pending_reviews=sum(1 for sub in submissions if sub.status == "pending"),
        total_submissions=len(submissions),
    )
