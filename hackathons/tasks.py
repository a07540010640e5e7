# hackathons/tasks.py

import logging

from celery import shared_task

from .periods import current_period_id, previous_period_id
from .services.submissions import check_commits_after_cutoff

logger = logging.getLogger("cos.hackathons")


@shared_task
def check_disqualified_submissions(hackathon_id: str = None):
    """
    Commit audit for a period whose cutoff has passed.

    Defaults to the previous month, which is the one that just closed when
    the beat schedule fires on the 1st.
    """
    hackathon_id = hackathon_id or previous_period_id(current_period_id())
    summary = check_commits_after_cutoff(hackathon_id)
    return {"hackathon_id": hackathon_id, "disqualified_count": summary["disqualified_count"]}
