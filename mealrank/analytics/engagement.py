from __future__ import annotations

from ..posts.models import EngagementType
from .store import AnalyticsStore

ENGAGEMENT_WEIGHTS: dict[EngagementType, int] = {
    EngagementType.view: 0,
    EngagementType.like: 1,
    EngagementType.unlike: -1,
    EngagementType.comment: 3,
    EngagementType.share: 5,
    EngagementType.save: 4,
}

# Views shorter than this are scroll-past noise
MIN_VIEW_SECONDS = 0.5


def record_engagement(
    store: AnalyticsStore,
    post_id: str,
    engagement_type: EngagementType,
    user_id: str | None = None,
    duration_seconds: float | None = None,
) -> bool:
    """Log one engagement event. Returns False when the event is ignored."""
    if engagement_type == EngagementType.view and (duration_seconds or 0.0) <= MIN_VIEW_SECONDS:
        return False
    store.record_event("engagement", {
        "post_id": post_id,
        "engagement_type": engagement_type.value,
        "weight": ENGAGEMENT_WEIGHTS[engagement_type],
        "user_id": user_id,
        "duration_seconds": duration_seconds,
    })
    return True
