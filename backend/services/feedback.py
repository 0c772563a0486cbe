"""Feedback loop: user reactions to stored recommendations."""

import logging
from collections.abc import Callable
from datetime import datetime

from models.entities import FeedbackEvent, FeedbackType
from models.responses import FeedbackEntry
from services.cache import RecommendationCache
from services.errors import NotFoundError
from services.normalizer import utc_now
from services.store import RecommendationStore

logger = logging.getLogger(__name__)


class FeedbackRecorder:
    def __init__(
        self,
        store: RecommendationStore,
        cache: RecommendationCache,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.cache = cache
        self._clock = clock

    def record_feedback(
        self,
        profile_id: str,
        job_id: str,
        feedback: FeedbackType,
        reasons: list[str] | None = None,
    ) -> None:
        """Append feedback to the stored recommendation and clear the profile's cache.

        Earlier feedback is kept; the history only grows. The event is also
        logged to the store, where the training pipeline picks it up.
        """
        now = self._clock()
        reasons = list(reasons or [])
        entry = FeedbackEntry(feedback=feedback, reasons=reasons, recorded_at=now)
        if self.store.append_feedback(profile_id, job_id, entry, now) is None:
            raise NotFoundError(f"No recommendation of job {job_id} for profile {profile_id}")

        self.store.record_feedback_event(FeedbackEvent(
            profile_id=profile_id,
            job_id=job_id,
            feedback=feedback,
            reasons=reasons,
            recorded_at=now,
        ))

        self.cache.invalidate_profile(profile_id)
        logger.info("Recorded %s feedback from profile %s on job %s", feedback, profile_id, job_id)
