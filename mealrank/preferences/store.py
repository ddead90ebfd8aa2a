from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Protocol

from ..posts.models import Post
from ..recommendations.config import DEFAULT_RANKING_CONFIG, RankingConfig
from .models import PreferenceProfile, UserPreferences

logger = logging.getLogger(__name__)


class PreferenceRepository(Protocol):
    """Durable owner of preference profiles (e.g. a document store)."""

    def get(self, user_id: str) -> PreferenceProfile | None: ...

    def put(self, user_id: str, profile: PreferenceProfile) -> bool: ...


class InMemoryPreferenceRepository:
    def __init__(self) -> None:
        self._docs: dict[str, dict] = {}

    def get(self, user_id: str) -> PreferenceProfile | None:
        doc = self._docs.get(user_id)
        return PreferenceProfile.model_validate(doc) if doc is not None else None

    def put(self, user_id: str, profile: PreferenceProfile) -> bool:
        self._docs[user_id] = profile.model_dump(mode="json")
        return True


class PreferenceStore:
    """
    Per-user personalization profiles.

    Profiles are read through the repository once per request with a
    bounded wait; anything other than a successful read yields the neutral
    default. Profiles learned during this process are kept as session
    copies and win over the persisted copy, so a failed write never loses
    an update for the rest of the session.

    A session copy is only ever seeded from a successful durable read.
    Likes that arrive while the repository is unreachable are held as
    pending signals and folded into the durable profile on the next read
    that succeeds.

    At most four durable reads run at once. A read that overruns its wait
    keeps its worker until the repository returns; ``close()`` releases
    the workers on shutdown.
    """

    def __init__(
        self,
        repository: PreferenceRepository,
        config: RankingConfig = DEFAULT_RANKING_CONFIG,
    ) -> None:
        self.repository = repository
        self.config = config
        self._sessions: dict[str, PreferenceProfile] = {}
        self._pending: dict[str, UserPreferences] = {}
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="pref-load")

    def load(self, user_id: str | None) -> PreferenceProfile:
        if user_id is None:
            return PreferenceProfile()

        with self._lock:
            session = self._sessions.get(user_id)
            if session is not None:
                return session.model_copy(deep=True)

        try:
            profile = self._fetch(user_id)
        except Exception:
            logger.warning(
                "Loading preferences for %s failed, using defaults", user_id, exc_info=True,
            )
            with self._lock:
                pending = self._pending.get(user_id)
                feed = pending.model_copy(deep=True) if pending else UserPreferences()
            return PreferenceProfile(feed=feed)

        return self._adopt(user_id, profile)

    def learn(self, user_id: str | None, liked_post: Post) -> UserPreferences:
        """Fold a liked post into the user's feed preferences and persist them."""
        if user_id is None:
            logger.debug("Anonymous like on post %s, nothing learned", liked_post.id)
            return UserPreferences()

        signals = UserPreferences(
            favorite_diet_tags=list(liked_post.diet_tags),
            favorite_location=liked_post.location,
            preferred_meal_types=[liked_post.meal_type],
            favorite_creators=[liked_post.user_id],
        )

        # _fetch blocks, so the durable read happens outside the lock
        with self._lock:
            seeded = user_id in self._sessions
        durable = None
        if not seeded:
            try:
                durable = self._fetch(user_id)
            except Exception:
                logger.warning(
                    "Loading preferences for %s failed, holding the update back",
                    user_id, exc_info=True,
                )

        with self._lock:
            profile = self._sessions.get(user_id)
            if profile is None and durable is not None:
                profile = self._sessions[user_id] = durable
                pending = self._pending.pop(user_id, None)
                if pending is not None:
                    profile.feed.absorb(pending)

            if profile is None:
                pending = self._pending.setdefault(user_id, UserPreferences())
                pending.absorb(signals)
                held = pending.model_copy(deep=True)
            else:
                profile.feed.absorb(signals)
                snapshot = profile.model_copy(deep=True)

        if profile is None:
            logger.info("Holding the preference update for %s until the store is reachable", user_id)
            return held

        logger.info(
            "Updated preferences for %s - tags: %d, location: %r",
            user_id, len(snapshot.feed.favorite_diet_tags), snapshot.feed.favorite_location,
        )
        self._persist(user_id, snapshot)
        return snapshot.feed

    def close(self) -> None:
        """Release the read workers. Later loads fall back to the default profile."""
        self._executor.shutdown(wait=False, cancel_futures=True)

    def _fetch(self, user_id: str) -> PreferenceProfile:
        """Durable read with a bounded wait; raises if the read fails or times out."""
        future = self._executor.submit(self.repository.get, user_id)
        profile = future.result(timeout=self.config.preference_load_timeout)
        if profile is None:
            logger.info("No preferences stored for %s, using defaults", user_id)
            return PreferenceProfile()
        return profile

    def _adopt(self, user_id: str, profile: PreferenceProfile) -> PreferenceProfile:
        """Fold held-back signals into a freshly read profile and write it back."""
        with self._lock:
            pending = self._pending.pop(user_id, None)
            if pending is None:
                return profile
            session = self._sessions.get(user_id)
            if session is None:
                session = self._sessions[user_id] = profile
            session.feed.absorb(pending)
            snapshot = session.model_copy(deep=True)
        self._persist(user_id, snapshot)
        return snapshot

    def _persist(self, user_id: str, profile: PreferenceProfile) -> None:
        try:
            ok = self.repository.put(user_id, profile)
        except Exception:
            logger.warning("Persisting preferences for %s failed", user_id, exc_info=True)
            return
        if not ok:
            logger.warning("Preference store rejected the write for %s", user_id)
