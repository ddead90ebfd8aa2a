from __future__ import annotations

import os

from fastapi import Depends, FastAPI, HTTPException, Request
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import compute_analytics
from .analytics.engagement import record_engagement
from .analytics.store import AnalyticsStore
from .auth.dependencies import get_current_user_id, require_admin, require_user
from .auth.models import LoginRequest
from .auth.users import authenticate
from .posts.models import (
    EngagementRequest,
    EngagementType,
    MarkShownRequest,
    Post,
    RankedPost,
    RankPostsRequest,
    RankPostsResponse,
)
from .preferences.models import PreferenceProfile, UserPreferences
from .preferences.store import InMemoryPreferenceRepository, PreferenceStore
from .recommendations.context import current_context
from .recommendations.engine import RecommendationEngine
from .recommendations.models import (
    RecommendationContext,
    RecommendationRequest,
    RecommendationResponse,
)


def build_engine() -> RecommendationEngine:
    analytics = AnalyticsStore()
    store = PreferenceStore(InMemoryPreferenceRepository())
    return RecommendationEngine(store, analytics=analytics)


app = FastAPI(title="Campus Meals Ranking API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "mealrank-secret-change-in-production"),
)
app.state.engine = build_engine()


def get_engine(request: Request) -> RecommendationEngine:
    return request.app.state.engine


@app.on_event("shutdown")
def on_shutdown() -> None:
    app.state.engine.close()


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/context", response_model=RecommendationContext)
def context() -> RecommendationContext:
    return current_context()


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Vendor feed ──────────────────────────────────────────────────────────


@app.post("/recommendations", response_model=RecommendationResponse)
def recommendations(
    body: RecommendationRequest,
    user_id: str | None = Depends(get_current_user_id),
    engine: RecommendationEngine = Depends(get_engine),
) -> RecommendationResponse:
    ctx = body.context or current_context()
    results = engine.generate_recommendations(
        body.candidates, body.user_location, ctx, user_id=user_id,
    )
    return RecommendationResponse(
        recommendations=results,
        total_candidates=len(body.candidates),
        context=ctx,
    )


# ── Social feed ──────────────────────────────────────────────────────────


@app.post("/posts/rank", response_model=RankPostsResponse)
def rank_posts(
    body: RankPostsRequest,
    user_id: str | None = Depends(get_current_user_id),
    engine: RecommendationEngine = Depends(get_engine),
) -> RankPostsResponse:
    scored = engine.score_posts(body.posts, user_id=user_id)
    return RankPostsResponse(
        posts=[RankedPost(post=post, score=round(score, 4)) for post, score in scored],
    )


@app.post("/posts/{post_id}/shown")
def mark_shown(
    post_id: str,
    body: MarkShownRequest | None = None,
    user_id: str | None = Depends(get_current_user_id),
    engine: RecommendationEngine = Depends(get_engine),
) -> dict:
    creator_id = body.creator_id if body else None
    engine.mark_as_shown(post_id, creator_id, user_id=user_id)
    return {"status": "recorded"}


@app.post("/posts/like", response_model=UserPreferences)
def like_post(
    body: Post,
    user: dict = Depends(require_user),
    engine: RecommendationEngine = Depends(get_engine),
) -> UserPreferences:
    record_engagement(engine.analytics, body.id, EngagementType.like, user["username"])
    return engine.update_preferences(body, user_id=user["username"])


@app.post("/posts/{post_id}/engagement")
def engagement(
    post_id: str,
    body: EngagementRequest,
    user_id: str | None = Depends(get_current_user_id),
    engine: RecommendationEngine = Depends(get_engine),
) -> dict:
    recorded = record_engagement(
        engine.analytics, post_id, body.type, user_id, body.duration_seconds,
    )
    return {"status": "recorded" if recorded else "ignored"}


@app.get("/preferences", response_model=PreferenceProfile)
def preferences(
    user: dict = Depends(require_user),
    engine: RecommendationEngine = Depends(get_engine),
) -> PreferenceProfile:
    return engine.preference_store.load(user["username"])


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.delete("/cache")
def clear_cache(
    user: dict = Depends(require_admin),
    engine: RecommendationEngine = Depends(get_engine),
) -> dict:
    engine.clear_cache()
    return {"status": "cleared"}


@app.get("/cache/stats")
def cache_stats(
    user: dict = Depends(require_admin),
    engine: RecommendationEngine = Depends(get_engine),
) -> dict:
    return engine.cache.stats()


@app.get("/analytics")
def analytics(
    user: dict = Depends(require_admin),
    engine: RecommendationEngine = Depends(get_engine),
) -> dict:
    return compute_analytics(engine.analytics.get_events())
