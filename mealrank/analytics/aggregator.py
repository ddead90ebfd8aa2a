from __future__ import annotations

from collections import Counter, defaultdict
from typing import Any


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    requests = [e for e in events if e["type"] == "recommendation"]
    total = len(requests)

    # Average response time
    times = [r["response_time_ms"] for r in requests if "response_time_ms" in r]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Meal periods served
    period_counter: Counter[str] = Counter()
    for r in requests:
        period_counter[r.get("meal_period", "unknown")] += 1

    # Cache stats
    cache_hits = sum(1 for r in requests if r.get("cache_hit"))
    cache_misses = total - cache_hits

    # Personalised vs anonymous traffic
    personalised = sum(1 for r in requests if r.get("user_id"))

    # Feed ranking
    rankings = [e for e in events if e["type"] == "post_ranking"]
    posts_ranked = sum(r.get("post_count", 0) for r in rankings)

    # Engagement
    engagement = [e for e in events if e["type"] == "engagement"]
    type_counter: Counter[str] = Counter(e["engagement_type"] for e in engagement)
    post_weights: dict[str, int] = defaultdict(int)
    for e in engagement:
        post_weights[e["post_id"]] += e.get("weight", 0)
    top_posts = sorted(post_weights.items(), key=lambda kv: kv[1], reverse=True)[:10]

    learned = sum(1 for e in events if e["type"] == "preference_update")

    return {
        "total_requests": total,
        "avg_response_time_ms": avg_time,
        "meal_periods": dict(period_counter),
        "personalised_rate": round(personalised / total * 100, 1) if total else 0.0,
        "cache_stats": {
            "hits": cache_hits,
            "misses": cache_misses,
            "hit_rate": round(cache_hits / total * 100, 1) if total else 0.0,
        },
        "feed": {
            "rankings": len(rankings),
            "posts_ranked": posts_ranked,
            "preference_updates": learned,
        },
        "engagement_summary": {
            "total": len(engagement),
            "by_type": dict(type_counter),
            "top_posts": [{"post_id": p, "score": s} for p, s in top_posts],
        },
    }
