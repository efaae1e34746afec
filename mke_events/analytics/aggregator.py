from __future__ import annotations

from collections import Counter
from typing import Any

HISTORY_STATUSES = ("ok", "empty", "unavailable")


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    requests = [e for e in events if e["type"] == "recommend"]
    total = len(requests)

    # Average response time
    times = [r["response_time_ms"] for r in requests if "response_time_ms" in r]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Top regions
    region_counter: Counter[str] = Counter()
    for r in requests:
        if r.get("region"):
            region_counter[r["region"].strip().lower()] += 1
    top_regions = [{"name": n, "count": c} for n, c in region_counter.most_common(10)]

    # Top requested genres
    genre_counter: Counter[str] = Counter()
    for r in requests:
        for g in r.get("genres", []) or []:
            genre_counter[g] += 1
    top_genres = [{"name": n, "count": c} for n, c in genre_counter.most_common(10)]

    # Filter usage rates
    filter_counts = {"region": 0, "genres": 0, "upcoming_only": 0, "interleave": 0}
    for r in requests:
        if r.get("region"):
            filter_counts["region"] += 1
        if r.get("genres"):
            filter_counts["genres"] += 1
        if r.get("upcoming_only"):
            filter_counts["upcoming_only"] += 1
        if r.get("interleave"):
            filter_counts["interleave"] += 1
    filter_usage = {
        k: round(v / total * 100, 1) if total else 0.0
        for k, v in filter_counts.items()
    }

    # Empty history and store outages are reported separately
    status_counter: Counter[str] = Counter(r.get("history_status", "ok") for r in requests)
    history_status = {s: status_counter.get(s, 0) for s in HISTORY_STATUSES}

    returned = [r.get("results_returned", 0) for r in requests]
    avg_results = round(sum(returned) / total, 1) if total else 0.0

    return {
        "total_requests": total,
        "avg_response_time_ms": avg_time,
        "avg_results_returned": avg_results,
        "top_regions": top_regions,
        "top_genres": top_genres,
        "filter_usage": filter_usage,
        "history_status": history_status,
    }
