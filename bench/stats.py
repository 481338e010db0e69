"""
Statistics aggregator shared by every bench mode.
"""
from typing import Optional

from core.types import AggregateStat, EndpointResult, ResultSet, Summary


def aggregate(result: EndpointResult) -> Optional[AggregateStat]:
    """Average/min/max over successful samples only; None if there are none."""
    durations = [s.duration_ms for s in result.successes()]
    if not durations:
        return None
    lo, hi = min(durations), max(durations)
    # float summation can drift just outside the observed range
    average = min(max(sum(durations) / len(durations), lo), hi)
    return AggregateStat(
        endpoint=result.endpoint,
        average_ms=average,
        min_ms=lo,
        max_ms=hi,
        successes=len(durations),
        failures=len(result.failures()),
    )


def summarize(result_set: ResultSet) -> Summary:
    """
    Aggregate every endpoint and rank by average latency, fastest first.
    Ties keep registration order. Endpoints without a single success are
    reported as no data; skipped endpoints are reported separately.
    """
    summary = Summary()
    for result in sorted(result_set.values(), key=lambda r: r.endpoint.index):
        if result.skipped:
            summary.skipped.append(result)
            continue
        stat = aggregate(result)
        if stat is None:
            summary.no_data.append(result.endpoint)
            continue
        summary.ranked.append(stat)
    # sort() is stable, so equal averages stay in registration order
    summary.ranked.sort(key=lambda s: s.average_ms)
    return summary
