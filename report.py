"""
Plain-text result table for a bench Summary.
"""
from typing import List

from core.types import Summary

_ROW = "| {:<40} | {:>12} | {:>12} | {:>12} |"


def _ms(value: float) -> str:
    return f"{value:.1f} ms"


def format_summary(summary: Summary, title: str) -> str:
    lines: List[str] = [
        f"===== {title} =====",
        _ROW.format("RPC endpoint", "average", "min", "max"),
        "|" + "-" * 42 + "|" + "-" * 14 + "|" + "-" * 14 + "|" + "-" * 14 + "|",
    ]
    for stat in summary.ranked:
        lines.append(_ROW.format(stat.endpoint.url, _ms(stat.average_ms), _ms(stat.min_ms), _ms(stat.max_ms)))
    for endpoint in summary.no_data:
        lines.append(_ROW.format(endpoint.url, "no data", "-", "-"))
    for result in summary.skipped:
        lines.append(_ROW.format(result.endpoint.url, "skipped", "-", "-"))

    best = summary.recommended
    if best is not None:
        lines.append("")
        lines.append(f"Fastest endpoint: {best.endpoint.url} (avg {_ms(best.average_ms)})")
    for result in summary.skipped:
        lines.append(f"Skipped {result.endpoint.url}: {result.skipped}")
    return "\n".join(lines)


def print_summary(summary: Summary, title: str) -> None:
    print()
    print(format_summary(summary, title))
