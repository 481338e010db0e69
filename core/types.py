from __future__ import annotations

"""
Core domain types for RPC endpoint benchmarking.

These are logic‑free data containers shared by:
1) the endpoint registry
2) the three bench components (ping, RPC methods, transaction cycle)
3) the statistics aggregator and report
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union


@dataclass(frozen=True)
class Endpoint:
    """A registered RPC endpoint under test."""

    index: int  # registration order; owned key into a ResultSet
    url: str
    host: str  # used only by the latency sampler


@dataclass(frozen=True)
class Success:
    """A probe that completed, with its measured duration."""

    label: str
    duration_ms: float


@dataclass(frozen=True)
class Failure:
    """A probe that did not complete. Carries no duration."""

    label: str
    reason: str


Sample = Union[Success, Failure]


@dataclass
class EndpointResult:
    """
    Samples collected by one bench for one endpoint, in attempt order.

    `skipped` is set (with a reason) when the bench declined to probe the
    endpoint at all, e.g. the sender balance cannot cover a transaction run.
    """

    endpoint: Endpoint
    samples: List[Sample] = field(default_factory=list)
    skipped: Optional[str] = None

    def successes(self) -> List[Success]:
        return [s for s in self.samples if isinstance(s, Success)]

    def failures(self) -> List[Failure]:
        return [s for s in self.samples if isinstance(s, Failure)]


# Keyed by Endpoint.index; insertion order = registration order
ResultSet = Dict[int, EndpointResult]


@dataclass
class AggregateStat:
    """Derived statistics over the successful samples of one endpoint."""

    endpoint: Endpoint
    average_ms: float
    min_ms: float
    max_ms: float
    successes: int
    failures: int


@dataclass
class Summary:
    """
    Result of aggregating a ResultSet.

    ranked: endpoints with at least one success, fastest average first.
    no_data: endpoints that were probed but never succeeded.
    skipped: endpoints the bench declined to probe, with the reason.
    """

    ranked: List[AggregateStat] = field(default_factory=list)
    no_data: List[Endpoint] = field(default_factory=list)
    skipped: List[EndpointResult] = field(default_factory=list)

    @property
    def recommended(self) -> Optional[AggregateStat]:
        return self.ranked[0] if self.ranked else None
