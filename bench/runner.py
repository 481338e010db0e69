"""
Drive one bench over the registered endpoints, sequentially.
"""
import logging
from typing import Sequence

from core.interfaces import Bench
from core.types import Endpoint, ResultSet

logger = logging.getLogger(__name__)


def run_bench(bench: Bench, endpoints: Sequence[Endpoint]) -> ResultSet:
    """Measure each endpoint in registration order and collect the results."""
    results: ResultSet = {}
    for endpoint in endpoints:
        logger.info("Testing [%s]: %s", bench.name, endpoint.url)
        result = bench.measure(endpoint)
        if result is not None:
            results[endpoint.index] = result
        logger.info("")
    return results
