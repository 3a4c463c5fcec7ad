"""
Readiness poller.

Blocks the calling thread until a resource reaches the desired state,
disappears, or its tick budget runs out. One inspector call is made per
tick and ticks are spaced by a fixed interval.
"""
import logging
import math
import time
from typing import Callable, Iterable, List, Optional

from kube_readiness.exceptions import ConfigurationError, InspectorError
from kube_readiness.inspectors import StatusInspector
from kube_readiness.models import (
    COMPLETED_PHASES,
    WORKLOAD_KINDS,
    PollOutcome,
    PollResult,
    ResourceKind,
    ResourceQuery,
    ResourceStatus,
)

logger = logging.getLogger(__name__)


def is_ready(query: ResourceQuery, status: Optional[ResourceStatus],
             expected: Optional[int] = None) -> bool:
    """Evaluate the readiness condition for one observed status.

    ``expected`` is the pinned replica target for workload kinds.
    Missing status or missing counts are never ready.
    """
    if status is None:
        return False

    if query.kind is ResourceKind.NAMESPACE:
        return status.phase == "Active"

    if query.kind is ResourceKind.POD:
        if query.allow_completed and status.phase in COMPLETED_PHASES:
            return True
        return (status.ready_count is not None
                and bool(status.desired_count)
                and status.ready_count == status.desired_count)

    return (expected is not None
            and status.ready_count is not None
            and status.ready_count == expected)


class ReadinessPoller:
    """Poll a StatusInspector until resources are ready or deleted."""

    def __init__(self, inspector: StatusInspector, interval: float = 1.0,
                 sleep: Callable[[float], None] = time.sleep):
        if interval < 0:
            raise ConfigurationError(f"Poll interval must not be negative: {interval}")
        self.inspector = inspector
        self.interval = interval
        self.sleep = sleep

    def tick_budget(self, timeout_seconds: float) -> int:
        """Number of ticks that fit in ``timeout_seconds`` at the configured interval."""
        if timeout_seconds is None or timeout_seconds <= 0:
            raise ConfigurationError(f"Timeout must be positive: {timeout_seconds}")
        if self.interval <= 0:
            return max(1, int(math.ceil(timeout_seconds)))
        return max(1, int(math.ceil(round(timeout_seconds / self.interval, 6))))

    def _inspect(self, query: ResourceQuery, tick: int, max_ticks: int) -> Optional[ResourceStatus]:
        status = self.inspector.inspect(query)
        logger.debug(f"[{tick}/{max_ticks}] {query}: "
                     f"{status.summary() if status is not None else 'not found'}")
        return status

    def await_ready(self, query: ResourceQuery, timeout_seconds: float) -> PollResult:
        """Wait until ``query`` is ready.

        For workloads the replica target is pinned from the first status
        that reports it and never refreshed within the session.
        """
        max_ticks = self.tick_budget(timeout_seconds)
        expected = None
        status = None

        for tick in range(1, max_ticks + 1):
            try:
                status = self._inspect(query, tick, max_ticks)
            except InspectorError as e:
                logger.error(f"Failed to inspect {query}: {e}")
                return PollResult(PollOutcome.ERROR, query, tick, status=status,
                                  expected=expected, error=e)

            if (query.kind.is_workload and expected is None
                    and status is not None and status.desired_count is not None):
                expected = status.desired_count

            if is_ready(query, status, expected):
                logger.info(f"{query} is ready ({status.summary()})")
                return PollResult(PollOutcome.READY, query, tick, status=status, expected=expected)

            if tick < max_ticks:
                self.sleep(self.interval)

        result = PollResult(PollOutcome.TIMED_OUT, query, max_ticks, status=status, expected=expected)
        logger.warning(result.describe())
        return result

    def await_deleted(self, query: ResourceQuery, timeout_seconds: float) -> PollResult:
        """Wait until the inspector no longer reports ``query``."""
        max_ticks = self.tick_budget(timeout_seconds)
        status = None

        for tick in range(1, max_ticks + 1):
            try:
                status = self._inspect(query, tick, max_ticks)
            except InspectorError as e:
                logger.error(f"Failed to inspect {query}: {e}")
                return PollResult(PollOutcome.ERROR, query, tick, status=status,
                                  error=e, target="deleted")

            if status is None:
                logger.info(f"{query} is deleted")
                return PollResult(PollOutcome.DELETED, query, tick, target="deleted")

            if tick < max_ticks:
                self.sleep(self.interval)

        result = PollResult(PollOutcome.TIMED_OUT, query, max_ticks, status=status, target="deleted")
        logger.warning(result.describe())
        return result

    def snapshot(self, namespace: str, kinds: Iterable[ResourceKind] = WORKLOAD_KINDS,
                 allow_completed: bool = False) -> List[ResourceQuery]:
        """Enumerate the resources currently present in ``namespace``."""
        queries = []
        for kind in kinds:
            if not kind.namespaced:
                raise ConfigurationError(f"{kind.value} resources do not live in a namespace")
            for name in self.inspector.list_names(kind, namespace):
                queries.append(ResourceQuery(
                    kind=kind,
                    name=name,
                    namespace=namespace,
                    allow_completed=allow_completed and kind is ResourceKind.POD,
                ))
        return queries

    def await_all_ready(self, namespace: str, timeout_seconds: float,
                        kinds: Iterable[ResourceKind] = WORKLOAD_KINDS,
                        allow_completed: bool = False) -> PollResult:
        """Wait for every resource in a one-time namespace snapshot, in order.

        Each resource gets the full ``timeout_seconds`` budget. The first
        failure is returned immediately and later resources are not polled.
        """
        namespace_query = ResourceQuery(ResourceKind.NAMESPACE, namespace)
        self.tick_budget(timeout_seconds)
        try:
            # listing a missing namespace returns nothing rather than failing
            if self.inspector.inspect(namespace_query) is None:
                raise InspectorError(f"Namespace {namespace} not found")
            queries = self.snapshot(namespace, kinds, allow_completed)
        except InspectorError as e:
            logger.error(f"Failed to list resources in namespace {namespace}: {e}")
            return PollResult(PollOutcome.ERROR, namespace_query, 0, error=e)

        logger.info(f"Waiting for {len(queries)} resource(s) in namespace {namespace}")
        total_ticks = 0
        for query in queries:
            result = self.await_ready(query, timeout_seconds)
            total_ticks += result.ticks
            if not result.ok:
                return result

        logger.info(f"All {len(queries)} resource(s) in namespace {namespace} are ready")
        return PollResult(PollOutcome.READY, namespace_query, total_ticks)

    def ensure_ready(self, query: ResourceQuery, timeout_seconds: float) -> PollResult:
        return self.await_ready(query, timeout_seconds).raise_for_outcome()

    def ensure_deleted(self, query: ResourceQuery, timeout_seconds: float) -> PollResult:
        return self.await_deleted(query, timeout_seconds).raise_for_outcome()

    def ensure_all_ready(self, namespace: str, timeout_seconds: float,
                         kinds: Iterable[ResourceKind] = WORKLOAD_KINDS,
                         allow_completed: bool = False) -> PollResult:
        return self.await_all_ready(namespace, timeout_seconds, kinds,
                                    allow_completed).raise_for_outcome()
