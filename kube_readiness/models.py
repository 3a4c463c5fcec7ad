"""
Type definitions for readiness queries, observed status and poll outcomes.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from kube_readiness.exceptions import ConfigurationError, InspectorError, ReadinessTimeout


class ResourceKind(str, Enum):
    """Resource kinds the poller understands, valued by their kubectl names."""
    DEPLOYMENT = "deployment"
    STATEFULSET = "statefulset"
    DAEMONSET = "daemonset"
    REPLICASET = "replicaset"
    POD = "pod"
    NAMESPACE = "namespace"

    @property
    def is_workload(self) -> bool:
        return self in WORKLOAD_KINDS

    @property
    def namespaced(self) -> bool:
        return self is not ResourceKind.NAMESPACE

    @classmethod
    def from_name(cls, name: str) -> "ResourceKind":
        """Resolve a kubectl-style kind name, including plurals and short names."""
        key = name.strip().lower()
        if "." in key:
            # deployments.apps -> deployments
            key = key.split(".", 1)[0]
        kind = _KIND_ALIASES.get(key)
        if kind is None:
            raise ConfigurationError(f"Unsupported resource kind: {name}")
        return kind


WORKLOAD_KINDS = (
    ResourceKind.DEPLOYMENT,
    ResourceKind.STATEFULSET,
    ResourceKind.DAEMONSET,
    ResourceKind.REPLICASET,
)


def _build_kind_aliases():
    short_names = {
        ResourceKind.DEPLOYMENT: "deploy",
        ResourceKind.STATEFULSET: "sts",
        ResourceKind.DAEMONSET: "ds",
        ResourceKind.REPLICASET: "rs",
        ResourceKind.POD: "po",
        ResourceKind.NAMESPACE: "ns",
    }
    aliases = {}
    for kind, short in short_names.items():
        aliases[kind.value] = kind
        aliases[kind.value + "s"] = kind
        aliases[short] = kind
    return aliases


_KIND_ALIASES = _build_kind_aliases()

# Phases that count as a successful run-to-completion for job-style pods
COMPLETED_PHASES = frozenset({"Completed", "Succeeded"})


@dataclass(frozen=True)
class ResourceQuery:
    """A single resource to poll, plus the desired-state specification.

    ``allow_completed`` enables the job-style pod variant where a pod that
    ran to completion counts as ready regardless of its ready fraction.
    """
    kind: ResourceKind
    name: str
    namespace: Optional[str] = None
    allow_completed: bool = False

    def __post_init__(self):
        if not self.name:
            raise ConfigurationError("Resource name must not be empty")
        if self.kind.namespaced and not self.namespace:
            raise ConfigurationError(
                f"A namespace is required to query {self.kind.value}/{self.name}")
        if not self.kind.namespaced and self.namespace:
            raise ConfigurationError(
                f"{self.kind.value}/{self.name} is cluster scoped and takes no namespace")

    @classmethod
    def parse(cls, resource: str, namespace: Optional[str] = None,
              allow_completed: bool = False) -> "ResourceQuery":
        """Build a query from a ``kind/name`` reference such as ``deploy/uaa``."""
        kind_name, sep, name = resource.partition("/")
        if not sep or not kind_name or not name:
            raise ConfigurationError(
                f"Resource must be given as KIND/NAME, got: {resource!r}")
        kind = ResourceKind.from_name(kind_name)
        if not kind.namespaced:
            namespace = None
        return cls(kind=kind, name=name, namespace=namespace, allow_completed=allow_completed)

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.kind.value}/{self.name} in namespace {self.namespace}"
        return f"{self.kind.value}/{self.name}"


def parse_ready_fraction(text: str) -> Optional[Tuple[int, int]]:
    """Parse a kubectl ready fraction such as ``"2/3"``; None when malformed."""
    if not text:
        return None
    numerator, sep, denominator = text.strip().partition("/")
    if not sep:
        return None
    try:
        ready, total = int(numerator), int(denominator)
    except ValueError:
        return None
    if ready < 0 or total < 0:
        return None
    return ready, total


@dataclass(frozen=True)
class ResourceStatus:
    """Status observed on one poll tick."""
    ready_count: Optional[int] = None
    desired_count: Optional[int] = None
    phase: Optional[str] = None

    @property
    def ready_fraction(self) -> str:
        ready = "?" if self.ready_count is None else self.ready_count
        desired = "?" if self.desired_count is None else self.desired_count
        return f"{ready}/{desired}"

    def summary(self) -> str:
        parts = []
        if self.ready_count is not None or self.desired_count is not None:
            parts.append(f"ready {self.ready_fraction}")
        if self.phase:
            parts.append(f"phase {self.phase}")
        return ", ".join(parts) if parts else "no status fields"


class PollOutcome(str, Enum):
    READY = "ready"
    TIMED_OUT = "timed_out"
    DELETED = "deleted"
    ERROR = "error"


@dataclass(frozen=True)
class PollResult:
    """Terminal result of one wait session."""
    outcome: PollOutcome
    query: ResourceQuery
    ticks: int
    status: Optional[ResourceStatus] = None
    expected: Optional[int] = None
    error: Optional[Exception] = None
    target: str = "ready"

    @property
    def ok(self) -> bool:
        return self.outcome in (PollOutcome.READY, PollOutcome.DELETED)

    def describe(self) -> str:
        """Human readable summary including last observed versus expected counts."""
        if self.outcome is PollOutcome.READY:
            return f"{self.query} is ready after {self.ticks} tick(s)"
        if self.outcome is PollOutcome.DELETED:
            return f"{self.query} is deleted after {self.ticks} tick(s)"
        if self.outcome is PollOutcome.ERROR:
            return f"Failed to inspect {self.query}: {self.error}"

        if self.target == "deleted":
            observed = self.status.summary() if self.status else "absent"
            return (f"Timed out after {self.ticks} tick(s) waiting for {self.query} "
                    f"to be deleted; still present ({observed})")
        return (f"Timed out after {self.ticks} tick(s) waiting for {self.query}; "
                f"observed {self._observed()}, expected {self._expected()}")

    def _observed(self) -> str:
        if self.status is None:
            return "nothing (resource not found)"
        return self.status.summary()

    def _expected(self) -> str:
        kind = self.query.kind
        if kind is ResourceKind.NAMESPACE:
            return "phase Active"
        if kind is ResourceKind.POD:
            total = self.status.desired_count if self.status else None
            fraction = f"{total}/{total}" if total else "all containers ready"
            if self.query.allow_completed:
                return f"ready {fraction} or phase Completed"
            return f"ready {fraction}"
        if self.expected is None:
            return "ready replicas equal to the replica target (unknown)"
        return f"ready {self.expected}/{self.expected}"

    def raise_for_outcome(self) -> "PollResult":
        """Raise the matching fatal error unless the session succeeded."""
        if self.outcome is PollOutcome.TIMED_OUT:
            raise ReadinessTimeout(self)
        if self.outcome is PollOutcome.ERROR:
            if isinstance(self.error, InspectorError):
                raise self.error
            raise InspectorError(self.describe())
        return self
