"""
Readiness polling for Kubernetes resources.

Waits for workloads, pods and namespaces to become ready, or to be
deleted, by polling a status inspector on a fixed tick.
"""
from kube_readiness.exceptions import (
    ConfigurationError,
    InspectorError,
    KubeReadinessError,
    ReadinessTimeout,
)
from kube_readiness.inspectors import ClientInspector, KubectlInspector, StatusInspector
from kube_readiness.models import (
    WORKLOAD_KINDS,
    PollOutcome,
    PollResult,
    ResourceKind,
    ResourceQuery,
    ResourceStatus,
)
from kube_readiness.poller import ReadinessPoller, is_ready

__version__ = "0.1.0"

__all__ = [
    "ClientInspector",
    "ConfigurationError",
    "InspectorError",
    "KubeReadinessError",
    "KubectlInspector",
    "PollOutcome",
    "PollResult",
    "ReadinessPoller",
    "ReadinessTimeout",
    "ResourceKind",
    "ResourceQuery",
    "ResourceStatus",
    "StatusInspector",
    "WORKLOAD_KINDS",
    "is_ready",
]
