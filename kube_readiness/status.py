"""
Convert Kubernetes object dictionaries into ResourceStatus records.

The input is the camelCase JSON form returned by ``kubectl get -o json`` or
by ``ApiClient.sanitize_for_serialization`` on a client model object.
"""
from typing import Any, Dict, Optional

from kube_readiness.models import ResourceKind, ResourceStatus


def _as_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _replica_status(obj: Dict[str, Any]) -> ResourceStatus:
    spec = obj.get("spec") or {}
    status = obj.get("status") or {}
    # The API server defaults spec.replicas to 1 when it is omitted
    desired = _as_int(spec.get("replicas", 1))
    ready = _as_int(status.get("readyReplicas")) or 0
    return ResourceStatus(ready_count=ready, desired_count=desired)


def _daemonset_status(obj: Dict[str, Any]) -> ResourceStatus:
    status = obj.get("status") or {}
    return ResourceStatus(
        ready_count=_as_int(status.get("numberReady")) or 0,
        desired_count=_as_int(status.get("desiredNumberScheduled")),
    )


def _pod_display_phase(status: Dict[str, Any]) -> Optional[str]:
    """Mirror the kubectl STATUS column for pods that ran to completion."""
    phase = status.get("phase")
    container_statuses = status.get("containerStatuses") or []
    if container_statuses:
        reasons = [
            ((cs.get("state") or {}).get("terminated") or {}).get("reason")
            for cs in container_statuses
        ]
        if all(reason == "Completed" for reason in reasons):
            return "Completed"
    return phase


def _pod_status(obj: Dict[str, Any]) -> ResourceStatus:
    spec = obj.get("spec") or {}
    status = obj.get("status") or {}
    container_statuses = status.get("containerStatuses") or []
    total = len(spec.get("containers") or []) or len(container_statuses)
    ready = sum(1 for cs in container_statuses if cs.get("ready"))
    return ResourceStatus(
        ready_count=ready,
        desired_count=total if total else None,
        phase=_pod_display_phase(status),
    )


def _namespace_status(obj: Dict[str, Any]) -> ResourceStatus:
    status = obj.get("status") or {}
    return ResourceStatus(phase=status.get("phase"))


_PARSERS = {
    ResourceKind.DEPLOYMENT: _replica_status,
    ResourceKind.STATEFULSET: _replica_status,
    ResourceKind.REPLICASET: _replica_status,
    ResourceKind.DAEMONSET: _daemonset_status,
    ResourceKind.POD: _pod_status,
    ResourceKind.NAMESPACE: _namespace_status,
}


def status_from_object(kind: ResourceKind, obj: Optional[Dict[str, Any]]) -> Optional[ResourceStatus]:
    """Build a ResourceStatus from an object dictionary; None for an empty object."""
    if not obj:
        return None
    return _PARSERS[kind](obj)
