"""Unit tests for parsing Kubernetes object dictionaries."""

import pytest

from kube_readiness.models import ResourceKind, ResourceStatus
from kube_readiness.status import status_from_object


@pytest.mark.unit
def test_empty_object_is_absent() -> None:
    assert status_from_object(ResourceKind.DEPLOYMENT, None) is None
    assert status_from_object(ResourceKind.DEPLOYMENT, {}) is None


@pytest.mark.unit
@pytest.mark.parametrize("kind", [
    ResourceKind.DEPLOYMENT, ResourceKind.STATEFULSET, ResourceKind.REPLICASET,
])
def test_replica_counts(kind) -> None:
    obj = {"spec": {"replicas": 3}, "status": {"readyReplicas": 2, "replicas": 3}}

    assert status_from_object(kind, obj) == ResourceStatus(ready_count=2, desired_count=3)


@pytest.mark.unit
def test_fresh_deployment_without_status() -> None:
    """A just-created object has no status block and no ready replicas yet."""
    obj = {"metadata": {"name": "uaa"}, "spec": {"replicas": 2}}

    assert status_from_object(ResourceKind.DEPLOYMENT, obj) == ResourceStatus(0, 2)


@pytest.mark.unit
def test_replicas_default_to_one() -> None:
    obj = {"metadata": {"name": "uaa"}, "spec": {}, "status": {"readyReplicas": 1}}

    assert status_from_object(ResourceKind.DEPLOYMENT, obj) == ResourceStatus(1, 1)


@pytest.mark.unit
def test_daemonset_counts() -> None:
    obj = {"status": {"desiredNumberScheduled": 4, "numberReady": 3}}

    assert status_from_object(ResourceKind.DAEMONSET, obj) == ResourceStatus(3, 4)


@pytest.mark.unit
def test_pod_ready_fraction_and_phase() -> None:
    obj = {
        "spec": {"containers": [{"name": "api"}, {"name": "sidecar"}, {"name": "log"}]},
        "status": {
            "phase": "Running",
            "containerStatuses": [
                {"name": "api", "ready": True, "state": {"running": {}}},
                {"name": "sidecar", "ready": False, "state": {"running": {}}},
                {"name": "log", "ready": True, "state": {"running": {}}},
            ],
        },
    }

    status = status_from_object(ResourceKind.POD, obj)

    assert status == ResourceStatus(ready_count=2, desired_count=3, phase="Running")
    assert status.ready_fraction == "2/3"


@pytest.mark.unit
def test_pending_pod_has_no_ready_containers() -> None:
    obj = {"spec": {"containers": [{"name": "api"}]}, "status": {"phase": "Pending"}}

    assert status_from_object(ResourceKind.POD, obj) == ResourceStatus(0, 1, "Pending")


@pytest.mark.unit
def test_pod_with_all_containers_completed() -> None:
    obj = {
        "spec": {"containers": [{"name": "generate"}]},
        "status": {
            "phase": "Running",
            "containerStatuses": [
                {"name": "generate", "ready": False,
                 "state": {"terminated": {"reason": "Completed", "exitCode": 0}}},
            ],
        },
    }

    assert status_from_object(ResourceKind.POD, obj).phase == "Completed"


@pytest.mark.unit
def test_pod_with_failed_container_keeps_phase() -> None:
    obj = {
        "spec": {"containers": [{"name": "a"}, {"name": "b"}]},
        "status": {
            "phase": "Failed",
            "containerStatuses": [
                {"name": "a", "state": {"terminated": {"reason": "Completed"}}},
                {"name": "b", "state": {"terminated": {"reason": "Error"}}},
            ],
        },
    }

    assert status_from_object(ResourceKind.POD, obj).phase == "Failed"


@pytest.mark.unit
def test_namespace_phase() -> None:
    obj = {"metadata": {"name": "scf"}, "status": {"phase": "Terminating"}}

    assert status_from_object(ResourceKind.NAMESPACE, obj) == ResourceStatus(phase="Terminating")
