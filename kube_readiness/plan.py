"""
Wait plans: an ordered list of waits loaded from a YAML file.

Example::

    timeout: 600
    steps:
      - ready: deployment/uaa
        namespace: uaa
      - all_ready: scf
        include_pods: true
        allow_completed: true
        timeout: 1200
      - deleted: namespace/stratos

Steps run one after another and the first failure stops the plan.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import yaml

from kube_readiness.exceptions import ConfigurationError
from kube_readiness.models import WORKLOAD_KINDS, PollResult, ResourceKind, ResourceQuery
from kube_readiness.poller import ReadinessPoller

logger = logging.getLogger(__name__)

ACTIONS = ("ready", "deleted", "all_ready")


@dataclass(frozen=True)
class WaitStep:
    action: str
    timeout: float
    query: Optional[ResourceQuery] = None
    namespace: Optional[str] = None
    kinds: Tuple[ResourceKind, ...] = WORKLOAD_KINDS
    allow_completed: bool = False

    def describe(self) -> str:
        if self.action == "all_ready":
            return f"all resources in namespace {self.namespace} ready"
        return f"{self.query} {self.action}"


def _timeout(value: Any, where: str) -> float:
    """Validate a timeout value; booleans and non-positive numbers are rejected."""
    if isinstance(value, bool):
        raise ConfigurationError(f"{where} has an invalid timeout: {value!r}")
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{where} has an invalid timeout: {value!r}")
    if timeout <= 0:
        raise ConfigurationError(f"{where} has an invalid timeout: {value!r} (must be positive)")
    return timeout


def _flag(raw: Dict[str, Any], key: str, index: int) -> bool:
    value = raw.get(key, False)
    if not isinstance(value, bool):
        raise ConfigurationError(
            f"Plan step {index} has an invalid {key}: {value!r} (expected true or false)")
    return value


def _parse_step(raw: Dict[str, Any], index: int, default_timeout: float) -> WaitStep:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Plan step {index} must be a mapping, got {type(raw).__name__}")
    actions = [action for action in ACTIONS if action in raw]
    if len(actions) != 1:
        raise ConfigurationError(
            f"Plan step {index} needs exactly one of {', '.join(ACTIONS)}")
    action = actions[0]

    timeout = _timeout(raw.get("timeout", default_timeout), f"Plan step {index}")
    allow_completed = _flag(raw, "allow_completed", index)

    if action == "all_ready":
        kinds = WORKLOAD_KINDS + ((ResourceKind.POD,) if _flag(raw, "include_pods", index) else ())
        return WaitStep(action=action, timeout=timeout, namespace=str(raw[action]),
                        kinds=kinds, allow_completed=allow_completed)

    query = ResourceQuery.parse(str(raw[action]), raw.get("namespace"),
                                allow_completed if action == "ready" else False)
    return WaitStep(action=action, timeout=timeout, query=query)


def load_plan(path: str, default_timeout: float = 300) -> List[WaitStep]:
    """Load and validate a wait plan from a YAML file.

    Step timeouts fall back to the plan's top-level ``timeout``, then to
    ``default_timeout``. Every step is validated before any of them runs.
    """
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigurationError(f"Unable to read wait plan {path}: {e}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in wait plan {path}: {e}")

    if isinstance(data, list):
        data = {"steps": data}
    if not isinstance(data, dict) or not isinstance(data.get("steps"), list):
        raise ConfigurationError(f"Wait plan {path} must define a list of steps")

    default_timeout = _timeout(data.get("timeout", default_timeout), f"Wait plan {path}")

    return [_parse_step(raw, idx, default_timeout) for idx, raw in enumerate(data["steps"], start=1)]


def run_step(poller: ReadinessPoller, step: WaitStep) -> PollResult:
    if step.action == "ready":
        return poller.await_ready(step.query, step.timeout)
    if step.action == "deleted":
        return poller.await_deleted(step.query, step.timeout)
    return poller.await_all_ready(step.namespace, step.timeout, step.kinds, step.allow_completed)


def run_plan(poller: ReadinessPoller, steps: List[WaitStep]) -> List[PollResult]:
    """Run every step in order, stopping at the first failed wait.

    Returns the results of the steps that ran; the last one is the
    failure when the plan did not complete.
    """
    results = []
    for idx, step in enumerate(steps, start=1):
        logger.info(f"Step {idx}/{len(steps)}: waiting for {step.describe()}")
        result = run_step(poller, step)
        results.append(result)
        if not result.ok:
            logger.error(f"Step {idx}/{len(steps)} failed: {result.describe()}")
            break
    return results
