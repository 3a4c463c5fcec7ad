"""
Status inspectors: read-only adapters that report the current state of a
cluster resource as a ResourceStatus.

Two implementations are provided. KubectlInspector shells out to kubectl
and ClientInspector talks to the API server through the kubernetes
Python client. Both feed the same structured parser.
"""
import json
import logging
import subprocess
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

import urllib3
from kubernetes import client, config
from kubernetes.client.rest import ApiException

from kube_readiness.exceptions import ConfigurationError, InspectorError
from kube_readiness.models import ResourceKind, ResourceQuery, ResourceStatus
from kube_readiness.status import status_from_object
from kube_readiness.tabular import parse_table, status_from_row

logger = logging.getLogger(__name__)


class StatusInspector(ABC):
    """Read-only view of cluster resources used by the poller."""

    @abstractmethod
    def inspect(self, query: ResourceQuery) -> Optional[ResourceStatus]:
        """Return the current status, or None when the resource does not exist.

        Raises InspectorError when the query itself fails.
        """

    @abstractmethod
    def list_names(self, kind: ResourceKind, namespace: str) -> List[str]:
        """Return the names of every ``kind`` resource in ``namespace``."""


class KubectlInspector(StatusInspector):
    """Inspect resources by running ``kubectl get``."""

    def __init__(self, kubectl: str = "kubectl", kubeconfig: Optional[str] = None,
                 context: Optional[str] = None, structured: bool = True,
                 command_timeout: int = 30):
        self.kubectl = kubectl
        self.kubeconfig = kubeconfig
        self.context = context
        self.structured = structured
        self.command_timeout = command_timeout

    def _base_command(self) -> List[str]:
        cmd = [self.kubectl]
        if self.kubeconfig:
            cmd += ["--kubeconfig", self.kubeconfig]
        if self.context:
            cmd += ["--context", self.context]
        return cmd

    def execute_kubectl_command(self, args: List[str]) -> subprocess.CompletedProcess:
        """Execute a kubectl command, raising InspectorError on any failure"""
        cmd = self._base_command() + args
        logger.debug(f"Executing: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.command_timeout,
                check=False
            )
        except subprocess.TimeoutExpired as e:
            logger.error(f"Command timeout after {self.command_timeout}s: {' '.join(cmd)}")
            raise InspectorError(
                f"kubectl timed out after {self.command_timeout}s", command=cmd) from e
        except OSError as e:
            logger.error(f"Error executing command: {e}")
            raise InspectorError(f"Unable to run {self.kubectl}: {e}", command=cmd) from e

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            logger.error(f"Command failed: {stderr}")
            raise InspectorError(
                f"kubectl exited with status {result.returncode}",
                details=stderr,
                command=cmd,
                returncode=result.returncode,
                stderr=stderr,
            )
        return result

    def _load_json(self, text: str, cmd_args: List[str]) -> Dict[str, Any]:
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise InspectorError(
                f"Failed to parse kubectl JSON output: {e}",
                command=self._base_command() + cmd_args) from e

    def inspect(self, query: ResourceQuery) -> Optional[ResourceStatus]:
        args = ["get", query.kind.value, query.name]
        if query.namespace:
            args += ["-n", query.namespace]
        args.append("--ignore-not-found")
        if self.structured:
            args += ["-o", "json"]

        output = self.execute_kubectl_command(args).stdout.strip()
        if not output:
            return None

        if self.structured:
            return status_from_object(query.kind, self._load_json(output, args))

        rows = parse_table(output)
        if not rows:
            return None
        return status_from_row(query.kind, rows[0])

    def list_names(self, kind: ResourceKind, namespace: str) -> List[str]:
        args = ["get", kind.value, "-n", namespace, "-o", "json"]
        data = self._load_json(self.execute_kubectl_command(args).stdout or "{}", args)
        return [
            item["metadata"]["name"]
            for item in data.get("items", [])
            if item.get("metadata", {}).get("name")
        ]


def load_api_client(kubeconfig: Optional[str] = None, context: Optional[str] = None,
                    verify_ssl: Optional[bool] = None) -> client.ApiClient:
    """Load cluster credentials and build an ApiClient.

    An explicit kubeconfig or context wins; otherwise in-cluster
    configuration is tried before the default kubeconfig file.
    """
    try:
        if kubeconfig or context:
            logger.info(f"Loading kubeconfig from: {kubeconfig or 'default location'}")
            config.load_kube_config(config_file=kubeconfig, context=context)
        else:
            try:
                config.load_incluster_config()
                logger.info("Using in-cluster Kubernetes configuration")
            except config.ConfigException:
                config.load_kube_config()
                logger.info("Using default kubeconfig file")
    except (config.ConfigException, OSError) as e:
        raise ConfigurationError(f"Failed to load Kubernetes configuration: {e}") from e

    k8s_conf = client.Configuration.get_default_copy()
    if verify_ssl is not None:
        k8s_conf.verify_ssl = verify_ssl
        if not verify_ssl:
            k8s_conf.assert_hostname = False
            k8s_conf.ssl_ca_cert = None
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        logger.info(f"SSL verification set via configuration: {verify_ssl}")
    return client.ApiClient(configuration=k8s_conf)


class ClientInspector(StatusInspector):
    """Inspect resources through the kubernetes Python client."""

    def __init__(self, core_v1: Optional[client.CoreV1Api] = None,
                 apps_v1: Optional[client.AppsV1Api] = None,
                 kubeconfig: Optional[str] = None, context: Optional[str] = None,
                 verify_ssl: Optional[bool] = None):
        api_client = None
        if core_v1 is None or apps_v1 is None:
            api_client = load_api_client(kubeconfig, context, verify_ssl)
        self.core_v1 = core_v1 or client.CoreV1Api(api_client)
        self.apps_v1 = apps_v1 or client.AppsV1Api(api_client)
        # Serialization is pure; a default client is enough for injected APIs
        self.api_client = api_client or client.ApiClient()

    def _reader(self, kind: ResourceKind) -> Callable[..., Any]:
        return {
            ResourceKind.DEPLOYMENT: self.apps_v1.read_namespaced_deployment,
            ResourceKind.STATEFULSET: self.apps_v1.read_namespaced_stateful_set,
            ResourceKind.DAEMONSET: self.apps_v1.read_namespaced_daemon_set,
            ResourceKind.REPLICASET: self.apps_v1.read_namespaced_replica_set,
            ResourceKind.POD: self.core_v1.read_namespaced_pod,
            ResourceKind.NAMESPACE: self.core_v1.read_namespace,
        }[kind]

    def _lister(self, kind: ResourceKind) -> Callable[..., Any]:
        listers = {
            ResourceKind.DEPLOYMENT: self.apps_v1.list_namespaced_deployment,
            ResourceKind.STATEFULSET: self.apps_v1.list_namespaced_stateful_set,
            ResourceKind.DAEMONSET: self.apps_v1.list_namespaced_daemon_set,
            ResourceKind.REPLICASET: self.apps_v1.list_namespaced_replica_set,
            ResourceKind.POD: self.core_v1.list_namespaced_pod,
        }
        if kind not in listers:
            raise ConfigurationError(f"Cannot list {kind.value} resources inside a namespace")
        return listers[kind]

    def inspect(self, query: ResourceQuery) -> Optional[ResourceStatus]:
        kwargs = {"name": query.name}
        if query.kind.namespaced:
            kwargs["namespace"] = query.namespace
        try:
            obj = self._reader(query.kind)(**kwargs)
        except ApiException as e:
            if e.status == 404:
                return None
            logger.error(f"Error reading {query}: {e.status} {e.reason}")
            raise InspectorError(
                f"API error reading {query}: {e.status} {e.reason}", details=e.body) from e
        except urllib3.exceptions.HTTPError as e:
            raise InspectorError(f"Unable to reach the API server: {e}") from e
        return status_from_object(query.kind, self.api_client.sanitize_for_serialization(obj))

    def list_names(self, kind: ResourceKind, namespace: str) -> List[str]:
        try:
            items = self._lister(kind)(namespace=namespace).items
        except ApiException as e:
            raise InspectorError(
                f"API error listing {kind.value} in {namespace}: {e.status} {e.reason}",
                details=e.body) from e
        except urllib3.exceptions.HTTPError as e:
            raise InspectorError(f"Unable to reach the API server: {e}") from e
        return [item.metadata.name for item in items or []]
