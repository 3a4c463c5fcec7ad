"""
Command line front end for the readiness poller.

Exit status is 0 when the wait succeeds and 1 on usage errors,
configuration errors, inspector failures and timeouts.
"""
import argparse
import sys
from typing import List, Optional

from dotenv import load_dotenv

from kube_readiness.config import INSPECTORS, Config
from kube_readiness.exceptions import ConfigurationError, KubeReadinessError, ReadinessTimeout
from kube_readiness.inspectors import ClientInspector, KubectlInspector, StatusInspector
from kube_readiness.logging_utils import log_error, log_info, log_warn, setup_logging
from kube_readiness.models import WORKLOAD_KINDS, PollResult, ResourceKind, ResourceQuery
from kube_readiness.plan import load_plan, run_plan
from kube_readiness.poller import ReadinessPoller


class ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors with exit status 1."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def create_argument_parser() -> argparse.ArgumentParser:
    """Create argument parser"""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--timeout', type=float,
                        help='Seconds to wait before giving up (one tick per interval)')
    common.add_argument('--interval', type=float,
                        help='Seconds between status checks')
    common.add_argument('--inspector', choices=INSPECTORS,
                        help='Status source: kubectl subprocess or the kubernetes API client')
    common.add_argument('--kubectl',
                        help='kubectl binary to run')
    common.add_argument('--kubeconfig',
                        help='Path to kubeconfig file')
    common.add_argument('--context',
                        help='Kubernetes context name')
    common.add_argument('--table', action='store_true',
                        help='Parse the kubectl table output instead of JSON')
    common.add_argument('--verify-ssl', action='store_true',
                        help='Force SSL certificate verification (client inspector)')
    common.add_argument('--log-level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Set logging level')
    common.add_argument('--log-file',
                        help='Log file path (empty string disables the file log)')

    parser = ArgumentParser(
        prog='kube-readiness',
        description='Wait for Kubernetes resources to become ready or to be deleted',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables:
  POLL_TIMEOUT (default: 300)
  POLL_INTERVAL (default: 1.0)
  INSPECTOR (default: kubectl) - kubectl or client
  KUBECTL (default: kubectl), KUBECONFIG, KUBE_CONTEXT
  KUBECTL_TABLE_OUTPUT (default: false)
  KUBECTL_COMMAND_TIMEOUT (default: 30)
  K8S_VERIFY, OCP_API_VERIFY, VERIFY_SSL (default: client defaults)
  LOG_FILE (default: kube_readiness.log), LOG_LEVEL (default: INFO)

  Variables may also be placed in a .env file.

Examples:
  %(prog)s ready deployment/uaa -n uaa --timeout 600
  %(prog)s ready pod/secret-generation-1-abcde -n scf --allow-completed
  %(prog)s namespace scf --include-pods --allow-completed
  %(prog)s deleted namespace/stratos --timeout 300
  %(prog)s plan waits.yaml
        """
    )
    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    subparsers.required = True

    ready = subparsers.add_parser('ready', parents=[common],
                                  help='Wait until a resource is ready')
    ready.add_argument('resource', help='Resource as KIND/NAME, e.g. deployment/uaa')
    ready.add_argument('-n', '--namespace', help='Namespace of the resource')
    ready.add_argument('--allow-completed', action='store_true',
                       help='Treat a Completed/Succeeded pod as ready')

    deleted = subparsers.add_parser('deleted', parents=[common],
                                    help='Wait until a resource no longer exists')
    deleted.add_argument('resource', help='Resource as KIND/NAME, e.g. namespace/scf')
    deleted.add_argument('-n', '--namespace', help='Namespace of the resource')

    namespace = subparsers.add_parser('namespace', parents=[common],
                                      help='Wait for every workload in a namespace')
    namespace.add_argument('name', help='Namespace to wait on')
    namespace.add_argument('--include-pods', action='store_true',
                           help='Also wait on every pod present in the namespace')
    namespace.add_argument('--allow-completed', action='store_true',
                           help='Treat Completed/Succeeded pods as ready')

    plan = subparsers.add_parser('plan', parents=[common],
                                 help='Run an ordered list of waits from a YAML file')
    plan.add_argument('file', help='Path to the YAML wait plan')

    return parser


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Override config with CLI arguments"""
    if args.timeout is not None:
        config.timeout = args.timeout
    if args.interval is not None:
        config.interval = args.interval
    if args.inspector is not None:
        config.inspector = args.inspector
    if args.kubectl is not None:
        config.kubectl = args.kubectl
    if args.kubeconfig is not None:
        config.kubeconfig_path = args.kubeconfig
    if args.context is not None:
        config.context = args.context
    if args.table:
        config.table_output = True
    if args.verify_ssl:
        config.k8s_verify_ssl = True
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_file is not None:
        config.log_file = args.log_file
    return config


def build_inspector(config: Config) -> StatusInspector:
    if config.inspector == 'client':
        return ClientInspector(
            kubeconfig=config.kubeconfig_path,
            context=config.context,
            verify_ssl=config.k8s_verify_ssl,
        )
    return KubectlInspector(
        kubectl=config.kubectl,
        kubeconfig=config.kubeconfig_path,
        context=config.context,
        structured=not config.table_output,
        command_timeout=config.command_timeout,
    )


def run_wait(poller: ReadinessPoller, args: argparse.Namespace, timeout: float) -> PollResult:
    """Dispatch the selected sub-command to the poller."""
    if args.command == 'ready':
        query = ResourceQuery.parse(args.resource, args.namespace, args.allow_completed)
        log_info(f"Waiting up to {timeout:g}s for {query} to be ready", "READY")
        return poller.await_ready(query, timeout)

    if args.command == 'deleted':
        query = ResourceQuery.parse(args.resource, args.namespace)
        log_info(f"Waiting up to {timeout:g}s for {query} to be deleted", "DELETE")
        return poller.await_deleted(query, timeout)

    if args.command == 'plan':
        steps = load_plan(args.file, default_timeout=timeout)
        if not steps:
            raise ConfigurationError(f"Wait plan {args.file} has no steps")
        log_info(f"Running {len(steps)} wait step(s) from {args.file}", "PLAN")
        return run_plan(poller, steps)[-1]

    kinds = WORKLOAD_KINDS + ((ResourceKind.POD,) if args.include_pods else ())
    log_info(f"Waiting up to {timeout:g}s per resource in namespace {args.name}", "NAMESPACE")
    return poller.await_all_ready(args.name, timeout, kinds, args.allow_completed)


def main(argv: Optional[List[str]] = None) -> int:
    """Main execution function"""
    load_dotenv()
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    try:
        config = apply_overrides(Config(), args)
    except ValueError as e:
        log_error(f"Invalid configuration value: {e}", "CONFIG")
        return 1

    try:
        setup_logging(config.log_level, config.log_file)
    except OSError as e:
        log_error(f"Unable to open log file {config.log_file}: {e}", "CONFIG")
        return 1
    component = args.command.upper()

    try:
        config.validate()
        poller = ReadinessPoller(build_inspector(config), interval=config.interval)
        result = run_wait(poller, args, config.timeout).raise_for_outcome()
    except ReadinessTimeout as e:
        log_error(str(e), "TIMEOUT")
        return 1
    except ConfigurationError as e:
        log_error(f"Configuration error: {e}", "CONFIG")
        return 1
    except KubeReadinessError as e:
        log_error(f"{e}" + (f": {e.details}" if e.details else ""), component)
        return 1
    except KeyboardInterrupt:
        log_warn("Wait interrupted by user", component)
        return 1

    log_info(result.describe(), component)
    return 0
