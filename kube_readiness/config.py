"""
Runtime configuration, read from environment variables with CLI overrides.
"""
import os
from typing import Optional

from kube_readiness.exceptions import ConfigurationError

INSPECTORS = ("kubectl", "client")


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("true", "1", "yes")


class Config:
    """Configuration class"""
    def __init__(self):
        # Polling
        self.timeout = float(os.getenv('POLL_TIMEOUT', '300'))
        self.interval = float(os.getenv('POLL_INTERVAL', '1.0'))

        # Status inspector
        self.inspector = os.getenv('INSPECTOR', 'kubectl').strip().lower()
        self.kubectl = os.getenv('KUBECTL', 'kubectl')
        self.kubeconfig_path: Optional[str] = os.getenv('KUBECONFIG') or None
        self.context: Optional[str] = os.getenv('KUBE_CONTEXT') or None
        self.table_output = _env_bool('KUBECTL_TABLE_OUTPUT')
        self.command_timeout = int(os.getenv('KUBECTL_COMMAND_TIMEOUT', '30'))
        self.k8s_verify_ssl: Optional[bool] = self._get_verify_ssl_setting()

        # Logging
        self.log_file = os.getenv('LOG_FILE', 'kube_readiness.log')
        self.log_level = os.getenv('LOG_LEVEL', 'INFO')

    def _get_verify_ssl_setting(self) -> Optional[bool]:
        """Get SSL verification setting from environment"""
        for env_var in ['K8S_VERIFY', 'OCP_API_VERIFY', 'VERIFY_SSL']:
            val = os.getenv(env_var)
            if val is not None:
                val_lower = val.strip().lower()
                if val_lower in ('true', '1', 'yes'):
                    return True
                if val_lower in ('false', '0', 'no'):
                    return False
        return None  # Not set, client defaults apply

    def validate(self) -> "Config":
        if self.timeout <= 0:
            raise ConfigurationError(f"Timeout must be positive, got {self.timeout}")
        if self.interval < 0:
            raise ConfigurationError(f"Poll interval must not be negative, got {self.interval}")
        if self.inspector not in INSPECTORS:
            raise ConfigurationError(
                f"Unknown inspector {self.inspector!r}; expected one of {', '.join(INSPECTORS)}")
        if self.command_timeout <= 0:
            raise ConfigurationError(
                f"kubectl command timeout must be positive, got {self.command_timeout}")
        return self
