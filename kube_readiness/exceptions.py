"""
Exception types raised by the readiness tooling.
"""
from typing import List, Optional


class KubeReadinessError(Exception):
    """Base class for every fatal readiness error."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigurationError(KubeReadinessError):
    """Required input is missing or invalid"""


class InspectorError(KubeReadinessError):
    """The status query itself failed (API error, kubectl exit status, bad output)."""

    def __init__(self, message: str, details: Optional[str] = None,
                 command: Optional[List[str]] = None,
                 returncode: Optional[int] = None,
                 stderr: Optional[str] = None):
        super().__init__(message, details)
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class ReadinessTimeout(KubeReadinessError):
    """A resource never reached the desired state within its tick budget."""

    def __init__(self, result):
        super().__init__(result.describe())
        self.result = result
