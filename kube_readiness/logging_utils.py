"""
Logging setup and coloured console output.
"""
import logging
import sys
from datetime import datetime
from typing import Optional

logger = logging.getLogger("kube_readiness")


class Colors:
    """ANSI color codes for terminal output"""
    RED = '\033[0;31m'
    GREEN = '\033[0;32m'
    YELLOW = '\033[1;33m'
    CYAN = '\033[0;36m'
    NC = '\033[0m'


def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """Setup logging configuration"""
    level = getattr(logging, log_level.upper(), logging.INFO)
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.insert(0, logging.FileHandler(log_file))
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - [%(funcName)s] - %(message)s',
        handlers=handlers,
        force=True
    )
    # Keep the kubernetes client's request logging out of the poll trace
    logging.getLogger("urllib3").setLevel(max(level, logging.WARNING))
    return logger


def _echo(color: str, message: str, component: str):
    timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
    print(f"{color}[{component}]{Colors.NC} {timestamp} - {message}")


def log_info(message: str, component: str = "MAIN"):
    _echo(Colors.GREEN, message, component)
    logger.info(f"[{component}] {message}")


def log_warn(message: str, component: str = "MAIN"):
    _echo(Colors.YELLOW, message, component)
    logger.warning(f"[{component}] {message}")


def log_error(message: str, component: str = "MAIN"):
    _echo(Colors.RED, message, component)
    logger.error(f"[{component}] {message}")
