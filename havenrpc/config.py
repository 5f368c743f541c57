"""
Haven RPC Configuration
Network constants, client defaults and connection settings.
"""

from dataclasses import dataclass
from typing import Dict, Optional
import logging
import os

logger = logging.getLogger(__name__)

# ============================================================================
# CORE SPECIFICATIONS
# ============================================================================

COIN_TICKER = "XHV"
COIN_DECIMALS = 12
COIN_UNIT = 10 ** COIN_DECIMALS  # Atomic units per XHV

# ============================================================================
# NETWORK PORTS
# ============================================================================

DAEMON_RPC_PORT = 17750
WALLET_RPC_PORT = 18082

# ============================================================================
# CLIENT DEFAULTS
# ============================================================================

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = WALLET_RPC_PORT
DEFAULT_TIMEOUT_MS = 5000

JSONRPC_VERSION = "2.0"
JSONRPC_ID = "0"
JSONRPC_INTERFACE = "json_rpc"

# ============================================================================
# WALLET DEFAULTS
# ============================================================================

DEFAULT_WALLET_FILENAME = "haven_wallet"
DEFAULT_WALLET_LANGUAGE = "English"

DEFAULT_PRIORITY = 0
DEFAULT_MIXIN = 10
DEFAULT_RING_SIZE = 11
DEFAULT_UNLOCK_TIME = 0


@dataclass(frozen=True)
class ConnectionConfig:
    """Connection settings captured once per client."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    user: str = ""
    password: str = ""
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    @classmethod
    def create(
        cls,
        host: str = None,
        port: int = None,
        user: str = None,
        password: str = None,
        timeout_ms: int = None,
    ) -> 'ConnectionConfig':
        """Build a config, substituting defaults for falsy arguments."""
        return cls(
            host=host or DEFAULT_HOST,
            port=int(port or DEFAULT_PORT),
            user=user or "",
            password=password or "",
            timeout_ms=int(timeout_ms or DEFAULT_TIMEOUT_MS),
        )

    @property
    def timeout(self) -> float:
        """Request timeout in seconds."""
        return self.timeout_ms / 1000.0

    def url(self, interface: str = JSONRPC_INTERFACE) -> str:
        return f"http://{self.host}:{self.port}/{interface}"


def get_data_dir() -> str:
    """Get default data directory."""
    import platform

    if platform.system() == 'Windows':
        base = os.environ.get('APPDATA', os.path.expanduser('~'))
        dir_name = 'Haven'
    elif platform.system() == 'Darwin':
        base = os.path.expanduser('~/Library/Application Support')
        dir_name = 'Haven'
    else:
        base = os.path.expanduser('~')
        dir_name = '.haven'

    return os.path.join(base, dir_name)


def get_config_file() -> str:
    """Get config file path."""
    return os.path.join(get_data_dir(), 'haven.conf')


def read_settings(config_file: str) -> Dict[str, str]:
    """
    Read a key=value config file.

    Blank lines and lines starting with '#' are ignored. A missing file
    yields no settings.

    Args:
        config_file: Path to config file

    Returns:
        Dictionary of raw settings
    """
    settings = {}
    try:
        with open(config_file, 'r') as f:
            for line in f:
                line = line.strip()
                if '=' in line and not line.startswith('#'):
                    key, value = line.split('=', 1)
                    settings[key.strip()] = value.strip()
    except FileNotFoundError:
        logger.debug(f"Config file {config_file} not found, using defaults")
    return settings


def load_config(config_file: Optional[str] = None) -> ConnectionConfig:
    """
    Create connection settings from a config file.

    Recognized keys: rpc-bind-ip, rpc-bind-port, rpc-login (user:password)
    and rpc-timeout (milliseconds).

    Args:
        config_file: Path to config file, defaults to get_config_file()

    Returns:
        ConnectionConfig instance
    """
    if config_file is None:
        config_file = get_config_file()

    settings = read_settings(config_file)

    user, password = "", ""
    login = settings.get('rpc-login', '')
    if login:
        user, _, password = login.partition(':')

    return ConnectionConfig.create(
        host=settings.get('rpc-bind-ip'),
        port=settings.get('rpc-bind-port'),
        user=user,
        password=password,
        timeout_ms=settings.get('rpc-timeout'),
    )
