"""
Haven RPC Module
JSON-RPC clients for the Haven daemon and wallet services.
"""

from .config import ConnectionConfig, load_config
from .client import (
    RPCClient,
    AsyncRPCClient,
    RPCClientError,
    ServerUnreachableError,
    RPCResponseError,
    check_result,
    is_error_response,
)
from .daemon import Daemon, AsyncDaemon
from .wallet import Wallet, AsyncWallet, TransferOptions, TransferFilter
from .units import Destination, InvalidAmountError, to_atomic_units, from_atomic_units

__version__ = '1.0.0'

__all__ = [
    'ConnectionConfig',
    'load_config',
    'RPCClient',
    'AsyncRPCClient',
    'RPCClientError',
    'ServerUnreachableError',
    'RPCResponseError',
    'check_result',
    'is_error_response',
    'Daemon',
    'AsyncDaemon',
    'Wallet',
    'AsyncWallet',
    'TransferOptions',
    'TransferFilter',
    'Destination',
    'InvalidAmountError',
    'to_atomic_units',
    'from_atomic_units',
]
