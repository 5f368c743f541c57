"""
Haven Daemon RPC
Client methods for the node's RPC interface.
"""

import logging
from typing import Any, Dict, List, Union

from .client import RPCClient, AsyncRPCClient, RPCClientError

logger = logging.getLogger(__name__)


class DaemonMethods:
    """
    Daemon RPC method table.

    Every method shapes its params and hands them to self.request, so the
    return value is whatever the transport returns: a plain value for
    Daemon, an awaitable for AsyncDaemon.
    """

    def getblockcount(self):
        """Look up how many blocks are in the longest chain known to the node."""
        return self.request('getblockcount')

    def get_coinbase_tx_sum(self, height: int = 0, count: int = 1):
        """Get the coinbase amount and fees for a range of blocks."""
        params = {
            'height': height or 0,
            'count': count or 1,
        }
        return self.request('get_coinbase_tx_sum', params)

    def on_getblockhash(self, height: int = 0):
        """Look up a block's hash by its height."""
        return self.request('on_getblockhash', {'height': height or 0})

    def getlastblockheader(self):
        """Block header information for the most recent block."""
        return self.request('getlastblockheader')

    def getblockheaderbyhash(self, hash: str):
        return self.request('getblockheaderbyhash', {'hash': hash})

    def getblockheaderbyheight(self, height: int = 0):
        return self.request('getblockheaderbyheight', {'height': height or 0})

    def get_block_by_hash(self, hash: str):
        """Full block information by hash."""
        return self.request('get_block', {'hash': hash})

    def get_block_by_height(self, height: int = 0):
        """Full block information by height."""
        return self.request('get_block', {'height': height or 0})

    def get_connections(self):
        """Retrieve information about incoming and outgoing connections."""
        return self.request('get_connections')

    def get_info(self):
        """Retrieve general information about the state of the node."""
        return self.request('get_info')

    def set_bans(self, bans: Union[str, List[Any]]):
        """
        Ban other nodes.

        Args:
            bans: A single ban entry or a list of them
        """
        if isinstance(bans, str):
            bans = [bans]
        return self.request('set_bans', {'bans': bans})

    def get_bans(self):
        return self.request('get_bans')

    def get_transactions(self, txs_hashes: Union[str, List[str]],
                         decode_as_json: bool = True, prune: bool = False):
        """
        Look up transactions by hash.

        This is a flat call: params are posted to /get_transactions
        without the JSON-RPC envelope.

        Args:
            txs_hashes: Transaction hash or list of hashes
            decode_as_json: Ask the node for JSON-decoded transactions
            prune: Ask for pruned transactions

        Returns:
            Raw response object
        """
        if isinstance(txs_hashes, str):
            txs_hashes = [txs_hashes]
        params: Dict[str, Any] = {
            'txs_hashes': txs_hashes,
            'decode_as_json': decode_as_json,
            'prune': prune,
        }
        return self.request(None, params, 'get_transactions')


class Daemon(DaemonMethods, RPCClient):
    """Blocking daemon client."""

    def init(self) -> bool:
        """Probe the daemon; failures are logged, not raised."""
        try:
            self.get_info()
        except RPCClientError as e:
            logger.warning(f"Daemon at {self.host}:{self.port} not available: {e}")
            return False
        logger.info(f"Connected to daemon at {self.host}:{self.port}")
        return True


class AsyncDaemon(DaemonMethods, AsyncRPCClient):
    """Async daemon client; every method returns an awaitable."""

    async def init(self) -> bool:
        """Probe the daemon; failures are logged, not raised."""
        try:
            await self.get_info()
        except RPCClientError as e:
            logger.warning(f"Daemon at {self.host}:{self.port} not available: {e}")
            return False
        logger.info(f"Connected to daemon at {self.host}:{self.port}")
        return True
