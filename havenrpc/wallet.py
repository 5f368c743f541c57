"""
Haven Wallet RPC
Client methods for the wallet RPC service.
"""

import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, List, Mapping, Optional

from . import config
from .client import RPCClient, AsyncRPCClient, RPCClientError
from .units import normalize_destinations

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferOptions:
    """Options shared by all value-movement methods."""
    priority: int = config.DEFAULT_PRIORITY
    mixin: int = config.DEFAULT_MIXIN
    ring_size: int = config.DEFAULT_RING_SIZE
    unlock_time: int = config.DEFAULT_UNLOCK_TIME
    do_not_relay: bool = False
    get_tx_hex: bool = False
    get_tx_key: bool = False
    get_tx_metadata: bool = False
    new_algorithm: bool = False
    below_amount: Optional[float] = None

    _INT_FIELDS = ('priority', 'mixin', 'ring_size', 'unlock_time')
    _BOOL_FIELDS = ('do_not_relay', 'get_tx_hex', 'get_tx_key',
                    'get_tx_metadata', 'new_algorithm')
    _ALIASES = {'unlockTime': 'unlock_time'}

    @classmethod
    def from_value(cls, options=None) -> 'TransferOptions':
        """
        Build options from None, an instance or a mapping.

        Falsy integer options fall back to their defaults. Integer options
        given as numeric strings or floats are truncated ('10.5' -> 10).

        Raises:
            ValueError: mapping has an unknown option name
        """
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        if not isinstance(options, Mapping):
            raise TypeError(f"Unsupported transfer options: {options!r}")

        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in options.items():
            name = cls._ALIASES.get(key, key)
            if name not in known:
                raise ValueError(f"Unknown transfer option: {key}")
            values[name] = value

        for name in cls._INT_FIELDS:
            value = values.get(name)
            if value:
                values[name] = value if isinstance(value, int) else int(float(value))
            else:
                values.pop(name, None)
        for name in cls._BOOL_FIELDS:
            if name in values:
                values[name] = bool(values[name])

        return replace(cls(), **values)

    def has_below_amount(self) -> bool:
        return (isinstance(self.below_amount, (int, float))
                and not isinstance(self.below_amount, bool))

    def to_params(self, new_algorithm: bool = False, below_amount: bool = False) -> Dict[str, Any]:
        """
        Wire params for these options.

        Args:
            new_algorithm: include the new_algorithm flag
            below_amount: include below_amount when it is numeric
        """
        params = {
            'priority': self.priority,
            'mixin': self.mixin,
            'ring_size': self.ring_size,
            'unlock_time': self.unlock_time,
            'do_not_relay': self.do_not_relay,
            'get_tx_hex': self.get_tx_hex,
            'get_tx_keys': self.get_tx_key,
            'get_tx_metadata': self.get_tx_metadata,
        }
        if new_algorithm:
            params['new_algorithm'] = self.new_algorithm
        if below_amount and self.has_below_amount():
            params['below_amount'] = self.below_amount
        return params


@dataclass(frozen=True)
class TransferFilter:
    """Height range options for get_transfers."""
    min_height: Optional[int] = None
    max_height: Optional[int] = None

    @classmethod
    def from_value(cls, options=None) -> 'TransferFilter':
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        unknown = set(options) - {'min_height', 'max_height'}
        if unknown:
            raise ValueError(f"Unknown transfer filter option: {', '.join(sorted(unknown))}")
        return cls(
            min_height=None if options.get('min_height') is None else int(options['min_height']),
            max_height=None if options.get('max_height') is None else int(options['max_height']),
        )

    def to_params(self) -> Dict[str, int]:
        params = {}
        if self.min_height is not None:
            params['min_height'] = self.min_height
        if self.max_height is not None:
            params['max_height'] = self.max_height
        return params


def _transfer_params(options, account_index, subaddr_indices,
                     new_algorithm=False, below_amount=False, **extra) -> Dict[str, Any]:
    opts = TransferOptions.from_value(options)
    params = dict(extra)
    params['account_index'] = account_index
    params['subaddr_indices'] = subaddr_indices
    params.update(opts.to_params(new_algorithm=new_algorithm, below_amount=below_amount))
    return params


class WalletMethods:
    """
    Wallet RPC method table.

    Methods return whatever self.request returns: a plain value for
    Wallet, an awaitable for AsyncWallet.
    """

    # === Lifecycle ===

    def create_wallet(self, filename: str = config.DEFAULT_WALLET_FILENAME,
                      password: str = '', language: str = config.DEFAULT_WALLET_LANGUAGE):
        """Create a new wallet file."""
        params = {
            'filename': filename or config.DEFAULT_WALLET_FILENAME,
            'password': password or '',
            'language': language or config.DEFAULT_WALLET_LANGUAGE,
        }
        return self.request('create_wallet', params)

    def open_wallet(self, filename: str = config.DEFAULT_WALLET_FILENAME, password: str = ''):
        params = {
            'filename': filename or config.DEFAULT_WALLET_FILENAME,
            'password': password or '',
        }
        return self.request('open_wallet', params)

    def stop_wallet(self):
        """Stop the wallet, storing its current state."""
        return self.request('stop_wallet')

    stopWallet = stop_wallet

    def store(self):
        """Save the wallet file."""
        return self.request('store')

    def get_height(self):
        """Wallet's current block height."""
        return self.request('get_height')

    # === Accounts and addresses ===

    def get_address(self, account_index: int = 0, address_indices=0):
        params = {
            'account_index': account_index,
            'address_indices': address_indices,
        }
        return self.request('get_address', params)

    def create_account(self, tag: str = ''):
        return self.request('create_account', {'tag': tag})

    def label_account(self, account_index: int = 0, label: str = ''):
        params = {
            'account_index': account_index,
            'label': label,
        }
        return self.request('label_account', params)

    def get_account_tags(self):
        return self.request('get_account_tags')

    def tag_accounts(self, tag: str = '', accounts: Optional[List[int]] = None):
        params = {
            'tag': tag,
            'account': list(accounts or []),
        }
        return self.request('tag_accounts', params)

    def untag_accounts(self, accounts: Optional[List[int]] = None):
        return self.request('untag_accounts', {'account': list(accounts or [])})

    def set_account_tag_description(self, tag: str = '', description: str = ''):
        params = {
            'tag': tag,
            'description': description,
        }
        return self.request('set_account_tag_description', params)

    def create_address(self, account_index: int = 0, label: str = ''):
        """Create a subaddress in an account."""
        params = {
            'account_index': account_index,
            'label': label,
        }
        return self.request('create_address', params)

    def label_address(self, account_index: int = 0, address_indices: int = 0, label: str = ''):
        """Label a subaddress, addressed as {major: account, minor: subaddress}."""
        params = {
            'index': {'major': account_index, 'minor': address_indices},
            'label': label,
        }
        return self.request('label_address', params)

    # === Balances and queries ===

    def get_balance(self, asset_name: str = config.COIN_TICKER, account_index: int = 0,
                    address_indices=0):
        """
        Wallet balance for one asset.

        Args:
            asset_name: Asset ticker, e.g. XHV or XUSD
            account_index: Account to query
            address_indices: Subaddress indices to query
        """
        params = {
            'asset_type': asset_name,
            'account_index': account_index,
            'address_indices': address_indices,
        }
        return self.request('get_balance', params)

    def get_transfers(self, tx_in: bool = False, tx_out: bool = False, tx_pending: bool = False,
                      tx_failed: bool = False, tx_pool: bool = False,
                      filter_by_height: bool = False, account_index: int = 0,
                      subaddr_indices=0, options=None):
        """
        List wallet transfers by category.

        Args:
            tx_in, tx_out, tx_pending, tx_failed, tx_pool: categories to include
            filter_by_height: restrict to the options' height range
            account_index: Account to query
            subaddr_indices: Subaddress indices to query
            options: TransferFilter or mapping with min_height / max_height
        """
        params = {
            'in': bool(tx_in),
            'out': bool(tx_out),
            'pending': bool(tx_pending),
            'failed': bool(tx_failed),
            'pool': bool(tx_pool),
            'filter_by_height': bool(filter_by_height),
        }
        params.update(TransferFilter.from_value(options).to_params())
        params['account_index'] = account_index
        params['subaddr_indices'] = subaddr_indices
        return self.request('get_transfers', params)

    def get_transfer_by_txid(self, txid: str, account_index: int = 0):
        params = {
            'txid': txid,
            'account_index': account_index,
        }
        return self.request('get_transfer_by_txid', params)

    def getPayments(self, pid: str, types=None):
        """Incoming payments for a payment ID."""
        params = {
            'payment_id': pid,
            'types': types,
        }
        return self.request('get_payments', params)

    get_payments = getPayments

    def getBulkPayments(self, pids, minHeight: int = None, types=None):
        """Incoming payments for one or more payment IDs from a given height."""
        params = {
            'payment_ids': pids,
            'min_block_height': minHeight,
            'types': types,
        }
        return self.request('get_bulk_payments', params)

    get_bulk_payments = getBulkPayments

    def incomingTransfers(self, type: str):
        """Incoming transfers; type is 'all', 'available' or 'unavailable'."""
        return self.request('incoming_transfers', {'transfer_type': type})

    incoming_transfers = incomingTransfers

    def queryKey(self, type: str):
        """Spend or view key; type is 'mnemonic' or 'view_key'."""
        return self.request('query_key', {'key_type': type})

    query_key = queryKey

    def integratedAddress(self, pid: str):
        return self.request('make_integrated_address', {'payment_id': pid})

    make_integrated_address = integratedAddress

    def splitIntegrated(self, address: str):
        return self.request('split_integrated_address', {'integrated_address': address})

    split_integrated_address = splitIntegrated

    def height(self):
        return self.request('getheight')

    # === Value movement ===

    def transfer(self, destinations, account_index: int = 0, subaddr_indices=0, options=None):
        """
        Send XHV to one or more recipients.

        Args:
            destinations: Destination, mapping or list of them; amounts in XHV
            account_index: Account to spend from
            subaddr_indices: Subaddresses to spend from
            options: TransferOptions or mapping
        """
        params = _transfer_params(
            options, account_index, subaddr_indices,
            destinations=normalize_destinations(destinations),
        )
        return self.request('transfer', params)

    def transfer_split(self, destinations, account_index: int = 0, subaddr_indices=0, options=None):
        """Same as transfer, split into several transactions if needed."""
        params = _transfer_params(
            options, account_index, subaddr_indices, new_algorithm=True,
            destinations=normalize_destinations(destinations),
        )
        return self.request('transfer_split', params)

    def sweep_dust(self):
        """Send all dust outputs back to the wallet."""
        return self.request('sweep_dust')

    def sweep_all(self, address: str, account_index: int = 0, subaddr_indices=0, options=None):
        """Send all unlocked balance to an address."""
        params = _transfer_params(
            options, account_index, subaddr_indices, below_amount=True,
            address=address,
        )
        return self.request('sweep_all', params)

    def sweep_single(self, address: str, key_image: str, account_index: int = 0,
                     subaddr_indices=0, options=None):
        """Send one unlocked output, by key image, to an address."""
        params = _transfer_params(
            options, account_index, subaddr_indices, below_amount=True,
            address=address, key_image=key_image,
        )
        return self.request('sweep_single', params)

    def onshore(self, destinations, account_index: int = 0, subaddr_indices=0, options=None):
        """Convert xUSD to XHV."""
        params = _transfer_params(
            options, account_index, subaddr_indices, new_algorithm=True,
            destinations=normalize_destinations(destinations),
        )
        return self.request('onshore', params)

    def offshore(self, destinations, account_index: int = 0, subaddr_indices=0, options=None):
        """Convert XHV to xUSD."""
        params = _transfer_params(
            options, account_index, subaddr_indices, new_algorithm=True,
            destinations=normalize_destinations(destinations),
        )
        return self.request('offshore', params)

    def offshore_transfer(self, destinations, account_index: int = 0, subaddr_indices=0,
                          options=None):
        """Send xUSD between wallets."""
        params = _transfer_params(
            options, account_index, subaddr_indices, new_algorithm=True,
            destinations=normalize_destinations(destinations),
        )
        return self.request('offshore_transfer', params)

    def offshore_sweep_all(self, address: str, account_index: int = 0, subaddr_indices=0,
                           options=None):
        """Send all xUSD outputs to an address."""
        params = _transfer_params(
            options, account_index, subaddr_indices, below_amount=True,
            address=address,
        )
        return self.request('offshore_sweep_all', params)

    def xusd_to_xasset(self, destinations, convert_to: str, account_index: int = 0,
                       subaddr_indices=0, options=None):
        """Convert xUSD to the xAsset named by convert_to."""
        params = _transfer_params(
            options, account_index, subaddr_indices, new_algorithm=True,
            destinations=normalize_destinations(destinations),
            asset_type=convert_to,
        )
        return self.request('xusd_to_xasset', params)

    def xasset_to_xusd(self, destinations, convert_from: str, account_index: int = 0,
                       subaddr_indices=0, options=None):
        """Convert the xAsset named by convert_from to xUSD."""
        params = _transfer_params(
            options, account_index, subaddr_indices, new_algorithm=True,
            destinations=normalize_destinations(destinations),
            asset_type=convert_from,
        )
        return self.request('xasset_to_xusd', params)

    def xasset_transfer(self, destinations, asset_type: str, account_index: int = 0,
                        subaddr_indices=0, options=None):
        """Send an xAsset between wallets."""
        params = _transfer_params(
            options, account_index, subaddr_indices, new_algorithm=True,
            destinations=normalize_destinations(destinations),
            asset_type=asset_type,
        )
        return self.request('xasset_transfer', params)


class Wallet(WalletMethods, RPCClient):
    """Blocking wallet client."""

    def init(self) -> bool:
        """Probe the wallet with a balance query."""
        try:
            result = self.get_balance()
        except RPCClientError as e:
            logger.error(f"Wallet initialization failed: {e}")
            return False
        logger.info(f"Wallet initialization successful: {result}")
        return True


class AsyncWallet(WalletMethods, AsyncRPCClient):
    """Async wallet client; every method returns an awaitable."""

    async def init(self) -> bool:
        """Probe the wallet with a balance query."""
        try:
            result = await self.get_balance()
        except RPCClientError as e:
            logger.error(f"Wallet initialization failed: {e}")
            return False
        logger.info(f"Wallet initialization successful: {result}")
        return True
