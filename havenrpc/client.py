"""
Haven RPC Client
HTTP JSON-RPC transport shared by the daemon and wallet clients.
"""

import asyncio
import logging
from typing import Any, Optional

import aiohttp
import requests
from requests.adapters import HTTPAdapter
from requests.auth import HTTPBasicAuth, HTTPDigestAuth

from . import config
from .config import ConnectionConfig

logger = logging.getLogger(__name__)

UNREACHABLE_MESSAGE = "Server is not reachable."


class RPCClientError(Exception):
    """RPC client error."""
    pass


class ServerUnreachableError(RPCClientError):
    """Raised for every transport-level failure."""

    def __init__(self, message: str = UNREACHABLE_MESSAGE):
        super().__init__(message)


class RPCResponseError(Exception):
    """RPC response error."""

    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


def build_request(method: Optional[str], params: Any = None,
                  interface: str = config.JSONRPC_INTERFACE) -> Any:
    """
    Build the HTTP body for one call.

    Enveloped calls carry params only when they are truthy. Flat calls
    post params as the whole body.
    """
    if interface != config.JSONRPC_INTERFACE:
        return params if params is not None else {}

    request = {
        'jsonrpc': config.JSONRPC_VERSION,
        'id': config.JSONRPC_ID,
        'method': method,
    }
    if params:
        request['params'] = params
    return request


def unwrap_response(data: Any) -> Any:
    """Return the `result` member when present, otherwise the whole body."""
    if isinstance(data, dict) and 'result' in data:
        return data['result']
    return data


def is_error_response(value: Any) -> bool:
    """Check whether an RPC return value is an error payload."""
    return isinstance(value, dict) and value.get('error') is not None


def check_result(value: Any) -> Any:
    """
    Raise RPCResponseError if value is an error payload.

    Args:
        value: Value returned by a client method

    Returns:
        value, unchanged
    """
    if is_error_response(value):
        error = value['error']
        if isinstance(error, dict):
            raise RPCResponseError(
                error.get('code', -1),
                error.get('message', 'Unknown error')
            )
        raise RPCResponseError(-1, str(error))
    return value


def _is_basic_challenge(headers) -> bool:
    challenge = headers.get('www-authenticate', '')
    return challenge.lower().startswith('basic')


class ChallengeAuth(HTTPDigestAuth):
    """
    Deferred HTTP auth.

    Requests go out without credentials; a 401 challenge is answered with
    Digest or Basic credentials, whichever the server asks for.
    """

    def handle_401(self, r, **kwargs):
        if r.status_code == 401 and _is_basic_challenge(r.headers):
            # Credentials already rejected
            if 'Authorization' in r.request.headers:
                return r

            # Consume content and release the only pooled connection
            r.content
            r.close()
            prep = HTTPBasicAuth(self.username, self.password)(r.request.copy())

            _r = r.connection.send(prep, **kwargs)
            _r.history.append(r)
            _r.request = prep
            return _r

        return super().handle_401(r, **kwargs)


class _BaseClient:

    def __init__(
        self,
        host: str = None,
        port: int = None,
        user: str = None,
        password: str = None,
        timeout_ms: int = None,
        connection: ConnectionConfig = None,
    ):
        """
        Initialize RPC client.

        Args:
            host: RPC server host
            port: RPC server port
            user: RPC username, empty disables auth
            password: RPC password
            timeout_ms: Request timeout in milliseconds
            connection: Prebuilt settings, overrides the other arguments
        """
        if connection is None:
            connection = ConnectionConfig.create(host, port, user, password, timeout_ms)
        self.connection = connection

    @classmethod
    def from_config(cls, config_file: str = None):
        """
        Create client from config file.

        Args:
            config_file: Path to config file

        Returns:
            Client instance
        """
        return cls(connection=config.load_config(config_file))

    @property
    def host(self) -> str:
        return self.connection.host

    @property
    def port(self) -> int:
        return self.connection.port

    @property
    def user(self) -> str:
        return self.connection.user

    @property
    def password(self) -> str:
        return self.connection.password

    @property
    def timeout_ms(self) -> int:
        return self.connection.timeout_ms

    def __repr__(self):
        return f"{type(self).__name__}({self.host}:{self.port})"


class RPCClient(_BaseClient):
    """
    Blocking JSON-RPC client.

    Holds one keep-alive connection; calls from several threads queue on it.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.session = requests.Session()
        adapter = HTTPAdapter(pool_connections=1, pool_maxsize=1, pool_block=True)
        self.session.mount('http://', adapter)
        if self.user:
            self.session.auth = ChallengeAuth(self.user, self.password)

    def request(self, method: Optional[str], params: Any = None,
                interface: str = config.JSONRPC_INTERFACE) -> Any:
        """
        Make an RPC request.

        Args:
            method: Method name, ignored for flat calls
            params: Parameters
            interface: 'json_rpc' or the path of a flat method

        Returns:
            Unwrapped result, or the whole body if it has no result

        Raises:
            ServerUnreachableError: on any transport failure
        """
        url = self.connection.url(interface)
        body = build_request(method, params, interface)
        logger.debug(f"POST {url} method={method}")

        try:
            response = self.session.post(url, json=body, timeout=self.connection.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.debug(f"Request to {url} failed: {e}")
            raise ServerUnreachableError() from e

        return unwrap_response(data)

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class AsyncRPCClient(_BaseClient):
    """
    Async JSON-RPC client.

    The aiohttp session is opened on first use and limited to one
    connection, so concurrent calls on one client queue.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._session: Optional[aiohttp.ClientSession] = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            middlewares = ()
            if self.user:
                middlewares = (aiohttp.DigestAuthMiddleware(self.user, self.password),)
            self._session = aiohttp.ClientSession(
                connector=aiohttp.TCPConnector(limit=1),
                timeout=aiohttp.ClientTimeout(total=self.connection.timeout),
                middlewares=middlewares,
            )
        return self._session

    @staticmethod
    async def _read(response: aiohttp.ClientResponse) -> Any:
        response.raise_for_status()
        return await response.json(content_type=None)

    async def request(self, method: Optional[str], params: Any = None,
                      interface: str = config.JSONRPC_INTERFACE) -> Any:
        """
        Make an RPC request asynchronously.

        Args:
            method: Method name, ignored for flat calls
            params: Parameters
            interface: 'json_rpc' or the path of a flat method

        Returns:
            Unwrapped result, or the whole body if it has no result

        Raises:
            ServerUnreachableError: on any transport failure
        """
        url = self.connection.url(interface)
        body = build_request(method, params, interface)
        logger.debug(f"POST {url} method={method}")

        session = self._get_session()
        try:
            async with session.post(url, json=body) as response:
                challenged = (response.status == 401 and bool(self.user)
                              and _is_basic_challenge(response.headers))
                if not challenged:
                    data = await self._read(response)

            if challenged:
                headers = {'Authorization': aiohttp.BasicAuth(self.user, self.password).encode()}
                async with session.post(url, json=body, headers=headers) as response:
                    data = await self._read(response)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.debug(f"Request to {url} failed: {e!r}")
            raise ServerUnreachableError() from e

        return unwrap_response(data)

    async def close(self):
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()


__all__ = [
    'RPCClient',
    'AsyncRPCClient',
    'ChallengeAuth',
    'RPCClientError',
    'ServerUnreachableError',
    'RPCResponseError',
    'build_request',
    'unwrap_response',
    'is_error_response',
    'check_result',
]
