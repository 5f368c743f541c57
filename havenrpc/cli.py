"""
Haven RPC CLI
Command-line interface for the Haven daemon and wallet RPC services.

Usage:
    haven-rpc-cli [options] <service> <method> [params...]

Options:
    --rpcconnect=<ip>   RPC server IP (default: 127.0.0.1)
    --rpcport=<port>    RPC port (default: 18082)
    --rpcuser=<user>    RPC username
    --rpcpassword=<pw>  RPC password
    --timeout=<ms>      Request timeout in milliseconds (default: 5000)
    --config=<file>     Config file (default: ~/.haven/haven.conf)
    --verbose           Log requests

Services:
    daemon              Node RPC
    wallet              Wallet RPC

Examples:
    haven-rpc-cli daemon getblockcount
    haven-rpc-cli wallet get_balance XUSD
    haven-rpc-cli wallet transfer '{"address": "hvx...", "amount": "1.5"}'
"""

import argparse
import inspect
import json
import logging
import sys
from typing import Any, Dict, List

from . import config
from .client import RPCClientError, RPCResponseError, check_result
from .daemon import Daemon, DaemonMethods
from .wallet import Wallet, WalletMethods

# name -> (client class, method table, usual RPC port)
SERVICES = {
    'daemon': (Daemon, DaemonMethods, config.DAEMON_RPC_PORT),
    'wallet': (Wallet, WalletMethods, config.WALLET_RPC_PORT),
}


def list_methods(methods_cls) -> Dict[str, Any]:
    """Public RPC methods of a method table."""
    return {
        name: func
        for name, func in vars(methods_cls).items()
        if not name.startswith('_') and inspect.isfunction(func)
    }


def parse_param(value: str) -> Any:
    """Parse one command-line parameter: JSON, then number, then string."""
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        pass
    try:
        if '.' in value:
            return float(value)
        return int(value)
    except ValueError:
        return value


def format_output(result, pretty=True):
    """Format output for display."""
    if result is None:
        return ""

    if isinstance(result, (dict, list)):
        if pretty:
            return json.dumps(result, indent=2, default=str)
        return json.dumps(result, default=str)

    return str(result)


def print_help(service=None):
    """Print the methods of one service, or of both."""
    print(__doc__)
    for name in ([service] if service else SERVICES):
        print(f"=== {name} === (usually --rpcport={SERVICES[name][2]})")
        for method, func in list_methods(SERVICES[name][1]).items():
            summary = (inspect.getdoc(func) or '').split('\n')[0]
            print(f"{method:<30}{summary}")
        print()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Haven RPC CLI",
        add_help=False,
    )

    parser.add_argument('--rpcconnect', type=str,
                        help='RPC server IP')
    parser.add_argument('--rpcport', type=int,
                        help='RPC port')
    parser.add_argument('--rpcuser', type=str,
                        help='RPC username')
    parser.add_argument('--rpcpassword', type=str,
                        help='RPC password')
    parser.add_argument('--timeout', type=int,
                        help='Request timeout in milliseconds')
    parser.add_argument('--config', type=str,
                        help='Config file')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Log requests')
    parser.add_argument('--help', '-h', action='store_true',
                        help='Show help')
    parser.add_argument('service', nargs='?', choices=sorted(SERVICES),
                        help='Service to call')
    parser.add_argument('method', nargs='?',
                        help='Method to execute')
    parser.add_argument('params', nargs='*',
                        help='Method parameters')
    return parser


def create_client(args):
    """Create the client for args.service, command line over config file."""
    settings = config.load_config(args.config)
    client_cls = SERVICES[args.service][0]
    return client_cls(
        host=args.rpcconnect or settings.host,
        port=args.rpcport or settings.port,
        user=args.rpcuser or settings.user,
        password=args.rpcpassword or settings.password,
        timeout_ms=args.timeout or settings.timeout_ms,
    )


def main(argv: List[str] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    if args.help or not args.service or not args.method:
        print_help(args.service)
        return 0

    methods = list_methods(SERVICES[args.service][1])
    if args.method not in methods:
        print(f"error: unknown {args.service} method: {args.method}", file=sys.stderr)
        return 1

    params = [parse_param(p) for p in args.params]

    with create_client(args) as client:
        try:
            result = check_result(getattr(client, args.method)(*params))
        except RPCResponseError as e:
            print(f"error: {e.message} (code {e.code})", file=sys.stderr)
            return 1
        except RPCClientError as e:
            print(f"error: {e}", file=sys.stderr)
            return 1
        except (ValueError, TypeError) as e:
            print(f"error: {e}", file=sys.stderr)
            return 1

    output = format_output(result)
    if output:
        print(output)
    return 0


if __name__ == '__main__':
    sys.exit(main())
