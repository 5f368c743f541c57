"""
Shared fixtures: a local JSON-RPC endpoint that records requests.
"""

import base64
import hashlib
import json
import os
import re
import socket
import sys
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

REALM = 'haven-rpc'
NONCE = 'f3a1c9d2b7e84a60'
DIGEST_FIELD = re.compile(r'(\w+)="?([^",]*)"?')


def _md5(text):
    return hashlib.md5(text.encode()).hexdigest()


class RecordingHandler(BaseHTTPRequestHandler):
    """Answers every POST with the server's canned response."""

    protocol_version = 'HTTP/1.1'

    def do_POST(self):
        server = self.server
        length = int(self.headers.get('Content-Length', 0))
        raw = self.rfile.read(length)

        server.requests.append({
            'path': self.path,
            'headers': dict(self.headers),
            'body': json.loads(raw) if raw else None,
            'client_address': self.client_address,
        })

        header = self.headers.get('Authorization', '')
        if server.auth and not server.authorized(header, self.command, self.path):
            self._send(401, b'', {'WWW-Authenticate': server.challenge()})
            return

        if server.delay:
            time.sleep(server.delay)

        if server.raw_response is not None:
            payload = server.raw_response
        else:
            payload = json.dumps(server.response).encode('utf-8')
        self._send(server.status, payload, {'Content-Type': 'application/json'})

    def _send(self, status, payload, headers):
        self.send_response(status)
        for key, value in headers.items():
            self.send_header(key, value)
        self.send_header('Content-Length', str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format, *args):
        pass


class RecordingServer(ThreadingHTTPServer):
    daemon_threads = True

    def __init__(self):
        super().__init__(('127.0.0.1', 0), RecordingHandler)
        self.requests = []
        self.response = {'id': '0', 'jsonrpc': '2.0', 'result': {'status': 'OK'}}
        self.raw_response = None
        self.status = 200
        self.delay = 0
        self.auth = None
        self.auth_scheme = 'Basic'

    @property
    def port(self):
        return self.server_address[1]

    def expected_auth(self):
        user, password = self.auth
        token = base64.b64encode(f"{user}:{password}".encode()).decode()
        return f"Basic {token}"

    def challenge(self):
        if self.auth_scheme == 'Digest':
            return f'Digest realm="{REALM}", nonce="{NONCE}", qop="auth"'
        return f'Basic realm="{REALM}"'

    def authorized(self, header, method, uri):
        if self.auth_scheme != 'Digest':
            return header == self.expected_auth()
        if not header.startswith('Digest '):
            return False

        fields = dict(DIGEST_FIELD.findall(header[len('Digest '):]))
        user, password = self.auth
        ha1 = _md5(f"{user}:{REALM}:{password}")
        ha2 = _md5(f"{method}:{fields.get('uri')}")
        expected = _md5(
            f"{ha1}:{NONCE}:{fields.get('nc')}:{fields.get('cnonce')}:{fields.get('qop')}:{ha2}"
        )
        return fields.get('username') == user and fields.get('response') == expected

    @property
    def last_body(self):
        return self.requests[-1]['body']


@pytest.fixture
def rpc_server():
    """Local RPC endpoint running in a background thread."""
    server = RecordingServer()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server
    server.shutdown()
    server.server_close()


@pytest.fixture
def free_port():
    """A port with nothing listening on it."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(('127.0.0.1', 0))
    port = sock.getsockname()[1]
    sock.close()
    return port
