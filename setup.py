#!/usr/bin/env python3
"""
Haven RPC Setup Script
Installs the havenrpc package and the haven-rpc-cli tool.

Usage:
    pip install .            Install the library and CLI
    pip install .[test]      Also install test dependencies
"""

from setuptools import setup, find_packages

setup(
    name="haven-rpc",
    version="1.0.0",
    description="JSON-RPC clients for the Haven daemon and wallet services",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "requests>=2.27",
        "aiohttp>=3.12",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "haven-rpc-cli=havenrpc.cli:main",
        ],
    },
    python_requires=">=3.9",
)
