# -*- coding: utf-8 -*-
"""
SharePoint Online Admin CLI Package
===================================

This package provides thin command line commands for administering
SharePoint Online tenants. Each command signs in with a cached access token,
fetches a request digest, sends a client.svc ProcessQuery (or REST) request
and prints the parsed response.

Modules:
--------
- config: Configuration from environment variables and .env
- auth: Microsoft authentication, connection and access token cache
- spo_api: SharePoint web requests, request digest and ProcessQuery wire format
- command: Command base classes
- commands: All commands and the command registry
- cli: Command line parsing, help and dispatch
- monitoring: Request and throttling statistics
- utils: Shared utility functions

Usage Example:
-------------
    from spo_cli.cli import run

    exit_code = run(['spo', 'serviceprincipal', 'set', '--enabled', 'true', '--confirm'])
"""

__version__ = "1.0.0"

# Main exports for convenience
from .config import parse_config, Config
from .exceptions import CommandError, AuthenticationError, SharePointAPIError
from .auth import Connection, ensure_access_token, login, logout
from .spo_api import (
    build_process_query,
    execute_process_query,
    get_request_digest,
    parse_client_svc_response
)
from .cli import run

__all__ = [
    # Configuration
    'parse_config',
    'Config',
    # Errors
    'CommandError',
    'AuthenticationError',
    'SharePointAPIError',
    # Authentication
    'Connection',
    'ensure_access_token',
    'login',
    'logout',
    # SharePoint requests
    'build_process_query',
    'execute_process_query',
    'get_request_digest',
    'parse_client_svc_response',
    # CLI
    'run',
]
