# -*- coding: utf-8 -*-
"""
Configuration management for the SharePoint Online admin CLI.

This module reads settings from environment variables (optionally loaded
from a .env file) and exposes them as a Config object.
"""

import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Azure AD app registered by the PnP community for the Office 365 CLI
DEFAULT_CLIENT_ID = '31359c7f-bd7e-475c-86db-fdb8c937548e'

CONNECTION_FILE_NAME = 'connection.json'
TOKEN_CACHE_FILE_NAME = 'msal_token_cache.bin'


class Config:
    """Configuration for SharePoint Online admin commands"""

    def __init__(self):
        """
        Read configuration from environment variables.

        Variables (all optional):
        1. SPO_CLI_CLIENT_ID - Azure AD application ID used to sign in
        2. SPO_CLI_TENANT - Authority tenant (default: common)
        3. SPO_CLI_LOGIN_ENDPOINT - Azure AD endpoint (default: login.microsoftonline.com)
        4. SPO_CLI_CONFIG_DIR - Where the connection and token cache are stored (default: ~/.spo-cli)
        5. SPO_CLI_TIMEOUT - HTTP timeout in seconds (default: 60)
        6. SPO_CLI_APPLICATION_NAME - ApplicationName sent to SharePoint (default: spo-cli)
        """
        self.client_id = os.environ.get('SPO_CLI_CLIENT_ID') or DEFAULT_CLIENT_ID
        self.tenant = os.environ.get('SPO_CLI_TENANT') or 'common'
        self.login_endpoint = os.environ.get('SPO_CLI_LOGIN_ENDPOINT') or 'login.microsoftonline.com'
        self.config_dir = os.path.expanduser(
            os.environ.get('SPO_CLI_CONFIG_DIR') or os.path.join('~', '.spo-cli')
        )
        self.timeout = float(os.environ.get('SPO_CLI_TIMEOUT') or 60)
        self.application_name = os.environ.get('SPO_CLI_APPLICATION_NAME') or 'spo-cli'

        # Derived values
        self.authority = f'https://{self.login_endpoint}/{self.tenant}'
        self.connection_file = os.path.join(self.config_dir, CONNECTION_FILE_NAME)
        self.token_cache_file = os.path.join(self.config_dir, TOKEN_CACHE_FILE_NAME)

    def validate(self):
        """
        Validate configuration values.

        Raises:
            ValueError: If configuration is invalid
        """
        if not self.client_id:
            raise ValueError("SPO_CLI_CLIENT_ID cannot be empty")
        if not self.tenant:
            raise ValueError("SPO_CLI_TENANT cannot be empty")
        if self.timeout <= 0:
            raise ValueError("SPO_CLI_TIMEOUT must be greater than 0")


def parse_config():
    """
    Parse configuration from environment variables.

    Returns:
        Config: Configured Config object

    Raises:
        ValueError: If configuration is invalid (including a non-numeric timeout)
    """
    config = Config()
    config.validate()
    return config
