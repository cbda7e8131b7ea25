# -*- coding: utf-8 -*-
"""
Microsoft authentication module for SharePoint Online admin commands.

This module handles Azure AD sign-in using MSAL (Microsoft Authentication
Library), persists the connection between runs and hands out access tokens
for SharePoint resources.
"""

import json
import os
import time
from urllib.parse import urlparse

import msal
import requests
from msal_extensions import FilePersistence, PersistedTokenCache

from .exceptions import AuthenticationError
from .utils import debug_log, is_debug_enabled, mask_token

# Process-wide cache of access tokens: resource -> {'access_token': str, 'expires_on': float}
access_token_cache = {}

AUTH_TYPE_DEVICE_CODE = 'deviceCode'
AUTH_TYPE_PASSWORD = 'password'
AUTH_TYPES = [AUTH_TYPE_DEVICE_CODE, AUTH_TYPE_PASSWORD]

LOGIN_EXPIRED_MESSAGE = ("Your login has expired. Sign in again to continue. "
                         "Run 'spo connect <url>' to connect to SharePoint Online")


class Connection:
    """Connection to a SharePoint Online site, persisted between invocations"""

    def __init__(self, url=None, user_name=None, auth_type=None, tenant=None, connected=False):
        self.url = url
        self.user_name = user_name
        self.auth_type = auth_type
        self.tenant = tenant
        self.connected = connected

    @property
    def resource(self):
        """OAuth resource of the connected site (scheme + host)"""
        return get_resource(self.url) if self.url else None

    def to_dict(self):
        return {
            'connected': self.connected,
            'url': self.url,
            'user_name': self.user_name,
            'auth_type': self.auth_type,
            'tenant': self.tenant
        }

    def save(self, config):
        """
        Write the connection to the configuration directory.

        Args:
            config (Config): Configuration holding the connection file path
        """
        os.makedirs(config.config_dir, exist_ok=True)
        with open(config.connection_file, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, config):
        """
        Read the connection stored by a previous 'spo connect'.

        Args:
            config (Config): Configuration holding the connection file path

        Returns:
            Connection: The stored connection, or a disconnected one if none exists
        """
        if not os.path.exists(config.connection_file):
            return cls()

        try:
            with open(config.connection_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            # A corrupt file means the user has to connect again
            if is_debug_enabled():
                print(f"[DEBUG] Could not read connection file: {e}")
            return cls()

        return cls(
            url=data.get('url'),
            user_name=data.get('user_name'),
            auth_type=data.get('auth_type'),
            tenant=data.get('tenant'),
            connected=bool(data.get('connected')) and bool(data.get('url'))
        )

    @staticmethod
    def clear(config):
        """Remove the stored connection"""
        if os.path.exists(config.connection_file):
            os.remove(config.connection_file)


def get_resource(url):
    """
    Get the OAuth resource for a SharePoint URL.

    Args:
        url (str): Any URL on a SharePoint Online site

    Returns:
        str: Scheme and host (e.g. 'https://contoso-admin.sharepoint.com')
    """
    parsed = urlparse(url)
    return f'{parsed.scheme}://{parsed.netloc}'


def get_scopes(resource):
    return [f'{resource}/.default']


def get_token_cache(config):
    """
    Return a lock-protected, on-disk MSAL token cache.

    PersistedTokenCache saves whenever MSAL changes the cache, so refreshed
    tokens survive between command invocations.
    """
    os.makedirs(config.config_dir, exist_ok=True)
    persistence = FilePersistence(os.path.abspath(config.token_cache_file))
    return PersistedTokenCache(persistence)


def create_msal_app(config):
    """
    Create the MSAL public client application used for delegated sign-in.

    Args:
        config (Config): Configuration with client id and authority

    Returns:
        msal.PublicClientApplication: Application bound to the persisted token cache
    """
    # MSAL validates the authority over the network when the app is created
    return _call_identity_platform(
        msal.PublicClientApplication, config,
        client_id=config.client_id,
        authority=config.authority,
        token_cache=get_token_cache(config)
    )


def _call_identity_platform(func, config, *args, **kwargs):
    """
    Call into MSAL and map the exceptions it raises to AuthenticationError.

    MSAL reports sign-in failures in its result dict but raises for network
    failures and for an authority it cannot resolve.
    """
    try:
        return func(*args, **kwargs)
    except requests.exceptions.RequestException as e:
        print("[!] ========================================")
        print("[!] CANNOT REACH MICROSOFT IDENTITY PLATFORM")
        print("[!] ========================================")
        print(f"[!] Could not connect to {config.authority}")
        print("[!] ")
        print("[!] Troubleshooting steps:")
        print("[!]   1. Verify internet connectivity")
        print(f"[!]   2. Check DNS resolution of {config.login_endpoint}")
        print("[!]   3. Verify HTTP_PROXY and HTTPS_PROXY if you are behind a proxy")
        print("[!] ")
        print(f"[!] Technical details: {str(e)[:300]}")
        print("[!] ========================================")
        raise AuthenticationError(f"Cannot reach {config.login_endpoint}: {str(e)[:200]}")
    except ValueError as e:
        print("[!] ========================================")
        print("[!] INVALID AUTHORITY")
        print("[!] ========================================")
        print(f"[!] Authority: {config.authority}")
        print("[!] ")
        print("[!] Check SPO_CLI_TENANT and SPO_CLI_LOGIN_ENDPOINT")
        print("[!] ")
        print(f"[!] Technical details: {str(e)[:300]}")
        print("[!] ========================================")
        raise AuthenticationError(f"Invalid authority {config.authority}: {str(e)[:200]}")


def _cache_token(resource, result):
    expires_in = int(result.get('expires_in', 0) or 0)
    access_token_cache[resource] = {
        'access_token': result['access_token'],
        'expires_on': time.time() + expires_in
    }


def _raise_for_token_error(result, config):
    """
    Check an MSAL result and raise AuthenticationError with troubleshooting hints.

    MSAL returns errors in the result dict rather than raising exceptions.
    """
    if result and "access_token" in result:
        return

    result = result or {}
    error_msg = result.get("error", "unknown_error")
    error_desc = result.get("error_description", "No description provided")
    error_codes = result.get("error_codes", [])

    print("[!] ========================================")
    print("[!] AUTHENTICATION FAILED")
    print("[!] ========================================")

    if error_msg == "authorization_declined":
        print("[!] Error: Sign-in was declined")
        print("[!] ")
        print("[!] Run the connect command again and approve the sign-in request")
    elif error_msg == "expired_token" or 70020 in error_codes:
        print("[!] Error: The device code expired before sign-in completed")
        print("[!] ")
        print("[!] Run the connect command again and complete sign-in within 15 minutes")
    elif 50076 in error_codes or 50079 in error_codes:
        print("[!] Error: Multi-factor authentication is required")
        print("[!] ")
        print("[!] Password authentication cannot complete MFA.")
        print("[!] Connect using the device code flow instead (--authType deviceCode)")
    elif 65001 in error_codes:
        print("[!] Error: The application has not been consented")
        print("[!] ")
        print("[!] Troubleshooting steps:")
        print(f"[!]   1. Ask a tenant administrator to consent to application {config.client_id}")
        print("[!]   2. Or register your own Azure AD application and set SPO_CLI_CLIENT_ID")
    elif "invalid_grant" in error_msg:
        print("[!] Error: Invalid credentials")
        print("[!] ")
        print("[!] Verify the user name and password and try again")
    else:
        print(f"[!] Error: {error_msg}")
        print("[!] ")
        print("[!] Common issues:")
        print("[!]   - Network connectivity problems")
        print("[!]   - Firewall blocking access to Microsoft identity platform")
        print(f"[!]   - Incorrect tenant or login endpoint ({config.authority})")

    print("[!] ")
    print(f"[!] Technical details: {error_desc}")
    print("[!] ========================================")
    raise AuthenticationError(f"Authentication failed: {error_msg} - {error_desc}")


def login(url, config, auth_type=AUTH_TYPE_DEVICE_CODE, user_name=None, password=None):
    """
    Sign in to SharePoint Online and store the connection.

    Args:
        url (str): Site URL to connect to
        config (Config): Configuration
        auth_type (str): 'deviceCode' (interactive, default) or 'password'
        user_name (str): User name for password authentication
        password (str): Password for password authentication

    Returns:
        Connection: The stored connection

    Raises:
        AuthenticationError: If sign-in fails
    """
    url = url.rstrip('/')
    resource = get_resource(url)
    scopes = get_scopes(resource)
    app = create_msal_app(config)

    if is_debug_enabled():
        print(f"[DEBUG] Signing in to {resource} using {auth_type} authentication...")

    if auth_type == AUTH_TYPE_PASSWORD:
        result = _call_identity_platform(app.acquire_token_by_username_password, config,
                                         user_name, password, scopes=scopes)
    else:
        flow = _call_identity_platform(app.initiate_device_flow, config, scopes=scopes)
        if "user_code" not in flow:
            raise AuthenticationError(
                f"Failed to start device code sign-in: {flow.get('error_description', flow.get('error', 'unknown error'))}"
            )

        # Display authentication instructions to the user
        print(flow["message"])
        # Blocks until the user completes sign-in or the code expires
        result = _call_identity_platform(app.acquire_token_by_device_flow, config, flow)

    _raise_for_token_error(result, config)
    _cache_token(resource, result)

    claims = result.get('id_token_claims') or {}
    connection = Connection(
        url=url,
        user_name=claims.get('preferred_username') or user_name,
        auth_type=auth_type,
        tenant=claims.get('tid') or config.tenant,
        connected=True
    )
    connection.save(config)
    return connection


def ensure_access_token(resource, config, connection=None):
    """
    Get a non-expired access token for a SharePoint resource.

    Tokens are served from the process-wide cache while valid. Otherwise the
    token is acquired silently from the MSAL cache (refreshing it if needed).

    Args:
        resource (str): OAuth resource (e.g. 'https://contoso-admin.sharepoint.com')
        config (Config): Configuration
        connection (Connection): Current connection (loaded from disk if omitted)

    Returns:
        str: Access token

    Raises:
        AuthenticationError: If not connected or the login expired
    """
    cached = access_token_cache.get(resource)
    if cached and cached['expires_on'] > time.time():
        if is_debug_enabled():
            print(f"[DEBUG] Existing access token {mask_token(cached['access_token'])} still valid for {resource}")
        return cached['access_token']

    connection = connection or Connection.load(config)
    if not connection.connected:
        raise AuthenticationError("Connect to a SharePoint Online site first")

    app = create_msal_app(config)
    if connection.user_name:
        accounts = app.get_accounts(username=connection.user_name)
    else:
        accounts = app.get_accounts()

    if not accounts:
        raise AuthenticationError(LOGIN_EXPIRED_MESSAGE)

    result = _call_identity_platform(app.acquire_token_silent, config,
                                     get_scopes(resource), account=accounts[0])
    if not result or "access_token" not in result:
        debug_log('Silent token acquisition failed:', result)
        raise AuthenticationError(LOGIN_EXPIRED_MESSAGE)

    _cache_token(resource, result)
    if is_debug_enabled():
        print(f"[DEBUG] Retrieved access token {mask_token(result['access_token'])} for {resource}")
    return result['access_token']


def logout(config):
    """
    Forget the connection and every cached token.

    Args:
        config (Config): Configuration
    """
    try:
        app = create_msal_app(config)
        for account in app.get_accounts():
            app.remove_account(account)
    finally:
        # The local connection is forgotten even when the identity platform is unreachable
        Connection.clear(config)
        access_token_cache.clear()
