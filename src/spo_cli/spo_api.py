# -*- coding: utf-8 -*-
"""
SharePoint Online web request operations.

This module provides the HTTP plumbing shared by all commands: request
headers, error mapping, the request digest and the client.svc ProcessQuery
wire format (an XML request answered with a JSON array).
"""

import json

import requests

from . import __version__
from .exceptions import CommandError, SharePointAPIError
from .monitoring import request_monitor
from .utils import debug_log, escape_xml, mask_token

CLIENT_QUERY_NAMESPACE = 'http://schemas.microsoft.com/sharepoint/clientquery/2009'

# Client object model type ids used in ObjectPaths constructors
TENANT_TYPE_ID = '{268004ae-ef6b-4e9b-8425-127220d84719}'
SERVICE_PRINCIPAL_TYPE_ID = '{104e8f06-1e00-4675-99c6-1b9b504ed8d8}'

ODATA_NOMETADATA = 'application/json;odata=nometadata'


def get_request_headers(headers=None, application_name='spo-cli'):
    """
    Build request headers with the headers every SharePoint request carries.

    Args:
        headers (dict): Request specific headers (Authorization, X-RequestDigest, ...)
        application_name (str): Name reported in the User-Agent

    Returns:
        dict: Headers including User-Agent and Accept-Encoding
    """
    request_headers = {
        # Decorated user agent, see https://aka.ms/spo-decorate-traffic
        'User-Agent': f'NONISV|SharePointPnP|{application_name}/{__version__}',
        'Accept-Encoding': 'gzip, deflate'
    }
    if headers:
        request_headers.update(headers)
    return request_headers


def get_error_message(response):
    """
    Extract a readable error message from a failed SharePoint response.

    Handles the OData verbose/nometadata error shapes and Azure AD error
    responses, falling back to the HTTP status.

    Args:
        response (requests.Response): The failed response

    Returns:
        str: Error message to show to the user
    """
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        odata_error = body.get('odata.error')
        if isinstance(odata_error, dict):
            message = odata_error.get('message')
            if isinstance(message, dict) and message.get('value'):
                return message['value']

        error = body.get('error')
        if isinstance(error, dict):
            message = error.get('message')
            if isinstance(message, dict) and message.get('value'):
                return message['value']
            if isinstance(message, str) and message:
                return message
        if body.get('error_description'):
            return body['error_description']
        if isinstance(error, str) and error:
            return error

    reason = response.reason or 'Request failed'
    return f'{response.status_code} {reason}'


def _print_network_error(title, description, steps, details, url):
    print("[!] ========================================")
    print(f"[!] {title}")
    print("[!] ========================================")
    print(f"[!] {description}")
    print("[!] ")
    print("[!] Troubleshooting steps:")
    for number, step in enumerate(steps, start=1):
        print(f"[!]   {number}. {step}")
    print("[!] ")
    print(f"[!] Technical details: {details[:300]}")
    print(f"[!] URL: {url[:100]}")
    print("[!] ========================================")


def make_spo_request(url, headers, method='GET', data=None, json_data=None, timeout=60):
    """
    Make a single SharePoint request and map failures to CommandError.

    No retries: throttled or failed requests surface immediately. Throttling
    responses are recorded by the request monitor.

    Args:
        url (str): SharePoint endpoint URL
        headers (dict): Request headers including Authorization
        method (str): HTTP method ('GET' or 'POST')
        data (str): Raw body for POST requests (XML payloads)
        json_data (dict): JSON body for POST requests
        timeout (float): Request timeout in seconds

    Returns:
        requests.Response: The successful HTTP response

    Raises:
        SharePointAPIError: If SharePoint returns a non-success status
        CommandError: If the request could not be sent
    """
    try:
        if method.upper() == 'GET':
            response = requests.get(url, headers=headers, timeout=timeout)
        elif method.upper() == 'POST':
            response = requests.post(url, headers=headers, data=data, json=json_data, timeout=timeout)
        else:
            raise ValueError(f"Unsupported HTTP method: {method}")

    except requests.exceptions.Timeout as e:
        _print_network_error(
            "REQUEST TIMEOUT",
            f"The request to SharePoint Online timed out after {timeout} seconds.",
            [
                "Check your internet connection",
                "Increase the timeout with the SPO_CLI_TIMEOUT environment variable",
                "Try again - SharePoint Online may be experiencing issues"
            ],
            str(e), url
        )
        raise CommandError(f"Request to {url} timed out")

    except requests.exceptions.SSLError as e:
        # SSL errors usually aren't transient - fail fast with clear message
        _print_network_error(
            "SSL/TLS CERTIFICATE ERROR",
            "Failed to verify SSL certificate for SharePoint Online.",
            [
                "Verify system certificate store is up to date",
                "Check if corporate proxy is intercepting SSL/TLS connections",
                "Ensure system clock is accurate (SSL cert validation requires correct time)"
            ],
            str(e), url
        )
        raise CommandError(f"SSL certificate verification failed: {str(e)[:200]}")

    except requests.exceptions.ProxyError as e:
        _print_network_error(
            "PROXY CONNECTION ERROR",
            "Failed to connect through proxy server.",
            [
                "Verify HTTP_PROXY and HTTPS_PROXY environment variables are set correctly",
                "Check proxy server is accessible and responding",
                "Check proxy server allows connections to *.sharepoint.com"
            ],
            str(e), url
        )
        raise CommandError(f"Proxy connection failed: {str(e)[:200]}")

    except requests.exceptions.TooManyRedirects as e:
        _print_network_error(
            "TOO MANY REDIRECTS",
            "Encountered redirect loop - this indicates a configuration issue.",
            [
                f"Verify the site URL is correct: {url[:100]}",
                "Check if proxy is misconfigured and causing redirect loops"
            ],
            str(e), url
        )
        raise CommandError(f"Too many redirects - possible configuration issue: {str(e)[:200]}")

    except requests.exceptions.ConnectionError as e:
        _print_network_error(
            "NETWORK CONNECTION FAILED",
            "Could not establish connection to SharePoint Online.",
            [
                "Verify internet connectivity",
                "Check DNS resolution of the site host name",
                "Ensure firewall allows HTTPS (port 443) to *.sharepoint.com"
            ],
            str(e), url
        )
        raise CommandError(f"Network connection failed: {str(e)[:200]}")

    except requests.exceptions.RequestException as e:
        raise CommandError(f"HTTP request error: {str(e)[:200]}")

    request_monitor.analyze_response(response, method=method, url=url)

    if not response.ok:
        debug_log('Error response:', response.text)
        raise SharePointAPIError(
            get_error_message(response),
            status_code=response.status_code,
            response_text=response.text
        )

    return response


def parse_json_response(response):
    """
    Parse the JSON body of a successful response.

    Sign-in and proxy pages come back as HTML with a success status, so a
    body that is not JSON is reported as an unexpected response.

    Raises:
        CommandError: If the body is not JSON
    """
    try:
        return response.json()
    except ValueError:
        raise CommandError(f"Unexpected response from SharePoint: {response.text[:200]}")


def get_request_digest(site_url, access_token, config):
    """
    Get a request digest (anti-forgery token) for the given site.

    The digest must be fetched right before the request it protects.

    Args:
        site_url (str): Site URL (e.g. 'https://contoso-admin.sharepoint.com')
        access_token (str): Bearer token for the site
        config (Config): Configuration

    Returns:
        dict: ContextInfo with FormDigestValue, FormDigestTimeoutSeconds, WebFullUrl, ...

    Raises:
        CommandError: If the response carries no digest
    """
    url = f'{site_url}/_api/contextinfo'
    headers = get_request_headers({
        'Authorization': f'Bearer {access_token}',
        'Accept': ODATA_NOMETADATA
    }, config.application_name)

    debug_log('Retrieving request digest...', {'url': url})
    response = make_spo_request(url, headers, method='POST', timeout=config.timeout)
    context_info = parse_json_response(response)
    debug_log('Response:', context_info)

    if not isinstance(context_info, dict) or not context_info.get('FormDigestValue'):
        raise CommandError(f"Unexpected response from SharePoint: {response.text[:200]}")
    return context_info


def build_process_query(actions, object_paths, application_name='spo-cli'):
    """
    Wrap client object model actions and object paths in a ProcessQuery request.

    Args:
        actions (str): XML for the <Actions> element content
        object_paths (str): XML for the <ObjectPaths> element content
        application_name (str): ApplicationName reported to SharePoint

    Returns:
        str: Complete XML request body
    """
    return (
        f'<Request AddExpandoFieldTypeSuffix="true" SchemaVersion="15.0.0.0" '
        f'LibraryVersion="16.0.0.0" ApplicationName="{escape_xml(application_name)}" '
        f'xmlns="{CLIENT_QUERY_NAMESPACE}">'
        f'<Actions>{actions}</Actions>'
        f'<ObjectPaths>{object_paths}</ObjectPaths>'
        f'</Request>'
    )


def parse_client_svc_response(text):
    """
    Parse a ProcessQuery response.

    The response is a JSON array. The first element holds the schema info and,
    on failure, ErrorInfo. The remaining elements alternate between action ids
    and their results.

    Args:
        text (str): Raw response body

    Returns:
        list: Parsed response

    Raises:
        CommandError: If the response carries ErrorInfo or is not a JSON array
    """
    try:
        parsed = json.loads(text)
    except ValueError:
        raise CommandError(f"Unexpected response from SharePoint: {text[:200]}")

    if not isinstance(parsed, list) or not parsed:
        raise CommandError(f"Unexpected response from SharePoint: {text[:200]}")

    header = parsed[0]
    if isinstance(header, dict) and header.get('ErrorInfo'):
        error_info = header['ErrorInfo']
        raise CommandError(error_info.get('ErrorMessage') or error_info.get('ErrorTypeName') or 'Unknown error')

    return parsed


def execute_process_query(site_url, access_token, request_digest, body, config):
    """
    POST a ProcessQuery request to the site's client.svc endpoint.

    Args:
        site_url (str): Site URL
        access_token (str): Bearer token for the site
        request_digest (str): FormDigestValue from get_request_digest()
        body (str): XML request built with build_process_query()
        config (Config): Configuration

    Returns:
        list: Parsed response (see parse_client_svc_response)
    """
    url = f'{site_url}/_vti_bin/client.svc/ProcessQuery'
    headers = get_request_headers({
        'Authorization': f'Bearer {access_token}',
        'X-RequestDigest': request_digest,
        'Content-Type': 'text/xml'
    }, config.application_name)

    debug_log('Executing web request...', {
        'url': url,
        'headers': {**headers, 'Authorization': f'Bearer {mask_token(access_token)}'},
        'body': body
    })

    response = make_spo_request(url, headers, method='POST', data=body, timeout=config.timeout)
    debug_log('Response:', response.text)
    return parse_client_svc_response(response.text)


def get_json(url, access_token, config):
    """
    GET a SharePoint REST endpoint with nometadata JSON.

    Args:
        url (str): REST endpoint URL
        access_token (str): Bearer token for the site
        config (Config): Configuration

    Returns:
        dict: Parsed JSON response
    """
    headers = get_request_headers({
        'Authorization': f'Bearer {access_token}',
        'Accept': ODATA_NOMETADATA
    }, config.application_name)

    debug_log('Executing web request...', {'url': url})
    response = make_spo_request(url, headers, method='GET', timeout=config.timeout)
    result = parse_json_response(response)
    debug_log('Response:', result)
    return result


def post_json(url, access_token, config, json_data=None):
    """
    POST a JSON body to a SharePoint REST endpoint with nometadata JSON.

    Args:
        url (str): REST endpoint URL
        access_token (str): Bearer token for the site
        config (Config): Configuration
        json_data (dict): Request body

    Returns:
        dict: Parsed JSON response
    """
    headers = get_request_headers({
        'Authorization': f'Bearer {access_token}',
        'Accept': ODATA_NOMETADATA,
        'Content-Type': ODATA_NOMETADATA
    }, config.application_name)

    debug_log('Executing web request...', {'url': url, 'body': json_data})
    response = make_spo_request(url, headers, method='POST', json_data=json_data, timeout=config.timeout)
    result = parse_json_response(response) if response.text else {}
    debug_log('Response:', result)
    return result


def strip_object_type(obj, keys=('_ObjectType_',)):
    """
    Remove client object model type tags from a response object.

    Args:
        obj (dict): Object from a ProcessQuery response
        keys (tuple): Tag keys to remove

    Returns:
        dict: Copy of the object without the tags
    """
    return {key: value for key, value in obj.items() if key not in keys}


def child_items(obj):
    """
    Get the cleaned child items of a collection from a ProcessQuery response.

    Args:
        obj (dict): Collection object (with _Child_Items_)

    Returns:
        list: Child items without _ObjectType_ and _ObjectIdentity_
    """
    items = obj.get('_Child_Items_') or []
    return [strip_object_type(item, ('_ObjectType_', '_ObjectIdentity_')) for item in items]
