# -*- coding: utf-8 -*-
"""
Shared utility functions for SharePoint Online admin commands.

This module provides the debug/verbose switches, console output helpers
and small string helpers used across commands.
"""

import json
import os
import re
from urllib.parse import urlparse
from xml.sax.saxutils import escape


def is_debug_enabled():
    """
    Check if debug mode is enabled via DEBUG environment variable.

    Debug mode prints every web request and raw response, plus the request
    summary at the end of the command.

    Returns:
        bool: True if debug mode is enabled, False otherwise
    """
    return os.environ.get('DEBUG', 'false').lower() == 'true'


def is_verbose_enabled():
    """
    Check if verbose mode is enabled via VERBOSE environment variable.

    Debug mode always implies verbose mode.

    Returns:
        bool: True if verbose mode is enabled, False otherwise
    """
    return is_debug_enabled() or os.environ.get('VERBOSE', 'false').lower() == 'true'


def debug_log(label, value=None):
    """
    Print a labelled debug block, only when debug mode is enabled.

    Args:
        label (str): Heading printed before the value (e.g. 'Response:')
        value: Optional value; dicts and lists are pretty-printed as JSON
    """
    if not is_debug_enabled():
        return

    print(f"[DEBUG] {label}")
    if value is not None:
        if isinstance(value, (dict, list)):
            print(json.dumps(value, indent=2, default=str))
        else:
            print(value)
        print("")


def mask_token(token):
    """Return the first characters of a token, enough to tell tokens apart in logs."""
    if not token:
        return ''
    return f"{token[:10]}..."


def is_tenant_admin_url(url):
    """
    Check whether a URL points to a SharePoint Online tenant admin site.

    Args:
        url (str): Site URL (e.g. 'https://contoso-admin.sharepoint.com')

    Returns:
        bool: True for https://<tenant>-admin.sharepoint.<tld> URLs
    """
    if not url:
        return False
    host = urlparse(url).netloc.lower()
    return re.match(r'^[a-z0-9-]+-admin\.sharepoint\.[a-z.]+$', host) is not None


def is_valid_sharepoint_url(url):
    """
    Check whether a value is an absolute https URL of a SharePoint Online site.

    Args:
        url (str): URL to validate

    Returns:
        bool: True if the URL is https and its host ends with a sharepoint domain
    """
    if not url:
        return False
    parsed = urlparse(url)
    if parsed.scheme.lower() != 'https' or not parsed.netloc:
        return False
    return re.search(r'\.sharepoint\.(com|us|de|cn)$', parsed.netloc.lower()) is not None


def is_valid_guid(value):
    """Check whether a value is a GUID (with or without braces)."""
    if not value:
        return False
    pattern = r'^\{?[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}\}?$'
    return re.match(pattern, value) is not None


def parse_bool_option(value):
    """
    Parse a true|false option value.

    Args:
        value (str): Raw option value from the command line

    Returns:
        bool or None: True/False for valid values (case-insensitive), None otherwise
    """
    if value is None:
        return None
    lowered = str(value).lower()
    if lowered == 'true':
        return True
    if lowered == 'false':
        return False
    return None


def escape_xml(value):
    """
    Escape a value before embedding it in a ProcessQuery XML payload.

    Quotes are escaped as well because some values end up in attributes.
    """
    return escape(str(value), {'"': '&quot;', "'": '&apos;'})


def format_output(data, output='text'):
    """
    Render command output for the console.

    Args:
        data: Value to render (scalar, dict or list)
        output (str): 'json' for indented JSON, 'text' for human readable output

    Returns:
        str: Rendered output
    """
    if output == 'json':
        return json.dumps(data, indent=2, default=str)

    if isinstance(data, dict):
        return _format_dict(data)

    if isinstance(data, list):
        if not data:
            return ''
        if all(isinstance(item, dict) for item in data):
            return _format_table(data)
        return '\n'.join(_format_scalar(item) for item in data)

    return _format_scalar(data)


def _format_scalar(value):
    # Booleans print the way SharePoint returns them
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if value is None:
        return ''
    if isinstance(value, (dict, list)):
        return json.dumps(value, default=str)
    return str(value)


def _format_dict(data):
    if not data:
        return ''
    width = max(len(str(key)) for key in data)
    lines = []
    for key, value in data.items():
        lines.append(f"{str(key):<{width}}  {_format_scalar(value)}")
    return '\n'.join(lines)


def _format_table(rows):
    # Column order follows first appearance across rows
    columns = []
    for row in rows:
        for key in row:
            if key not in columns:
                columns.append(key)

    cells = [[_format_scalar(row.get(column)) for column in columns] for row in rows]
    widths = [
        max([len(column)] + [len(line[index]) for line in cells])
        for index, column in enumerate(columns)
    ]

    lines = ['  '.join(column.ljust(widths[i]) for i, column in enumerate(columns)).rstrip()]
    lines.append('  '.join('-' * width for width in widths))
    for line in cells:
        lines.append('  '.join(value.ljust(widths[i]) for i, value in enumerate(line)).rstrip())
    return '\n'.join(lines)


def confirm(message, default=False):
    """
    Ask a yes/no question on the console.

    Args:
        message (str): Question to display
        default (bool): Answer used when the user just presses Enter

    Returns:
        bool: True when the user confirmed
    """
    suffix = '(Y/n)' if default else '(y/N)'
    try:
        answer = input(f"? {message} {suffix} ")
    except EOFError:
        # No console attached (piped input), keep the safe default
        return default

    answer = answer.strip().lower()
    if not answer:
        return default
    return answer in ('y', 'yes')
