# -*- coding: utf-8 -*-
"""
Exception classes for SharePoint Online admin commands.
"""


class CommandError(Exception):
    """Raised when a command fails; the message is shown to the user."""
    pass


class AuthenticationError(CommandError):
    """Raised when signing in or acquiring an access token fails."""
    pass


class SharePointAPIError(CommandError):
    """Raised when SharePoint answers a web request with an error."""
    def __init__(self, message, status_code=None, response_text=None):
        super().__init__(message)
        self.status_code = status_code
        self.response_text = response_text
