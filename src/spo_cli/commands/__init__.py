# -*- coding: utf-8 -*-
"""
Command registry.

Commands are looked up by the words on the command line; the longest name
or alias matching the leading words wins.
"""

from .connect import SpoConnectCommand, SpoDisconnectCommand, SpoStatusCommand
from .serviceprincipal import (
    SpoServicePrincipalGrantListCommand,
    SpoServicePrincipalGrantRevokeCommand,
    SpoServicePrincipalPermissionRequestApproveCommand,
    SpoServicePrincipalPermissionRequestDenyCommand,
    SpoServicePrincipalPermissionRequestListCommand,
    SpoServicePrincipalSetCommand
)
from .storageentity import (
    SpoStorageEntityGetCommand,
    SpoStorageEntityListCommand,
    SpoStorageEntityRemoveCommand,
    SpoStorageEntitySetCommand
)
from .tenant import (
    SpoCdnGetCommand,
    SpoCdnSetCommand,
    SpoHideDefaultThemesGetCommand,
    SpoHideDefaultThemesSetCommand,
    SpoTenantAppCatalogUrlGetCommand
)

COMMAND_CLASSES = [
    SpoCdnGetCommand,
    SpoCdnSetCommand,
    SpoConnectCommand,
    SpoDisconnectCommand,
    SpoHideDefaultThemesGetCommand,
    SpoHideDefaultThemesSetCommand,
    SpoServicePrincipalGrantListCommand,
    SpoServicePrincipalGrantRevokeCommand,
    SpoServicePrincipalPermissionRequestApproveCommand,
    SpoServicePrincipalPermissionRequestDenyCommand,
    SpoServicePrincipalPermissionRequestListCommand,
    SpoServicePrincipalSetCommand,
    SpoStatusCommand,
    SpoStorageEntityGetCommand,
    SpoStorageEntityListCommand,
    SpoStorageEntityRemoveCommand,
    SpoStorageEntitySetCommand,
    SpoTenantAppCatalogUrlGetCommand
]


def get_commands():
    """
    Create an instance of every command.

    Returns:
        list: Command instances sorted by name
    """
    return sorted((command_class() for command_class in COMMAND_CLASSES), key=lambda c: c.name)


def find_command(words, commands=None):
    """
    Resolve a command from command line words.

    Args:
        words (list): Command line arguments (e.g. ['spo', 'sp', 'set', '--enabled', 'true'])
        commands (list): Commands to search (all commands by default)

    Returns:
        tuple: (command, remaining arguments), or (None, words) if nothing matches
    """
    commands = commands if commands is not None else get_commands()

    best_match = None
    best_length = 0
    for command in commands:
        for name in [command.name] + command.alias():
            name_words = name.split(' ')
            length = len(name_words)
            if length > best_length and [w.lower() for w in words[:length]] == name_words:
                best_match = command
                best_length = length

    if best_match is None:
        return None, list(words)
    return best_match, list(words[best_length:])
