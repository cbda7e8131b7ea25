# -*- coding: utf-8 -*-
"""
Command line entry point.

Resolves the command from the command line words, parses its options with
argparse, validates them and runs the command. Returns a process exit code:
0 on success, 1 when validation or the command failed.
"""

import argparse
import os
import sys

from .commands import find_command, get_commands
from .config import parse_config
from .exceptions import CommandError
from .monitoring import print_request_summary, request_monitor
from .utils import is_debug_enabled

PROG = 'spo-cli'
OUTPUT_MODES = ['text', 'json']


class CommandArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports errors as CommandError instead of exiting"""

    def error(self, message):
        raise CommandError(message)


def print_error(message):
    print(f"[!] Error: {message}", file=sys.stderr)


def build_parser(command):
    """
    Build the argument parser for a command.

    Args:
        command (Command): The command

    Returns:
        CommandArgumentParser: Parser with the command's and the global options
    """
    description = command.description or ''
    aliases = command.alias()
    if aliases:
        description = f"{description}\n\nAlias: {', '.join(aliases)}"

    parser = CommandArgumentParser(
        prog=f'{PROG} {command.name}',
        description=description,
        epilog=command.help_text() or None,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    for option in command.options():
        option.add_to_parser(parser)

    parser.add_argument('-o', '--output', choices=OUTPUT_MODES, default='text',
                        help='Output type. Default text')
    parser.add_argument('--verbose', action='store_true', help='Runs command with verbose logging')
    parser.add_argument('--debug', action='store_true', help='Runs command with debug logging')
    return parser


def print_command_list(commands=None):
    commands = commands if commands is not None else get_commands()
    width = max(len(command.name) for command in commands)

    print(f"Usage: {PROG} <command> [options]")
    print("")
    print("Commands:")
    print("")
    for command in commands:
        print(f"  {command.name:<{width}}  {command.description}")
    print("")
    print(f"Run '{PROG} help <command>' or '{PROG} <command> --help' for more information on a command.")


def print_command_help(words):
    """
    Print the help of the command named by words, or the command list.

    Returns:
        int: Exit code
    """
    if not words:
        print_command_list()
        return 0

    command, remaining = find_command(words)
    if command is None or remaining:
        print_error(f"Unknown command: {' '.join(words)}")
        print_command_list()
        return 1

    print(build_parser(command).format_help())
    return 0


def run(argv=None):
    """
    Run the CLI.

    Args:
        argv (list): Command line arguments without the program name (sys.argv[1:] by default)

    Returns:
        int: Exit code
    """
    argv = sys.argv[1:] if argv is None else list(argv)

    if not argv or argv[0] in ('-h', '--help'):
        print_command_list()
        return 0

    if argv[0] == 'help':
        return print_command_help(argv[1:])

    command, remaining = find_command(argv)
    if command is None:
        print_error(f"Unknown command: {' '.join(argv)}")
        print_command_list()
        return 1

    parser = build_parser(command)
    try:
        args = parser.parse_args(remaining)
    except CommandError as e:
        print_error(e)
        print(parser.format_usage(), file=sys.stderr)
        return 1
    except SystemExit as e:
        # -h/--help prints the command help and exits
        return e.code or 0

    # Enable debug/verbose checks in utils.py while the command runs
    saved_switches = {name: os.environ.get(name) for name in ('DEBUG', 'VERBOSE')}
    if args.debug:
        os.environ['DEBUG'] = 'true'
    if args.verbose:
        os.environ['VERBOSE'] = 'true'

    try:
        return _run_command(command, args)
    finally:
        for name, value in saved_switches.items():
            if value is None:
                os.environ.pop(name, None)
            else:
                os.environ[name] = value


def _run_command(command, args):
    validation = command.validate(args)
    if validation is not True:
        print_error(validation)
        return 1

    try:
        config = parse_config()
    except ValueError as e:
        print_error(f"Invalid configuration: {e}")
        return 1

    request_monitor.reset()
    try:
        command.execute(args, config)
    except CommandError as e:
        print_error(e)
        return 1
    finally:
        if is_debug_enabled():
            print_request_summary()

    return 0


def main():
    sys.exit(run())
