# -*- coding: utf-8 -*-
"""
Command framework for SharePoint Online admin commands.

Every command is a small class: it declares its name, options and
validation, and implements action(). SpoCommand adds the SharePoint plumbing
shared by all commands (connection checks, access token, request digest and
ProcessQuery execution).
"""

from . import auth
from . import spo_api
from .exceptions import CommandError
from .utils import confirm, format_output, is_debug_enabled, is_tenant_admin_url, is_verbose_enabled


class CommandOption:
    """
    A command line option.

    Args:
        flags (tuple): Option strings (e.g. ('-e', '--enabled')) or a positional name
        help (str): Description shown in the command help
        autocomplete (list): Allowed values, listed in the help
        is_flag (bool): True for switches without a value (e.g. --confirm)
        metavar (str): Placeholder for the value in the usage line
    """

    def __init__(self, *flags, help='', autocomplete=None, is_flag=False, metavar=None):
        self.flags = flags
        self.help = help
        self.autocomplete = autocomplete
        self.is_flag = is_flag
        self.metavar = metavar

    @property
    def is_positional(self):
        return not self.flags[0].startswith('-')

    def add_to_parser(self, parser):
        """Register the option on an argparse parser"""
        help_text = self.help
        if self.autocomplete:
            help_text = f"{help_text} Allowed values: {'|'.join(self.autocomplete)}"

        if self.is_positional:
            parser.add_argument(self.flags[0], nargs='?', help=help_text, metavar=self.metavar)
        elif self.is_flag:
            parser.add_argument(*self.flags, action='store_true', help=help_text)
        else:
            # Required values and allowed values are checked in validate()
            # so the user gets the command's own error message
            parser.add_argument(*self.flags, help=help_text, metavar=self.metavar)


class Command:
    """Base class for all commands"""

    name = None
    description = None

    def __init__(self):
        self.config = None
        self.output = 'text'

    def alias(self):
        """Alternative names for the command"""
        return []

    def options(self):
        """Options specific to the command (global options are added by the CLI)"""
        return []

    def validate(self, args):
        """
        Validate parsed options before anything is sent to SharePoint.

        Returns:
            True when the options are valid, an error message otherwise
        """
        return True

    def help_text(self):
        """Remarks and examples appended to the command help"""
        return ''

    def requires_tenant_admin(self):
        return False

    @property
    def debug(self):
        return is_debug_enabled()

    @property
    def verbose(self):
        return is_verbose_enabled()

    def execute(self, args, config):
        """
        Run the command.

        Args:
            args (argparse.Namespace): Parsed and validated options
            config (Config): Configuration
        """
        self.config = config
        self.output = getattr(args, 'output', None) or 'text'
        self.action(args)

    def action(self, args):
        raise NotImplementedError

    def log(self, value):
        """Print command output in the selected output mode"""
        print(format_output(value, self.output))

    def log_verbose(self, message):
        if self.verbose:
            print(message)

    def log_done(self):
        if self.verbose:
            print("[✓] DONE")

    def confirm(self, args, message):
        """
        Ask for confirmation unless --confirm was passed.

        Returns:
            bool: True when the command may continue
        """
        if getattr(args, 'confirm', False):
            return True
        return confirm(message)


class SpoCommand(Command):
    """Base class for commands that talk to SharePoint Online"""

    def __init__(self):
        super().__init__()
        self.connection = None

    def execute(self, args, config):
        self.config = config
        self.ensure_connected()
        super().execute(args, config)

    def ensure_connected(self):
        """
        Load the stored connection and check it fits the command.

        Raises:
            CommandError: If not connected, or the command needs a tenant admin
                site and the connection is to another site
        """
        connection = auth.Connection.load(self.config)
        if not connection.connected:
            raise CommandError("Connect to a SharePoint Online site first")

        if self.requires_tenant_admin() and not is_tenant_admin_url(connection.url):
            raise CommandError(
                f"{connection.url} is not a tenant admin site. "
                f"Connect to your tenant admin site (https://<tenant>-admin.sharepoint.com) and try again"
            )

        self.connection = connection

    def get_access_token(self, site_url=None):
        resource = auth.get_resource(site_url or self.connection.url)
        return auth.ensure_access_token(resource, self.config, self.connection)

    def get_request_digest(self, site_url=None):
        """
        Get a fresh request digest for a site (the connected site by default).

        Returns:
            str: FormDigestValue
        """
        site_url = site_url or self.connection.url
        access_token = self.get_access_token(site_url)
        if self.debug:
            print("[DEBUG] Retrieved access token. Getting request digest...")
        context_info = spo_api.get_request_digest(site_url, access_token, self.config)
        return context_info['FormDigestValue']

    def process_query(self, actions, object_paths, progress=None):
        """
        Execute a ProcessQuery request against the connected site.

        Args:
            actions (str): XML content of <Actions>
            object_paths (str): XML content of <ObjectPaths>
            progress (str): Verbose message printed right before the request

        Returns:
            list: Parsed response without ErrorInfo

        Raises:
            CommandError: If SharePoint returns ErrorInfo
        """
        site_url = self.connection.url
        request_digest = self.get_request_digest(site_url)
        if progress:
            self.log_verbose(progress)

        body = spo_api.build_process_query(actions, object_paths, self.config.application_name)
        return spo_api.execute_process_query(
            site_url, self.get_access_token(site_url), request_digest, body, self.config
        )

    def get_json(self, url):
        """GET a REST endpoint on the site the URL belongs to"""
        access_token = self.get_access_token(url)
        return spo_api.get_json(url, access_token, self.config)

    def post_json(self, url, json_data=None):
        """POST a JSON body to a REST endpoint on the site the URL belongs to"""
        access_token = self.get_access_token(url)
        return spo_api.post_json(url, access_token, self.config, json_data=json_data)
