# -*- coding: utf-8 -*-
"""
Connection commands: connect, disconnect and status.
"""

from .. import auth
from ..command import Command, CommandOption
from ..utils import is_tenant_admin_url, is_valid_sharepoint_url
from . import names


class SpoConnectCommand(Command):
    name = names.CONNECT
    description = 'Connects to a SharePoint Online site'

    def options(self):
        return [
            CommandOption('url', help='Absolute URL of the SharePoint Online site to connect to'),
            CommandOption('--authType', help='Method used to sign in. Default deviceCode.',
                          autocomplete=auth.AUTH_TYPES),
            CommandOption('-u', '--userName', help='Name of the user to sign in with. Required for password authentication'),
            CommandOption('-p', '--password', help='Password of the user. Required for password authentication')
        ]

    def validate(self, args):
        if not args.url:
            return 'Required argument url missing'

        if not is_valid_sharepoint_url(args.url):
            return f'{args.url} is not a valid SharePoint Online site URL'

        auth_type = args.authType or auth.AUTH_TYPE_DEVICE_CODE
        if auth_type not in auth.AUTH_TYPES:
            return f"{args.authType} is not a valid authentication type. Allowed values are {'|'.join(auth.AUTH_TYPES)}"

        if auth_type == auth.AUTH_TYPE_PASSWORD:
            if not args.userName:
                return 'Required option userName missing'
            if not args.password:
                return 'Required option password missing'

        return True

    def action(self, args):
        auth_type = args.authType or auth.AUTH_TYPE_DEVICE_CODE

        # Tokens of a previous connection belong to another account or tenant
        auth.access_token_cache.clear()

        self.log_verbose(f"Connecting to SharePoint Online at {args.url}...")
        connection = auth.login(args.url, self.config, auth_type=auth_type,
                                user_name=args.userName, password=args.password)

        if self.verbose:
            print(f"[✓] Connected to {connection.url}")
            if is_tenant_admin_url(connection.url):
                print("[=] Connected to the tenant admin site")
        self.log_done()

    def help_text(self):
        return f"""Remarks:

  Using the {names.CONNECT} command you can connect to any SharePoint Online
  site. Depending on the command you want to use, you might be required to
  connect to a SharePoint Online tenant admin site (suffixed with -admin,
  eg. https://contoso-admin.sharepoint.com) or a regular site.

  By default the device code flow is used: the command prints a code that
  you enter at https://microsoft.com/devicelogin to sign in. Use
  --authType password to sign in with a user name and password. Password
  authentication does not support multi-factor authentication.

  The connection is stored in the configuration directory (~/.spo-cli by
  default, see SPO_CLI_CONFIG_DIR) and reused by subsequent commands until
  you run {names.DISCONNECT}.

Examples:

  Connect to a SharePoint Online tenant admin site
    spo-cli {names.CONNECT} https://contoso-admin.sharepoint.com

  Connect to a regular SharePoint Online site using a user name and password
    spo-cli {names.CONNECT} https://contoso.sharepoint.com/sites/team --authType password --userName john@contoso.com --password pass@word1
"""


class SpoDisconnectCommand(Command):
    name = names.DISCONNECT
    description = 'Disconnects from a previously connected SharePoint Online site'

    def action(self, args):
        self.log_verbose("Disconnecting from SharePoint Online...")
        auth.logout(self.config)
        self.log_done()

    def help_text(self):
        return f"""Remarks:

  The {names.DISCONNECT} command removes the stored connection and all
  cached access tokens. You have to connect again before running other
  SharePoint Online commands.

Examples:

  Disconnect from SharePoint Online
    spo-cli {names.DISCONNECT}
"""


class SpoStatusCommand(Command):
    name = names.STATUS
    description = 'Shows SharePoint Online site connection status'

    def action(self, args):
        connection = auth.Connection.load(self.config)
        if not connection.connected:
            self.log('Not connected to SharePoint Online')
            return

        if self.output == 'json':
            self.log({'connectedAs': connection.user_name, 'url': connection.url})
        else:
            self.log(f'Connected to {connection.url}')
            if self.verbose and connection.user_name:
                print(f'[=] Signed in as {connection.user_name}')

    def help_text(self):
        return f"""Remarks:

  If you are connected to a SharePoint Online site, the {names.STATUS}
  command shows the URL of the site you are connected to.

Examples:

  Show the information about the current connection to SharePoint Online
    spo-cli {names.STATUS}
"""
