#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SharePoint Online Admin CLI
===========================

PURPOSE:
    Administer SharePoint Online tenant settings from the command line:
    enable or disable the web app service principal, manage its permission
    grants and requests, the Office 365 CDN, theme settings and tenant
    properties.

SYNOPSIS:
    python main.py <command> [options]
    python main.py help <command>

EXAMPLES:
    python main.py spo connect https://contoso-admin.sharepoint.com
    python main.py spo serviceprincipal set --enabled true --confirm
    python main.py spo hidedefaultthemes get --output json
    python main.py spo disconnect

GLOBAL OPTIONS:
    -o, --output <text|json>
        Output type. Default text.

    --verbose
        Print progress messages.

    --debug
        Print every web request and response and a request summary.

ENVIRONMENT:
    SPO_CLI_CLIENT_ID, SPO_CLI_TENANT, SPO_CLI_LOGIN_ENDPOINT,
    SPO_CLI_CONFIG_DIR, SPO_CLI_TIMEOUT, SPO_CLI_APPLICATION_NAME
    (may also be set in a .env file in the working directory)

EXIT CODES:
    0 - Success
    1 - Invalid options, configuration or a failed command
"""

from spo_cli.cli import main


if __name__ == "__main__":
    main()
