# -*- coding: utf-8 -*-
"""
Tenant settings commands.

CDN settings are read and written through the Tenant client object
(ProcessQuery on the tenant admin site). HideDefaultThemes goes through the
theme manager REST endpoints and the app catalog URL comes from
SP_TenantSettings_Current.
"""

from ..command import CommandOption, SpoCommand
from ..spo_api import TENANT_TYPE_ID
from ..utils import parse_bool_option
from . import names
from .serviceprincipal import CONNECT_TO_ADMIN_SITE

TENANT_OBJECT_PATH = f'<Constructor Id="1" TypeId="{TENANT_TYPE_ID}" />'

# SPOTenantCdnType enum values
CDN_TYPES = {
    'Public': 0,
    'Private': 1
}


class SpoHideDefaultThemesGetCommand(SpoCommand):
    name = names.HIDEDEFAULTTHEMES_GET
    description = 'Gets the current value of the HideDefaultThemes setting'

    def requires_tenant_admin(self):
        return True

    def action(self, args):
        self.log_verbose('Getting the current value of the HideDefaultThemes setting...')
        result = self.post_json(f'{self.connection.url}/_api/thememanager/GetHideDefaultThemes')
        self.log(result.get('value'))

    def help_text(self):
        return f"""{CONNECT_TO_ADMIN_SITE}
Remarks:

  When HideDefaultThemes is true, the default SharePoint themes are hidden
  in the theme picker and only custom themes are offered to users.

Examples:

  Get the current value of the HideDefaultThemes setting
    spo-cli {names.HIDEDEFAULTTHEMES_GET}
"""


class SpoHideDefaultThemesSetCommand(SpoCommand):
    name = names.HIDEDEFAULTTHEMES_SET
    description = 'Sets the value of the HideDefaultThemes setting'

    def requires_tenant_admin(self):
        return True

    def options(self):
        return [
            CommandOption('--hideDefaultThemes',
                          help='Set to true to hide default themes and to false to show them.',
                          autocomplete=['true', 'false'])
        ]

    def validate(self, args):
        if not args.hideDefaultThemes:
            return 'Required option hideDefaultThemes missing'

        if parse_bool_option(args.hideDefaultThemes) is None:
            return f'{args.hideDefaultThemes} is not a valid boolean value. Allowed values are true|false'

        return True

    def action(self, args):
        hide = parse_bool_option(args.hideDefaultThemes)
        self.log_verbose(f'Setting the value of the HideDefaultThemes setting to {"true" if hide else "false"}...')
        self.post_json(f'{self.connection.url}/_api/thememanager/SetHideDefaultThemes',
                       json_data={'hideDefaultThemes': hide})
        self.log_done()

    def help_text(self):
        return f"""{CONNECT_TO_ADMIN_SITE}
Examples:

  Hide the default SharePoint themes
    spo-cli {names.HIDEDEFAULTTHEMES_SET} --hideDefaultThemes true

  Show the default SharePoint themes
    spo-cli {names.HIDEDEFAULTTHEMES_SET} --hideDefaultThemes false
"""


def _validate_cdn_type(value):
    if value and value not in CDN_TYPES:
        return f"{value} is not a valid CDN type. Allowed values are {'|'.join(CDN_TYPES)}"
    return True


class SpoCdnGetCommand(SpoCommand):
    name = names.CDN_GET
    description = 'View current status of the specified Office 365 CDN'

    def requires_tenant_admin(self):
        return True

    def options(self):
        return [
            CommandOption('-t', '--type', help='Type of CDN to manage. Default Public.',
                          autocomplete=list(CDN_TYPES))
        ]

    def validate(self, args):
        return _validate_cdn_type(args.type)

    def action(self, args):
        cdn_type = args.type or 'Public'
        actions = (
            '<ObjectPath Id="2" ObjectPathId="1" />'
            '<Method Name="GetTenantCdnEnabled" Id="3" ObjectPathId="1"><Parameters>'
            f'<Parameter Type="Enum">{CDN_TYPES[cdn_type]}</Parameter>'
            '</Parameters></Method>'
        )

        response = self.process_query(actions, TENANT_OBJECT_PATH,
                                      progress=f'Retrieving status of {cdn_type} CDN...')
        enabled = response[-1] is True
        if self.verbose:
            print(f"[=] {cdn_type} CDN at {self.connection.url} is {'enabled' if enabled else 'disabled'}")
        self.log(enabled)

    def help_text(self):
        return f"""{CONNECT_TO_ADMIN_SITE}
Remarks:

  Using the -t, --type option you can choose whether you want to manage the
  settings of the Public (default) or Private CDN.

Examples:

  Show if the Public CDN is currently enabled or not
    spo-cli {names.CDN_GET}

  Show if the Private CDN is currently enabled or not
    spo-cli {names.CDN_GET} --type Private
"""


class SpoCdnSetCommand(SpoCommand):
    name = names.CDN_SET
    description = 'Enable or disable the specified Office 365 CDN'

    def requires_tenant_admin(self):
        return True

    def options(self):
        return [
            CommandOption('-e', '--enabled', help='Set to true to enable CDN or to false to disable it.',
                          autocomplete=['true', 'false']),
            CommandOption('-t', '--type', help='Type of CDN to manage. Default Public.',
                          autocomplete=list(CDN_TYPES))
        ]

    def validate(self, args):
        if not args.enabled:
            return 'Required option enabled missing'

        if parse_bool_option(args.enabled) is None:
            return f'{args.enabled} is not a valid boolean value. Allowed values are true|false'

        return _validate_cdn_type(args.type)

    def action(self, args):
        cdn_type = args.type or 'Public'
        enabled = parse_bool_option(args.enabled)
        actions = (
            '<ObjectPath Id="2" ObjectPathId="1" />'
            '<Method Name="SetTenantCdnEnabled" Id="3" ObjectPathId="1"><Parameters>'
            f'<Parameter Type="Enum">{CDN_TYPES[cdn_type]}</Parameter>'
            f'<Parameter Type="Boolean">{"true" if enabled else "false"}</Parameter>'
            '</Parameters></Method>'
        )

        self.process_query(actions, TENANT_OBJECT_PATH,
                           progress=f"{'Enabling' if enabled else 'Disabling'} {cdn_type} CDN...")
        self.log_done()

    def help_text(self):
        return f"""{CONNECT_TO_ADMIN_SITE}
Remarks:

  Using the -e, --enabled option you can specify whether the given CDN type
  should be enabled or disabled. Use true to enable the specified CDN and
  false to disable it.

  After enabling the CDN, it takes up to 15 minutes before files are
  served from it.

Examples:

  Enable the Public CDN
    spo-cli {names.CDN_SET} --type Public --enabled true

  Disable the Private CDN
    spo-cli {names.CDN_SET} --type Private --enabled false
"""


class SpoTenantAppCatalogUrlGetCommand(SpoCommand):
    name = names.TENANT_APPCATALOGURL_GET
    description = 'Gets the URL of the tenant app catalog'

    def action(self, args):
        self.log_verbose('Retrieving tenant settings...')
        settings = self.get_json(f'{self.connection.url}/_api/SP_TenantSettings_Current')

        app_catalog_url = settings.get('CorporateCatalogUrl')
        if app_catalog_url:
            self.log(app_catalog_url)
        elif self.verbose:
            print('[!] Tenant app catalog is not configured')

    def help_text(self):
        return f"""Remarks:

  This command can be run against any SharePoint Online site of the tenant.
  When no tenant app catalog has been created, nothing is printed.

Examples:

  Get the URL of the tenant app catalog
    spo-cli {names.TENANT_APPCATALOGURL_GET}
"""
