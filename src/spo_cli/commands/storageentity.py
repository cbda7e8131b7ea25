# -*- coding: utf-8 -*-
"""
Tenant property (storage entity) commands.

Storage entities are tenant-wide key/value properties stored on the root web
of the tenant app catalog. Reading uses the REST API of any site; writing
goes through the Tenant object on the tenant admin site.
"""

import json
from urllib.parse import quote

from ..command import CommandOption, SpoCommand
from ..exceptions import CommandError
from ..spo_api import TENANT_TYPE_ID
from ..utils import escape_xml, is_valid_sharepoint_url
from . import names
from .serviceprincipal import CONNECT_TO_ADMIN_SITE


def _app_catalog_object_paths(app_catalog_url):
    return (
        f'<Constructor Id="23" TypeId="{TENANT_TYPE_ID}" />'
        '<Method Id="25" ParentId="23" Name="GetSiteByUrl"><Parameters>'
        f'<Parameter Type="String">{escape_xml(app_catalog_url)}</Parameter>'
        '</Parameters></Method>'
        '<Property Id="27" ParentId="25" Name="RootWeb" />'
    )


def _validate_app_catalog_url(args):
    if not args.appCatalogUrl:
        return 'Required option appCatalogUrl missing'
    if not is_valid_sharepoint_url(args.appCatalogUrl):
        return f'{args.appCatalogUrl} is not a valid SharePoint Online site URL'
    return True


class SpoStorageEntityListCommand(SpoCommand):
    name = names.STORAGEENTITY_LIST
    description = 'Lists tenant properties stored on the specified SharePoint Online app catalog'

    def options(self):
        return [
            CommandOption('-u', '--appCatalogUrl', help='URL of the app catalog site')
        ]

    def validate(self, args):
        return _validate_app_catalog_url(args)

    def action(self, args):
        app_catalog_url = args.appCatalogUrl.rstrip('/')
        self.log_verbose(f'Retrieving details for app catalog {app_catalog_url}...')

        result = self.get_json(f'{app_catalog_url}/_api/web/AllProperties?$select=storageentitiesindex')
        index = result.get('storageentitiesindex')
        if not index:
            self.log_verbose('[=] No tenant properties found')
            return

        try:
            entities = json.loads(index)
        except ValueError:
            raise CommandError(f'Unable to parse tenant properties: {index[:200]}')

        if not entities:
            self.log_verbose('[=] No tenant properties found')
            return

        self.log([
            {
                'Key': key,
                'Value': entity.get('Value'),
                'Description': entity.get('Description'),
                'Comment': entity.get('Comment')
            }
            for key, entity in entities.items()
        ])

    def help_text(self):
        return f"""Remarks:

  Tenant properties are stored in the app catalog site. To list all tenant
  properties, you have to specify the absolute URL of the app catalog site.
  If you specify the URL of a site different than the app catalog, you will
  get an access denied error. Use {names.TENANT_APPCATALOGURL_GET} to find it.

Examples:

  List all tenant properties stored in the https://contoso.sharepoint.com/sites/appcatalog app catalog site
    spo-cli {names.STORAGEENTITY_LIST} -u https://contoso.sharepoint.com/sites/appcatalog
"""


class SpoStorageEntityGetCommand(SpoCommand):
    name = names.STORAGEENTITY_GET
    description = 'Get details for the specified tenant property'

    def options(self):
        return [
            CommandOption('-k', '--key', help='Name of the tenant property to retrieve')
        ]

    def validate(self, args):
        if not args.key:
            return 'Required option key missing'
        return True

    def action(self, args):
        # Single quotes are doubled inside OData string literals
        key = quote(args.key.replace("'", "''"), safe='')
        result = self.get_json(f"{self.connection.url}/_api/web/GetStorageEntity('{key}')")

        if result.get('odata.null'):
            self.log_verbose(f'[!] Property with key {args.key} not found')
            return

        self.log({
            'Key': args.key,
            'Value': result.get('Value'),
            'Description': result.get('Description'),
            'Comment': result.get('Comment')
        })

    def help_text(self):
        return f"""Remarks:

  Tenant properties are stored in the app catalog site associated with the
  site to which you are currently connected. When retrieving the specified
  tenant property, SharePoint will automatically find the associated app
  catalog and try to retrieve the property from it.

Examples:

  Show the value, description and comment of the AnalyticsId tenant property
    spo-cli {names.STORAGEENTITY_GET} -k AnalyticsId
"""


class SpoStorageEntitySetCommand(SpoCommand):
    name = names.STORAGEENTITY_SET
    description = 'Sets tenant property on the specified SharePoint Online app catalog'

    def requires_tenant_admin(self):
        return True

    def options(self):
        return [
            CommandOption('-u', '--appCatalogUrl', help='URL of the app catalog site'),
            CommandOption('-k', '--key', help='Name of the tenant property to set'),
            CommandOption('-v', '--value', help='Value to set for the property'),
            CommandOption('-d', '--description', help='Description to set for the property (optional)'),
            CommandOption('-c', '--comment', help='Comment to set for the property (optional)')
        ]

    def validate(self, args):
        result = _validate_app_catalog_url(args)
        if result is not True:
            return result
        if not args.key:
            return 'Required option key missing'
        if args.value is None:
            return 'Required option value missing'
        return True

    def action(self, args):
        actions = (
            '<ObjectPath Id="24" ObjectPathId="23" />'
            '<ObjectPath Id="26" ObjectPathId="25" />'
            '<ObjectPath Id="28" ObjectPathId="27" />'
            '<Method Name="SetStorageEntity" Id="29" ObjectPathId="27"><Parameters>'
            f'<Parameter Type="String">{escape_xml(args.key)}</Parameter>'
            f'<Parameter Type="String">{escape_xml(args.value)}</Parameter>'
            f'<Parameter Type="String">{escape_xml(args.description or "")}</Parameter>'
            f'<Parameter Type="String">{escape_xml(args.comment or "")}</Parameter>'
            '</Parameters></Method>'
        )

        self.process_query(actions, _app_catalog_object_paths(args.appCatalogUrl.rstrip('/')),
                           progress=f'Setting tenant property {args.key} in {args.appCatalogUrl}...')
        self.log_done()

    def help_text(self):
        return f"""{CONNECT_TO_ADMIN_SITE}
Remarks:

  Tenant properties are stored in the app catalog site. If the property
  already exists, its value, description and comment are overwritten.

Examples:

  Set AnalyticsId tenant property in the https://contoso.sharepoint.com/sites/appcatalog app catalog site
    spo-cli {names.STORAGEENTITY_SET} -u https://contoso.sharepoint.com/sites/appcatalog -k AnalyticsId -v 123 -d "Web analytics ID" -c "Use on all sites"
"""


class SpoStorageEntityRemoveCommand(SpoCommand):
    name = names.STORAGEENTITY_REMOVE
    description = 'Removes tenant property stored on the specified SharePoint Online app catalog'

    def requires_tenant_admin(self):
        return True

    def options(self):
        return [
            CommandOption('-u', '--appCatalogUrl', help='URL of the app catalog site'),
            CommandOption('-k', '--key', help='Name of the tenant property to remove'),
            CommandOption('--confirm', is_flag=True, help="Don't prompt for confirming removal of a tenant property")
        ]

    def validate(self, args):
        result = _validate_app_catalog_url(args)
        if result is not True:
            return result
        if not args.key:
            return 'Required option key missing'
        return True

    def action(self, args):
        if not self.confirm(args, f"Are you sure you want to delete the {args.key} tenant property?"):
            return

        actions = (
            '<ObjectPath Id="24" ObjectPathId="23" />'
            '<ObjectPath Id="26" ObjectPathId="25" />'
            '<ObjectPath Id="28" ObjectPathId="27" />'
            '<Method Name="RemoveStorageEntity" Id="29" ObjectPathId="27"><Parameters>'
            f'<Parameter Type="String">{escape_xml(args.key)}</Parameter>'
            '</Parameters></Method>'
        )

        self.process_query(actions, _app_catalog_object_paths(args.appCatalogUrl.rstrip('/')),
                           progress=f'Removing tenant property {args.key} from {args.appCatalogUrl}...')
        self.log_done()

    def help_text(self):
        return f"""{CONNECT_TO_ADMIN_SITE}
Examples:

  Remove the AnalyticsId tenant property. Will prompt for confirmation
    spo-cli {names.STORAGEENTITY_REMOVE} -u https://contoso.sharepoint.com/sites/appcatalog -k AnalyticsId

  Remove the AnalyticsId tenant property without prompting for confirmation
    spo-cli {names.STORAGEENTITY_REMOVE} -u https://contoso.sharepoint.com/sites/appcatalog -k AnalyticsId --confirm
"""
