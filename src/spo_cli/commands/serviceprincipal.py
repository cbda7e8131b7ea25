# -*- coding: utf-8 -*-
"""
Service principal commands.

The SharePoint Online web app service principal is the Azure AD application
SharePoint Framework solutions use to call APIs. These commands enable or
disable it and manage its permission grants and pending permission requests
through client.svc ProcessQuery calls on the tenant admin site.
"""

from ..command import CommandOption, SpoCommand
from ..spo_api import SERVICE_PRINCIPAL_TYPE_ID, child_items, strip_object_type
from ..utils import escape_xml, is_valid_guid, parse_bool_option
from . import names

CONNECT_TO_ADMIN_SITE = f"""Important: before using this command, connect to a SharePoint Online tenant
admin site, using the {names.CONNECT} command, eg.
spo-cli {names.CONNECT} https://contoso-admin.sharepoint.com.
"""


class SpoServicePrincipalSetCommand(SpoCommand):
    name = names.SERVICEPRINCIPAL_SET
    description = 'Enable or disable the service principal'

    def alias(self):
        return [names.SP_SET]

    def requires_tenant_admin(self):
        return True

    def options(self):
        return [
            CommandOption('-e', '--enabled',
                          help='Set to true to enable the service principal or to false to disable it.',
                          autocomplete=['true', 'false']),
            CommandOption('--confirm', is_flag=True,
                          help="Don't prompt for confirming enabling/disabling the service principal")
        ]

    def validate(self, args):
        if not args.enabled:
            return 'Required option enabled missing'

        if parse_bool_option(args.enabled) is None:
            return f'{args.enabled} is not a valid boolean value. Allowed values are true|false'

        return True

    def action(self, args):
        enabled = parse_bool_option(args.enabled)

        if not self.confirm(args, f"Are you sure you want to {'enable' if enabled else 'disable'} the service principal?"):
            return

        actions = (
            '<ObjectPath Id="28" ObjectPathId="27" />'
            '<SetProperty Id="29" ObjectPathId="27" Name="AccountEnabled">'
            f'<Parameter Type="Boolean">{"true" if enabled else "false"}</Parameter>'
            '</SetProperty>'
            '<Method Name="Update" Id="30" ObjectPathId="27" />'
            '<Query Id="31" ObjectPathId="27"><Query SelectAllProperties="true"><Properties>'
            '<Property Name="AccountEnabled" ScalarProperty="true" />'
            '</Properties></Query></Query>'
        )
        object_paths = f'<Constructor Id="27" TypeId="{SERVICE_PRINCIPAL_TYPE_ID}" />'

        response = self.process_query(
            actions, object_paths,
            progress=f"{'Enabling' if enabled else 'Disabling'} service principal..."
        )
        self.log(strip_object_type(response[-1]))
        self.log_done()

    def help_text(self):
        return f"""{CONNECT_TO_ADMIN_SITE}
Remarks:

  Using the -e, --enabled option you can specify whether the service
  principal should be enabled or disabled. Use true to enable the service
  principal and false to disable it.

Examples:

  Enable the service principal. Will prompt for confirmation
    spo-cli {names.SERVICEPRINCIPAL_SET} --enabled true

  Disable the service principal. Will prompt for confirmation
    spo-cli {names.SERVICEPRINCIPAL_SET} --enabled false

  Enable the service principal without prompting for confirmation
    spo-cli {names.SERVICEPRINCIPAL_SET} --enabled true --confirm
"""


class SpoServicePrincipalGrantListCommand(SpoCommand):
    name = names.SERVICEPRINCIPAL_GRANT_LIST
    description = 'Lists permissions granted to the service principal'

    def alias(self):
        return [names.SP_GRANT_LIST]

    def requires_tenant_admin(self):
        return True

    def action(self, args):
        actions = (
            '<ObjectPath Id="4" ObjectPathId="3" />'
            '<Query Id="5" ObjectPathId="3">'
            '<Query SelectAllProperties="true"><Properties /></Query>'
            '<ChildItemQuery SelectAllProperties="true"><Properties /></ChildItemQuery>'
            '</Query>'
        )
        object_paths = (
            '<Property Id="3" ParentId="1" Name="PermissionGrants" />'
            f'<Constructor Id="1" TypeId="{SERVICE_PRINCIPAL_TYPE_ID}" />'
        )

        response = self.process_query(actions, object_paths, progress='Retrieving permission grants...')
        self.log(child_items(response[-1]))

    def help_text(self):
        return f"""{CONNECT_TO_ADMIN_SITE}
Examples:

  List all permissions granted to the service principal
    spo-cli {names.SERVICEPRINCIPAL_GRANT_LIST}
"""


class SpoServicePrincipalGrantRevokeCommand(SpoCommand):
    name = names.SERVICEPRINCIPAL_GRANT_REVOKE
    description = 'Revokes the specified set of permissions granted to the service principal'

    def alias(self):
        return [names.SP_GRANT_REVOKE]

    def requires_tenant_admin(self):
        return True

    def options(self):
        return [
            CommandOption('-i', '--grantId',
                          help=f'ObjectId of the permission grant to revoke (see {names.SERVICEPRINCIPAL_GRANT_LIST})'),
            CommandOption('--confirm', is_flag=True,
                          help="Don't prompt for confirming revoking the permission grant")
        ]

    def validate(self, args):
        if not args.grantId:
            return 'Required option grantId missing'
        return True

    def action(self, args):
        if not self.confirm(args, f"Are you sure you want to revoke the permission grant {args.grantId}?"):
            return

        actions = '<Method Name="DeleteObject" Id="7" ObjectPathId="5" />'
        object_paths = (
            f'<Constructor Id="1" TypeId="{SERVICE_PRINCIPAL_TYPE_ID}" />'
            '<Property Id="3" ParentId="1" Name="PermissionGrants" />'
            '<Method Id="5" ParentId="3" Name="GetByObjectId"><Parameters>'
            f'<Parameter Type="String">{escape_xml(args.grantId)}</Parameter>'
            '</Parameters></Method>'
        )

        self.process_query(actions, object_paths, progress=f'Revoking permission grant {args.grantId}...')
        self.log_done()

    def help_text(self):
        return f"""{CONNECT_TO_ADMIN_SITE}
Remarks:

  When revoking a permission grant, the permission is removed from the
  service principal, but the grant request itself is not removed. Use the
  {names.SERVICEPRINCIPAL_GRANT_LIST} command to get the ObjectId of the
  grant to revoke.

Examples:

  Revoke the permission grant with ObjectId 50NAzUm3C0K9B6p8ORLtIsQccg4rMERGvFGRtBsk2fA
    spo-cli {names.SERVICEPRINCIPAL_GRANT_REVOKE} --grantId 50NAzUm3C0K9B6p8ORLtIsQccg4rMERGvFGRtBsk2fA
"""


class SpoServicePrincipalPermissionRequestListCommand(SpoCommand):
    name = names.SERVICEPRINCIPAL_PERMISSIONREQUEST_LIST
    description = 'Lists pending permission requests'

    def alias(self):
        return [names.SP_PERMISSIONREQUEST_LIST]

    def requires_tenant_admin(self):
        return True

    def action(self, args):
        actions = (
            '<ObjectPath Id="16" ObjectPathId="15" />'
            '<Query Id="17" ObjectPathId="15">'
            '<Query SelectAllProperties="true"><Properties /></Query>'
            '<ChildItemQuery SelectAllProperties="true"><Properties /></ChildItemQuery>'
            '</Query>'
        )
        object_paths = (
            '<Property Id="15" ParentId="13" Name="PermissionRequests" />'
            f'<Constructor Id="13" TypeId="{SERVICE_PRINCIPAL_TYPE_ID}" />'
        )

        response = self.process_query(actions, object_paths, progress='Retrieving permission requests...')
        self.log(child_items(response[-1]))

    def help_text(self):
        return f"""{CONNECT_TO_ADMIN_SITE}
Remarks:

  Permission requests are added when SharePoint Framework solutions that
  request API permissions are deployed to the tenant app catalog.

Examples:

  List all pending permission requests
    spo-cli {names.SERVICEPRINCIPAL_PERMISSIONREQUEST_LIST}
"""


def _permission_request_object_paths(request_id):
    # Guid parameters are sent wrapped in braces
    guid = '{' + request_id.strip('{}') + '}'
    return (
        f'<Constructor Id="1" TypeId="{SERVICE_PRINCIPAL_TYPE_ID}" />'
        '<Property Id="3" ParentId="1" Name="PermissionRequests" />'
        '<Method Id="5" ParentId="3" Name="GetById"><Parameters>'
        f'<Parameter Type="Guid">{guid}</Parameter>'
        '</Parameters></Method>'
    )


def _validate_request_id(args):
    if not args.requestId:
        return 'Required option requestId missing'
    if not is_valid_guid(args.requestId):
        return f'{args.requestId} is not a valid GUID'
    return True


class SpoServicePrincipalPermissionRequestApproveCommand(SpoCommand):
    name = names.SERVICEPRINCIPAL_PERMISSIONREQUEST_APPROVE
    description = 'Approves the specified permission request'

    def alias(self):
        return [names.SP_PERMISSIONREQUEST_APPROVE]

    def requires_tenant_admin(self):
        return True

    def options(self):
        return [
            CommandOption('-i', '--requestId',
                          help=f'ID of the permission request to approve (see {names.SERVICEPRINCIPAL_PERMISSIONREQUEST_LIST})')
        ]

    def validate(self, args):
        return _validate_request_id(args)

    def action(self, args):
        actions = (
            '<ObjectPath Id="10" ObjectPathId="9" />'
            '<Query Id="11" ObjectPathId="9"><Query SelectAllProperties="true"><Properties /></Query></Query>'
        )
        object_paths = (
            _permission_request_object_paths(args.requestId) +
            '<Method Id="9" ParentId="5" Name="Approve" />'
        )

        response = self.process_query(actions, object_paths,
                                      progress=f'Approving permission request {args.requestId}...')
        self.log(strip_object_type(response[-1]))
        self.log_done()

    def help_text(self):
        return f"""{CONNECT_TO_ADMIN_SITE}
Remarks:

  Approving a permission request grants the requested permission to the
  service principal. The command prints the resulting permission grant.

Examples:

  Approve permission request with id 4dc4c043-25ee-40f2-81d3-b3bf63da7538
    spo-cli {names.SERVICEPRINCIPAL_PERMISSIONREQUEST_APPROVE} --requestId 4dc4c043-25ee-40f2-81d3-b3bf63da7538
"""


class SpoServicePrincipalPermissionRequestDenyCommand(SpoCommand):
    name = names.SERVICEPRINCIPAL_PERMISSIONREQUEST_DENY
    description = 'Denies the specified permission request'

    def alias(self):
        return [names.SP_PERMISSIONREQUEST_DENY]

    def requires_tenant_admin(self):
        return True

    def options(self):
        return [
            CommandOption('-i', '--requestId',
                          help=f'ID of the permission request to deny (see {names.SERVICEPRINCIPAL_PERMISSIONREQUEST_LIST})')
        ]

    def validate(self, args):
        return _validate_request_id(args)

    def action(self, args):
        actions = '<Method Name="Deny" Id="7" ObjectPathId="5" />'

        self.process_query(actions, _permission_request_object_paths(args.requestId),
                           progress=f'Denying permission request {args.requestId}...')
        self.log_done()

    def help_text(self):
        return f"""{CONNECT_TO_ADMIN_SITE}
Remarks:

  Denying a permission request removes it from the list of pending
  permission requests.

Examples:

  Deny permission request with id 4dc4c043-25ee-40f2-81d3-b3bf63da7538
    spo-cli {names.SERVICEPRINCIPAL_PERMISSIONREQUEST_DENY} --requestId 4dc4c043-25ee-40f2-81d3-b3bf63da7538
"""
