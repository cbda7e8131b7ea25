# -*- coding: utf-8 -*-
"""
Names and aliases of all commands.
"""

PREFIX = 'spo'

CDN_GET = f'{PREFIX} cdn get'
CDN_SET = f'{PREFIX} cdn set'
CONNECT = f'{PREFIX} connect'
DISCONNECT = f'{PREFIX} disconnect'
HIDEDEFAULTTHEMES_GET = f'{PREFIX} hidedefaultthemes get'
HIDEDEFAULTTHEMES_SET = f'{PREFIX} hidedefaultthemes set'
SERVICEPRINCIPAL_GRANT_LIST = f'{PREFIX} serviceprincipal grant list'
SERVICEPRINCIPAL_GRANT_REVOKE = f'{PREFIX} serviceprincipal grant revoke'
SERVICEPRINCIPAL_PERMISSIONREQUEST_APPROVE = f'{PREFIX} serviceprincipal permissionrequest approve'
SERVICEPRINCIPAL_PERMISSIONREQUEST_DENY = f'{PREFIX} serviceprincipal permissionrequest deny'
SERVICEPRINCIPAL_PERMISSIONREQUEST_LIST = f'{PREFIX} serviceprincipal permissionrequest list'
SERVICEPRINCIPAL_SET = f'{PREFIX} serviceprincipal set'
STATUS = f'{PREFIX} status'
STORAGEENTITY_GET = f'{PREFIX} storageentity get'
STORAGEENTITY_LIST = f'{PREFIX} storageentity list'
STORAGEENTITY_REMOVE = f'{PREFIX} storageentity remove'
STORAGEENTITY_SET = f'{PREFIX} storageentity set'
TENANT_APPCATALOGURL_GET = f'{PREFIX} tenant appcatalogurl get'

# Aliases
SP_GRANT_LIST = f'{PREFIX} sp grant list'
SP_GRANT_REVOKE = f'{PREFIX} sp grant revoke'
SP_PERMISSIONREQUEST_APPROVE = f'{PREFIX} sp permissionrequest approve'
SP_PERMISSIONREQUEST_DENY = f'{PREFIX} sp permissionrequest deny'
SP_PERMISSIONREQUEST_LIST = f'{PREFIX} sp permissionrequest list'
SP_SET = f'{PREFIX} sp set'
