# Copyright (C) 2024 Red Hat, Inc.
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

import logging

from .allowlist import is_allowed
from .base import AccountLookup, ActorContext, GateError, RepositoryRef
from .jsonutil import get_str

logger = logging.getLogger(__name__)

# the legacy `permission` field; 'maintain' and 'triage' don't count
WRITE_LEVELS = frozenset({'admin', 'write'})


class PermissionCheckFailed(GateError):
    def __init__(self, actor: str, cause: BaseException):
        super().__init__(f'Failed to check permissions for {actor}: {cause}')
        self.actor = actor


async def check_write_permissions(api: AccountLookup, context: ActorContext, repository: RepositoryRef) -> bool:
    """Does the actor have write access to the repository?

    Returns False for a successfully determined but insufficient permission
    level.  Raises PermissionCheckFailed only if the level could not be
    determined at all.
    """
    actor = context.actor
    logger.info('Checking permissions for actor: %s', actor)

    if is_allowed(actor, context.allowed_actors):
        logger.info('Actor %s is in the allowed actors list, bypassing permission check', actor)
        return True

    logger.info('Actor %s not in allowed list, checking repository permissions', actor)
    try:
        response = await api.get_collaborator_permission(repository.owner, repository.repo, actor)
        permission = get_str(response, 'permission')
    except Exception as exc:
        logger.error('Failed to check permissions: %s', exc)
        raise PermissionCheckFailed(actor, exc) from exc

    logger.info('Permission level retrieved: %s', permission)

    if permission in WRITE_LEVELS:
        logger.info('Actor has write access: %s', permission)
        return True

    logger.warning('Actor has insufficient permissions: %s', permission)
    return False
