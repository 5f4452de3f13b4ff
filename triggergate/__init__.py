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

"""Gate GitHub Actions workflows on the triggering actor being a human with write access"""

from .actor import NonHumanActor, check_human_actor
from .base import AccountLookup, ActorContext, GateError, RepositoryRef
from .context import (
    InvalidRepositoryOverride,
    parse_additional_permissions,
    parse_multiline_input,
    parse_repository_override,
)
from .permissions import PermissionCheckFailed, check_write_permissions

__all__ = (
    'AccountLookup',
    'ActorContext',
    'GateError',
    'InvalidRepositoryOverride',
    'NonHumanActor',
    'PermissionCheckFailed',
    'RepositoryRef',
    'check_human_actor',
    'check_write_permissions',
    'parse_additional_permissions',
    'parse_multiline_input',
    'parse_repository_override',
)
