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

from collections.abc import Sequence
from typing import NamedTuple

from .jsonutil import JsonObject


class GateError(Exception):
    """Base class for everything that aborts the gate

    The driver turns any of these into a failed workflow run.
    """


class RepositoryRef(NamedTuple):
    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f'{self.owner}/{self.repo}'


class ActorContext(NamedTuple):
    actor: str
    allowed_actors: Sequence[str] = ()


class AccountLookup:
    """The two GitHub queries the checks need

    Implementations return the decoded JSON object of the respective REST
    resource and raise on any failure to obtain it.
    """

    async def get_account(self, username: str) -> JsonObject:
        raise NotImplementedError

    async def get_collaborator_permission(self, owner: str, repo: str, username: str) -> JsonObject:
        raise NotImplementedError
