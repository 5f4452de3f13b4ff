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
from .base import AccountLookup, ActorContext, GateError
from .jsonutil import get_str

logger = logging.getLogger(__name__)

# GitHub's account type for individual (human) accounts; others are 'Bot' and 'Organization'
HUMAN_ACCOUNT_TYPE = 'User'


class NonHumanActor(GateError):
    def __init__(self, actor: str, actor_type: str):
        super().__init__(f'Workflow initiated by non-human actor: {actor} (type: {actor_type}).')
        self.actor = actor
        self.actor_type = actor_type


async def check_human_actor(api: AccountLookup, context: ActorContext) -> None:
    """Refuse to continue unless the workflow was triggered by a human

    Allow-listed actors skip the check without querying GitHub.
    """
    if is_allowed(context.actor, context.allowed_actors):
        logger.info('Actor %s is in the allowed actors list, bypassing human check', context.actor)
        return

    actor_type = get_str(await api.get_account(context.actor), 'type')
    logger.info('Actor type: %s', actor_type)

    if actor_type != HUMAN_ACCOUNT_TYPE:
        raise NonHumanActor(context.actor, actor_type)

    logger.info('Verified human actor: %s', context.actor)
