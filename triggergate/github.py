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

import asyncio
import contextlib
import logging
import ssl
from collections.abc import Awaitable, Callable
from typing import Self, TypeVar

import aiohttp
from yarl import URL

from .base import AccountLookup
from .jsonutil import JsonObject, JsonValue, get_str, typechecked

logger = logging.getLogger(__name__)

T = TypeVar('T')

DEFAULT_API_URL = 'https://api.github.com'


async def retry(func: Callable[[], Awaitable[T]], attempts: int = 4) -> T:
    for attempt in range(attempts):
        try:
            return await func()
        except aiohttp.ClientResponseError as exc:
            if exc.status < 500:
                raise
            logger.warning('GitHub API error, attempt #%s: %s', attempt, exc)
        except aiohttp.ClientError as exc:
            logger.warning('Transient error talking to GitHub, attempt #%s: %r', attempt, exc)

        # 1 → 2 → 4 → 8s delay
        await asyncio.sleep(2 ** attempt)

    # ...last attempt.
    return await func()


class GitHub(AccountLookup, contextlib.AsyncExitStack):
    """Account and collaborator lookups against the GitHub REST API

    `config` is the [github] table: `api-url`, `user-agent`, and optionally
    `token` and `ca` (PEM data for an Enterprise server with a private CA).
    """

    def __init__(self, config: JsonObject) -> None:
        super().__init__()
        self.api = URL(get_str(config, 'api-url', DEFAULT_API_URL))
        self.user_agent = get_str(config, 'user-agent')
        self.token = get_str(config, 'token', None)
        self.cadata = get_str(config, 'ca', None)

    def session_headers(self) -> dict[str, str]:
        headers = {
            'Accept': 'application/vnd.github+json',
            'User-Agent': self.user_agent,
            'X-GitHub-Api-Version': '2022-11-28',
        }
        # anonymous access works for public data, but rate limits are tight
        if self.token:
            headers['Authorization'] = f'token {self.token.strip()}'
        else:
            logger.warning('No GitHub token configured, using anonymous API access to %s', self.api)
        return headers

    async def __aenter__(self) -> Self:
        connector = None
        if self.cadata:
            connector = aiohttp.TCPConnector(ssl=ssl.create_default_context(cadata=self.cadata))

        self.session = await self.enter_async_context(
            aiohttp.ClientSession(connector=connector, headers=self.session_headers(), raise_for_status=True))
        return self

    async def get(self, resource: str) -> JsonValue:
        async def get_once() -> JsonValue:
            logger.debug('get %r', resource)
            async with self.session.get(self.api / resource) as response:
                logger.debug('response %r', response)
                return await response.json()

        return await retry(get_once)

    async def get_obj(self, resource: str) -> JsonObject:
        return typechecked(await self.get(resource), dict)

    async def get_account(self, username: str) -> JsonObject:
        return await self.get_obj(f'users/{username}')

    async def get_collaborator_permission(self, owner: str, repo: str, username: str) -> JsonObject:
        return await self.get_obj(f'repos/{owner}/{repo}/collaborators/{username}/permission')
