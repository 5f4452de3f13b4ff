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

# Settings for one gate run.  Inside a workflow nothing needs configuring:
# the runner exports the API endpoint and a token for the repository.  A TOML
# file can still override either, or add a private CA for an Enterprise server.

import contextlib
import logging
import os
import sys
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Self

from .base import AccountLookup
from .directories import xdg_config_home
from .github import GitHub
from .jsonutil import JsonError, JsonObject, get_dict, get_nested, json_merge_patch, load_external_files

logger = logging.getLogger(__name__)

BUILTIN_CONFIG = Path(__file__).parent / 'trigger-gate.toml'

# [github] setting → variable the Actions runner sets for it
RUNNER_ENVIRONMENT = {
    'api-url': 'GITHUB_API_URL',
    'token': 'GITHUB_TOKEN',
}


def read_config(path: Path) -> JsonObject:
    logger.debug('Reading configuration from %s', path)
    try:
        with path.open('rb') as file:
            return load_external_files(tomllib.load(file), path.parent)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        sys.exit(f'{path}: {exc}')


def config_file_path(config_file: Path | str | None, environ: Mapping[str, str]) -> Path | None:
    """The one configuration file layered over the built-in defaults, if any"""
    if config_file:
        return Path(config_file)
    if from_env := environ.get('TRIGGER_GATE_CONFIG'):
        return Path(from_env)
    user_config = Path(xdg_config_home('trigger-gate', 'config.toml'))
    return user_config if user_config.exists() else None


def runner_settings(config: JsonObject, environ: Mapping[str, str]) -> JsonObject:
    """[github] settings taken from the runner for anything not configured explicitly"""
    github = get_dict(config, 'github', {})
    settings = {}
    for key, variable in RUNNER_ENVIRONMENT.items():
        if key not in github and (value := environ.get(variable)):
            logger.debug('Using $%s for github.%s', variable, key)
            settings[key] = value
    return {'github': settings}


class GateContext(contextlib.AsyncExitStack):
    forge: AccountLookup

    def __init__(self, config_file: Path | str | None = None, environ: Mapping[str, str] | None = None) -> None:
        super().__init__()
        if environ is None:
            environ = os.environ

        self.config = read_config(BUILTIN_CONFIG)
        if path := config_file_path(config_file, environ):
            self.config = json_merge_patch(self.config, read_config(path))

        try:
            self.config = json_merge_patch(self.config, runner_settings(self.config, environ))
        except JsonError as exc:
            sys.exit(f'Configuration error: {exc}')

    async def __aenter__(self) -> Self:
        try:
            with get_nested(self.config, 'github') as github:
                self.forge = await self.enter_async_context(GitHub(github))
        except JsonError as exc:
            await self.aclose()
            sys.exit(f'Configuration error: {exc}')
        return self
