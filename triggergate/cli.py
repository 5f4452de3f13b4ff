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

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Mapping, Sequence

import aiohttp

from .actor import check_human_actor
from .base import AccountLookup, GateError
from .context import ParsedContext, load_event
from .gatecontext import GateContext
from .jsonutil import JsonError
from .permissions import check_write_permissions

logger = logging.getLogger(__name__)


async def run_gate(api: AccountLookup, context: ParsedContext, *, human_check: bool = True) -> None:
    if human_check:
        await check_human_actor(api, context.actor_context)

    if not await check_write_permissions(api, context.actor_context, context.repository):
        raise GateError('Actor does not have write permissions to the repository')


def write_outputs(path: str, context: ParsedContext) -> None:
    # https://docs.github.com/en/actions/reference/workflow-commands-for-github-actions#setting-an-output-parameter
    with open(path, 'a') as file:
        file.write(f'actor={context.actor}\n')
        file.write(f'repository={context.repository.full_name}\n')
        file.write(f'is_pr={str(context.is_pr).lower()}\n')


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Refuse to continue a workflow that wasn't triggered by a human with write access")
    parser.add_argument('-F', '--config', metavar='FILE', help="Configuration file (default: $TRIGGER_GATE_CONFIG)")
    parser.add_argument('--debug', '-d', action='store_true', help="Enable debug output")
    parser.add_argument('--actor', help="Check this login instead of $GITHUB_ACTOR")
    parser.add_argument('--repository', metavar='OWNER/REPO',
                        help="Check permissions on this repository (overrides $TARGET_REPOSITORY)")
    parser.add_argument('--skip-human-check', action='store_true',
                        help="Only check for write permissions")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None, environ: Mapping[str, str] | None = None) -> None:
    args = parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO, format='%(message)s')

    env = dict(os.environ if environ is None else environ)
    if args.actor:
        env['GITHUB_ACTOR'] = args.actor
    if args.repository:
        env['TARGET_REPOSITORY'] = args.repository

    try:
        context = ParsedContext(env, load_event(env.get('GITHUB_EVENT_PATH')))
    except GateError as exc:
        sys.exit(str(exc))
    except (JsonError, ValueError, OSError) as exc:
        sys.exit(f'Cannot read event payload: {exc}')

    logger.debug('Checking %s on %s (%s event, run %s)',
                 context.actor, context.repository.full_name, context.event_name, context.run_id)

    async def _async_main() -> None:
        async with GateContext(args.config, env) as gate:
            await run_gate(gate.forge, context, human_check=not args.skip_human_check)

    try:
        asyncio.run(_async_main(), debug=args.debug)
    except GateError as exc:
        sys.exit(str(exc))
    except (aiohttp.ClientError, JsonError) as exc:
        # only the humanity check lets lookup failures through
        sys.exit(f'Cannot look up {context.actor}: {exc}')

    if output := env.get('GITHUB_OUTPUT'):
        write_outputs(output, context)
