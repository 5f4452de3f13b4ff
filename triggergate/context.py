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

# Everything the gate knows about the workflow run, assembled from the
# environment that GitHub Actions provides plus the action's inputs.
#
# The parse_*() functions are pure: no I/O, no logging.

import json
from collections.abc import Mapping
from pathlib import Path

from .base import ActorContext, GateError, RepositoryRef
from .jsonutil import JsonObject, get_dict, get_int, get_nested, get_str, typechecked

PULL_REQUEST_EVENTS = frozenset({
    'pull_request',
    'pull_request_review',
    'pull_request_review_comment',
    'pull_request_target',
})


class InvalidRepository(GateError):
    def __init__(self, variable: str, raw: str):
        super().__init__(f'Invalid {variable} format: "{raw}". Expected "owner/repo" (e.g., "octocat/hello-world").')
        self.raw = raw


class InvalidRepositoryOverride(InvalidRepository):
    def __init__(self, raw: str):
        super().__init__('TARGET_REPOSITORY', raw)


def parse_multiline_input(text: str) -> list[str]:
    """Split a list given as comma-separated and/or one-per-line entries

    A '#' starts a comment which runs to the end of the line.
    """
    result = []
    for line in text.splitlines():
        content, _, _comment = line.partition('#')
        result.extend(token.strip() for token in content.split(',') if token.strip())
    return result


def parse_additional_permissions(text: str) -> dict[str, str]:
    # `scope: level`, one per line; lines without a colon, a scope or a level are ignored
    permissions = {}
    for line in text.splitlines():
        key, _, value = (part.strip() for part in line.partition(':'))
        if key and value:
            permissions[key] = value
    return permissions


def _split_repository(variable: str, raw: str) -> RepositoryRef:
    parts = raw.strip().split('/')
    if len(parts) != 2:
        raise InvalidRepository(variable, raw)

    owner, repo = (part.strip() for part in parts)
    if not owner or not repo:
        raise InvalidRepository(variable, raw)

    return RepositoryRef(owner, repo)


def parse_repository(full_name: str) -> RepositoryRef:
    return _split_repository('GITHUB_REPOSITORY', full_name)


def parse_repository_override(raw: str | None, default: RepositoryRef) -> RepositoryRef:
    if raw is None:
        return default

    try:
        return _split_repository('TARGET_REPOSITORY', raw)
    except InvalidRepository:
        raise InvalidRepositoryOverride(raw) from None


def get_entity_number(payload: JsonObject) -> int | None:
    for key in ('issue', 'pull_request'):
        if get_dict(payload, key, None) is not None:
            with get_nested(payload, key) as entity:
                return get_int(entity, 'number')
    return None


def is_pull_request(event_name: str, payload: JsonObject) -> bool:
    if event_name in PULL_REQUEST_EVENTS:
        return True
    # issue_comment events fire for pull requests too; those issues carry a 'pull_request' link
    issue = get_dict(payload, 'issue', {})
    return get_dict(issue, 'pull_request', None) is not None


def load_event(path: str | None) -> JsonObject:
    if not path:
        return {}
    return typechecked(json.loads(Path(path).read_text()), dict)


class ParsedContext:
    def __init__(self, environ: Mapping[str, str], payload: JsonObject) -> None:
        self.run_id = environ.get('GITHUB_RUN_ID', '')
        self.event_name = environ.get('GITHUB_EVENT_NAME', '')
        self.event_action = get_str(payload, 'action', None)
        self.payload = payload

        self.actor = environ.get('GITHUB_ACTOR', '')
        if not self.actor:
            raise GateError('GITHUB_ACTOR is not set')

        if 'GITHUB_REPOSITORY' not in environ:
            raise GateError('GITHUB_REPOSITORY is not set')
        # unset action inputs arrive as empty strings
        self.repository = parse_repository_override(environ.get('TARGET_REPOSITORY') or None,
                                                    parse_repository(environ['GITHUB_REPOSITORY']))

        self.entity_number = get_entity_number(payload)
        self.is_pr = is_pull_request(self.event_name, payload)

        # action inputs
        self.allowed_actors = parse_multiline_input(environ.get('ALLOWED_ACTORS', ''))
        self.allowed_tools = parse_multiline_input(environ.get('ALLOWED_TOOLS', ''))
        self.disallowed_tools = parse_multiline_input(environ.get('DISALLOWED_TOOLS', ''))
        self.additional_permissions = parse_additional_permissions(environ.get('ADDITIONAL_PERMISSIONS', ''))

    @property
    def actor_context(self) -> ActorContext:
        return ActorContext(self.actor, tuple(self.allowed_actors))
