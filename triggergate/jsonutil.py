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

import contextlib
from collections.abc import Callable, Iterator, Mapping, Sequence
from enum import Enum
from pathlib import Path
from typing import ContextManager, TypeVar, Union

# API responses, event payloads and configuration are all treated as immutable
JsonLiteral = str | float | bool | None
JsonValue = Union['JsonObject', Sequence['JsonValue'], JsonLiteral]
JsonObject = Mapping[str, JsonValue]


DT = TypeVar('DT')
T = TypeVar('T')


class JsonError(Exception):
    value: object

    def __init__(self, value: object, msg: str):
        super().__init__(msg)
        self.value = value


def typechecked(value: JsonValue, expected_type: type[T]) -> T:
    """Ensure a JSON value has the expected type, returning it if so."""
    if not isinstance(value, expected_type):
        raise JsonError(value, f'must have type {expected_type.__name__}')
    return value


# None is a legitimate default ("field is optional"), so it can't be the sentinel
class _Empty(Enum):
    TOKEN = 0


_empty = _Empty.TOKEN


def _get(obj: JsonObject, cast: Callable[[JsonValue], T], key: str, default: DT | _Empty) -> T | DT:
    try:
        value = obj[key]
    except KeyError:
        if default is not _empty:
            return default
        raise JsonError(obj, f"attribute '{key}' required") from None

    # an explicit JSON null for an optional field means "not there"
    if value is None and default is not _empty:
        return default

    try:
        return cast(value)
    except JsonError as exc:
        raise JsonError(obj, f"attribute '{key}': {exc!s}") from exc


def get_int(obj: JsonObject, key: str, default: DT | _Empty = _empty) -> DT | int:
    # bool is a subclass of int, but `"number": true` is not a number
    def as_int(value: JsonValue) -> int:
        if isinstance(value, bool):
            raise JsonError(value, 'must have type int')
        return typechecked(value, int)
    return _get(obj, as_int, key, default)


def get_str(obj: JsonObject, key: str, default: DT | _Empty = _empty) -> DT | str:
    return _get(obj, lambda v: typechecked(v, str), key, default)


def get_dict(obj: JsonObject, key: str, default: DT | _Empty = _empty) -> DT | JsonObject:
    return _get(obj, lambda v: typechecked(v, dict), key, default)


def get_nested(obj: JsonObject, key: str) -> ContextManager[JsonObject]:
    """Descend into a required sub-object, prefixing errors with its key"""
    @contextlib.contextmanager
    def wrapper() -> Iterator[JsonObject]:
        try:
            yield get_dict(obj, key)
        except JsonError as exc:
            if exc.value is obj:
                raise
            raise JsonError(obj, f"attribute '{key}': {exc!s}") from exc
    return wrapper()


def json_merge_patch(current: JsonObject, patch: JsonObject) -> JsonObject:
    """Perform a JSON merge patch (RFC 7396) of 'patch' onto 'current'.

    Neither input is modified; the merged document is returned.
    """
    result = dict(current)
    for key, patch_value in patch.items():
        if isinstance(patch_value, Mapping):
            current_value = current.get(key)
            if not isinstance(current_value, Mapping):
                current_value = {}
            result[key] = json_merge_patch(current_value, patch_value)
        elif patch_value is None:
            result.pop(key, None)
        else:
            result[key] = patch_value

    return result


def parse_filename(value: JsonValue) -> str | None:
    # a file reference looks exactly like [{file="filename"}]
    if not isinstance(value, Sequence) or isinstance(value, str) or len(value) != 1:
        return None
    item, = value
    if not isinstance(item, Mapping) or set(item) != {'file'}:
        return None
    filename = item['file']
    return filename if isinstance(filename, str) else None


def load_external_files(obj: JsonObject, path: Path) -> JsonObject:
    """Replace [{file="filename"}] values with the contents of that file

    Filenames are relative to `path`.  Sub-tables are processed recursively and
    a new document is returned.
    """
    result: dict[str, JsonValue] = {}
    for key, value in obj.items():
        if filename := parse_filename(value):
            value = (path / filename).read_text()
        elif isinstance(value, Mapping):
            value = load_external_files(value, path)
        result[key] = value
    return result
