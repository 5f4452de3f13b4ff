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

# bots and users which are allowed to skip the human and permission checks

from collections.abc import Iterable


def is_allowed(actor: str, allowed_actors: Iterable[str]) -> bool:
    # GitHub logins are case-insensitive: compare lowercased, never casefold
    needle = actor.lower()
    return any(allowed.lower() == needle for allowed in allowed_actors)
