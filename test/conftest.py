from unittest.mock import AsyncMock

import pytest

from triggergate.base import AccountLookup


@pytest.fixture
def api() -> AsyncMock:
    # Mock(spec=...) turns the `async def` methods into AsyncMocks
    return AsyncMock(spec=AccountLookup)
