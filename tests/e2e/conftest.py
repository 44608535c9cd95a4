from collections.abc import AsyncIterator

import pytest_asyncio

from nlweb.core.bootstrap import Engine, build_engine
from nlweb.core.config import Config


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[Engine]:
    """Real engine built from the environment, for e2e/integration suites only."""
    instance = build_engine(Config.load())
    try:
        yield instance
    finally:
        await instance.close()
