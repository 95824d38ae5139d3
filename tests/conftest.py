import pytest


@pytest.fixture
def anyio_backend() -> str:
    # The storage layer uses aiosqlite, which only runs on asyncio.
    return "asyncio"
