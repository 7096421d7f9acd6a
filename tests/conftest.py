import os
import tempfile

import pytest

# must be set before app.config is imported anywhere
_TEST_DIR = tempfile.mkdtemp(prefix="installation-planner-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.sqlite3"


@pytest.fixture(autouse=True, scope="session")
def setup_test_db():
    import asyncio

    # Disable API key auth for tests
    from app.config import settings
    settings.api_key = ""

    from app.database import create_tables, async_session
    from app.seed import seed_data

    async def _setup():
        await create_tables()
        async with async_session() as session:
            await seed_data(session)

    asyncio.run(_setup())
