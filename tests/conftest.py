from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tests.fake_backend import BASE_URL, FakeStore, create_fake_backend
from workspace_sync.config.settings import ClientSettings
from workspace_sync.services import RemoteStoreClient


@pytest.fixture
def store() -> FakeStore:
    """A backend with one workspace holding a few notes."""
    store = FakeStore()
    store.add_workspace("notes")
    store.files["notes"].update(
        {
            "todo.md": "- [ ] write tests\n",
            "journal/2024-01-01.md": "# New year\n",
            "journal/ideas.md": "ideas\n",
            "images/logo.png": "PNG",
        }
    )
    return store


@pytest.fixture
def client_settings() -> ClientSettings:
    return ClientSettings(
        API_BASE_URL=BASE_URL,
        WORKSPACE_NAME="",
        THEME_APPLY_DELAY=0.0,
        AUTO_SAVE_DELAY=0.01,
    )


@pytest_asyncio.fixture
async def remote(store: FakeStore) -> AsyncGenerator[RemoteStoreClient, None]:
    """RemoteStoreClient talking to the fake backend in-process."""
    transport = ASGITransport(app=create_fake_backend(store))
    async with AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield RemoteStoreClient(BASE_URL, token="secret", http_client=http)
