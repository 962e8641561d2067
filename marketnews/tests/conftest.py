# marketnews/tests/conftest.py
import pytest

from marketnews.storage.repository import NewsRepository
from marketnews.tests.fakes import MemoryStore


@pytest.fixture()
def memory_store():
    return MemoryStore()


@pytest.fixture()
def repo(tmp_path):
    r = NewsRepository(f"sqlite:///{tmp_path / 'market_news.db'}")
    r.init_schema()
    yield r
    r.close()


@pytest.fixture()
def app(monkeypatch, tmp_path):
    # Impede o scraper de rodar no startup
    from marketnews.api import main as api_main

    class DummyScheduler:
        is_running = False

        def start(self, cycle_fn, on_exit=None):
            self.is_running = True

        def stop(self, timeout=None):
            self.is_running = False

    test_settings = api_main.settings.model_copy(
        update={"database_url": f"sqlite:///{tmp_path / 'api_news.db'}"}
    )
    monkeypatch.setattr(api_main, "settings", test_settings, raising=True)
    monkeypatch.setattr(api_main, "scheduler", DummyScheduler(), raising=True)
    return api_main.app


@pytest.fixture()
def client(app):
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c
