"""Shared fixtures for the CMS tests."""

import pytest
from httpx import ASGITransport, AsyncClient


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Reset all module-level singletons and caches between tests."""
    yield

    # 1. Settings LRU cache
    from cms.config import get_settings

    get_settings.cache_clear()

    # 2. Database engine singleton (tests dispose their own engines)
    import cms.services.database as db_mod

    db_mod._engine = None

    # 3. HTTP client singleton
    import cms.services.http_client as http_mod

    http_mod._client = None

    # 4. Admin sessions: revoked token ids + per-process signing key
    import cms.services.auth as auth_mod

    auth_mod._revoked.clear()
    auth_mod._fallback_secret = None

    # 5. Contact form rate limiter
    import cms.routers.contact as contact_mod

    contact_mod._rate_limits.clear()

    # 6. Health check cache
    import cms.main as main_mod

    main_mod._health_cache = None


@pytest.fixture
def mock_settings(monkeypatch, tmp_path):
    """Provide a Settings object with safe test defaults."""
    from cms.config import Settings, get_settings

    test_settings = Settings(
        database_url="sqlite+aiosqlite://",
        create_tables_on_startup=False,
        public_dir=str(tmp_path / "public"),
        admin_password="test-admin-secret",
        session_secret="test-session-secret-0123456789abcdef",
        session_ttl_minutes=60,
        email_api_url="https://email.test/emails",
        email_api_key="",
        email_from="CMS Test <noreply@example.com>",
        notification_email="ops@example.com",
        contact_rate_limit=5,
    )

    get_settings.cache_clear()
    monkeypatch.setattr("cms.config.get_settings", lambda: test_settings)

    # Patch get_settings in all modules that import it directly
    # (from cms.config import get_settings creates a local binding that
    # the cms.config monkeypatch above does not affect)
    for mod_path in [
        "cms.main",
        "cms.services.auth",
        "cms.services.database",
        "cms.services.email",
        "cms.services.uploads",
        "cms.routers.contact",
    ]:
        monkeypatch.setattr(f"{mod_path}.get_settings", lambda: test_settings)

    return test_settings


@pytest.fixture
async def db_engine(mock_settings):
    """Fresh in-memory SQLite database, installed as the shared engine."""
    import cms.services.database as db_mod

    engine = db_mod.create_engine(mock_settings.database_url)
    await db_mod.init_db(engine)
    db_mod._engine = engine
    yield engine
    await engine.dispose()


@pytest.fixture
def admin_headers(mock_settings):
    """Authorization header carrying a valid admin session."""
    from cms.services.auth import issue_session

    token, _ = issue_session()
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def client(db_engine):
    """HTTP client bound to the app, backed by the in-memory database."""
    from cms.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as c:
        yield c


@pytest.fixture
def blog_post_data():
    """A valid create payload for a blog post (camelCase, as the editor sends)."""
    return {
        "title": "Scaling AI Responsibly",
        "slug": "scaling-ai-responsibly",
        "excerpt": "What boards should ask before the pilot becomes production.",
        "content": "<p>Start with the decision you want to improve.</p>",
        "author": "Sam Taylor",
        "category": "AI & Technology",
        "date": "2025-01-01",
    }


@pytest.fixture
def case_study_data():
    """A valid create payload for a case study."""
    return {
        "slug": "retail-data-platform",
        "title": "Retail Data Platform",
        "client": "Northwind Retail",
        "category": "Data Strategy",
        "challenge": "Siloed sales data across 40 stores.",
        "approach": "A shared event model and weekly delivery cadence.",
        "impact": "Stock-outs down 18% in two quarters.",
        "roleDescription": "Interim CTO",
    }
