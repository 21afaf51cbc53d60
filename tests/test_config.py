import pytest

from app.customer_service import create_app
from app.customer_service.config import load_config, load_settings


@pytest.fixture()
def clean_env(monkeypatch):
    for k in ("SECRET_KEY", "ENV", "DATABASE_URL", "LOG_LEVEL"):
        monkeypatch.delenv(k, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    s = load_settings()
    assert s.secret_key == "change-me"
    assert s.env == "development"
    assert s.database_url == "sqlite:///customers.db"
    assert s.log_level == "INFO"


def test_env_values_are_stripped(clean_env):
    clean_env.setenv("DATABASE_URL", "  postgresql://u:p@db/customers ")
    clean_env.setenv("LOG_LEVEL", "debug")
    cfg = load_config()
    assert cfg["DATABASE_URL"] == "postgresql://u:p@db/customers"
    assert cfg["LOG_LEVEL"] == "DEBUG"


def test_production_rejects_sqlite(clean_env):
    clean_env.setenv("ENV", "production")
    clean_env.setenv("SECRET_KEY", "s3cret-value")
    clean_env.setenv("DATABASE_URL", "sqlite:///prod.db")
    with pytest.raises(RuntimeError, match="Postgres"):
        create_app()


def test_production_rejects_default_secret(clean_env):
    clean_env.setenv("ENV", "prod")
    clean_env.setenv("DATABASE_URL", "postgresql://u:p@db/customers")
    with pytest.raises(RuntimeError, match="SECRET_KEY"):
        create_app()


def test_injected_store_is_used(clean_env, tmp_path):
    from app.customer_service.modules.customers.service import CustomerStore

    class EmptyStore(CustomerStore):
        def select_by_id(self, customer_id):
            return None

    clean_env.setenv("DATABASE_URL", f"sqlite:///{tmp_path/'unused.db'}")
    app = create_app(store=EmptyStore())
    r = app.test_client().get("/customers/1")
    assert r.status_code == 404
