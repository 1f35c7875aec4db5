# tests/test_core.py

import pytest
from pydantic import ValidationError

from core.config import Settings
from core.database import DatabaseUnavailableError, is_transient_db_connectivity_error, normalize_database_url


def test_transient_errors_are_detected_through_cause_chain():
    try:
        try:
            raise OSError("could not translate host name \"db.example\" to address")
        except OSError as inner:
            raise RuntimeError("connect failed") from inner
    except RuntimeError as exc:
        assert is_transient_db_connectivity_error(exc)


def test_sql_errors_are_not_transient():
    assert not is_transient_db_connectivity_error(ValueError("duplicate key value violates unique constraint"))
    assert is_transient_db_connectivity_error(DatabaseUnavailableError("Connection timed out"))


def test_postgres_urls_are_normalized_to_psycopg2():
    assert normalize_database_url("postgres://u:p@h/db") == "postgresql+psycopg2://u:p@h/db"
    assert normalize_database_url(" postgresql://u:p@h/db ") == "postgresql+psycopg2://u:p@h/db"
    assert normalize_database_url("sqlite://") == "sqlite://"


def test_settings_normalization():
    s = Settings(
        database_url="sqlite://",
        jwt_secret_key="k",
        frontend_origin="https://school.example/ ",
        admin_roles=" Admin, Principal ",
        log_level="info",
    )

    assert s.frontend_origin == "https://school.example"
    assert s.admin_role_set == frozenset({"admin", "principal"})
    assert s.log_level == "INFO"


def test_settings_reject_unknown_log_level():
    with pytest.raises(ValidationError):
        Settings(database_url="sqlite://", jwt_secret_key="k", log_level="LOUD")


def test_health(client):
    assert client.get("/health").json() == {"app": "ok", "database": "ok"}
