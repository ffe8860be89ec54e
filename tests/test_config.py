"""Environment-driven settings."""

import pytest
from pydantic import ValidationError

from topup.common.config import CommonSettings


def test_postgres_dsn_is_required(monkeypatch):
    monkeypatch.delenv("POSTGRES_DSN", raising=False)

    with pytest.raises(ValidationError):
        CommonSettings(_env_file=None)


def test_postgres_dsn_read_from_environment(monkeypatch):
    monkeypatch.setenv("POSTGRES_DSN", "postgresql+psycopg2://relay@db/relay")

    assert CommonSettings(_env_file=None).postgres_dsn == "postgresql+psycopg2://relay@db/relay"
