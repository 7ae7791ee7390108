import logging

import pytest
import structlog


@pytest.fixture
def file_scope(monkeypatch, tmp_path):
    monkeypatch.setenv("CAMPUSBOOK_STORAGE_BACKEND", "file")
    monkeypatch.setenv("CAMPUSBOOK_STORAGE_PATH", str(tmp_path))
    monkeypatch.setenv("CAMPUSBOOK_STORAGE_SCOPE", "cli")
    monkeypatch.setenv("CAMPUSBOOK_LOG_LEVEL", "ERROR")
    yield tmp_path
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


def run(monkeypatch, *argv):
    # Import lazily to avoid side-effects at collection time
    from scripts import manage_store

    monkeypatch.setattr("sys.argv", ["manage_store.py", *argv])
    manage_store.main()


@pytest.mark.unit
def test_seed_then_list(monkeypatch, capsys, file_scope):
    run(monkeypatch, "seed", "--admin-password", "s3cret!")
    out = capsys.readouterr().out
    assert "Sample teachers: added" in out
    assert "Admin credentials added: 3" in out

    run(monkeypatch, "seed")
    out = capsys.readouterr().out
    assert "Sample teachers: already present" in out
    assert "Admin credentials added: 0" in out

    run(monkeypatch, "users", "--role", "teacher")
    out = capsys.readouterr().out
    assert "Dr. John Smith | john.smith@school.edu | teacher | approved" in out
    assert "admin@" not in out

    assert (file_scope / "cli.json").exists()


@pytest.mark.unit
def test_accounts_never_prints_passwords(monkeypatch, capsys, file_scope):
    run(monkeypatch, "accounts")
    assert "No accounts found" in capsys.readouterr().out

    run(monkeypatch, "seed", "--admin-password", "s3cret!")
    capsys.readouterr()
    run(monkeypatch, "accounts")
    out = capsys.readouterr().out

    assert "1. admin@school.edu | admin-001" in out
    assert "s3cret!" not in out
    assert "$2b$" not in out


@pytest.mark.unit
def test_redis_backend_without_url_exits(monkeypatch, file_scope):
    monkeypatch.setenv("CAMPUSBOOK_STORAGE_BACKEND", "redis")
    monkeypatch.delenv("CAMPUSBOOK_REDIS_URL", raising=False)

    with pytest.raises(SystemExit) as exc_info:
        run(monkeypatch, "accounts")

    assert exc_info.value.code == 1
