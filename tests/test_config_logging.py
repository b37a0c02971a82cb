"""
tests/test_config_logging.py: Configuration validation and structured logging.

Covers:
    1. validate_config: JWT secret length, store backend
    2. ProductionConfig refuses to start without secrets
    3. JSONFormatter promotes context fields
    4. Service mutations are logged with operation context
    5. Active data tag stamped on records
"""

import json
import logging

import pytest

from bumasys.config import ProductionConfig, validate_config
from bumasys.middleware.logging_config import DataTagFilter, JSONFormatter, ReadableFormatter
from bumasys.store import DatabaseManager, MemoryStore


class TestValidateConfig:
    def test_short_jwt_secret(self):
        with pytest.raises(RuntimeError, match="at least 10 characters"):
            validate_config({"JWT_SECRET_KEY": "short", "STORE_BACKEND": "memory"})

    def test_unknown_backend(self):
        with pytest.raises(RuntimeError, match="STORE_BACKEND"):
            validate_config({"JWT_SECRET_KEY": "x" * 32, "STORE_BACKEND": "postgres"})

    def test_valid(self):
        validate_config({"JWT_SECRET_KEY": "x" * 32, "STORE_BACKEND": "json"})

    def test_production_requires_secrets(self, monkeypatch):
        monkeypatch.delenv("SECRET_KEY", raising=False)
        monkeypatch.delenv("JWT_SECRET_KEY", raising=False)
        with pytest.raises(RuntimeError, match="SECRET_KEY"):
            ProductionConfig()


def _record(**extra):
    record = logging.LogRecord("bumasys.test", logging.INFO, __file__, 1,
                               "Organization created", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestFormatters:
    def test_json_formatter_includes_context(self):
        entry = json.loads(JSONFormatter().format(
            _record(operation="create", entity="organizations", entity_id="o1")))
        assert entry["message"] == "Organization created"
        assert entry["operation"] == "create"
        assert entry["entity_id"] == "o1"
        assert "tag" not in entry

    def test_readable_formatter_appends_context(self):
        line = ReadableFormatter().format(_record(operation="delete", entity_id="o1"))
        assert "operation=delete entity_id=o1" in line


class TestServiceLogging:
    def test_mutations_logged(self, services, caplog):
        with caplog.at_level(logging.INFO, logger="bumasys"):
            org = services.organizations.create({"name": "Acme"})
            services.organizations.delete(org["id"])
        records = [r for r in caplog.records if getattr(r, "entity_id", None) == org["id"]]
        assert [r.operation for r in records] == ["create", "delete"]

    def test_rejected_request_logged_as_warning(self, client, auth_headers, caplog):
        with caplog.at_level(logging.WARNING, logger="bumasys"):
            client.post("/api/v1/statuses", json={"name": ""}, headers=auth_headers)
        assert any(r.levelno == logging.WARNING and r.getMessage() == "Request rejected: name is required"
                   for r in caplog.records)


class TestDataTagFilter:
    def test_data_tag_stamped_on_records(self, tmp_path):
        store = DatabaseManager(str(tmp_path), tag="sandbox")
        record = _record()
        assert DataTagFilter(store).filter(record) is True
        assert json.loads(JSONFormatter().format(record))["tag"] == "sandbox"

    def test_explicit_tag_wins(self):
        record = _record(tag="qa")
        DataTagFilter(MemoryStore()).filter(record)
        assert record.tag == "qa"
