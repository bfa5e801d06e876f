from __future__ import annotations

from typing import Optional

import pytest
from sqlalchemy import Integer, String, create_engine, event, func, select
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from enum_behavior.core.config import settings
from enum_behavior.core.errors import ConfigurationError, EnumValidationError
from enum_behavior.core.sentinels import GENERATED, NOT_FOUND
from enum_behavior.db.database import DatabaseGateway, _build_engine
from enum_behavior.db.introspection import column_default, column_nullability
from enum_behavior.models.enum_mixin import _HOOKS, EnumMixin


class _Base(DeclarativeBase):
    pass


class Ticket(EnumMixin, _Base):
    __tablename__ = "tickets"
    __enums__ = {
        "state": {1: "open", 2: "in_progress", 3: "closed"},
        "priority": {"values": {1: "low", 2: "high"}, "validate": True},
        "category": {"values": {"bug": "bug", "feature": "feature_request"}, "validate": False},
        "resolution": {"fixed": "fixed", "wontfix": "wont_fix", "none": ""},
    }

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    state: Mapped[int] = mapped_column(Integer, nullable=False)
    priority: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    resolution: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)


class Broken(EnumMixin, _Base):
    __tablename__ = "broken"
    __enums__ = {
        "state": {1: "on", 2: "off"},
        "mode": "not-a-mapping",
    }

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    state: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)


class Account(EnumMixin, _Base):
    __tablename__ = "accounts"
    __enums__ = {
        "status": {1: "active", 2: "inactive"},
        "tier": {"basic": "basic", "pro": "pro"},
    }

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    status: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    tier: Mapped[str] = mapped_column(String(10), nullable=False, server_default="basic")


class Legacy(EnumMixin, _Base):
    __tablename__ = "legacy"
    __enums__ = {"status": {1: "active", 2: "inactive"}}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    status: Mapped[int] = mapped_column(Integer, nullable=False, default=9)


@pytest.fixture()
def bound(registry):
    Ticket.setup_enums(registry)
    yield registry
    Ticket.teardown_enums()


@pytest.fixture()
def session():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    _Base.metadata.create_all(engine)
    with Session(engine) as db:
        yield db
    engine.dispose()


def test_column_nullability_reads_the_mapped_columns():
    assert column_nullability(Ticket, ["state", "priority", "missing"]) == {
        "state": False,
        "priority": True,
    }
    assert column_nullability(object, ["state"]) == {}


def test_setup_registers_declarations(bound):
    assert bound.is_registered("Ticket")
    assert Ticket.enum_model_id() == "Ticket"
    rules = Ticket.enum_rules()
    assert [rule.name for rule in rules["state"]] == ["allowedValuesCreate", "allowedValuesUpdate"]
    assert [rule.name for rule in rules["priority"]] == ["allowedValues"]
    assert "category" not in rules


def test_lookups_through_the_model(bound):
    assert Ticket.enum_key_to_value("state", 2) == "in_progress"
    assert Ticket.enum_value_to_key("category", "feature_request") == "feature"
    assert Ticket.enum_key_to_value("state", 9) is NOT_FOUND


def test_enum_values_for_select_controls(bound):
    assert Ticket.enum_values() == {
        "states": {1: "Open", 2: "In Progress", 3: "Closed"},
        "priorities": {1: "Low", 2: "High"},
        "categories": {"bug": "Bug", "feature": "Feature Request"},
        "resolutions": {"fixed": "Fixed", "wontfix": "Wont Fix", "none": ""},
    }


def test_lookups_require_setup():
    with pytest.raises(ConfigurationError):
        Ticket.enum_values()


def test_valid_insert_and_update(bound, session):
    ticket = Ticket(state=1, priority=2, category="anything", resolution=None)
    session.add(ticket)
    session.commit()
    ticket.state = 3
    ticket.resolution = "fixed"
    session.commit()
    assert session.get(Ticket, ticket.id).state == 3


def test_insert_with_unknown_key_is_rejected(bound, session):
    session.add(Ticket(state=7))
    with pytest.raises(EnumValidationError) as excinfo:
        session.flush()
    assert excinfo.value.detail["phase"] == "create"
    assert list(excinfo.value.detail["fields"]) == ["state"]
    session.rollback()


def test_insert_without_required_field_is_rejected(bound, session):
    session.add(Ticket(priority=1))
    with pytest.raises(EnumValidationError) as excinfo:
        session.flush()
    assert excinfo.value.detail["fields"] == {
        "state": ["Please choose one of the following values : Open, In Progress, Closed"],
    }
    session.rollback()


def test_update_checks_changed_fields_only(bound, session):
    ticket = Ticket(state=1)
    session.add(ticket)
    session.commit()

    ticket.priority = 2
    session.commit()

    ticket.priority = 5
    with pytest.raises(EnumValidationError) as excinfo:
        session.flush()
    assert excinfo.value.detail["phase"] == "update"
    assert list(excinfo.value.detail["fields"]) == ["priority"]
    session.rollback()


def test_empty_label_allows_empty_values(bound, session):
    session.add(Ticket(state=2, resolution=""))
    session.flush()


def test_validate_enums_without_flushing(bound):
    ticket = Ticket(state=4, priority=1)
    assert ticket.validate_enums("create") == {
        "state": ["Please choose one of the following values : Open, In Progress, Closed"],
    }
    assert Ticket(state=1).validate_enums() == {}


def test_teardown_removes_hooks_and_entry(registry, session):
    Ticket.setup_enums(registry)
    Ticket.teardown_enums()
    assert not registry.is_registered("Ticket")
    for identifier, hook in _HOOKS:
        assert not event.contains(Ticket, identifier, hook)
    session.add(Ticket(state=42))
    session.flush()


def test_setup_twice_installs_hooks_once(registry, session, monkeypatch):
    calls = []
    Ticket.setup_enums(registry)
    Ticket.setup_enums(registry)
    monkeypatch.setattr(Ticket, "_enforce_enums", lambda self, phase: calls.append(phase))
    try:
        session.add(Ticket(state=1))
        session.flush()
    finally:
        Ticket.teardown_enums()
    assert calls == ["create"]


def test_malformed_declaration_keeps_valid_fields(registry, session):
    with pytest.raises(ConfigurationError) as excinfo:
        Broken.setup_enums(registry)
    try:
        assert set(excinfo.value.detail["failures"]) == {"mode"}
        assert Broken.enum_key_to_value("state", 1) == "on"
        session.add(Broken(state=3))
        with pytest.raises(EnumValidationError):
            session.flush()
        session.rollback()
    finally:
        Broken.teardown_enums()


def test_table_name_strategy(monkeypatch):
    monkeypatch.setattr(settings, "enum_model_id_strategy", "table_name")
    assert Ticket.enum_model_id() == "tickets"


def test_models_can_share_a_registry(registry, monkeypatch):
    monkeypatch.setattr(Broken, "__enums__", {"state": {1: "on"}})
    Ticket.setup_enums(registry)
    Broken.setup_enums(registry)
    try:
        assert set(registry.snapshot()) == {"Ticket", "Broken"}
        assert Broken.enum_values() == {"states": {1: "On"}}
    finally:
        Broken.teardown_enums()
        Ticket.teardown_enums()


def test_transactional_gateway_rolls_back_invalid_rows(bound):
    engine = _build_engine("sqlite+pysqlite:///:memory:")
    _Base.metadata.create_all(engine)
    gateway = DatabaseGateway(engine=engine, session_factory=sessionmaker(bind=engine))
    with pytest.raises(EnumValidationError):
        with gateway.transactional() as db:
            db.add(Ticket(state=1))
            db.add(Ticket(state=8))
    with gateway.session() as db:
        assert db.scalar(select(func.count()).select_from(Ticket)) == 0
    engine.dispose()


def test_column_defaults_count_as_submitted_on_create(registry, session):
    Account.setup_enums(registry)
    try:
        assert column_default(Account, "status") == 1
        assert column_default(Account, "tier") is GENERATED
        assert column_default(Account, "id") is NOT_FOUND
        assert Account().validate_enums("create") == {}
        session.add(Account())
        session.flush()
        account = session.scalars(select(Account)).one()
        assert (account.status, account.tier) == (1, "basic")
    finally:
        Account.teardown_enums()


def test_scalar_column_default_is_checked_against_the_keys(registry, session):
    Legacy.setup_enums(registry)
    try:
        session.add(Legacy())
        with pytest.raises(EnumValidationError) as excinfo:
            session.flush()
        assert list(excinfo.value.detail["fields"]) == ["status"]
        session.rollback()
    finally:
        Legacy.teardown_enums()
