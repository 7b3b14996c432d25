from __future__ import annotations

from types import SimpleNamespace

import pytest
from sqlalchemy import inspect
from sqlmodel import Session

from chemical_inventory.config import get_settings
from chemical_inventory.db import create_db_engine, init_db
from chemical_inventory.models import (
    Entity,
    HazardStatement,
    Person,
    PhysicalState,
    PrecautionaryStatement,
    SignalWord,
    StoreLocation,
    Symbol,
    Unit,
)


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def engine():
    engine = create_db_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


def _add_all(session: Session, rows: list) -> list[int]:
    session.add_all(rows)
    session.commit()
    return [inspect(row).identity[0] for row in rows]


@pytest.fixture
def people(session):
    """Four persons without any permission rule."""
    admin, alice, bob, carol = _add_all(
        session,
        [
            Person(person_email="admin@lab.example"),
            Person(person_email="alice@lab.example"),
            Person(person_email="bob@lab.example"),
            Person(person_email="carol@lab.example"),
        ],
    )
    return SimpleNamespace(admin=admin, alice=alice, bob=bob, carol=carol)


@pytest.fixture
def labs(session):
    """Two entities, each with one store location, and two units."""
    chemistry, biology = _add_all(
        session,
        [
            Entity(entity_name="CHEMISTRY", entity_description="organic chemistry lab"),
            Entity(entity_name="BIOLOGY"),
        ],
    )
    cabinet, fridge = _add_all(
        session,
        [
            StoreLocation(storelocation_name="cabinet A", entity=chemistry),
            StoreLocation(storelocation_name="fridge 2", entity=biology),
        ],
    )
    litre, gram = _add_all(session, [Unit(unit_label="L"), Unit(unit_label="g")])
    return SimpleNamespace(
        chemistry=chemistry,
        biology=biology,
        cabinet=cabinet,
        fridge=fridge,
        litre=litre,
        gram=gram,
    )


@pytest.fixture
def catalogue(session):
    """GHS rows products link to."""
    symbols = _add_all(
        session,
        [
            Symbol(symbol_label="GHS02"),
            Symbol(symbol_label="GHS05"),
            Symbol(symbol_label="GHS07"),
        ],
    )
    hazards = _add_all(
        session,
        [
            HazardStatement(hazardstatement_label="Highly flammable liquid and vapour", hazardstatement_reference="H225"),
            HazardStatement(hazardstatement_label="Causes serious eye irritation", hazardstatement_reference="H319"),
            HazardStatement(hazardstatement_label="Toxic if swallowed", hazardstatement_reference="H301"),
        ],
    )
    precautions = _add_all(
        session,
        [
            PrecautionaryStatement(
                precautionarystatement_label="Keep away from heat", precautionarystatement_reference="P210"
            ),
            PrecautionaryStatement(
                precautionarystatement_label="Keep container tightly closed", precautionarystatement_reference="P233"
            ),
        ],
    )
    (liquid,) = _add_all(session, [PhysicalState(physicalstate_label="liquid")])
    (danger,) = _add_all(session, [SignalWord(signalword_label="Danger")])
    return SimpleNamespace(
        symbols=symbols,
        hazards=hazards,
        precautions=precautions,
        liquid=liquid,
        danger=danger,
    )
