from __future__ import annotations

from datetime import datetime, timezone

import pytest

from chemical_inventory.models import Storage
from chemical_inventory.rbac import PermissionService
from chemical_inventory.services import NewReference, ProductDraft, ProductService, StockService, StockTotals


@pytest.fixture
def ethanol(session, people):
    return ProductService(session).create_product(
        ProductDraft(
            cas_number=NewReference(label="64-17-5"),
            name=NewReference(label="ethanol"),
            empirical_formula=NewReference(label="C2H6O"),
            person=people.alice,
        )
    )


def test_stock_defaults_to_zero(session, ethanol, labs):
    assert StockService(session).compute_stock(ethanol, labs.cabinet, labs.litre) == 0
    assert StockService(session).stock_by_location(ethanol) == {}


def test_stock_sums_matching_storages_only(session, ethanol, labs):
    session.add_all(
        [
            Storage(product=ethanol, storelocation=labs.cabinet, unit=labs.litre, storage_quantity=1.5),
            Storage(product=ethanol, storelocation=labs.cabinet, unit=labs.litre, storage_quantity=2.0),
            Storage(product=ethanol, storelocation=labs.cabinet, unit=labs.gram, storage_quantity=250),
            Storage(product=ethanol, storelocation=labs.fridge, unit=labs.litre, storage_quantity=4),
        ]
    )
    session.commit()

    stocks = StockService(session)
    assert stocks.compute_stock(ethanol, labs.cabinet, labs.litre) == pytest.approx(3.5)
    assert stocks.compute_stock(ethanol, labs.cabinet, labs.gram) == pytest.approx(250)
    assert stocks.compute_stock(ethanol, labs.fridge, labs.gram) == 0


def test_stock_by_location_separates_current_stock(session, ethanol, labs):
    session.add_all(
        [
            Storage(product=ethanol, storelocation=labs.cabinet, unit=labs.litre, storage_quantity=1.0),
            Storage(
                product=ethanol,
                storelocation=labs.cabinet,
                unit=labs.litre,
                storage_quantity=2.0,
                storage_exitdate=datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc),
            ),
            Storage(product=ethanol, storelocation=labs.fridge, unit=labs.litre, storage_quantity=0.5),
        ]
    )
    session.commit()

    assert StockService(session).stock_by_location(ethanol) == {
        (labs.cabinet, labs.litre): StockTotals(total=3.0, current=1.0),
        (labs.fridge, labs.litre): StockTotals(total=0.5, current=0.5),
    }


def test_stock_by_location_hides_other_entities(session, ethanol, people, labs):
    session.add_all(
        [
            Storage(product=ethanol, storelocation=labs.cabinet, unit=labs.litre, storage_quantity=1.0),
            Storage(product=ethanol, storelocation=labs.fridge, unit=labs.litre, storage_quantity=0.5),
        ]
    )
    permissions = PermissionService(session)
    permissions.grant(people.bob, "r", "storages", labs.chemistry)
    permissions.grant(people.carol, "all", "all")
    session.commit()

    stocks = StockService(session)
    assert stocks.stock_by_location(ethanol, people.bob) == {
        (labs.cabinet, labs.litre): StockTotals(total=1.0, current=1.0),
    }
    assert set(stocks.stock_by_location(ethanol, people.carol)) == {
        (labs.cabinet, labs.litre),
        (labs.fridge, labs.litre),
    }
    assert stocks.stock_by_location(ethanol, people.alice) == {}
