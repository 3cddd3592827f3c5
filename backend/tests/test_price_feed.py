"""Tests for the community price feed."""
from datetime import date, timedelta
from decimal import Decimal

import pytest

from pricetrack.models import Product
from pricetrack.schemas.price import FeedRecord
from pricetrack.services.price_feed import PriceFeedAggregator, clamp_feed_limit, summarize_feed


@pytest.mark.parametrize("raw, expected", [
    (None, 120),
    ("", 120),
    ("abc", 120),
    ("NaN", 120),
    (float("nan"), 120),
    (float("inf"), 120),
    ("-inf", 120),
    (5, 20),
    (-3, 20),
    (9999, 300),
    ("45", 45),
    (45.9, 45),
    ("299.99", 299),
    (120, 120),
])
def test_clamp_feed_limit(raw, expected):
    assert clamp_feed_limit(raw) == expected


async def _fill(add_observation, catalog, count):
    start = date(2024, 1, 1)
    for offset in range(count):
        await add_observation(catalog.milk, 1000 + offset, start + timedelta(days=offset))


async def test_small_limits_are_raised_to_the_minimum(db, catalog, add_observation):
    await _fill(add_observation, catalog, 25)

    page = await PriceFeedAggregator(db).get_feed(5)

    assert page.limit == 20
    assert page.count == 20
    assert len(page.records) == 20
    # Newest first: the window holds the 20 most recent observations
    assert page.records[0].price == Decimal("1024.00")
    assert page.records[-1].price == Decimal("1005.00")


async def test_large_and_nan_limits(db, catalog, add_observation):
    await _fill(add_observation, catalog, 3)
    aggregator = PriceFeedAggregator(db)

    big = await aggregator.get_feed(9999)
    assert big.limit == 300
    assert big.count == 3

    nan = await aggregator.get_feed("NaN")
    assert nan.limit == 120
    assert nan.count == 3


async def test_feed_skips_invalid_and_orders_ties_by_id(db, catalog, add_observation):
    first = await add_observation(catalog.milk, 1000, "2024-06-01")
    second = await add_observation(catalog.bread, 2000, "2024-06-01")
    await add_observation(catalog.rice, 1, "2024-06-02", is_valid=False)

    page = await PriceFeedAggregator(db).get_feed(None)

    assert [r.observation_id for r in page.records] == [second, first]
    assert all(r.is_valid for r in page.records)


async def test_feed_records_are_enriched(db, catalog, add_observation):
    await add_observation(catalog.milk, 990, "2024-06-01", branch_id=catalog.jumbo_costanera, user_id=catalog.bruno)

    [record] = (await PriceFeedAggregator(db).get_feed(None)).records

    assert record.product_name == "Leche Entera 1L"
    assert record.barcode == "7801000000010"
    assert record.brand == "Colun"
    assert record.category == "Dairy"
    assert record.branch_name == "Jumbo Costanera"
    assert record.supermarket_name == "Jumbo"
    assert record.user_name == "Bruno Diaz"


@pytest.mark.parametrize("search, expected_products", [
    ("leche", {10}),            # product name, any case
    ("  LECHE  ", {10}),        # trimmed
    ("0000011", {11}),          # barcode
    ("bruno", {12}),            # reporting user
    ("jumbo", {11}),            # supermarket
    ("%", {12}),                # wildcards match literally
    ("_grado", {12}),
    ("nothing like this", set()),
    ("   ", {10, 11, 12}),      # blank search returns everything
])
async def test_feed_search(db, catalog, add_observation, search, expected_products):
    await add_observation(catalog.milk, 1000, "2024-06-01", branch_id=catalog.lider_centro, user_id=catalog.ana)
    await add_observation(catalog.bread, 2000, "2024-06-02", branch_id=catalog.jumbo_costanera, user_id=catalog.ana)
    await add_observation(catalog.rice, 1500, "2024-06-03", branch_id=catalog.lider_maipu, user_id=catalog.bruno)

    page = await PriceFeedAggregator(db).get_feed(None, search)

    assert {r.product_id for r in page.records} == expected_products
    assert page.count == len(expected_products)


@pytest.mark.parametrize("search", ["ñoquis", "ÑOQUIS", "azúcar", "AZÚCAR"])
async def test_feed_search_folds_non_ascii_case(db, session_factory, catalog, add_observation, search):
    async with session_factory() as session:
        session.add(Product(id=13, barcode="7801000000013", name="Ñoquis de Azúcar"))
        await session.commit()
    await add_observation(13, 1800, "2024-06-04")
    await add_observation(catalog.milk, 1000, "2024-06-01")

    page = await PriceFeedAggregator(db).get_feed(None, search)

    assert [r.product_id for r in page.records] == [13]


async def test_long_search_text_is_matched_not_rejected(db, catalog, add_observation):
    await add_observation(catalog.milk, 1000, "2024-06-01")

    assert (await PriceFeedAggregator(db).get_feed(None, "leche" * 60)).records == []


def _record(observation_id, product_id, user_id, price, supermarket):
    return FeedRecord(
        observation_id=observation_id,
        product_id=product_id,
        branch_id=1,
        price=Decimal(price),
        observed_on=date(2024, 1, 1),
        user_id=user_id,
        supermarket_name=supermarket,
    )


def test_summarize_feed():
    records = [
        _record(1, 10, 1, "1000", "Lider"),
        _record(2, 10, 2, "1100", "Jumbo"),
        _record(3, 11, 1, "2000", "Lider"),
        _record(4, 12, 1, "500", None),
    ]

    summary = summarize_feed(records)

    assert summary.supermarkets == ["Jumbo", "Lider"]
    assert summary.total_records == 4
    assert summary.distinct_users == 2
    assert summary.distinct_products == 3
    assert summary.average_price == Decimal("1150.00")
    groups = {g.supermarket_name: (g.count, g.average_price) for g in summary.groups}
    assert groups["Lider"] == (2, Decimal("1500.00"))
    assert groups["Jumbo"] == (1, Decimal("1100.00"))


def test_summarize_feed_for_one_supermarket():
    records = [
        _record(1, 10, 1, "1000", "Lider"),
        _record(2, 10, 2, "1100", "Jumbo"),
        _record(3, 11, 1, "2001", "Lider"),
    ]

    summary = summarize_feed(records, "Lider")

    assert summary.supermarkets == ["Jumbo", "Lider"]
    assert summary.total_records == 2
    assert summary.distinct_users == 1
    assert summary.distinct_products == 2
    assert summary.average_price == Decimal("1500.50")
    assert [g.supermarket_name for g in summary.groups] == ["Lider"]


def test_summarize_empty_feed():
    summary = summarize_feed([])
    assert summary.total_records == 0
    assert summary.average_price is None
    assert summary.groups == []
