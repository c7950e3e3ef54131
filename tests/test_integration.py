"""End-to-end run against a real DynamoDB endpoint.

Runs only with ``MOVIES_RUN_INTEG=1`` and working AWS credentials. Tests share
one table and depend on running in file order.
"""

import os
import uuid
from decimal import Decimal

import pytest

from partiql_basics import PartiQLWrapper
from partiql_settings import PartiQLSettings, make_resource
from scaffold import Scaffold

pytestmark = [
    pytest.mark.integ,
    pytest.mark.skipif(
        os.environ.get("MOVIES_RUN_INTEG") != "1", reason="set MOVIES_RUN_INTEG=1 to run"
    ),
]


@pytest.fixture(scope="module")
def live_settings():
    return PartiQLSettings()


@pytest.fixture(scope="module")
def table_name(live_settings):
    return live_settings.table_name_for(uuid.uuid4().hex[:8])


@pytest.fixture(scope="module")
def live_resource(live_settings):
    return make_resource(live_settings)


@pytest.fixture(scope="module")
def live_scaffold(live_resource, live_settings, table_name):
    scaffold = Scaffold(live_resource, live_settings)
    yield scaffold
    if scaffold.exists(table_name):
        scaffold.delete_table(table_name)


@pytest.fixture(scope="module")
def sdk(live_resource, table_name):
    return PartiQLWrapper(live_resource, table_name)


def test_create_table(live_scaffold, table_name):
    live_scaffold.create_table(table_name)
    assert live_scaffold.exists(table_name)


def test_write_batch(live_scaffold, movie_fixture_path):
    movies = live_scaffold.fetch_movie_data(movie_fixture_path)
    assert len(movies) > 200
    live_scaffold.write_batch(movies)


def test_select_item_by_title(sdk):
    result = sdk.select_item_by_title("Star Wars")
    assert len(result.items) >= 1
    assert result.items[0].title == "Star Wars"


def test_update_rating_by_title(sdk):
    before = next(m for m in sdk.select_item_by_title("The Big Lebowski").items if m.year == 1998)

    sdk.update_rating_by_title("The Big Lebowski", 1998, 10.0)

    after = next(m for m in sdk.select_item_by_title("The Big Lebowski").items if m.year == 1998)
    assert after.info.rating == Decimal("10")
    assert after.info.plot == before.info.plot


def test_delete_item_by_title_keeps_other_years(sdk):
    sdk.delete_item_by_title("Ocean's Eleven", 1960)

    years = [movie.year for movie in sdk.select_item_by_title("Ocean's Eleven").items]
    assert 1960 not in years
    assert 2001 in years


def test_delete_item_by_title(sdk):
    sdk.delete_item_by_title("The Silence of the Lambs", 1991)

    result = sdk.select_item_by_title("The Silence of the Lambs")
    assert all(movie.year != 1991 for movie in result.items)


def test_insert_item(sdk):
    sdk.insert_item("The Prancing of the Lambs", 2005, "A movie about happy livestock.", 5.0)

    result = sdk.select_item_by_title("The Prancing of the Lambs")
    new_movie = next((movie for movie in result.items if movie.year == 2005), None)
    assert new_movie is not None
    assert new_movie.title == "The Prancing of the Lambs"
    assert new_movie.info is not None


def test_batch_execute_select(sdk):
    titles = ["Star Wars", "The Big Lebowski", "The Prancing of the Lambs"]
    result = sdk.batch_execute_select(titles)
    assert len(result.responses) == len(titles)


def test_batch_execute_write(sdk):
    pairs = [("Mean Girls", 2004), ("The Prancing of the Lambs", 2005)]
    sdk.batch_execute_write(pairs)
    for title, _ in pairs:
        assert sdk.select_item_by_title(title).items == []


def test_delete_table(live_scaffold, table_name):
    if live_scaffold.exists(table_name):
        live_scaffold.delete_table(table_name)
    assert not live_scaffold.exists(table_name)
