import asyncio

import pytest

from conftest import FailingEventStore
from technova.core.errors import ValidationError
from technova.models import InteractionType, OrderItem
from technova.services.recorder import InteractionRecorder


def test_record_appends_event(store):
    result = asyncio.run(InteractionRecorder(store).record("u1", 3, "cart_add", "men's clothing"))

    assert result.success and result.recorded == 1
    [ev] = asyncio.run(store.query())
    assert ev.user_id == "u1"
    assert ev.product_id == 3
    assert ev.interaction_type == InteractionType.CART_ADD
    assert ev.category == "men's clothing"


def test_anonymous_user_is_a_noop(store):
    result = asyncio.run(InteractionRecorder(store).record(None, 3, "view"))

    assert result.success and result.recorded == 0
    assert asyncio.run(store.query()) == []


@pytest.mark.parametrize("kind,product", [("like", 3), ("view", None), ("view", "abc")])
def test_invalid_events_are_rejected(store, kind, product):
    with pytest.raises(ValidationError):
        asyncio.run(InteractionRecorder(store).record("u1", product, kind))
    assert asyncio.run(store.query()) == []


def test_store_failure_is_reported_not_raised(caplog):
    result = asyncio.run(InteractionRecorder(FailingEventStore()).record("u1", 3, "purchase"))

    assert result.success is False
    assert "tracking purchase of product 3 for user u1 failed" in caplog.text


def test_record_many_tracks_every_order_line(store):
    items = [OrderItem(product_id=1), OrderItem(product_id=9, category="electronics")]
    result = asyncio.run(InteractionRecorder(store).record_many("u1", items))

    assert result.recorded == 2
    events = asyncio.run(store.query())
    assert {e.interaction_type for e in events} == {InteractionType.PURCHASE}
    assert [e.category for e in events] == [None, "electronics"]


def test_dispatch_swallows_everything(caplog):
    recorder = InteractionRecorder(FailingEventStore())
    asyncio.run(recorder.dispatch("u1", 3, "view"))
    asyncio.run(recorder.dispatch("u1", 3, "wishlist"))
    asyncio.run(recorder.dispatch_many("u1", [OrderItem(product_id=3)]))

    assert "dropping invalid interaction" in caplog.text


@pytest.mark.parametrize("product", [3.9, True, False, "3.5"])
def test_non_integral_product_ids_are_rejected(store, product):
    with pytest.raises(ValidationError):
        asyncio.run(InteractionRecorder(store).record("u1", product, "view"))
    assert asyncio.run(store.query()) == []


def test_integral_product_ids_are_accepted(store):
    asyncio.run(InteractionRecorder(store).record("u1", 4.0, "view"))
    asyncio.run(InteractionRecorder(store).record("u1", "7", "view"))
    assert [e.product_id for e in asyncio.run(store.query())] == [4, 7]
