import pytest

from conftest import OWNER, order_json
from perp_orders.core.errors import ProtocolError
from perp_orders.core.models.enums import OrderStatus
from perp_orders.core.oms.parser import parse_order, parse_orders_response


def test_parse_order():
    o = parse_order(order_json(filled_amount=500_000))
    assert o.id == "order_1"
    assert o.user_id == OWNER
    assert o.amount == 1_500_000
    assert o.filled_amount == 500_000
    assert o.remaining_amount == 1_000_000
    assert o.side is True
    assert o.status is OrderStatus.PENDING
    assert not o.is_final
    assert o.fill_ratio == pytest.approx(1 / 3)


@pytest.mark.parametrize("status, expected", [("Filled", OrderStatus.FILLED), ("canceled", OrderStatus.CANCELED), ("Matched", OrderStatus.MATCHED)])
def test_status_case_insensitive(status, expected):
    assert parse_order(order_json(status=status)).status is expected


@pytest.mark.parametrize(
    "overrides",
    [
        {"status": "Exploded"},
        {"side": "buy"},
        {"amount": 1.5},
        {"amount": "1500000"},
        {"price": True},
        {"id": ""},
        {"filled_amount": 2_000_000},
        {"amount": -1},
    ],
)
def test_invalid_orders_are_protocol_errors(overrides):
    with pytest.raises(ProtocolError):
        parse_order(order_json(**overrides))


def test_not_an_object():
    with pytest.raises(ProtocolError):
        parse_order(["id"])


def test_parse_orders_response():
    orders = parse_orders_response({"orders": [order_json(), order_json(id="order_2")], "total": 2})
    assert [o.id for o in orders] == ["order_1", "order_2"]


@pytest.mark.parametrize("payload", [None, [], {"data": []}, {"orders": {}}])
def test_parse_orders_response_shape(payload):
    with pytest.raises(ProtocolError):
        parse_orders_response(payload)
