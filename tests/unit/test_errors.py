"""Tests for the routing error taxonomy."""

import pytest

from swap_router.errors import (
    DataUnavailable,
    InsufficientLiquidity,
    InvalidDeadline,
    InvalidSlippageTolerance,
    NoRouteFound,
    NoViableRoute,
    RoutingCancelled,
    RoutingError,
    StaleDataTimeout,
)


@pytest.mark.parametrize(
    "error,kind",
    [
        (InsufficientLiquidity, "insufficient_liquidity"),
        (NoRouteFound, "no_route_found"),
        (NoViableRoute, "no_viable_route"),
        (DataUnavailable, "data_unavailable"),
        (StaleDataTimeout, "stale_data_timeout"),
        (InvalidDeadline, "invalid_deadline"),
        (InvalidSlippageTolerance, "invalid_slippage_tolerance"),
        (RoutingCancelled, "routing_cancelled"),
    ],
)
def test_kinds(error, kind):
    err = error("boom")

    assert isinstance(err, RoutingError)
    assert err.kind == kind
    assert err.to_dict()["error"] == kind


def test_params_are_kept():
    err = NoRouteFound("No path", token_in="0xaa", token_out="0xbb", max_hops=3)

    assert err.params == {"token_in": "0xaa", "token_out": "0xbb", "max_hops": 3}
    assert str(err) == "No path"


def test_to_dict_is_json_ready():
    err = InsufficientLiquidity("Too big", amount=10**30, path=("0xaa", "0xbb"), ratio=object())

    doc = err.to_dict()

    assert doc["message"] == "Too big"
    assert doc["params"]["amount"] == 10**30
    assert doc["params"]["path"] == ["0xaa", "0xbb"]
    assert isinstance(doc["params"]["ratio"], str)


def test_can_catch_all_routing_errors():
    with pytest.raises(RoutingError):
        raise StaleDataTimeout("late", timeout_seconds=5.0)
