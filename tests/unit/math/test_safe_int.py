"""Tests for SafeInt checked arithmetic."""

import pytest

from swap_router.safe_int import (
    DivisionByZero,
    S,
    SafeInt,
    SafeIntError,
    Underflow,
)


class TestSafeIntConstruction:
    """Tests for SafeInt construction."""

    def test_from_int(self):
        assert SafeInt(42).value == 42

    def test_from_safeint(self):
        assert SafeInt(SafeInt(42)).value == 42

    def test_alias_s(self):
        """S is a short alias for SafeInt."""
        assert S is SafeInt

    def test_from_large(self):
        assert SafeInt(10**80).value == 10**80

    @pytest.mark.parametrize("value", ["42", 3.14, True, None])
    def test_from_invalid_type_raises(self, value):
        with pytest.raises(TypeError):
            SafeInt(value)  # type: ignore[arg-type]


class TestSafeIntArithmetic:
    """Tests for arithmetic operators."""

    def test_add(self):
        assert S(2) + S(3) == 5
        assert 2 + S(3) == 5

    def test_sub(self):
        assert S(10) - S(4) == 6
        assert S(10) - 10 == 0

    def test_sub_underflow_raises(self):
        with pytest.raises(Underflow):
            S(3) - S(4)

    def test_rsub_underflow_raises(self):
        with pytest.raises(Underflow):
            3 - S(4)

    def test_mul(self):
        assert S(6) * S(7) == 42
        assert 6 * S(7) == 42

    def test_floordiv(self):
        assert S(7) // S(2) == 3

    def test_floordiv_by_zero_raises(self):
        with pytest.raises(DivisionByZero):
            S(7) // S(0)

    def test_rfloordiv_by_zero_raises(self):
        with pytest.raises(DivisionByZero):
            7 // S(0)


class TestSafeIntComparison:
    def test_eq(self):
        assert S(5) == S(5)
        assert S(5) == 5
        assert S(5) != S(6)

    def test_ordering(self):
        assert S(1) < S(2)
        assert S(2) <= 2
        assert S(3) > 2
        assert S(3) >= S(3)

    def test_hash_matches_int(self):
        assert hash(S(42)) == hash(42)


class TestSafeIntConversion:
    def test_int(self):
        assert int(S(42)) == 42

    def test_bool(self):
        assert S(1)
        assert not S(0)

    def test_repr(self):
        assert repr(S(42)) == "SafeInt(42)"


class TestSafeIntExceptionHierarchy:
    """All SafeInt errors are SafeIntError and ArithmeticError."""

    @pytest.mark.parametrize("error", [DivisionByZero, Underflow])
    def test_is_safeint_error(self, error):
        assert issubclass(error, SafeIntError)
        assert issubclass(error, ArithmeticError)


class TestSafeIntChaining:
    def test_constant_product_formula(self):
        """The constant product output formula evaluated through SafeInt."""
        amount_in, reserve_in, reserve_out = 10**18, 1000 * 10**18, 2_500_000 * 10**6
        with_fee = S(amount_in) * S(997_000)

        out = (with_fee * S(reserve_out)) // (S(reserve_in) * S(1_000_000) + with_fee)

        assert out.value == amount_in * 997_000 * reserve_out // (
            reserve_in * 1_000_000 + amount_in * 997_000
        )
        assert (S(reserve_out) - out).value > 0
