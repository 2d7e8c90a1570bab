"""Token identity and exact token amounts."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from swap_router.models.types import UINT256_MAX, normalize_address


@dataclass(frozen=True)
class Token:
    """An ERC20 token on a specific chain.

    Identity is ``(chain_id, address)``; symbol and name are metadata only,
    so two tokens sharing a symbol on the same chain are still distinct.
    """

    chain_id: int
    address: str
    decimals: int = field(compare=False)
    symbol: str | None = field(default=None, compare=False)
    name: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", normalize_address(self.address, validate=True))
        if not 0 <= self.decimals <= 77:
            raise ValueError(f"Token decimals out of range: {self.decimals}")

    def __str__(self) -> str:
        return self.symbol or self.address


@dataclass(frozen=True)
class TokenAmount:
    """An exact amount of a token, in the token's smallest unit.

    ``raw`` is always a Python int. Conversions from human-readable
    decimals go through ``Decimal`` and refuse anything that would need
    rounding.
    """

    token: Token
    raw: int

    def __post_init__(self) -> None:
        if isinstance(self.raw, bool) or not isinstance(self.raw, int):
            raise TypeError(f"TokenAmount requires an int, got {type(self.raw).__name__}")
        if not 0 <= self.raw <= UINT256_MAX:
            raise ValueError(f"TokenAmount out of uint256 range: {self.raw}")

    @classmethod
    def from_raw(cls, token: Token, raw: int | str) -> TokenAmount:
        """Build from a raw integer or decimal integer string."""
        if isinstance(raw, str):
            if not (raw.isascii() and raw.isdigit()):
                raise ValueError(f"Raw amount must be a decimal integer string: '{raw}'")
            raw = int(raw)
        return cls(token=token, raw=raw)

    @classmethod
    def from_decimal(cls, token: Token, value: str | Decimal) -> TokenAmount:
        """Parse a human-readable amount such as ``"10000.5"``.

        Raises:
            ValueError: For floats, malformed input, negative values, or
                more fractional digits than the token supports
        """
        if isinstance(value, float):
            raise ValueError("Refusing to parse a float amount; pass a string or Decimal")
        try:
            dec = Decimal(value)
        except InvalidOperation as err:
            raise ValueError(f"Invalid decimal amount: '{value}'") from err
        if not dec.is_finite():
            raise ValueError(f"Invalid decimal amount: '{value}'")

        # Work on the digit tuple so no Decimal context precision applies
        sign, digits, exponent = dec.as_tuple()
        if sign and any(digits):
            raise ValueError(f"Amount cannot be negative: {value}")
        coefficient = int("".join(str(d) for d in digits) or "0")
        shift = int(exponent) + token.decimals
        if shift >= 0:
            raw = coefficient * 10**shift
        else:
            raw, remainder = divmod(coefficient, 10**-shift)
            if remainder:
                raise ValueError(f"Amount {value} has more than {token.decimals} decimal places")
        return cls(token=token, raw=raw)

    def to_decimal(self) -> Decimal:
        """Human-readable amount (exact)."""
        return Decimal((0, tuple(int(d) for d in str(self.raw)), -self.token.decimals))

    def __str__(self) -> str:
        return f"{self.to_decimal()} {self.token}"

    def __add__(self, other: TokenAmount) -> TokenAmount:
        self._check_same_token(other)
        return TokenAmount(self.token, self.raw + other.raw)

    def __sub__(self, other: TokenAmount) -> TokenAmount:
        self._check_same_token(other)
        return TokenAmount(self.token, self.raw - other.raw)

    def _check_same_token(self, other: TokenAmount) -> None:
        if other.token != self.token:
            raise ValueError(f"Token mismatch: {self.token} vs {other.token}")


__all__ = ["Token", "TokenAmount"]
