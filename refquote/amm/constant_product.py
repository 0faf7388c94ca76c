"""Constant-product AMM math for Ref-style simple pools.

Simple pools hold reserve_in * reserve_out = k, net of the pool fee. The fee
is taken from the input before pricing, and every step truncates exactly as
the exchange contract does; any deviation changes which pool ranks best.
"""

from __future__ import annotations

from refquote.constants import FEE_DIVISOR, MAX_SLIPPAGE_BPS
from refquote.errors import InvalidInput
from refquote.models.pool import Pool
from refquote.safe_int import mul_div, net_of_bps


class ConstantProductAMM:
    """Constant-product pricing: x * y = k, fee charged on input.

    Formula:
        amount_in_after_fee = amount_in * (10000 - fee_bps) // 10000
        amount_out = amount_in_after_fee * reserve_out // (reserve_in + amount_in_after_fee)
    """

    def get_amount_out(
        self,
        amount_in: int,
        reserve_in: int,
        reserve_out: int,
        fee_bps: int = 30,
    ) -> int:
        """Calculate output amount using the constant product formula.

        Args:
            amount_in: Input token amount
            reserve_in: Reserve of input token in pool
            reserve_out: Reserve of output token in pool
            fee_bps: Pool fee in basis points (30 = 0.3%)

        Returns:
            Output token amount, 0 if the pool cannot price the swap
        """
        if amount_in <= 0:
            return 0
        if reserve_in <= 0 or reserve_out <= 0:
            return 0
        if not 0 <= fee_bps <= FEE_DIVISOR:
            return 0

        amount_in_after_fee = net_of_bps(amount_in, fee_bps)
        if amount_in_after_fee <= 0:
            return 0
        return mul_div(amount_in_after_fee, reserve_out, reserve_in + amount_in_after_fee)

    def estimate(self, pool: Pool, token_in: str, token_out: str, amount_in: int) -> int:
        """Estimate output for a directed token pair within a pool.

        Returns 0 when either token is missing from the pool, the tokens are
        the same, or either reserve is empty.
        """
        if token_in == token_out:
            return 0
        reserve_in = pool.reserve_of(token_in)
        reserve_out = pool.reserve_of(token_out)
        if reserve_in is None or reserve_out is None:
            return 0
        return self.get_amount_out(amount_in, reserve_in, reserve_out, pool.total_fee_bps)


# Singleton instance
constant_product = ConstantProductAMM()


def estimate_constant_product_output(
    pool: Pool,
    token_in_id: str,
    token_out_id: str,
    amount_in: int,
) -> int:
    """Expected output of swapping amount_in of token_in_id for token_out_id."""
    return constant_product.estimate(pool, token_in_id, token_out_id, amount_in)


def validate_slippage_bps(slippage_bps: int) -> int:
    """Validate a slippage tolerance in basis points.

    Raises:
        InvalidInput: If not an integer in 0..5000
    """
    if isinstance(slippage_bps, bool) or not isinstance(slippage_bps, int):
        raise InvalidInput(f"slippageBps must be an integer, got {slippage_bps!r}")
    if slippage_bps < 0 or slippage_bps > MAX_SLIPPAGE_BPS:
        raise InvalidInput(f"slippageBps must be between 0 and {MAX_SLIPPAGE_BPS}")
    return slippage_bps


def apply_slippage(amount_out: int, slippage_bps: int) -> int:
    """Minimum acceptable output: amount_out * (10000 - bps) // 10000."""
    bps = validate_slippage_bps(slippage_bps)
    return net_of_bps(amount_out, bps)


__all__ = [
    "ConstantProductAMM",
    "apply_slippage",
    "constant_product",
    "estimate_constant_product_output",
    "validate_slippage_bps",
]
