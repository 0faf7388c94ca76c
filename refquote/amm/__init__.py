"""AMM pricing for exchange pools."""

from refquote.amm.constant_product import (
    ConstantProductAMM,
    apply_slippage,
    constant_product,
    estimate_constant_product_output,
    validate_slippage_bps,
)

__all__ = [
    "ConstantProductAMM",
    "apply_slippage",
    "constant_product",
    "estimate_constant_product_output",
    "validate_slippage_bps",
]
