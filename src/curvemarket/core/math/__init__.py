"""
Core math modules для curvemarket

Fixed-point примитивы, кривая цены и численное интегрирование.
"""

# Fixed Point
from curvemarket.core.math.fixed_point import (
    # Constants
    BPS_DENOMINATOR,
    MAX_UINT256,
    SCALE,
    # Checked arithmetic
    checked_add,
    checked_div,
    checked_mul,
    checked_sub,
    # Scaled arithmetic
    bps_of,
    div_scaled,
    half,
    mul_scaled,
    # Conversion
    clamp_non_negative,
    from_fixed,
    to_fixed,
)

# Price Model
from curvemarket.core.math.price_model import (
    all_prices,
    is_price_bounded,
    normalized_prices,
    price,
    sum_of_prices,
)

# Curve Integration
from curvemarket.core.math.curve_integration import (
    LARGE_TRADE_THRESHOLD,
    STEPS_LARGE_TRADE,
    STEPS_SMALL_TRADE,
    buy_cost,
    integration_steps,
    sell_return,
    step_sizes,
)

# Budget Solver
from curvemarket.core.math.budget_solver import (
    BINARY_SEARCH_ITERATIONS,
    PRICE_PREMIUM,
    SMALL_BUDGET_THRESHOLD,
    BudgetQuote,
    post_trade_price_check,
    tokens_for_budget,
)

__all__ = [
    # Fixed Point — Constants
    "BPS_DENOMINATOR",
    "MAX_UINT256",
    "SCALE",
    # Fixed Point — Checked arithmetic
    "checked_add",
    "checked_div",
    "checked_mul",
    "checked_sub",
    # Fixed Point — Scaled arithmetic
    "bps_of",
    "div_scaled",
    "half",
    "mul_scaled",
    # Fixed Point — Conversion
    "clamp_non_negative",
    "from_fixed",
    "to_fixed",
    # Price Model
    "all_prices",
    "is_price_bounded",
    "normalized_prices",
    "price",
    "sum_of_prices",
    # Curve Integration — Constants
    "LARGE_TRADE_THRESHOLD",
    "STEPS_LARGE_TRADE",
    "STEPS_SMALL_TRADE",
    # Curve Integration — Functions
    "buy_cost",
    "integration_steps",
    "sell_return",
    "step_sizes",
    # Budget Solver — Constants
    "BINARY_SEARCH_ITERATIONS",
    "PRICE_PREMIUM",
    "SMALL_BUDGET_THRESHOLD",
    # Budget Solver — Types
    "BudgetQuote",
    # Budget Solver — Functions
    "post_trade_price_check",
    "tokens_for_budget",
]
