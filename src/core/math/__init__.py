"""
Core math modules

Арифметика номиналов: жадное разложение цены и сдачи.
"""

from src.core.math.change_decomposition import (
    CANONICAL_PRICE_VALUES_DEFAULT,
    PHASE_CHANGE,
    PHASE_PRICE,
    ChangeBreakdown,
    DecompositionIncomplete,
    GreedyResult,
    canonical_subset,
    decompose,
    greedy_breakdown,
    missing_canonical_values,
    solve_exact_payment,
)

__all__ = [
    # Change Decomposition — Constants
    "CANONICAL_PRICE_VALUES_DEFAULT",
    "PHASE_CHANGE",
    "PHASE_PRICE",
    # Change Decomposition — Exceptions
    "DecompositionIncomplete",
    # Change Decomposition — Types
    "ChangeBreakdown",
    "GreedyResult",
    # Change Decomposition — Functions
    "canonical_subset",
    "decompose",
    "greedy_breakdown",
    "missing_canonical_values",
    "solve_exact_payment",
]
