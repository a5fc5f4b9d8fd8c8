"""Domain constants for net worth analytics."""

INCOME = "Income"
SAVINGS_FROM_INCOME = "Savings from Income"
INTEREST_EARNED = "Interest Earned"
CAPITAL_GAINS = "Capital Gains"

TOTAL_INCOME = "Total Income"
TOTAL_GROWTH = "Total Growth"
SAVINGS_RATE = "Savings Rate"

SOURCE_OF_GROWTH_LABELS = (
    SAVINGS_FROM_INCOME,
    INTEREST_EARNED,
    CAPITAL_GAINS,
)


__all__ = [
    "INCOME",
    "SAVINGS_FROM_INCOME",
    "INTEREST_EARNED",
    "CAPITAL_GAINS",
    "TOTAL_INCOME",
    "TOTAL_GROWTH",
    "SAVINGS_RATE",
    "SOURCE_OF_GROWTH_LABELS",
]
