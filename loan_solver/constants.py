"""Numeric limits and defaults shared by the engine and the front ends."""

from decimal import Decimal

# Balance below which a loan counts as paid off.
PAID_OFF_THRESHOLD = Decimal("0.01")

# 100 years; no realistic loan runs longer.
MAX_SIMULATION_MONTHS = 1200

MONTHS_PER_YEAR = 12

# Bisection settings for the monthly payment search. The upper bound is a
# multiple of the principal: no sensible payment exceeds twice the debt.
PAYMENT_TOLERANCE = Decimal("0.01")
PAYMENT_UPPER_BOUND_FACTOR = Decimal(2)

# Bisection settings for the maximum loan amount search.
PRINCIPAL_TOLERANCE = Decimal(1)
PRINCIPAL_UPPER_BOUND = Decimal(10_000_000)

MAX_SOLVER_ITERATIONS = 100

DEFAULT_CURRENCY = "€"
