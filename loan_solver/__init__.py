"""Loan amortization solver: payoff term, required payment and maximum loan."""
