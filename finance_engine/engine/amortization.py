"""
Amortization Step

Advances one debt by one period. Strategy-agnostic: the caller decides the
payment, this only applies it.
"""

from finance_engine.models.debt import AmortizationStep


def step_debt(balance: float, monthly_rate: float, payment: float) -> AmortizationStep:
    """
    Accrue one period of interest and apply a payment.

    new_balance = max(0, balance + balance * monthly_rate - payment)

    Overpayment is not carried as a credit. The balance may grow when the
    payment does not cover the interest.
    """
    interest = balance * monthly_rate
    new_balance = max(0.0, balance + interest - payment)
    return AmortizationStep(
        new_balance=new_balance,
        interest=interest,
        payment=payment,
    )
