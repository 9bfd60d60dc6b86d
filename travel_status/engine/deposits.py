"""Deposit classification against a package's expected total."""

from typing import Any, Optional

from travel_status.schemas.customer_schema import PackagePolicy
from travel_status.schemas.status_schema import DepositEvaluation, DepositState
from travel_status.utils import to_amount


def evaluate_deposits(
    paid_a: Any, paid_b: Any, policy: Optional[PackagePolicy]
) -> DepositEvaluation:
    """Classify what the customer has paid so far.

    The missing-policy check runs before the amount checks: a zero deposit
    against an unknown package is not the same as a zero deposit against a
    known one, and the expected amount is reported as unavailable.
    """
    total_paid = round(to_amount(paid_a) + to_amount(paid_b), 2)

    if policy is None:
        return DepositEvaluation(state=DepositState.UNKNOWN_PACKAGE, total_paid=total_paid)

    expected = policy.total_deposit
    remaining = max(0.0, round(expected - total_paid, 2))

    if total_paid == 0:
        state = DepositState.NONE
    elif total_paid >= expected:
        state = DepositState.COMPLETE
    else:
        state = DepositState.PARTIAL

    return DepositEvaluation(
        state=state,
        total_paid=total_paid,
        expected=expected,
        remaining=remaining,
        activation_method=policy.activation_method,
    )
