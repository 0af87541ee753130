"""Domain-specific errors for the planning engine.

Only InvalidConstraintsError is fatal to a planning run. Every other
condition degrades to a PlanFlag on the result.
"""


class PlannerError(Exception):
    """Base exception for all planning errors."""

    pass


class InvalidConstraintsError(PlannerError):
    """Raised when intake constraints cannot be planned against.

    Carries every validation message so the caller can re-run intake once.
    """

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("Intake validation failed: " + "; ".join(self.errors))


class InsufficientDataError(PlannerError):
    """Raised when the load ratio lacks enough days of history."""

    def __init__(self, days_with_data: int, required_days: int) -> None:
        self.days_with_data = days_with_data
        self.required_days = required_days
        super().__init__(
            f"Insufficient data for load ratio: {days_with_data} day(s) with data, need {required_days}"
        )
