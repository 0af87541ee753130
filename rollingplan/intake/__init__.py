from rollingplan.intake.validation import collect_intake_errors, validate_intake

__all__ = ["collect_intake_errors", "validate_intake"]
