"""Domain exceptions raised by the billing engine and its services."""


class SocietyBillsError(Exception):
    """Base exception for the billing engine"""


class ValidationError(SocietyBillsError):
    """Request or configuration data is missing or malformed"""


class MissingRateError(ValidationError):
    """A billing category defines no rate for a flat type being billed"""

    def __init__(self, category_label: str, flat_type: str) -> None:
        self.category_label = category_label
        self.flat_type = flat_type
        super().__init__(f"No rate for category '{category_label}' and flat type '{flat_type}'")


class DuplicateConfigError(ValidationError):
    """A society already has a billing config with this effective date"""

    def __init__(self, effective_from: str) -> None:
        self.effective_from = effective_from
        super().__init__(f"A config effective from {effective_from} already exists.")


class ConfigNotFoundError(SocietyBillsError):
    """No billing config is effective for the requested period"""

    def __init__(self, period: str) -> None:
        self.period = period
        super().__init__(f"No billing config found for period {period}")


class NotFoundError(SocietyBillsError):
    """Entity does not exist in the requested partition"""


class InvalidTransitionError(SocietyBillsError):
    """Approval status change is not in the transition table"""

    def __init__(self, from_status: str, to_status: str) -> None:
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Invalid approval transition: {from_status} -> {to_status}")


class PermissionDeniedError(SocietyBillsError):
    """Actor lacks the capability required for the operation"""


class ConflictError(SocietyBillsError):
    """Stored version differs from the version the caller read"""


class PersistenceError(SocietyBillsError):
    """The store is unavailable or rejected a write"""
