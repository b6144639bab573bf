"""Pointsman exceptions."""


class PointsmanError(Exception):
    """
    Structured exception for ledger and customer operations.

    Every failure carries a stable ``code``, a human readable ``message``
    (defaulted per code) and free-form ``data`` for the caller.

    Usage:
        try:
            customer, tx = ledger.redeem(customer, 15)
        except PointsmanError as e:
            if e.code == "INSUFFICIENT_POINTS":
                show(e.message)
    """

    _default_messages = {
        "CUSTOMER_NOT_FOUND": "Customer not found",
        "PHONE_REQUIRED": "Phone number is required",
        "INVALID_NAME": "Name must be text",
        "DUPLICATE_PHONE": "This phone number already exists",
        "INVALID_AMOUNT": "Please enter a valid amount",
        "INVALID_INCREMENT": "Redemption must be in the configured increments",
        "INSUFFICIENT_POINTS": "Not enough points for this redemption",
        "INVALID_PAGE_SIZE": "Page size must be a positive integer",
        "TRANSACTION_IMMUTABLE": "Transactions cannot be changed once recorded",
        "STORE_UNAVAILABLE": "The data store is unavailable",
        "INVALID_JSON": "Invalid JSON",
        "INVALID_DATE": "Invalid date",
        "INVALID_PAGE": "Invalid page",
    }

    def __init__(self, code: str, message: str | None = None, **data):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(f"{code}: {self.message}")

    def as_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "data": self.data}
