"""
Django Pointsman - Customer points ledger.

Usage:
    from pointsman import PointsService

    lookup = PointsService.lookup("5551234567")
    customer, tx = PointsService.accrue(lookup.customer, 42)
    customer, tx = PointsService.redeem(customer, 5)
    page = PointsService.history(customer, page=1)
"""


def __getattr__(name):
    if name == "PointsService":
        from pointsman.service import PointsService

        return PointsService
    if name == "PointsmanError":
        from pointsman.exceptions import PointsmanError

        return PointsmanError
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["PointsService", "PointsmanError"]
__version__ = "0.1.0"
