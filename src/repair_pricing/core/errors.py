from __future__ import annotations


class PricingError(ValueError):
    """Base class for validation failures raised by the pricing core."""


class InvalidLineItem(PricingError):
    pass


class InvalidDiscount(PricingError):
    pass


class InvalidTaxRate(PricingError):
    pass


class FormattingFailure(PricingError):
    """Locale-aware formatting could not render an amount; recovered by the symbol fallback."""


class ReferenceDataError(Exception):
    """Currency or tax-rate reference data could not be fetched or parsed."""

    def __init__(self, message: str, *, organization_id: str | None = None):
        super().__init__(message)
        self.organization_id = organization_id
