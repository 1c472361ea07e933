from typing import Literal


TaxType = Literal["flat", "percentage"]

TAX_TYPES = ("flat", "percentage")


def calculate_total(amount: float, tax_type: str, tax_amount: float) -> float:
    """Return the tax-adjusted total of an entry.

    ``flat`` adds ``tax_amount`` as is, ``percentage`` adds ``tax_amount``
    percent of ``amount``. The result is not rounded; callers that display
    it round for presentation only.
    """
    if tax_type == "percentage":
        return amount + amount * tax_amount / 100
    if tax_type == "flat":
        return amount + tax_amount
    raise ValueError(f"Unknown tax type: {tax_type!r}")
