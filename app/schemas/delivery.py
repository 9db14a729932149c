# app/schemas/delivery.py
from datetime import date

from sqlmodel import SQLModel


class DeliveryEstimate(SQLModel):
    """
    Result of the delivery estimator.

    A display heuristic only: the date is not a logistics commitment.
    """

    deliverable: bool
    estimated_date: date | None = None
    range_label: str | None = None
    pincode: str | None = None
