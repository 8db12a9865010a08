"""Order DTOs for the Service Layer.

Framework-agnostic inputs built with Pydantic v2 and frozen.  The DRF
serializers validate the HTTP payload shape; these DTOs normalise it
(strip whitespace, blank -> ``None``) before it reaches the service.
Business rules such as "courier required when shipping" stay in the
service so every caller gets the same ``ValidationError``.

- ``ShipmentInfoDTO``: courier and optional tracking number for ``shipped``.
- ``TransitionDTO``: a status change request.
- ``ShipmentUpdateDTO``: tracking number / sub-status change on a shipment.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from modules.orders.constants import ShipmentStatus


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class ShipmentInfoDTO(BaseModel):
    """Shipment data submitted together with a ``shipped`` transition."""

    model_config = ConfigDict(frozen=True)

    courier_name: str = ""
    tracking_number: Optional[str] = None

    @field_validator("courier_name")
    @classmethod
    def strip_courier(cls, v: str) -> str:
        return v.strip()

    @field_validator("tracking_number")
    @classmethod
    def blank_tracking_is_none(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


class TransitionDTO(BaseModel):
    """Immutable status change request."""

    model_config = ConfigDict(frozen=True)

    status: str
    shipment: Optional[ShipmentInfoDTO] = None
    notes: str = ""

    @field_validator("status")
    @classmethod
    def normalise_status(cls, v: str) -> str:
        return v.strip().lower()


class ShipmentUpdateDTO(BaseModel):
    """Immutable shipment update request; at least one field must be set."""

    model_config = ConfigDict(frozen=True)

    tracking_number: Optional[str] = None
    status: Optional[str] = None

    @field_validator("tracking_number")
    @classmethod
    def blank_tracking_is_none(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)

    @field_validator("status")
    @classmethod
    def known_shipment_status(cls, v: Optional[str]) -> Optional[str]:
        v = _blank_to_none(v)
        if v is None:
            return None
        v = v.lower()
        if v not in ShipmentStatus.values:
            raise ValueError(f"Unknown shipment status: {v}.")
        return v

    @model_validator(mode="after")
    def something_to_update(self):
        if self.tracking_number is None and self.status is None:
            raise ValueError("Provide tracking_number or status.")
        return self
