from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class RentalCreate(BaseModel):
    product_sn: str = Field(min_length=1)
    start_date: str = Field(min_length=1)
    transaction_type: int
    end_date: Optional[str] = None
    qty: float
    description: Optional[str] = ""

    @field_validator("description", mode="after")
    @classmethod
    def blank_description(cls, value: Optional[str]) -> str:
        return value or ""

    model_config = {
        "json_schema_extra": {
            "example": {
                "product_sn": "ABCDE123",
                "start_date": "2024-07-19 17:19:10",
                "transaction_type": 1,
                "end_date": None,
                "qty": 1,
                "description": "",
            }
        },
    }


class RentalUpdate(BaseModel):
    """Partial update. Only fields present in the body change.

    ``start_date`` is not part of the model: the row is always addressed by the
    key it was stored under, so a body value is dropped.
    """

    transaction_type: Optional[int] = None
    end_date: Optional[str] = None
    qty: Optional[float] = None
    description: Optional[str] = None

    @model_validator(mode="after")
    def required_not_cleared(self) -> "RentalUpdate":
        for name in ("transaction_type", "qty"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict[str, object]:
        values = self.model_dump(include=self.model_fields_set)
        if "description" in values and values["description"] is None:
            values["description"] = ""
        return values


class RentalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_sn: str
    start_date: str
    transaction_type: int
    end_date: Optional[str] = None
    qty: float
    description: str
