from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductFields(BaseModel):
    purchase_date: str = Field(min_length=1)
    name: str = Field(min_length=1)
    price: float = Field(ge=0)
    vendor: str = Field(min_length=1)
    description: Optional[str] = ""

    @field_validator("description", mode="after")
    @classmethod
    def blank_description(cls, value: Optional[str]) -> str:
        return value or ""


class ProductCreate(ProductFields):
    # Omit to have the server allocate one.
    product_sn: Optional[str] = Field(default=None, min_length=1)

    model_config = {
        "json_schema_extra": {
            "example": {
                "product_sn": "ABCDE123",
                "purchase_date": "2024-01-01T00:00:00Z",
                "name": "Widget",
                "price": 9.99,
                "vendor": "Acme",
                "description": "",
            }
        },
    }


class ProductUpdate(ProductFields):
    """Full replacement of every mutable field. A ``product_sn`` in the body is ignored."""


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_sn: str
    purchase_date: str
    name: str
    price: float
    vendor: str
    description: str
