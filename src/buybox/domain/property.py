from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Commercial asset classes we underwrite
PropertyType = Literal[
    "Multifamily",
    "Office",
    "Retail",
    "Industrial",
]


class Property(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    property_type: PropertyType
    total_units: int | None = Field(default=None, description="Door count, when known")
    year_built: int | None = None

    @field_validator("total_units")
    @classmethod
    def _units_positive(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError("total_units must be >= 1")
        return v
