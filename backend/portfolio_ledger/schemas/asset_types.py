# backend/portfolio_ledger/schemas/asset_types.py
"""Pydantic schemas for asset types."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AssetTypeBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Stock", "Foreign Currency"])
    unit: str | None = Field(default=None, max_length=50, examples=["shares", "USD"])
    description: str | None = Field(default=None, max_length=1000)

    @field_validator('name')
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be blank")
        return v


class AssetTypeCreate(AssetTypeBase):
    pass


class AssetTypeUpdate(BaseModel):
    """All fields optional; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    unit: str | None = Field(default=None, max_length=50)
    description: str | None = Field(default=None, max_length=1000)


class AssetTypeResponse(AssetTypeBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
