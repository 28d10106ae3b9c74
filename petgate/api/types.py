"""Pydantic models for the contract's component schemas."""

from pydantic import BaseModel, ConfigDict, Field


class Pet(BaseModel):
    """A pet as declared by ``#/components/schemas/Pet``.
    
    Fields outside the schema are dropped on load.
    """
    
    model_config = ConfigDict(extra="ignore")
    
    id: int = Field(..., description="Caller-supplied identifier")
    name: str = Field(..., description="Pet name")
    tag: str | None = Field(None, description="Optional free-form tag")


class Error(BaseModel):
    code: int
    message: str


class ListPetsParams(BaseModel):
    """Query parameters of ``listPets``."""
    
    limit: int = Field(..., description="How many items to return at one time")
