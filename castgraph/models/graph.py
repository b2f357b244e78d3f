from pydantic import BaseModel, Field
from typing import Optional, List


class EdgeOut(BaseModel):
    name: str
    weight: Optional[float] = None


class ActorCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Unique actor name")
    age: Optional[int] = Field(None, ge=0)


class ActorUpdate(BaseModel):
    """Full or partial update; omitted fields are left unchanged."""
    name: Optional[str] = Field(None, min_length=1, description="New name (renames the actor)")
    age: Optional[int] = Field(None, ge=0)
    total_grossing_value: Optional[float] = None


class ActorOut(BaseModel):
    name: str
    age: Optional[int] = None
    total_grossing_value: Optional[float] = None
    adjacency_list: List[EdgeOut] = Field(default_factory=list)


class MovieCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Unique movie name")
    box_office: Optional[float] = Field(None, ge=0)
    year: Optional[int] = None


class MovieUpdate(BaseModel):
    """Full or partial update; omitted fields are left unchanged."""
    name: Optional[str] = Field(None, min_length=1, description="New name (renames the movie)")
    box_office: Optional[float] = Field(None, ge=0)
    year: Optional[int] = None


class MovieOut(BaseModel):
    name: str
    box_office: Optional[float] = None
    year: Optional[int] = None
    adjacency_list: List[EdgeOut] = Field(default_factory=list)


class NamesOut(BaseModel):
    count: int
    items: List[str]
