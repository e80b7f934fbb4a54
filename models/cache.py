"""
Cache and inventory models
Parsed from the JSON documents returned by remote scripts
"""
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _as_list(value: Any) -> List[Any]:
    """ConvertTo-Json may emit null or a bare object where a list is expected"""
    if value is None:
        return []
    if isinstance(value, dict):
        return [value]
    return value


class CacheElement(BaseModel):
    """One deletable unit in the client agent cache"""
    model_config = ConfigDict(populate_by_name=True)

    element_id: str = Field(alias='id')
    size_bytes: int = Field(default=0, alias='size', ge=0)


class CacheSnapshot(BaseModel):
    """Capacity and contents of the client agent cache at one point in time"""
    model_config = ConfigDict(populate_by_name=True)

    total_mb: float = Field(alias='total', ge=0)
    free_mb: float = Field(alias='free', ge=0)
    elements: List[CacheElement] = Field(default_factory=list)

    @field_validator('elements', mode='before')
    @classmethod
    def _coerce_elements(cls, value):
        return _as_list(value)

    @property
    def used_mb(self) -> float:
        return self.total_mb - self.free_mb

    @property
    def element_count(self) -> int:
        return len(self.elements)

    @property
    def is_empty(self) -> bool:
        return not self.elements


class DirectoryMeasurement(BaseModel):
    """Recursive on-disk size of a remote directory"""
    model_config = ConfigDict(populate_by_name=True)

    path: str
    exists: bool = False
    size_bytes: int = Field(default=0, alias='bytes', ge=0)

    @field_validator('size_bytes', mode='before')
    @classmethod
    def _missing_size_is_zero(cls, value):
        return 0 if value is None else value


class CollectionMember(BaseModel):
    """Resource that belongs to a collection"""
    name: str
    resource_id: int


class CollectionMembership(BaseModel):
    """Result of a collection membership query"""
    found: bool
    collection_id: str = ""
    members: List[CollectionMember] = Field(default_factory=list)

    @field_validator('members', mode='before')
    @classmethod
    def _coerce_members(cls, value):
        return _as_list(value)

    @field_validator('collection_id', mode='before')
    @classmethod
    def _missing_id_is_blank(cls, value):
        return value or ""
