"""
Base model for documents persisted through a document session.
"""

from typing import Any, ClassVar, Dict, Optional

from bson import ObjectId
from pydantic import BaseModel, Field, field_validator


def generate_document_id() -> str:
    """Generate a new document identity."""
    return str(ObjectId())


class Document(BaseModel):
    """A record stored in a named collection, identified by ``_id``."""

    collection_name: ClassVar[str] = "documents"

    id: Optional[str] = Field(None, alias="_id", description="Document ID")

    @field_validator("id", mode="before")
    @classmethod
    def convert_objectid_to_str(cls, v):
        """Convert MongoDB ObjectId to string."""
        if isinstance(v, ObjectId):
            return str(v)
        return v

    class Config:
        populate_by_name = True

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the dict stored in the collection."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_document(cls, document: Dict[str, Any]):
        """Build an instance from a stored dict."""
        return cls.model_validate(document)
