"""
Shared Models

Base class for models that mirror stored documents.
"""

from pydantic import BaseModel, ConfigDict


class DomainModel(BaseModel):
    """
    Base for models loaded from MongoDB.

    Fields are populated by Python name or by their stored camelCase alias,
    and bookkeeping fields in the document (``updatedAt``) are ignored.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
    )
