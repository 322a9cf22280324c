"""
Base schemas shared by all models.
"""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base for all schemas.

    Features:
        - Auto-trim whitespace from strings
        - Validate on attribute assignment
        - Allow ORM objects (from_attributes)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )


class QuerySchema(BaseModel):
    """
    Base for immutable query objects.

    Frozen so instances are hashable and can key a cache.
    """
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True
    )
