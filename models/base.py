"""
Base schemas for all models.
"""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base for all schemas.

    Features:
        - Auto-trim whitespace from strings
        - Validate on attribute assignment
        - Allow construction from plain objects (from_attributes)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )


class FrozenSchema(BaseSchema):
    """
    Base for output records that must not change after creation.

    Strings are kept as given: output records carry raw cell values verbatim.
    """
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=False
    )
