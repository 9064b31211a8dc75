"""Base Pydantic model configuration for sigenv models.

All sigenv models inherit from SigenvBaseModel to ensure consistent behavior:
- Immutability (frozen=True): every update returns a new value
- Strict validation (extra="forbid") to reject unknown fields
- Flexible field naming (populate_by_name=True) for alias support
"""

from pydantic import BaseModel, ConfigDict


class SigenvBaseModel(BaseModel):
    """Base model for keys, metadata, messages and signatures.

    Example:
        >>> class MyModel(SigenvBaseModel):
        ...     name: str
        >>>
        >>> obj = MyModel(name="test")
        >>> obj.name = "other"  # Raises ValidationError (frozen)
        Traceback (most recent call last):
        ...
        pydantic_core._pydantic_core.ValidationError: ...
    """

    model_config = ConfigDict(
        # Immutability: prevents accidental mutations after creation
        frozen=True,

        # Strict validation: reject unknown fields rather than ignoring them
        extra="forbid",

        populate_by_name=True,
        validate_default=True,
    )
