"""
Member model for Library Desk.

A member is someone books can be issued to. Members carry contact details
only; their loans live in the lending ledger.
"""

from pydantic import BaseModel, ConfigDict, Field


class Member(BaseModel):
    """Represents a library member."""

    id: str = Field(
        ...,
        description="User-assigned identifier, unique ignoring case",
        min_length=1,
        max_length=100,
        frozen=True,
        examples=["M-1", "M-SMITH"],
    )

    name: str = Field(
        ...,
        description="Full name of the member",
        min_length=1,
        max_length=200,
        examples=["John Smith", "Jane Doe"],
    )

    # Free text: only emptiness is checked
    email: str = Field(
        ...,
        description="Email address",
        min_length=1,
        max_length=255,
        examples=["john.smith@example.com"],
    )

    contact: str = Field(
        ...,
        description="Phone number or other contact detail",
        min_length=1,
        max_length=100,
        examples=["555-123-4567"],
    )

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"

    model_config = ConfigDict(
        validate_assignment=True,
        validate_default=True,
        extra="forbid",
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "id": "M-1",
                "name": "John Smith",
                "email": "john.smith@example.com",
                "contact": "555-123-4567",
            }
        },
    )
