"""
Book model for Library Desk.

A book is a catalog entry with a user-assigned identifier and a copy count.
Copies that are out on loan are tracked in ``issued``; the number of copies
on the shelf is derived, never stored:

    available_copies = quantity - issued
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Book(BaseModel):
    """
    Represents a book in the library catalog.

    The catalog owns every Book instance. Issue records refer to a book only
    through its ``id`` and look up the current copy counts on demand.
    """

    id: str = Field(
        ...,
        description="User-assigned identifier, unique ignoring case",
        min_length=1,
        max_length=100,
        frozen=True,
        examples=["B-1", "B-GATSBY"],
    )

    title: str = Field(
        ...,
        description="The title of the book",
        min_length=1,
        max_length=500,
        examples=["The Great Gatsby", "To Kill a Mockingbird"],
    )

    author: str = Field(
        ...,
        description="Author name as printed on the cover",
        min_length=1,
        max_length=200,
        examples=["F. Scott Fitzgerald", "Harper Lee"],
    )

    publisher: str = Field(
        ...,
        description="Publishing house",
        min_length=1,
        max_length=200,
        examples=["Scribner", "J. B. Lippincott & Co."],
    )

    quantity: int = Field(
        ...,
        description="Total number of copies owned by the library",
        ge=0,
        examples=[1, 3, 10],
    )

    issued: int = Field(
        default=0,
        description="Number of copies currently out on loan",
        ge=0,
        examples=[0, 1, 2],
    )

    @model_validator(mode="after")
    def validate_copies(self) -> "Book":
        """Ensure issued copies never exceed the copies owned."""
        if self.issued > self.quantity:
            raise ValueError("Issued copies cannot exceed quantity")
        return self

    @property
    def available_copies(self) -> int:
        """Copies currently on the shelf."""
        return self.quantity - self.issued

    @property
    def is_available(self) -> bool:
        """Check if the book has any copy left to issue."""
        return self.available_copies > 0

    def issue_copy(self) -> bool:
        """Take one copy off the shelf. Returns False if none is left."""
        if not self.is_available:
            return False
        self.issued += 1
        return True

    def return_copy(self) -> None:
        """Put one copy back on the shelf; does nothing if none is out."""
        if self.issued > 0:
            self.issued -= 1

    def __str__(self) -> str:
        return f"{self.title} by {self.author}"

    model_config = ConfigDict(
        validate_assignment=True,
        validate_default=True,
        extra="forbid",
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "id": "B-1",
                "title": "The Great Gatsby",
                "author": "F. Scott Fitzgerald",
                "publisher": "Scribner",
                "quantity": 3,
                "issued": 1,
            }
        },
    )
