from typing import Optional

from pydantic import BaseModel, Field


YEAR_FIELD = "published_year"
# Spelling used by one of the range filters in the legacy script; read only by the audit
LEGACY_YEAR_FIELD = "published_Year"


class Book(BaseModel):
    title: str = Field(description="Title of the book, unique per catalog entry by convention")
    author: str
    genre: str
    published_year: int
    price: float = Field(ge=0)
    in_stock: bool


class UpdateOutcome(BaseModel):
    matched: int
    modified: int


class DeleteOutcome(BaseModel):
    deleted: int


class GenreAverage(BaseModel):
    genre: Optional[str] = Field(alias="_id")
    avg_price: Optional[float] = Field(alias="avgPrice")


class AuthorCount(BaseModel):
    author: Optional[str] = Field(alias="_id")
    total_books: int = Field(alias="totalBooks")


class DecadeCount(BaseModel):
    decade: Optional[str] = Field(alias="_id")
    count: int


class YearFieldAudit(BaseModel):
    """How many documents carry each spelling of the publication year field."""
    canonical: int
    legacy: int

    @property
    def consistent(self) -> bool:
        return self.legacy == 0
