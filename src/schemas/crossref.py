"""Crossref document validation schemas."""

from pydantic import BaseModel


class ValidationError(BaseModel):
    """A required field missing while building a Crossref document.

    Attributes:
        object_id: Id of the submission the field belongs to
        field_name: Human-readable field name, e.g. "Publisher Name"
        chapter_id: Chapter the field belongs to, for chapter-level fields
    """

    object_id: str
    field_name: str
    chapter_id: str | None = None

    @property
    def message(self) -> str:
        if self.chapter_id is not None:
            return (
                f"Missing element {self.field_name} for submission "
                f"{self.object_id} (chapter {self.chapter_id})"
            )
        return f"Missing element {self.field_name} for submission {self.object_id}"

    def __str__(self) -> str:
        return self.message
