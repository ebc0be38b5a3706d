"""Monograph submission schemas.

A submission is a read-only snapshot of a book as the press holds it: the
current publication, its chapters and their authors, and the series record
the publication belongs to (if any). Snapshots are assembled by the caller
and handed to the document builder; nothing here performs lookups.
"""

from datetime import date

from pydantic import BaseModel, model_validator


class Author(BaseModel):
    """A chapter author.

    Either name part may be missing. Authors with neither are tolerated in
    the snapshot and skipped when contributors are written.

    Attributes:
        given_name: Given (first) name
        family_name: Family (last) name
    """

    given_name: str | None = None
    family_name: str | None = None


class Chapter(BaseModel):
    """A chapter of a monograph.

    Attributes:
        id: Chapter identifier within the press
        title: Chapter title in the publication locale
        pages: Page range string, e.g. "12-20" or "12"
        authors: Authors in display order
        doi: Assigned DOI, if any
        source_chapter_id: Stable chapter reference used in resource URLs
    """

    id: str
    title: str | None = None
    pages: str | None = None
    authors: list[Author] = []
    doi: str | None = None
    source_chapter_id: str | None = None

    @model_validator(mode="after")
    def _default_source_chapter_id(self) -> "Chapter":
        if self.source_chapter_id is None:
            self.source_chapter_id = self.id
        return self


class Series(BaseModel):
    """A named, ISSN-bearing book series.

    Attributes:
        id: Series identifier
        title: Series title
        online_issn: Online ISSN of the series
        context_id: Press that owns the series
    """

    id: str
    title: str | None = None
    online_issn: str | None = None
    context_id: str | None = None


class Publication(BaseModel):
    """The current publication of a submission.

    Attributes:
        locale: Publication locale, e.g. "en_US"
        title: Book title in the publication locale
        series_id: Series the book belongs to, if any
        series_position: Position within the series (written as volume)
        date_published: Publication date
        doi: Assigned book-level DOI, if any
        url_path: Public identifier used in catalog URLs
        chapters: Chapters in table-of-contents order
    """

    locale: str = "en_US"
    title: str | None = None
    series_id: str | None = None
    series_position: str | None = None
    date_published: date | None = None
    doi: str | None = None
    url_path: str | None = None
    chapters: list[Chapter] = []


class Submission(BaseModel):
    """A monograph submission (book).

    Attributes:
        id: Submission identifier
        publication: The current publication
        series: Snapshot of the series referenced by publication.series_id
    """

    id: str
    publication: Publication
    series: Series | None = None

    @property
    def best_id(self) -> str:
        """Public identifier for URLs: the url path if set, else the id."""
        return self.publication.url_path or self.id
