"""Crossref builder for generating deposit XML from monograph submissions.

Builds a Crossref 4.3.7 doi_batch document describing one book and each of
its chapters. Missing required metadata never raises: it is collected as
ValidationError entries and the affected element is left out.
"""

import logging
import re
from datetime import datetime
from zoneinfo import ZoneInfo

from lxml import etree

from schemas.crossref import ValidationError
from schemas.monograph import Author, Chapter, Submission
from schemas.press import PressContext

from .builder import BuildResult, DocumentBuilder

logger = logging.getLogger(__name__)

CROSSREF_VERSION = "4.3.7"
CROSSREF_NS = f"http://www.crossref.org/schema/{CROSSREF_VERSION}"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"
CROSSREF_SCHEMA_LOCATION = (
    f"http://www.crossref.org/schemas/crossref{CROSSREF_VERSION}.xsd"
)
ROOT_ELEMENT = "doi_batch"
BOOK_TYPE = "edited_book"
DEFAULT_TIMEZONE = "Europe/Berlin"


def _tag(local: str) -> str:
    return f"{{{CROSSREF_NS}}}{local}"


def format_batch_timestamp(timestamp: datetime) -> str:
    """Format a timestamp for doi_batch_id: YYYY-MM-DD-H-MM-SS."""
    return f"{timestamp:%Y-%m-%d}-{timestamp.hour}-{timestamp:%M}-{timestamp:%S}"


def format_compact_timestamp(timestamp: datetime) -> str:
    """Format a timestamp for the head timestamp field: YYYYMMDDHMMSS."""
    return f"{timestamp:%Y%m%d}{timestamp.hour}{timestamp:%M%S}"


def parse_page_range(pages: str) -> tuple[str, str] | None:
    """Split a page string into first and last page.

    "12-20" gives ("12", "20") and "12" gives ("12", "12"). A missing or
    empty last segment reuses the first page. Strings with more than one
    hyphen, or an empty first segment, return None.
    """
    segments = [segment.strip() for segment in pages.split("-")]
    if len(segments) > 2 or not segments[0]:
        return None
    first_page = segments[0]
    last_page = segments[1] if len(segments) == 2 and segments[1] else first_page
    return first_page, last_page


def language_code(locale: str) -> str:
    """Convert a locale such as "en_US" to its ISO 639-1 code ("en")."""
    return re.split(r"[_\-@.]", locale)[0].lower()


class CrossrefXmlBuilder(DocumentBuilder):
    """Build Crossref 4.3.7 deposit documents for monographs.

    The document has the shape:

        doi_batch
        ├── head (doi_batch_id, timestamp, depositor, registrant)
        └── body
            └── book (book_type="edited_book")
                ├── book_metadata | book_series_metadata
                └── content_item (one per chapter)

    The series variant is used whenever the publication has a series id.

    Example:
        result = CrossrefXmlBuilder().build(submission, context)
        if result.is_valid:
            path.write_bytes(result.to_bytes())
    """

    def __init__(self, timezone: str = DEFAULT_TIMEZONE):
        self.timezone = ZoneInfo(timezone)

    def build(
        self,
        submission: Submission,
        context: PressContext,
        timestamp: datetime | None = None,
    ) -> BuildResult:
        """Build the doi_batch document for a submission.

        Args:
            submission: Submission snapshot with current publication
            context: Press settings (publisher, depositor, site URL)
            timestamp: Time used for batch id and head timestamp

        Returns:
            BuildResult with the root element and validation errors
        """
        if timestamp is None:
            timestamp = datetime.now(self.timezone)
        errors: list[ValidationError] = []

        nsmap = {None: CROSSREF_NS, "xsi": XSI_NS}
        root = etree.Element(_tag(ROOT_ELEMENT), nsmap=nsmap)
        root.set("version", CROSSREF_VERSION)
        root.set(
            f"{{{XSI_NS}}}schemaLocation",
            f"{CROSSREF_NS} {CROSSREF_SCHEMA_LOCATION}",
        )

        root.append(self._build_head(submission, context, timestamp, errors))
        root.append(self._build_body(submission, context, errors))

        if errors:
            logger.warning(
                f"Submission {submission.id} built with "
                f"{len(errors)} validation error(s)"
            )
        logger.debug(f"Built Crossref document for submission {submission.id}")
        return BuildResult(document=root, validation_errors=errors)

    def _build_head(
        self,
        submission: Submission,
        context: PressContext,
        timestamp: datetime,
        errors: list[ValidationError],
    ) -> etree._Element:
        head = etree.Element(_tag("head"))

        batch_id = etree.SubElement(head, _tag("doi_batch_id"))
        batch_id.text = f"{format_batch_timestamp(timestamp)}-{submission.id}"

        timestamp_el = etree.SubElement(head, _tag("timestamp"))
        timestamp_el.text = format_compact_timestamp(timestamp)

        if not context.depositor_name:
            errors.append(ValidationError(object_id=submission.id, field_name="Depositor Name"))
        if not context.depositor_email:
            errors.append(ValidationError(object_id=submission.id, field_name="Depositor Email"))

        depositor = etree.SubElement(head, _tag("depositor"))
        if context.depositor_name:
            name_el = etree.SubElement(depositor, _tag("depositor_name"))
            name_el.text = context.depositor_name
        if context.depositor_email:
            email_el = etree.SubElement(depositor, _tag("email_address"))
            email_el.text = context.depositor_email

        # registrant re-uses the depositor name
        if context.depositor_name:
            registrant = etree.SubElement(head, _tag("registrant"))
            registrant.text = context.depositor_name

        return head

    def _build_body(
        self,
        submission: Submission,
        context: PressContext,
        errors: list[ValidationError],
    ) -> etree._Element:
        body = etree.Element(_tag("body"))
        book = etree.SubElement(body, _tag("book"))
        book.set("book_type", BOOK_TYPE)

        book.append(self._build_book_metadata(submission, context, errors))

        for chapter in submission.publication.chapters:
            book.append(self._build_content_item(submission, context, chapter, errors))

        return body

    def _build_book_metadata(
        self,
        submission: Submission,
        context: PressContext,
        errors: list[ValidationError],
    ) -> etree._Element:
        """Build book_metadata, or book_series_metadata for series books."""
        publication = submission.publication
        is_series = bool(publication.series_id)

        metadata = etree.Element(
            _tag("book_series_metadata" if is_series else "book_metadata")
        )
        metadata.set("language", language_code(publication.locale))

        if is_series:
            metadata.append(self._build_series_metadata(submission, errors))

        if publication.title:
            metadata.append(self._titles(publication.title))
        else:
            errors.append(ValidationError(object_id=submission.id, field_name="Title"))

        if is_series:
            if publication.series_position:
                volume = etree.SubElement(metadata, _tag("volume"))
                volume.text = publication.series_position
            else:
                errors.append(
                    ValidationError(object_id=submission.id, field_name="Series Position")
                )

        if publication.date_published is not None:
            publication_date = etree.SubElement(metadata, _tag("publication_date"))
            publication_date.set("media_type", "online")
            year = etree.SubElement(publication_date, _tag("year"))
            year.text = str(publication.date_published.year)
        else:
            errors.append(
                ValidationError(object_id=submission.id, field_name="Publication Date")
            )

        publisher_name = context.localized_publisher_name(publication.locale)
        if publisher_name:
            publisher = etree.SubElement(metadata, _tag("publisher"))
            name_el = etree.SubElement(publisher, _tag("publisher_name"))
            name_el.text = publisher_name
        else:
            errors.append(
                ValidationError(object_id=submission.id, field_name="Publisher Name")
            )

        if publication.doi:
            metadata.append(
                self._doi_data(publication.doi, self.book_url(submission, context))
            )

        return metadata

    def _build_series_metadata(
        self, submission: Submission, errors: list[ValidationError]
    ) -> etree._Element:
        series_metadata = etree.Element(_tag("series_metadata"))
        series = submission.series

        if series is not None and series.title:
            series_metadata.append(self._titles(series.title))
        else:
            errors.append(ValidationError(object_id=submission.id, field_name="Series Title"))

        if series is not None and series.online_issn:
            issn = etree.SubElement(series_metadata, _tag("issn"))
            issn.text = series.online_issn
        else:
            errors.append(ValidationError(object_id=submission.id, field_name="Series ISSN"))

        return series_metadata

    def _build_content_item(
        self,
        submission: Submission,
        context: PressContext,
        chapter: Chapter,
        errors: list[ValidationError],
    ) -> etree._Element:
        """Build the content_item element for one chapter."""
        item = etree.Element(_tag("content_item"))
        item.set("component_type", "chapter")
        item.set("publication_type", "full_text")

        contributors = self._build_contributors(chapter.authors)
        if contributors is not None:
            item.append(contributors)

        if chapter.title:
            item.append(self._titles(chapter.title))

        if chapter.pages:
            page_range = parse_page_range(chapter.pages)
            if page_range is None:
                logger.warning(
                    f"Unsupported page range {chapter.pages!r} in chapter {chapter.id}"
                )
                errors.append(
                    ValidationError(
                        object_id=submission.id,
                        field_name="Pages",
                        chapter_id=chapter.id,
                    )
                )
            else:
                pages = etree.SubElement(item, _tag("pages"))
                first_page = etree.SubElement(pages, _tag("first_page"))
                first_page.text = page_range[0]
                last_page = etree.SubElement(pages, _tag("last_page"))
                last_page.text = page_range[1]

        if chapter.doi:
            item.append(
                self._doi_data(chapter.doi, self.chapter_url(submission, context, chapter))
            )
        else:
            errors.append(
                ValidationError(
                    object_id=submission.id,
                    field_name="Chapter DOI",
                    chapter_id=chapter.id,
                )
            )

        return item

    def _build_contributors(self, authors: list[Author]) -> etree._Element | None:
        """Build the contributors element, or None if no author is usable.

        The first written author is sequence="first", every later one
        "additional". A single name goes into surname. Authors without
        any name are skipped.
        """
        contributors = etree.Element(_tag("contributors"))
        is_first = True

        for author in authors:
            given_name = author.given_name
            family_name = author.family_name
            if not given_name and not family_name:
                continue

            person = etree.SubElement(contributors, _tag("person_name"))
            person.set("sequence", "first" if is_first else "additional")
            person.set("contributor_role", "author")
            is_first = False

            if given_name and family_name:
                given_el = etree.SubElement(person, _tag("given_name"))
                given_el.text = given_name
                surname_el = etree.SubElement(person, _tag("surname"))
                surname_el.text = family_name
            else:
                surname_el = etree.SubElement(person, _tag("surname"))
                surname_el.text = given_name or family_name

        if len(contributors) == 0:
            return None
        return contributors

    def _titles(self, title: str) -> etree._Element:
        titles = etree.Element(_tag("titles"))
        title_el = etree.SubElement(titles, _tag("title"))
        title_el.text = title
        return titles

    def _doi_data(self, doi: str, resource_url: str) -> etree._Element:
        doi_data = etree.Element(_tag("doi_data"))
        doi_el = etree.SubElement(doi_data, _tag("doi"))
        doi_el.text = doi
        resource = etree.SubElement(doi_data, _tag("resource"))
        resource.text = resource_url
        return doi_data

    def book_url(self, submission: Submission, context: PressContext) -> str:
        """Catalog URL of the book."""
        return f"{context.base_url.rstrip('/')}/catalog/book/{submission.best_id}"

    def chapter_url(
        self, submission: Submission, context: PressContext, chapter: Chapter
    ) -> str:
        """Catalog URL of a chapter within its book."""
        return (
            f"{self.book_url(submission, context)}"
            f"/chapter/{chapter.source_chapter_id}"
        )
