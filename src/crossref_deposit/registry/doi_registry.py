"""DOI registries holding deposit status per DOI."""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from schemas.doi import DoiRecord, DoiRegistryManifest
from schemas.monograph import Submission

logger = logging.getLogger(__name__)


def record_id(submission_id: str, chapter_id: str | None = None) -> str:
    """Registry key for a book DOI or a chapter DOI."""
    if chapter_id is None:
        return f"{submission_id}:book"
    return f"{submission_id}:chapter:{chapter_id}"


class DoiRegistry(ABC):
    """Abstract base class for DOI registries.

    A registry owns the DOI records of every submission: the DOI strings
    and the status, batch id and diagnostic of the last deposit attempt.
    """

    @abstractmethod
    def dois_for_submission(self, submission_id: str) -> list[DoiRecord]:
        """Return every DOI record of a submission, book DOI first."""
        pass

    @abstractmethod
    def get(self, doi_id: str) -> DoiRecord:
        """Return one record.

        Raises:
            KeyError: If no record has this id
        """
        pass

    @abstractmethod
    def save(self, record: DoiRecord) -> None:
        """Insert or replace a record."""
        pass

    def assign(
        self,
        submission_id: str,
        doi: str,
        chapter_id: str | None = None,
    ) -> DoiRecord:
        """Assign a DOI string to a book or chapter.

        Existing records keep their deposit status; only the DOI string is
        replaced.

        Returns:
            The stored record
        """
        key = record_id(submission_id, chapter_id)
        try:
            record = self.get(key).model_copy(update={"doi": doi})
        except KeyError:
            record = DoiRecord(
                id=key,
                submission_id=submission_id,
                chapter_id=chapter_id,
                doi=doi,
            )
        self.save(record)
        return record

    def register_submission(self, submission: Submission) -> list[DoiRecord]:
        """Assign every DOI present in a submission snapshot.

        Returns:
            The records for the book and chapters that carry a DOI
        """
        records = []
        if submission.publication.doi:
            records.append(self.assign(submission.id, submission.publication.doi))
        for chapter in submission.publication.chapters:
            if chapter.doi:
                records.append(self.assign(submission.id, chapter.doi, chapter.id))
        return records


class JsonDoiRegistry(DoiRegistry):
    """DOI registry persisted as a JSON manifest file.

    The whole manifest is rewritten on every save, through a temporary file
    that replaces the manifest in one rename.

    Example:
        registry = JsonDoiRegistry(Path("./workspace/dois.json"))
        registry.assign("17", "10.1234/book.17")
    """

    def __init__(self, path: Path):
        self.path = path
        self._records: dict[str, DoiRecord] | None = None

    @property
    def records(self) -> dict[str, DoiRecord]:
        """Lazily loaded records keyed by id."""
        if self._records is None:
            self._records = self._load()
        return self._records

    def dois_for_submission(self, submission_id: str) -> list[DoiRecord]:
        matches = [
            record for record in self.records.values()
            if record.submission_id == submission_id
        ]
        return sorted(matches, key=lambda record: record.chapter_id is not None)

    def get(self, doi_id: str) -> DoiRecord:
        return self.records[doi_id].model_copy()

    def save(self, record: DoiRecord) -> None:
        """Store a record and rewrite the manifest.

        If the manifest cannot be written, the in-memory records are left
        as they were before the call.
        """
        previous = self.records.get(record.id)
        self.records[record.id] = record.model_copy()
        try:
            self._write()
        except Exception:
            if previous is None:
                del self.records[record.id]
            else:
                self.records[record.id] = previous
            raise

    def _load(self) -> dict[str, DoiRecord]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text())
        manifest = DoiRegistryManifest.model_validate(data)
        logger.debug(f"Loaded {len(manifest.records)} DOI records from {self.path}")
        return {record.id: record for record in manifest.records}

    def _write(self) -> None:
        manifest = DoiRegistryManifest(records=list(self.records.values()))
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        tmp_path.write_text(manifest.model_dump_json(indent=2))
        tmp_path.replace(self.path)
        logger.debug(f"Wrote DOI registry to {self.path}")
