"""Pytest fixtures for crossref-deposit tests."""

import json
from datetime import datetime

import pytest

from schemas.monograph import Submission
from schemas.press import PressContext


@pytest.fixture
def fixed_timestamp():
    """A fixed build time: 2026-01-15 09:05:07."""
    return datetime(2026, 1, 15, 9, 5, 7)


@pytest.fixture
def sample_context_record():
    """Sample press settings."""
    return {
        "id": "1",
        "publisher_name": {"en_US": "Open Book Press"},
        "depositor_name": "Open Book Press Metadata Team",
        "depositor_email": "metadata@openbookpress.example",
        "username": "obp",
        "password": "secret",
        "test_mode": False,
        "base_url": "https://press.example/index.php/obp",
    }


@pytest.fixture
def press_context(sample_context_record):
    return PressContext.model_validate(sample_context_record)


@pytest.fixture
def sample_submission_record():
    """Sample monograph without a series, with two chapters.

    Matches the structure of a batch file submission entry.
    """
    return {
        "id": "17",
        "publication": {
            "locale": "en_US",
            "title": "Reading the Archive",
            "date_published": "2024-05-02",
            "doi": "10.1234/obp.17",
            "chapters": [
                {
                    "id": "101",
                    "title": "Introduction",
                    "pages": "1-11",
                    "doi": "10.1234/obp.17.c1",
                    "source_chapter_id": "5",
                    "authors": [
                        {"given_name": "Ada", "family_name": "Lovelace"},
                        {"given_name": "Charles", "family_name": "Babbage"},
                    ],
                },
                {
                    "id": "102",
                    "title": "Sources and Methods",
                    "pages": "12-20",
                    "doi": "10.1234/obp.17.c2",
                    "source_chapter_id": "6",
                    "authors": [
                        {"given_name": "Grace", "family_name": "Hopper"},
                    ],
                },
            ],
        },
    }


@pytest.fixture
def sample_series_submission_record(sample_submission_record):
    """Sample monograph belonging to a series."""
    record = json.loads(json.dumps(sample_submission_record))
    record["publication"]["series_id"] = "3"
    record["publication"]["series_position"] = "4"
    record["series"] = {
        "id": "3",
        "title": "Studies in Digital Humanities",
        "online_issn": "1234-5679",
        "context_id": "1",
    }
    return record


@pytest.fixture
def submission(sample_submission_record):
    return Submission.model_validate(sample_submission_record)


@pytest.fixture
def series_submission(sample_series_submission_record):
    return Submission.model_validate(sample_series_submission_record)


@pytest.fixture
def make_submission(sample_submission_record):
    """Factory for submissions derived from the sample record."""

    def _make(submission_id: str = "17", **publication_overrides) -> Submission:
        record = json.loads(json.dumps(sample_submission_record))
        record["id"] = submission_id
        record["publication"]["doi"] = f"10.1234/obp.{submission_id}"
        for i, chapter in enumerate(record["publication"]["chapters"], start=1):
            chapter["doi"] = f"10.1234/obp.{submission_id}.c{i}"
        record["publication"].update(publication_overrides)
        return Submission.model_validate(record)

    return _make


@pytest.fixture
def sample_batch_file(tmp_path, sample_context_record, sample_submission_record):
    """Create a batch JSON file with one submission."""
    batch_path = tmp_path / "batch.json"
    batch_path.write_text(json.dumps({
        "context": sample_context_record,
        "submissions": [sample_submission_record],
    }, indent=2))
    return batch_path


SUCCESS_RESPONSE = b"""<?xml version="1.0" encoding="UTF-8"?>
<doi_batch_diagnostic status="completed" sp="cr-deposit">
  <submission_id>1430891634</submission_id>
  <batch_id>2026-01-15-9-05-07-17</batch_id>
  <record_diagnostic status="Success">
    <doi>10.1234/obp.17</doi>
    <msg>Successfully added</msg>
  </record_diagnostic>
  <batch_data>
    <record_count>3</record_count>
    <success_count>3</success_count>
    <warning_count>{warnings}</warning_count>
    <failure_count>{failures}</failure_count>
  </batch_data>
</doi_batch_diagnostic>
"""


@pytest.fixture
def deposit_report():
    """Factory for Crossref deposit report bodies."""

    def _report(failures: int = 0, warnings: int = 0) -> bytes:
        return (
            SUCCESS_RESPONSE
            .replace(b"{failures}", str(failures).encode())
            .replace(b"{warnings}", str(warnings).encode())
        )

    return _report


REJECTION_RESPONSE = b"""<?xml version="1.0" encoding="UTF-8"?>
<doi_batch_diagnostic status="completed" sp="cr-deposit">
  <batch_id>2026-01-15-9-05-07-17</batch_id>
  <msg>Deposit rejected: user not allowed to deposit for prefix 10.1234</msg>
</doi_batch_diagnostic>
"""


@pytest.fixture
def rejection_body():
    """Body of a Crossref 403 rejection."""
    return REJECTION_RESPONSE
