# tests/unit/pipeline/test_unit_revision.py — v1
"""Tests for pipeline/revision.py — request ordering and revision ceiling."""

from __future__ import annotations

import pytest

from toolfactory.jobs.models import Job
from toolfactory.pipeline.revision import (
    PRIOR_ARTIFACT_HEADER,
    QA_FEEDBACK_HEADER,
    REVISION_HEADER,
    SOURCE_HEADER,
    RevisionController,
    build_user_request,
    with_revision_block,
)


class TestBuildUserRequest:
    def test_source_only(self):
        assert build_user_request("Lever 1") == f"{SOURCE_HEADER}:\nLever 1"

    def test_notes_come_first(self):
        text = build_user_request(
            "Lever 1", revision_notes="  focus on the second framework item ",
            prior_artifact="<html>old</html>",
        )
        notes_at = text.index(REVISION_HEADER)
        source_at = text.index(SOURCE_HEADER)
        prior_at = text.index(PRIOR_ARTIFACT_HEADER)
        assert notes_at < source_at < prior_at
        assert text.startswith(f"{REVISION_HEADER}: focus on the second framework item\n\n")

    def test_blank_notes_ignored(self):
        assert REVISION_HEADER not in build_user_request("x", revision_notes="   ")

    def test_prior_artifact_excerpted(self):
        text = build_user_request("x", prior_artifact="a" * 50, prior_chars=10)
        assert text.endswith(f"{PRIOR_ARTIFACT_HEADER}:\n" + "a" * 10)

    def test_prior_artifact_disabled(self):
        assert PRIOR_ARTIFACT_HEADER not in build_user_request("x", prior_artifact="a", prior_chars=0)


    def test_qa_feedback_between_notes_and_source(self):
        text = build_user_request(
            "Lever 1", revision_notes="shorter copy",
            qa_feedback=["[A] first", "[B] second"],
        )
        assert text == (
            f"{REVISION_HEADER}: shorter copy\n\n"
            f"{QA_FEEDBACK_HEADER}:\n1. [A] first\n2. [B] second\n\n"
            f"{SOURCE_HEADER}:\nLever 1"
        )

    def test_empty_qa_feedback_ignored(self):
        assert build_user_request("Lever 1", qa_feedback=[]) == f"{SOURCE_HEADER}:\nLever 1"


class TestWithRevisionBlock:
    def test_prefixes_notes(self):
        assert with_revision_block("body", " fix it ") == f"{REVISION_HEADER}: fix it\n\nbody"

    def test_no_notes(self):
        assert with_revision_block("body", None) == "body"
        assert with_revision_block("body", "   ") == "body"


class TestRevisionController:
    def _job(self, revisions: int) -> Job:
        return Job(slug="s", source_content="c", revision_count=revisions)

    def test_allowed_below_ceiling(self):
        decision = RevisionController(max_attempts=3).evaluate(self._job(2))
        assert decision.allowed
        assert not decision.escalate
        assert decision.attempt == 3

    def test_escalates_at_ceiling(self):
        decision = RevisionController(max_attempts=3).evaluate(self._job(3))
        assert not decision.allowed
        assert decision.escalate
        assert "3/3" in decision.reason

    def test_invalid_ceiling(self):
        with pytest.raises(ValueError):
            RevisionController(max_attempts=0)
