# src/pipeline/revision.py — v1
"""Revision handling: request ordering and the revision ceiling.

Human revision notes outrank everything else in a generation request, so
they are placed first, ahead of the source content and the prior artifact.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from toolfactory.jobs.models import Job

logger = logging.getLogger(__name__)

REVISION_HEADER = "BOSS REVISION REQUEST (HIGHEST PRIORITY)"
QA_FEEDBACK_HEADER = "QA FINDINGS FROM THE PREVIOUS ATTEMPT (must fix)"
SOURCE_HEADER = "COURSE CONTENT"
PRIOR_ARTIFACT_HEADER = "PREVIOUS VERSION (excerpt)"


def revision_block(revision_notes: str | None) -> str:
    """The revision request line, or "" when there are no notes."""
    if not revision_notes or not revision_notes.strip():
        return ""
    return f"{REVISION_HEADER}: {revision_notes.strip()}"


def with_revision_block(text: str, revision_notes: str | None) -> str:
    """Prefix `text` with the revision request when notes are present."""
    block = revision_block(revision_notes)
    return f"{block}\n\n{text}" if block else text


def build_user_request(
    source_content: str,
    revision_notes: str | None = None,
    prior_artifact: str | None = None,
    prior_chars: int = 4000,
    qa_feedback: list[str] | None = None,
) -> str:
    """Compose the generation request in authority order.

    Args:
        source_content: Course content (possibly summarized).
        revision_notes: Human revision notes, highest authority.
        prior_artifact: Previously generated HTML, excerpted for reference.
        prior_chars: Excerpt length for the prior artifact.
        qa_feedback: Blocking findings of the previous attempt (retries).

    Returns:
        Request text: revision block, QA findings, source, prior excerpt.
    """
    parts: list[str] = []
    block = revision_block(revision_notes)
    if block:
        parts.append(block)
    if qa_feedback:
        numbered = "\n".join(f"{i}. {item}" for i, item in enumerate(qa_feedback, 1))
        parts.append(f"{QA_FEEDBACK_HEADER}:\n{numbered}")
    parts.append(f"{SOURCE_HEADER}:\n{source_content}")
    if prior_artifact and prior_artifact.strip() and prior_chars > 0:
        parts.append(f"{PRIOR_ARTIFACT_HEADER}:\n{prior_artifact[:prior_chars]}")
    return "\n\n".join(parts)


@dataclass(frozen=True)
class RevisionDecision:
    """Whether a job may re-enter the pipeline."""

    allowed: bool
    escalate: bool
    attempt: int
    reason: str = ""


class RevisionController:
    """Bounds how many times a job may re-enter the pipeline.

    Args:
        max_attempts: Revisions or retries allowed after the first run.
    """

    def __init__(self, max_attempts: int = 3) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.max_attempts = max_attempts

    def evaluate(self, job: Job) -> RevisionDecision:
        """Decide on a revision or retry for `job`."""
        if job.revision_count >= self.max_attempts:
            logger.info(
                "Job %s reached revision ceiling (%d/%d), escalating",
                job.id, job.revision_count, self.max_attempts,
            )
            return RevisionDecision(
                allowed=False,
                escalate=True,
                attempt=job.revision_count,
                reason=(
                    f"Revision limit reached ({job.revision_count}/{self.max_attempts}); "
                    "escalated for human decision"
                ),
            )
        return RevisionDecision(allowed=True, escalate=False, attempt=job.revision_count + 1)
