"""
Candidate and job text blocks for the analysis and embedding models.

Both builders are pure: only present, non-empty fields are emitted, always
in the same order, so identical records always give identical text.
"""

import json
from typing import Any, Optional

from ai_matching.data.models.records import CandidateRecord, JobRecord


def _present(value: Optional[str]) -> bool:
    return value is not None and value.strip() != ""


def _dump_parsed(data: dict[str, Any]) -> str:
    return json.dumps(data, sort_keys=True, ensure_ascii=False, default=str)


def build_candidate_text(candidate: CandidateRecord, resume_text: str = "") -> str:
    """Summarize a candidate profile plus resume text as labelled lines."""
    parts = [f"Name: {candidate.first_name} {candidate.last_name}"]

    if _present(candidate.current_title):
        parts.append(f"Current Title: {candidate.current_title}")
    if _present(candidate.current_company):
        parts.append(f"Current Company: {candidate.current_company}")
    if _present(candidate.location):
        parts.append(f"Location: {candidate.location}")

    tags = [tag for tag in candidate.tags if _present(tag)]
    if tags:
        parts.append(f"Skills/Tags: {', '.join(tags)}")
    if _present(candidate.notes):
        parts.append(f"Notes: {candidate.notes}")

    if candidate.resume_parsed_data:
        parts.append(f"Resume Data: {_dump_parsed(candidate.resume_parsed_data)}")

    if _present(resume_text):
        parts.append(f"\nResume Content:\n{resume_text}")

    return "\n".join(parts)


def build_job_text(job: JobRecord) -> str:
    """Summarize a job posting as labelled lines."""
    parts = [f"Title: {job.title}"]

    if _present(job.department):
        parts.append(f"Department: {job.department}")
    if _present(job.location):
        parts.append(f"Location: {job.location}")
    parts.append(f"Employment Type: {job.employment_type}")
    if _present(job.description):
        parts.append(f"Description: {job.description}")
    if _present(job.requirements):
        parts.append(f"Requirements: {job.requirements}")

    return "\n".join(parts)
