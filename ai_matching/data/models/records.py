"""
Read-only views of the records owned by the surrounding applicant tracker.

The matching engine never writes these; it only reads the fields it needs
to build model prompts.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExternalRecord(BaseModel):
    """Base for foreign records; unknown fields are ignored."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
    )

    id: str = Field(..., alias="_id")

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: Any) -> str:
        return str(v)


class CandidateRecord(ExternalRecord):
    """Candidate profile fields consumed by the text builder."""

    first_name: str
    last_name: str
    email: str
    current_company: Optional[str] = None
    current_title: Optional[str] = None
    location: Optional[str] = None
    resume_url: Optional[str] = None
    resume_parsed_data: Optional[dict[str, Any]] = None
    tags: list[str] = Field(default_factory=list)
    notes: Optional[str] = None

    @field_validator("tags", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class JobRecord(ExternalRecord):
    """Job posting fields consumed by the text builder."""

    title: str
    employment_type: str
    department: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[str] = None


class ApplicationRecord(ExternalRecord):
    """Association between one candidate and one job."""

    organization_id: str
    candidate_id: str
    job_id: str

    @field_validator("organization_id", "candidate_id", "job_id", mode="before")
    @classmethod
    def stringify_refs(cls, v: Any) -> str:
        return str(v)


class ApplicationContext(BaseModel):
    """An application together with its candidate and job."""

    application: ApplicationRecord
    candidate: CandidateRecord
    job: JobRecord
