from __future__ import annotations

from pydantic import AliasChoices, BaseModel, Field


class ContactInfo(BaseModel):
    name: str | None = Field(default=None, max_length=200)
    email: str | None = Field(default=None, max_length=320)
    phone: str | None = Field(default=None, max_length=50)
    linkedin: str | None = Field(default=None, max_length=500)
    location: str | None = Field(default=None, max_length=200)


class ResumeMetadata(BaseModel):
    format: str | None = Field(default=None, max_length=20)
    filename: str | None = Field(default=None, max_length=255)
    page_count: int | None = Field(
        default=None,
        ge=0,
        le=100,
        validation_alias=AliasChoices("page_count", "pageCount"),
    )


class ExperienceEntry(BaseModel):
    title: str = ""
    company: str = ""
    start_date: str | None = Field(default=None, validation_alias=AliasChoices("start_date", "startDate"))
    end_date: str | None = Field(default=None, validation_alias=AliasChoices("end_date", "endDate"))
    bullets: list[str] = Field(default_factory=list)


class Resume(BaseModel):
    """Parsed resume handed over by the ingestion layer.

    ``raw_text`` is what every detector reads. Structured fields are best
    effort and only the formatting checker looks at ``contact`` and
    ``metadata``.
    """

    raw_text: str = Field(default="", validation_alias=AliasChoices("raw_text", "rawText"))
    skills: list[str] = Field(default_factory=list)
    experience: list[ExperienceEntry] = Field(default_factory=list)
    contact: ContactInfo | None = None
    metadata: ResumeMetadata | None = None
