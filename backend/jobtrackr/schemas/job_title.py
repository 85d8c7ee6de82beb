from pydantic import BaseModel, Field


class JobTitleResponse(BaseModel):
    """Public shape of a job title; the ranking score is never exposed."""

    label: str
    short_label: str = Field(serialization_alias="shortLabel")
    code: int
    code_rome: str = Field(serialization_alias="codeRome")

    class Config:
        from_attributes = True
