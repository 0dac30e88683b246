from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class PageImage(BaseModel):
    """One rasterized PDF page, ready to be sent as an inline image."""

    model_config = ConfigDict(frozen=True)

    mime_type: str
    data: str  # base64, no data: prefix

    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


class ResumeUpload(BaseModel):
    model_config = ConfigDict(frozen=True)

    filename: str
    mime_type: str
    data: bytes


# -------------------------
# Wire schemas (model output)
# -------------------------
class ResumeAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    summary: str
    skills: list[str]
    experience_years: float = Field(alias="experienceYears", ge=0)


class RankingEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    rank: int
    justification: str


class TaskAssignment(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    employee_id: str = Field(alias="employeeId")
    tasks: list[str]


# -------------------------
# Roster records
# -------------------------
class AnalyzedEmployee(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: Literal["analyzed"] = "analyzed"
    id: str
    name: str
    summary: str
    skills: list[str]
    experience_years: float = Field(alias="experienceYears", ge=0)

    def promote(self, rank: int, justification: str) -> RankedEmployee:
        return RankedEmployee(
            id=self.id,
            name=self.name,
            summary=self.summary,
            skills=list(self.skills),
            experience_years=self.experience_years,
            rank=rank,
            justification=justification,
        )


class RankedEmployee(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kind: Literal["ranked"] = "ranked"
    id: str
    name: str
    summary: str
    skills: list[str]
    experience_years: float = Field(alias="experienceYears", ge=0)
    rank: int
    justification: str


Employee = Annotated[Union[AnalyzedEmployee, RankedEmployee], Field(discriminator="kind")]


class Notification(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: str
    message: str
    raised_at: float
