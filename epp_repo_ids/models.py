from __future__ import annotations

from enum import Enum
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RawRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    number: int = Field(ge=1, description="1-based, the header is record 1")
    fields: Tuple[str, ...]


class CandidateIdentifier(BaseModel):
    model_config = ConfigDict(frozen=True)

    literal: str
    codepoint_spec: str


class RejectReason(str, Enum):
    UNPARSABLE = "unparsable"
    MALFORMED_CODE_POINTS = "malformed_code_points"
    MISMATCH = "mismatch"
    TOO_LONG = "too_long"
    ILLEGAL_CODE_POINT = "illegal_code_point"


class Accepted(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["accepted"] = "accepted"
    record: int
    id: str

    @property
    def line(self) -> str:
        return self.id


class Rejected(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["rejected"] = "rejected"
    record: int
    reason: RejectReason
    comment: str

    @field_validator("comment")
    @classmethod
    def _comment_marker(cls, value: str) -> str:
        if not value.startswith("#"):
            raise ValueError("rejection comments must start with '#'")
        return value

    @property
    def line(self) -> str:
        return self.comment


OutputRecord = Annotated[Union[Accepted, Rejected], Field(discriminator="kind")]


class Database(BaseModel):
    sha256: str
    encoding: str = Field(default="utf-8")
    content_b64: str


class ReportSummary(BaseModel):
    records: int = 0
    accepted: int = 0
    rejected: int = 0
    deterministic: bool = True


class ReportItem(BaseModel):
    record: Optional[int] = None
    issue: str
    value: Optional[str] = None
    action: str


class NormalizationReport(BaseModel):
    summary: ReportSummary = Field(default_factory=ReportSummary)
    rejections: List[ReportItem] = Field(default_factory=list)
    warnings: List[ReportItem] = Field(default_factory=list)


class NormalizeResponse(BaseModel):
    database: Database
    report: NormalizationReport

class HealthResponse(BaseModel):
    ok: bool = True
