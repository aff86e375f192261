from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from datetime import datetime
from enum import Enum
from typing import Optional

from ..utils.timezone import to_naive_utc


class ExamStatus(str, Enum):
    LIVE = "live"
    UPCOMING = "upcoming"
    ENDED = "ended"


class ExamBase(BaseModel):
    name: str = Field(min_length=1)
    year: int = Field(ge=1)
    department: Optional[str] = None
    section: Optional[str] = None
    duration_minutes: int = Field(gt=0)
    start_time: datetime
    end_time: datetime
    random_question_count: Optional[int] = Field(default=None, ge=0)

    class Config:
        populate_by_name = True
        alias_generator = to_camel


class ExamCreate(ExamBase):

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_to_utc(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @model_validator(mode="after")
    def check_window(self):
        if self.start_time >= self.end_time:
            raise ValueError("startTime must be before endTime")
        return self


class Exam(ExamBase):
    id: str
    department: str = "general"
    section: str = "general"
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        populate_by_name = True
        alias_generator = to_camel


class ExamListing(Exam):
    status: ExamStatus
    is_live: bool
    is_upcoming: bool
