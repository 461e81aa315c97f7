from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TreatmentPlanCreate(BaseModel):
    patient_id: int
    therapist_id: int
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    total_sessions: int = Field(ge=1)
    completed_sessions: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def validate_sessions(self) -> "TreatmentPlanCreate":
        if self.completed_sessions > self.total_sessions:
            raise ValueError("Tamamlanan seans sayısı toplamı aşamaz")
        return self


class TreatmentPlanUpdate(BaseModel):
    therapist_id: Optional[int] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    total_sessions: Optional[int] = Field(default=None, ge=1)
    completed_sessions: Optional[int] = Field(default=None, ge=0)


class TreatmentPlanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    patient_id: int
    therapist_id: int
    name: str
    description: Optional[str] = None
    total_sessions: int
    completed_sessions: int
    created_at: datetime


class SessionNoteCreate(BaseModel):
    appointment_id: int
    therapist_id: Optional[int] = None
    note_text: str = Field(min_length=1)
    pain_scale: Optional[int] = Field(default=None, ge=0, le=10)


class SessionNoteUpdate(BaseModel):
    note_text: Optional[str] = Field(default=None, min_length=1)
    pain_scale: Optional[int] = Field(default=None, ge=0, le=10)


class SessionNoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    appointment_id: int
    therapist_id: int
    note_text: str
    pain_scale: Optional[int] = None
    created_at: datetime
