"""
Pydantic schemas for data validation.
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from config import COMPETITION_DEFAULTS


# ============ Competition Schemas ============

class PointsSettings(BaseModel):
    """Points awarded per league outcome."""
    points_for_win: int = Field(default=COMPETITION_DEFAULTS.points_for_win, ge=0, strict=True)
    points_for_draw: int = Field(default=COMPETITION_DEFAULTS.points_for_draw, ge=0, strict=True)
    points_for_loss: int = Field(default=COMPETITION_DEFAULTS.points_for_loss, ge=0, strict=True)


class CompetitionCreate(BaseModel):
    """Schema for creating a new competition."""
    name: str = Field(..., min_length=1, max_length=200)
    type: Literal["league", "cup"]
    settings: PointsSettings = Field(default_factory=PointsSettings)

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()


# ============ Participant Schemas ============

class ParticipantCreate(BaseModel):
    """Schema for entering a participant."""
    name: str = Field(..., min_length=1, max_length=200)

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()


# ============ Result Schemas ============

class ResultEntry(BaseModel):
    """A score line; both scores must be non-negative integers."""
    home_score: int = Field(..., ge=0, strict=True)
    away_score: int = Field(..., ge=0, strict=True)
