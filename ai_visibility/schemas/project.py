from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from ai_visibility.collectors.llm_base import normalize_domain


class ProjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    domain: str = Field(min_length=1, max_length=255)
    competitors: list[str] | None = None  # initial competitor domains

    @field_validator("domain")
    @classmethod
    def _normalize_domain(cls, v: str) -> str:
        domain = normalize_domain(v)
        if not domain:
            raise ValueError("domain must not be empty")
        return domain


class ProjectResponse(BaseModel):
    id: int
    name: str
    domain: str
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class CompetitorCreate(BaseModel):
    domain: str = Field(min_length=1, max_length=255)

    @field_validator("domain")
    @classmethod
    def _normalize_domain(cls, v: str) -> str:
        domain = normalize_domain(v)
        if not domain:
            raise ValueError("domain must not be empty")
        return domain


class CompetitorResponse(BaseModel):
    id: int
    project_id: int
    domain: str
    created_at: datetime

    model_config = {"from_attributes": True}
