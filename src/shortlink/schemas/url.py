from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime


class URLCreate(BaseModel):
    url: str

    @field_validator("url")
    @classmethod
    def url_not_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("url must not be empty")
        return value


class ShortenResponse(BaseModel):
    short_url: str
    id: str


class URL(BaseModel):
    id: str
    original_url: str
    short_url: str
    created_at: datetime
    owner_id: Optional[str]

    class Config:
        from_attributes = True
