# models.py
from enum import Enum

from pydantic import BaseModel, field_validator


class Style(str, Enum):
    TLDR = "tldr"
    BULLET = "bullet"
    ELI5 = "eli5"


class SummarizeRequest(BaseModel):
    input: str
    style: Style = Style.TLDR
    model: str = "llama3"

    @field_validator("input")
    @classmethod
    def input_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("input must not be empty")
        return value


class SummarizeResponse(BaseModel):
    summary: str


class QuotaStatus(BaseModel):
    authenticated: bool
    used: int
    limit: int
    remaining: int
