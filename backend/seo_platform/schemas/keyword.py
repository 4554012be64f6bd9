"""
Pydantic schemas for keyword research requests
"""

from pydantic import BaseModel, Field, field_validator
from typing import List
from uuid import UUID


class KeywordCreate(BaseModel):
    """Terms to look up and store for a project"""

    project_id: UUID
    terms: List[str] = Field(..., min_length=1, max_length=20)

    @field_validator('terms')
    @classmethod
    def validate_terms(cls, v):
        cleaned = []
        for term in v:
            term = term.strip()
            if not term:
                raise ValueError("Keyword terms cannot be empty")
            if len(term) > 200:
                raise ValueError("Keyword terms must be at most 200 characters")
            cleaned.append(term)
        return cleaned
