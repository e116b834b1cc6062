"""
Data Models for the VietCorrect HTTP API

© 2025 Sven Kalinowski with small help of Lino Casu
Licensed under the Anti-Capitalist Software License v1.4
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class TextStats(BaseModel):
    chars: int = 0
    words: int = 0


class TextRequest(BaseModel):
    text: str = Field("", description="Raw text, may span several lines")


class NormalizeResponse(BaseModel):
    text: str
    stats: TextStats


class ExtractResponse(BaseModel):
    """Plain text extracted from an uploaded .docx or .pdf."""
    file_name: str
    file_type: str
    text: str
    stats: TextStats


class DocxFromTextRequest(BaseModel):
    text: str
    file_name: str = Field("document.txt", description="Name of the source, used for the output name")


class AIFixRequest(BaseModel):
    text: str
    # Falls back to the stored settings when omitted
    api_key: Optional[str] = None
    model: Optional[str] = None


class AIFixResponse(BaseModel):
    text: str
    model_used: str


class ModelEntry(BaseModel):
    id: str
    name: str
    desc: str
    priority: int


class ModelsResponse(BaseModel):
    models: List[ModelEntry]
    default: str
