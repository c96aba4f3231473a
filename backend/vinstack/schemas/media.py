"""Pydantic schemas for text-to-speech and video generation."""
from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, Field


class SpeechRequest(BaseModel):
    user_id: Optional[str] = None
    text: str = Field(min_length=1, max_length=5000)
    voice_id: Optional[str] = None
    stability: float = Field(default=0.5, ge=0.0, le=1.0)
    similarity_boost: float = Field(default=0.75, ge=0.0, le=1.0)
    style: float = Field(default=0.0, ge=0.0, le=1.0)
    speaker_boost: bool = True


class VoiceOut(BaseModel):
    voice_id: str
    name: str
    category: Optional[str] = None


class VideoRequest(BaseModel):
    user_id: str
    script: str = Field(min_length=1)
    title: Optional[str] = None
    snippet_id: Optional[str] = None


class VideoStatusOut(BaseModel):
    video_id: str
    status: str  # pending | processing | completed | failed
    video_url: Optional[str] = None
    error: Optional[str] = None


class VideoAttach(BaseModel):
    video_url: str
