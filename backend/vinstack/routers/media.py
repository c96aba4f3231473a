"""Text-to-speech and explainer video routes."""
import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from vinstack.database import get_db
from vinstack.deps import get_elevenlabs, get_tavus
from vinstack.integrations.elevenlabs import ElevenLabsClient
from vinstack.integrations.tavus import TavusClient
from vinstack.schemas.media import SpeechRequest, VideoRequest, VideoStatusOut, VoiceOut
from vinstack.services.profile_service import get_profile_or_404, record_activity

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/speech", response_class=Response)
def text_to_speech(
    payload: SpeechRequest,
    db: Session = Depends(get_db),
    tts: ElevenLabsClient = Depends(get_elevenlabs),
):
    """Synthesize ``text`` and return the MPEG audio."""
    audio = tts.text_to_speech(
        payload.text,
        voice_id=payload.voice_id,
        stability=payload.stability,
        similarity_boost=payload.similarity_boost,
        style=payload.style,
        speaker_boost=payload.speaker_boost,
    )
    if payload.user_id:
        record_activity(
            db, payload.user_id, "generate", "voice", payload.voice_id or "default",
            "Generated speech", {"characters": len(payload.text)},
        )
    return Response(content=audio, media_type="audio/mpeg")


@router.get("/voices", response_model=list[VoiceOut])
def list_voices(tts: ElevenLabsClient = Depends(get_elevenlabs)):
    return tts.list_voices()


@router.post("/videos", response_model=VideoStatusOut, status_code=202)
def create_video(payload: VideoRequest, db: Session = Depends(get_db), tavus: TavusClient = Depends(get_tavus)):
    """Start rendering an explainer video. Poll ``GET /videos/{id}`` for the result."""
    get_profile_or_404(db, payload.user_id)
    result = tavus.create_video(payload.script, payload.title)
    record_activity(
        db, payload.user_id, "generate", "video", result["video_id"],
        "Requested explainer video", {"snippet_id": payload.snippet_id},
    )
    return result


@router.get("/videos/{video_id}", response_model=VideoStatusOut)
def get_video(video_id: str, tavus: TavusClient = Depends(get_tavus)):
    return tavus.get_video(video_id)
