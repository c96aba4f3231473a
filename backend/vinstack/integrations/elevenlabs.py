"""ElevenLabs text-to-speech client."""
import logging
from typing import Any, Optional

import httpx

from vinstack.config import settings
from vinstack.integrations.base import ProviderClient

logger = logging.getLogger(__name__)

DEFAULT_VOICES = {
    "male": "21m00Tcm4TlvDq8ikWAM",
    "female": "EXAVITQu4vr4xnSDxMaL",
    "neutral": "onwK4e9ZLuTAKqWW03F9",
}
DEFAULT_STABILITY = 0.5
DEFAULT_SIMILARITY_BOOST = 0.75


class ElevenLabsClient(ProviderClient):
    name = "elevenlabs"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model_id: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ):
        super().__init__(
            base_url or settings.ELEVENLABS_API_URL,
            settings.ELEVENLABS_API_KEY if api_key is None else api_key,
            client,
        )
        self.model_id = model_id or settings.ELEVENLABS_MODEL_ID

    def _headers(self) -> dict[str, str]:
        return {"xi-api-key": self.api_key}

    def text_to_speech(
        self,
        text: str,
        voice_id: Optional[str] = None,
        stability: float = DEFAULT_STABILITY,
        similarity_boost: float = DEFAULT_SIMILARITY_BOOST,
        style: float = 0.0,
        speaker_boost: bool = True,
    ) -> bytes:
        """Return the synthesized audio (MPEG bytes)."""
        voice_id = voice_id or DEFAULT_VOICES["neutral"]
        body = {
            "text": text,
            "model_id": self.model_id,
            "voice_settings": {
                "stability": stability,
                "similarity_boost": similarity_boost,
                "style": style,
                "use_speaker_boost": speaker_boost,
            },
        }
        response = self.request(
            "POST", f"/text-to-speech/{voice_id}", json=body, headers={"Accept": "audio/mpeg"},
        )
        logger.info("Generated %d bytes of speech with voice %s (%d chars)", len(response.content), voice_id, len(text))
        return response.content

    def list_voices(self) -> list[dict[str, Any]]:
        data = self.request_json("GET", "/voices")
        return [
            {"voice_id": v["voice_id"], "name": v.get("name", ""), "category": v.get("category")}
            for v in data.get("voices", [])
        ]
