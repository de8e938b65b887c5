"""
safe_assistant/deployment/api.py - REST API

HTTP surface for the presentation layer. Serves scenario runs and narration
audio. Errors are reported generically; upstream error text never reaches
the client.
"""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING
import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from safe_assistant.bootstrap.app import AssistantApp

logger = logging.getLogger("deployment.api")

MAX_TTS_CHARS = 5000


# =============================================================================
# Request Models
# =============================================================================

class TTSRequest(BaseModel):
    """Request model for narration audio."""
    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = None
    voice: Optional[str] = None
    want_alignment: bool = Field(default=True, alias="wantAlignment")


def create_fastapi_app(assistant: "AssistantApp") -> FastAPI:
    """
    Create FastAPI application.

    Args:
        assistant: Built application holding clients, caches, and services

    Returns:
        FastAPI application instance
    """
    from safe_assistant.bootstrap.app import UnknownScenarioError
    from safe_assistant.assistant.scenarios import get_scenario

    assistant.build()

    app = FastAPI(
        title="Safe Assistant API",
        description="Governed action assistant with narrated decisions",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=assistant.config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Startup/Shutdown
    # =========================================================================

    @app.on_event("shutdown")
    async def shutdown():
        logger.info("API server stopping")
        await assistant.close()

    # =========================================================================
    # Health
    # =========================================================================

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "ok",
            "ttsEnabled": bool(assistant.synthesizer and assistant.synthesizer.enabled),
        }

    # =========================================================================
    # Scenarios
    # =========================================================================

    @app.post("/api/scenario/{scenario_id}")
    async def run_scenario(scenario_id: str):
        """Run a catalogued scenario and return the structured result."""
        scenario = get_scenario(scenario_id)
        if scenario is None:
            raise HTTPException(status_code=400, detail=f"Unknown scenario: {scenario_id}")

        try:
            result = await assistant.run_scenario(scenario.id)
        except UnknownScenarioError:
            raise HTTPException(status_code=400, detail=f"Unknown scenario: {scenario_id}")
        except Exception as e:
            logger.error(f"Scenario {scenario.id} failed: {type(e).__name__}: {e}")
            raise HTTPException(status_code=500, detail="Scenario failed")

        return {
            "scenario": scenario.label,
            "result": result.to_dict(),
            "narration": result.explanation.text,
        }

    # =========================================================================
    # Narration audio
    # =========================================================================

    @app.post("/api/tts")
    async def text_to_speech(request: TTSRequest):
        """Synthesize narration audio with word alignment."""
        if not request.text:
            raise HTTPException(status_code=400, detail="Missing required field: text")
        if len(request.text) > MAX_TTS_CHARS:
            raise HTTPException(
                status_code=400,
                detail=f"Text too long (max {MAX_TTS_CHARS} chars)",
            )

        try:
            result = await assistant.synthesize(
                request.text,
                voice=request.voice,
                want_alignment=request.want_alignment,
            )
        except Exception as e:
            logger.error(f"TTS failed: {type(e).__name__}: {e}")
            raise HTTPException(status_code=500, detail="TTS failed")

        return result.to_dict()

    return app
