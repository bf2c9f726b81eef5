"""Engine request and result models."""

from pathlib import Path

from pydantic import BaseModel, Field


class EngineRequest(BaseModel):
    """Single instruction handed to an engine process."""

    prompt: str = Field(description="Natural-language instruction")
    cwd: Path = Field(description="Working directory, always the repository root")
    max_turns: int = Field(default=50, description="Engine turn/step budget")
    model: str | None = Field(default=None, description="Engine-specific model hint")


class EngineResult(BaseModel):
    """Raw engine output. Never parsed for structure."""

    engine: str
    output: str = ""
    exit_code: int = 0
    success: bool = True
