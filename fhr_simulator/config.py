"""
config.py

Typed settings for the strip simulator.

Defaults are baked in; any of them can be overridden with environment
variables:
- FHR_SIM_HOST / FHR_SIM_PORT
- FHR_SIM_CORS_ORIGINS (comma separated)
- FHR_SIM_LOG_LEVEL
- FHR_SIM_SEED (integer; makes every regeneration reproducible)
- FHR_SIM_SURFACE_WIDTH / FHR_SIM_SURFACE_HEIGHT / FHR_SIM_TOCO_HEIGHT
"""
import os
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator


class ServerSettings(BaseModel):
    host: str = Field(default="127.0.0.1", description="Bind address for the local server.")
    port: int = Field(default=8000, ge=1, le=65535)
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"])


class SurfaceSettings(BaseModel):
    """Default backing resolution of the two strip charts."""
    width: int = Field(default=1200, gt=0)
    fhr_height: int = Field(default=420, gt=0)
    toco_height: int = Field(default=200, gt=0)


class SimulatorSettings(BaseModel):
    server: ServerSettings = Field(default_factory=ServerSettings)
    surface: SurfaceSettings = Field(default_factory=SurfaceSettings)
    log_level: str = Field(default="INFO")
    seed: Optional[int] = Field(default=None, description="Seed for the strip random source.")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        normalized = (value or "").strip().upper()
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if normalized not in allowed:
            raise ValueError("log_level must be one of: " + ", ".join(sorted(allowed)))
        return normalized


def _environment_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {"server": {}, "surface": {}}

    def read(env_name: str) -> str:
        return environ.get(env_name, "").strip()

    for env_name, section, key in (
        ("FHR_SIM_HOST", "server", "host"),
        ("FHR_SIM_PORT", "server", "port"),
        ("FHR_SIM_SURFACE_WIDTH", "surface", "width"),
        ("FHR_SIM_SURFACE_HEIGHT", "surface", "fhr_height"),
        ("FHR_SIM_TOCO_HEIGHT", "surface", "toco_height"),
    ):
        value_text = read(env_name)
        if value_text:
            overrides[section][key] = value_text

    origins_text = read("FHR_SIM_CORS_ORIGINS")
    if origins_text:
        overrides["server"]["cors_origins"] = [o.strip() for o in origins_text.split(",") if o.strip()]
    if read("FHR_SIM_LOG_LEVEL"):
        overrides["log_level"] = read("FHR_SIM_LOG_LEVEL")
    if read("FHR_SIM_SEED"):
        overrides["seed"] = read("FHR_SIM_SEED")
    return overrides


def load_settings(environ: Optional[Mapping[str, str]] = None) -> SimulatorSettings:
    environ = os.environ if environ is None else environ
    try:
        return SimulatorSettings.model_validate(_environment_overrides(environ))
    except ValidationError as exception:
        raise ValueError(f"Invalid FHR_SIM_* environment settings:\n{exception}") from exception


@lru_cache(maxsize=1)
def get_settings() -> SimulatorSettings:
    return load_settings()
