import os
import yaml
from pathlib import Path
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from typing import Optional

from connect3d.app.engine.constants import MAX_DELAY

load_dotenv()

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "engine.yaml"

class EngineSettings(BaseModel):
    search_depth: int = Field(default=2, ge=0)
    win_length: int = Field(default=4, ge=2)

class SelfPlaySettings(BaseModel):
    delay: float = Field(default=1.0, le=MAX_DELAY)
    max_sessions: int = Field(default=8, ge=1)

class TunerSettings(BaseModel):
    population_size: int = Field(default=20, ge=2)
    generations: int = Field(default=10, ge=1)
    games_per_pair: int = Field(default=3, ge=1)
    tournament_size: int = Field(default=3, ge=1)
    mutation_rate: float = Field(default=0.1, ge=0.0, le=1.0)
    mutation_step: float = Field(default=0.25, ge=0.0)
    max_moves: int = Field(default=20, ge=1)
    win_length: int = Field(default=4, ge=2)

class Settings(BaseModel):
    engine: EngineSettings = Field(default_factory=EngineSettings)
    self_play: SelfPlaySettings = Field(default_factory=SelfPlaySettings)
    tuner: TunerSettings = Field(default_factory=TunerSettings)

def get_config_path() -> Path:
    """CONNECT3D_CONFIG wins over the bundled file"""
    return Path(os.getenv("CONNECT3D_CONFIG") or DEFAULT_CONFIG_PATH)

def load_settings(path: Optional[str] = None) -> Settings:
    config_path = Path(path) if path else get_config_path()
    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}
    return Settings(**data)
