"""Configuration loading from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_SERVICE_PORT = 8080
DEFAULT_DEV_SERVER_URL = "http://localhost:5173"
_TRUTHY = {"1", "true", "yes", "on"}


def env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class AppConfig:
    server_mode: bool = False
    server_host: str = "localhost"
    port: int = DEFAULT_SERVICE_PORT
    http_host: str = "localhost"
    use_bridge: bool = True
    http_timeout: float = 30.0
    home_dir: Path = Path.home() / "NeuralForge"
    dev: bool = False
    dev_server_url: str = DEFAULT_DEV_SERVER_URL
    ffmpeg_binary: str = "ffmpeg"

    @property
    def projects_dir(self) -> Path:
        return self.home_dir / "projects"

    @property
    def service_url(self) -> str:
        return f"http://{self.http_host}:{self.port}"


def load_config(env_file: str | os.PathLike[str] | None = None) -> AppConfig:
    load_dotenv(env_file, override=False)
    home_raw = os.environ.get("NEURALFORGE_HOME", "").strip()
    home_dir = Path(home_raw).expanduser() if home_raw else Path.home() / "NeuralForge"
    return AppConfig(
        server_mode=env_flag("SERVER_MODE"),
        server_host=os.environ.get("SERVER_HOST", "").strip() or "localhost",
        port=_env_int("PORT", DEFAULT_SERVICE_PORT),
        http_host=os.environ.get("NEURALFORGE_HTTP_HOST", "").strip() or "localhost",
        use_bridge=env_flag("NEURALFORGE_USE_BRIDGE", default=True),
        http_timeout=_env_float("NEURALFORGE_HTTP_TIMEOUT", 30.0),
        home_dir=home_dir,
        dev=env_flag("NEURALFORGE_DEV"),
        dev_server_url=os.environ.get("NEURALFORGE_DEV_SERVER_URL", "").strip() or DEFAULT_DEV_SERVER_URL,
        ffmpeg_binary=os.environ.get("FFMPEG_BINARY", "").strip() or "ffmpeg",
    )
