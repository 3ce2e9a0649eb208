import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple

from dotenv import find_dotenv, load_dotenv


# -----------------------------
# Defaults
# -----------------------------
DEFAULT_API_BASE = "https://discord.com/api/v10"
DEFAULT_OUTPUT_PATH = Path("public") / "dq.json"
DEFAULT_FETCH_LIMIT = 50
MAX_FETCH_LIMIT = 100  # Discord caps a single messages page at 100
DEFAULT_TIMEOUT = 15.0
DEFAULT_TRIGGERS = ("daily quest",)
DEFAULT_RAW_LIMIT = 1000

DEFAULT_FMT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


class ConfigError(Exception):
    """A required setting is missing or unusable."""


@dataclass(frozen=True, slots=True)
class Config:
    """Runtime configuration for one fetch-and-extract run."""

    token: str
    channel_id: str
    api_base: str = DEFAULT_API_BASE
    output_path: Path = DEFAULT_OUTPUT_PATH
    limit: int = DEFAULT_FETCH_LIMIT
    timeout: float = DEFAULT_TIMEOUT
    triggers: Tuple[str, ...] = DEFAULT_TRIGGERS
    raw_limit: int = DEFAULT_RAW_LIMIT
    log_level: str = "INFO"

    def __repr__(self) -> str:
        # keep the token out of logs and tracebacks
        return (
            f"Config(channel_id={self.channel_id!r}, api_base={self.api_base!r}, "
            f"output_path={str(self.output_path)!r}, limit={self.limit})"
        )


def _require(env: Mapping[str, str], key: str) -> str:
    value = (env.get(key) or "").strip()
    if not value:
        raise ConfigError(f"Missing required environment variable: {key}")
    return value


def _get_int(env: Mapping[str, str], key: str, default: int) -> int:
    value = (env.get(key) or "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"Environment variable '{key}' is not a valid integer: {value!r}") from None


def _get_float(env: Mapping[str, str], key: str, default: float) -> float:
    value = (env.get(key) or "").strip()
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigError(f"Environment variable '{key}' is not a valid number: {value!r}") from None


def clamp_limit(limit: int) -> int:
    return max(1, min(MAX_FETCH_LIMIT, limit))


def parse_triggers(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return DEFAULT_TRIGGERS
    triggers = tuple(t.strip().lower() for t in value.split(",") if t.strip())
    return triggers or DEFAULT_TRIGGERS


def load_config(env: Optional[Mapping[str, str]] = None) -> Config:
    """
    Build a Config from environment variables.

    When ``env`` is None the process environment is used, after loading a
    ``.env`` file found from the working directory upward. Raises
    ConfigError when the bot token or channel id is missing, or a numeric
    setting does not parse.
    """
    if env is None:
        load_dotenv(find_dotenv(usecwd=True))
        env = os.environ

    token = _require(env, "DISCORD_BOT_TOKEN")
    channel_id = _require(env, "DISCORD_CHANNEL_ID")

    timeout = _get_float(env, "DQ_TIMEOUT", DEFAULT_TIMEOUT)
    if timeout <= 0:
        raise ConfigError(f"DQ_TIMEOUT must be positive, got {timeout}")

    raw_limit = _get_int(env, "DQ_RAW_LIMIT", DEFAULT_RAW_LIMIT)
    if raw_limit < 0:
        raise ConfigError(f"DQ_RAW_LIMIT must not be negative, got {raw_limit}")

    return Config(
        token=token,
        channel_id=channel_id,
        api_base=(env.get("DISCORD_API_BASE") or DEFAULT_API_BASE).rstrip("/"),
        output_path=Path(env.get("DQ_OUTPUT_PATH") or DEFAULT_OUTPUT_PATH),
        limit=clamp_limit(_get_int(env, "DQ_FETCH_LIMIT", DEFAULT_FETCH_LIMIT)),
        timeout=timeout,
        triggers=parse_triggers(env.get("DQ_TRIGGERS")),
        raw_limit=raw_limit,
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
    )
