"""
Configuration Management
========================

Centralized configuration using Pydantic Settings.
Loads from environment variables and .env file.
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from a11y_announcer.categories import Category, parse_category


# Shared config that all settings classes use to load .env
_shared_config = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    env_prefix="",
    extra="ignore",
)


def _parse_category_list(value: str) -> frozenset[Category]:
    return frozenset(
        parse_category(name) for name in value.split(",") if name.strip()
    )


class ChannelSettings(BaseSettings):
    """Duplicate suppression and repeat-buffer settings for both channels."""

    model_config = _shared_config

    dedup_window: float = Field(
        default=0.5,
        ge=0.0,
        description="Seconds during which an identical announcement is suppressed",
    )
    speech_repeatable: str = Field(
        default="dialogue,narrator,credits",
        description="Comma-separated categories stored in the speech channel's repeat buffer",
    )
    queue_repeatable: str = Field(
        default="dialogue,narrator,credits",
        description="Comma-separated categories stored in the queue channel's repeat buffer",
    )

    @field_validator("speech_repeatable", "queue_repeatable")
    @classmethod
    def validate_categories(cls, v: str) -> str:
        """Reject unknown category names at load time."""
        _parse_category_list(v)
        return v

    def get_repeatable(self, channel: str) -> frozenset[Category]:
        """Return the repeatable category set for ``speech`` or ``queue``."""
        if channel == "queue":
            return _parse_category_list(self.queue_repeatable)
        return _parse_category_list(self.speech_repeatable)


class QueueSettings(BaseSettings):
    """Clipboard output queue settings."""

    model_config = _shared_config

    queue_drain_interval: float = Field(
        default=0.025,
        gt=0.0,
        description="Seconds to wait after delivering one queued item",
    )
    queue_idle_interval: float = Field(
        default=1 / 60,
        gt=0.0,
        description="Seconds to wait before re-checking an empty queue (one tick)",
    )
    queue_max_size: Optional[int] = Field(
        default=None,
        ge=1,
        description="Optional cap; when full the oldest pending item is dropped",
    )


class SchedulerSettings(BaseSettings):
    """Delayed announcement settings."""

    model_config = _shared_config

    delayed_announcement_delay: float = Field(
        default=0.5,
        ge=0.0,
        description="Default delay in seconds for delayed announcements",
    )


class TextSettings(BaseSettings):
    """Text normalization settings."""

    model_config = _shared_config

    text_replacements: dict[str, str] = Field(
        default_factory=lambda: {"☓": " by ", "×": " by "},
        description="Literal substring replacements applied after markup stripping (JSON)",
    )


class InputSettings(BaseSettings):
    """Global key bindings."""

    model_config = _shared_config

    key_repeat: str = Field(default="r", description="Repeat last announcement")
    key_state: str = Field(default="i", description="Announce current state")
    key_reload: str = Field(default="f5", description="Reload configuration")

    @field_validator("key_repeat", "key_state", "key_reload")
    @classmethod
    def normalize_key(cls, v: str) -> str:
        """Keys are compared lower-case."""
        return v.strip().lower()


class ModeSettings(BaseSettings):
    """Host-pushed modes, for hosts driving the core over HTTP."""

    model_config = _shared_config

    mode_flags: str = Field(
        default="",
        description="Comma-separated mode names in priority order, toggled via PUT /modes/flags/{name}",
    )

    def get_mode_flags(self) -> list[str]:
        """Return the pushed mode names, highest priority first."""
        seen: set[str] = set()
        names: list[str] = []
        for name in self.mode_flags.split(","):
            name = name.strip().lower()
            if name and name not in seen:
                seen.add(name)
                names.append(name)
        return names


class MessageSettings(BaseSettings):
    """Fixed notices spoken by the core itself."""

    model_config = _shared_config

    message_nothing_to_repeat: str = Field(default="Nothing to repeat")
    message_state_unknown: str = Field(default="Current state unknown")
    message_state_unavailable: str = Field(default="Unable to determine current state")
    message_mode: str = Field(
        default="{mode} mode",
        description="Template for announcing a known coarse mode",
    )
    message_config_reloaded: str = Field(default="Configuration reloaded")
    message_config_reload_error: str = Field(default="Error reloading configuration")
    message_scene: str = Field(default="Scene: {scene}")


class OutputSettings(BaseSettings):
    """Delivery backends for the two channels."""

    model_config = _shared_config

    speech_backend: Literal["log", "auto"] = Field(
        default="log",
        description="'auto' uses the active screen reader via accessible_output2, 'log' only logs",
    )
    speech_interrupt: bool = Field(
        default=False,
        description="Whether each utterance interrupts current speech",
    )
    clipboard_backend: Literal["log", "pyperclip"] = Field(
        default="log",
        description="'pyperclip' copies queued output to the OS clipboard, 'log' only logs",
    )


class ServerSettings(BaseSettings):
    """Server and tick-loop configuration settings."""

    model_config = _shared_config

    server_host: str = Field(default="127.0.0.1", description="Server host")
    server_port: int = Field(default=8765, description="Server port")
    debug: bool = Field(default=True, description="Debug mode")
    environment: str = Field(default="development", description="Environment name (development, staging, production)")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level",
    )
    cors_origins: list[str] = Field(
        default_factory=list,
        description="Allowed CORS origins for browser-based hosts (JSON list)",
    )
    tick_interval: float = Field(
        default=1 / 60,
        gt=0.0,
        description="Seconds between mode evaluations when the service drives its own tick",
    )
    run_tick_loop: bool = Field(
        default=True,
        description="Drive tick() from an internal task (disable when the host calls tick itself)",
    )


class Settings(BaseSettings):
    """
    Main settings class combining all configuration sections.

    Usage:
        from a11y_announcer.config import get_settings
        settings = get_settings()
        print(settings.channel.dedup_window)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Nested settings
    channel: ChannelSettings = Field(default_factory=ChannelSettings)
    queue: QueueSettings = Field(default_factory=QueueSettings)
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    text: TextSettings = Field(default_factory=TextSettings)
    input: InputSettings = Field(default_factory=InputSettings)
    modes: ModeSettings = Field(default_factory=ModeSettings)
    messages: MessageSettings = Field(default_factory=MessageSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)

    def __init__(self, **kwargs):
        """Initialize settings with nested configuration."""
        super().__init__(**kwargs)
        # Re-initialize nested settings to pick up env vars
        self.channel = kwargs.get("channel") or ChannelSettings()
        self.queue = kwargs.get("queue") or QueueSettings()
        self.scheduler = kwargs.get("scheduler") or SchedulerSettings()
        self.text = kwargs.get("text") or TextSettings()
        self.input = kwargs.get("input") or InputSettings()
        self.modes = kwargs.get("modes") or ModeSettings()
        self.messages = kwargs.get("messages") or MessageSettings()
        self.output = kwargs.get("output") or OutputSettings()
        self.server = kwargs.get("server") or ServerSettings()


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings loaded from environment.
    """
    return Settings()
