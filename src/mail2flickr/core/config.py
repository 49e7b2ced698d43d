"""Listener configuration models and loader utilities."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Optional, cast

from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field, field_validator

CompletionCallback = Callable[[Optional[Exception], Optional[str]], None]

FLICKR_UPLOAD_URL = "https://up.flickr.com/services/upload/"


class ConfigurationError(ValueError):
    """Raised when required listener settings are missing."""


class ImapSettings(BaseModel):
    """Settings controlling IMAP connectivity."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(default="imap.gmail.com", description="IMAP hostname")
    port: int = Field(default=993, description="IMAP port, typically 993 for SSL")
    username: str | None = Field(default=None, description="Account username")
    password: str | None = Field(default=None, description="Account password")
    mailbox: str = Field(default="INBOX", description="Mailbox to monitor")
    use_ssl: bool = Field(default=True, description="Whether to enforce SSL")
    mark_seen: bool = Field(
        default=True, description="Flag fetched messages as seen on the server"
    )


class FlickrSettings(BaseModel):
    """Credentials and metadata used when uploading photos to Flickr."""

    model_config = ConfigDict(frozen=True)

    consumer_key: str | None = Field(default=None, description="Flickr app key")
    consumer_secret: str | None = Field(
        default=None, description="Flickr app key secret"
    )
    oauth_token: str | None = Field(
        default=None, description="Authorised OAuth token for the target user"
    )
    oauth_token_secret: str | None = Field(
        default=None, description="Authorised OAuth token secret"
    )
    upload_url: str = Field(
        default=FLICKR_UPLOAD_URL, description="Flickr upload endpoint"
    )
    tags: str | None = Field(
        default=None, description="Space separated tags applied to uploads"
    )
    is_public: bool | None = Field(default=None, description="Public visibility")
    is_friend: bool | None = Field(default=None, description="Friends visibility")
    is_family: bool | None = Field(default=None, description="Family visibility")
    timeout_seconds: float = Field(
        default=60.0, gt=0, description="Upload request timeout"
    )


class FilterSettings(BaseModel):
    """Sender and subject filters deciding which attachments get uploaded."""

    model_config = ConfigDict(frozen=True)

    subjects: tuple[str, ...] | None = Field(
        default=None, description="Keywords to look for in the subject line"
    )
    strict: bool = Field(
        default=False, description="Require exact equality between subject and keyword"
    )
    senders: tuple[str, ...] | None = Field(
        default=None, description="Allowed sender addresses (substring match)"
    )
    cleanup: bool = Field(
        default=False, description="Delete local attachment files after upload"
    )

    @field_validator("subjects", "senders", mode="before")
    @classmethod
    def _split_list(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple)):
            entries = tuple(str(entry).strip() for entry in value)
            entries = tuple(entry for entry in entries if entry)
            return entries or None
        return value


class WatchSettings(BaseModel):
    """Settings for the mailbox polling loop."""

    model_config = ConfigDict(frozen=True)

    attachment_dir: Path = Field(
        default=Path("."), description="Directory where attachments are stored"
    )
    poll_interval_seconds: float = Field(
        default=30.0, ge=0, description="Delay between mailbox polls"
    )
    max_cycles: int | None = Field(
        default=None, ge=1, description="Stop after this many polls"
    )


class LoggingSettings(BaseModel):
    """Logging preferences."""

    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO", description="Root logging level")
    structured: bool = Field(
        default=False, description="Toggle key=value structured logging"
    )


class ListenerConfig(BaseModel):
    """Aggregated listener configuration, immutable once built."""

    model_config = ConfigDict(frozen=True)

    imap: ImapSettings = Field(default_factory=ImapSettings)
    flickr: FlickrSettings = Field(default_factory=FlickrSettings)
    filters: FilterSettings = Field(default_factory=FilterSettings)
    watch: WatchSettings = Field(default_factory=WatchSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    callback: Optional[CompletionCallback] = Field(
        default=None, exclude=True, description="Invoked with (error, photo_id)"
    )

    def with_callback(self, callback: CompletionCallback | None) -> ListenerConfig:
        """Return a copy of the configuration using ``callback``."""
        return self.model_copy(update={"callback": callback})

    def require_credentials(self) -> None:
        """Raise :class:`ConfigurationError` if any credential is missing."""
        missing = [
            name
            for name, value in (
                ("imap.username", self.imap.username),
                ("imap.password", self.imap.password),
                ("flickr.consumer_key", self.flickr.consumer_key),
                ("flickr.consumer_secret", self.flickr.consumer_secret),
                ("flickr.oauth_token", self.flickr.oauth_token),
                ("flickr.oauth_token_secret", self.flickr.oauth_token_secret),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                "Missing required settings: " + ", ".join(missing)
            )


ENV_PREFIX = "MAIL2FLICKR_"


def _normalize_key(raw_key: str) -> list[str]:
    """Convert an environment variable key into a nested attribute path."""
    trimmed = raw_key.removeprefix(ENV_PREFIX)
    return [segment.lower() for segment in trimmed.split("__") if segment]


def _merge_into_tree(tree: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign a value to a nested dictionary given a path."""
    cursor = tree
    for segment in path[:-1]:
        next_node = cursor.setdefault(segment, {})
        cursor = cast(dict[str, Any], next_node)
    cursor[path[-1]] = value


def _collect_env_values(
    env_file: Path | str | None, include_environment: bool
) -> dict[str, Any]:
    """Load configuration values from environment variables and optional file."""
    collected: dict[str, Any] = {}

    file_values = {}
    if env_file:
        env_path = Path(env_file)
        if env_path.is_file():
            file_values = {
                key: value
                for key, value in dotenv_values(env_path).items()
                if key and key.startswith(ENV_PREFIX)
            }

    env_values = {}
    if include_environment:
        env_values = {
            key: value
            for key, value in os.environ.items()
            if key.startswith(ENV_PREFIX)
        }

    combined: dict[str, Any] = {**file_values, **env_values}

    for key, value in combined.items():
        path = _normalize_key(key)
        if not path:
            continue
        normalized_value: Any = value
        if isinstance(value, str) and value == "":
            normalized_value = None
        elif isinstance(value, str):
            lowercase_value = value.lower()
            if lowercase_value == "true":
                normalized_value = True
            elif lowercase_value == "false":
                normalized_value = False
        _merge_into_tree(collected, path, normalized_value)

    return collected


@lru_cache(maxsize=1)
def load_listener_config(
    env_file: Path | str | None = None,
    *,
    include_environment: bool = True,
    **overrides: Any,
) -> ListenerConfig:
    """Load listener settings, applying env files and overrides."""
    collected = _collect_env_values(env_file, include_environment)
    if overrides:
        collected.update(overrides)
    return ListenerConfig.model_validate(collected)


__all__ = [
    "CompletionCallback",
    "ConfigurationError",
    "FilterSettings",
    "FlickrSettings",
    "ImapSettings",
    "ListenerConfig",
    "LoggingSettings",
    "WatchSettings",
    "load_listener_config",
]
