"""Configuration manager — read/write TOML config, resolve project connections."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import pydantic
import tomli_w

from pinecone_lifecycle.client.errors import ConfigurationError
from pinecone_lifecycle.config.constants import (
    CONFIG_FILE,
    DEFAULT_CONTROLLER_URL,
    DEFAULT_STATE_FILE,
    ENV_API_KEY,
    ENV_CONTROLLER_URL,
    ENV_PROFILE,
    ENV_STATE_FILE,
)
from pinecone_lifecycle.config.models import CLIConfig, ProjectProfile

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib


def _write_private(path: Path, text: str) -> None:
    """Write ``text`` owner-only, through a temp file renamed over ``path``."""
    temp = path.with_suffix(".tmp")
    fd = os.open(str(temp), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    try:
        os.write(fd, text.encode())
    finally:
        os.close(fd)
    temp.replace(path)


class ConfigManager:
    """Owns the config file: project profiles, wait budgets, state file location."""

    def __init__(self, config_path: Path | None = None) -> None:
        self.config_path = config_path or CONFIG_FILE
        self._config: CLIConfig | None = None

    @property
    def config(self) -> CLIConfig:
        if self._config is None:
            self._config = self._load()
        return self._config

    def _load(self) -> CLIConfig:
        if not self.config_path.exists():
            return CLIConfig()
        try:
            data = tomllib.loads(self.config_path.read_text())
        except tomllib.TOMLDecodeError as exc:
            raise ConfigurationError(
                f"Cannot parse config file {self.config_path}: {exc}"
            ) from exc
        # Profile names are the table keys, not stored inside each table
        data["profiles"] = {
            name: {**body, "name": name}
            for name, body in data.get("profiles", {}).items()
        }
        try:
            return CLIConfig.model_validate(data)
        except pydantic.ValidationError as exc:
            raise ConfigurationError(f"Invalid config file {self.config_path}: {exc}") from exc

    def _dump(self) -> dict[str, Any]:
        """The config as TOML-ready data, leaving out anything at its default."""
        data = self.config.model_dump(
            exclude={"profiles"}, exclude_none=True, exclude_defaults=True,
        )
        if self.config.profiles:
            data["profiles"] = {
                name: profile.model_dump(
                    exclude={"name"}, exclude_none=True, exclude_defaults=True,
                )
                for name, profile in self.config.profiles.items()
            }
        return data

    def save(self) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        os.chmod(self.config_path.parent, 0o700)
        _write_private(self.config_path, tomli_w.dumps(self._dump()))

    # Profiles

    def add_profile(self, profile: ProjectProfile, *, make_default: bool = False) -> None:
        """Add or replace a profile; the first profile becomes the default."""
        profiles = self.config.profiles
        profiles[profile.name] = profile
        if make_default or self.config.default_profile not in profiles:
            self.config.default_profile = profile.name
        self.save()

    def remove_profile(self, name: str) -> bool:
        if self.config.profiles.pop(name, None) is None:
            return False
        if self.config.default_profile == name:
            self.config.default_profile = next(iter(self.config.profiles), None)
        self.save()
        return True

    def set_default(self, name: str) -> bool:
        if name not in self.config.profiles:
            return False
        self.config.default_profile = name
        self.save()
        return True

    def get_profile(self, name: str | None = None) -> ProjectProfile | None:
        """Look up ``name``, or the default profile when no name is given."""
        wanted = name or self.config.default_profile
        return self.config.profiles.get(wanted) if wanted else None

    # Resolution

    def resolve_project(
        self,
        profile_name: str | None = None,
        url: str | None = None,
        api_key: str | None = None,
    ) -> ProjectProfile:
        """Resolve the control plane connection.

        Precedence: CLI flags > env vars > config profile. A profile that was
        asked for by name (flag or ``PINECONE_PROFILE``) must exist.
        """
        wanted = profile_name or os.environ.get(ENV_PROFILE)
        profile = self.get_profile(wanted)
        if wanted and profile is None:
            raise ConfigurationError(f"Profile '{wanted}' not found.")
        base = profile or ProjectProfile(name="cli")

        resolved_key = api_key or os.environ.get(ENV_API_KEY) or base.api_key
        if not resolved_key:
            raise ConfigurationError(
                "No API key configured. Use 'pinecone-lifecycle config add' or set "
                f"{ENV_API_KEY} or pass --api-key."
            )
        resolved_url = (
            url or os.environ.get(ENV_CONTROLLER_URL) or base.url or DEFAULT_CONTROLLER_URL
        )
        return base.model_copy(update={"api_key": resolved_key, "url": resolved_url.rstrip("/")})

    def resolve_state_file(self, state_file: str | None = None) -> Path:
        """Resolve the durable state file.

        Precedence: CLI flag > env var > config file > working directory default.
        """
        chosen = state_file or os.environ.get(ENV_STATE_FILE) or self.config.state_file
        return Path(chosen).expanduser() if chosen else DEFAULT_STATE_FILE
