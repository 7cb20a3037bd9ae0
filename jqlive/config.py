"""Configuration loading for jqlive."""

from __future__ import annotations

import json
import os
import shlex
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.text import Text

from .core.session_log import log_warn
from .paths import JqlivePaths


DEFAULT_TOOL = "jq"
DEFAULT_POLL_INTERVAL_MS = 50


@dataclass
class JqliveSettings:
    tool: str = DEFAULT_TOOL
    tool_args: List[str] = field(default_factory=list)
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    color: bool = True
    debug: Any = None

    @property
    def poll_interval_s(self) -> float:
        return self.poll_interval_ms / 1000.0


def _as_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _as_bool(value: Optional[str]) -> Optional[bool]:
    if value is None:
        return None
    cleaned = value.strip().lower()
    if cleaned in {"1", "true", "yes", "y", "on"}:
        return True
    if cleaned in {"0", "false", "no", "n", "off"}:
        return False
    return None


def _load_env() -> Dict[str, Any]:
    values: Dict[str, Any] = {
        "tool": os.getenv("JQLIVE_TOOL") or None,
        "poll_interval_ms": _as_int(os.getenv("JQLIVE_POLL_MS")),
        "color": _as_bool(os.getenv("JQLIVE_COLOR")),
        "debug": os.getenv("JQLIVE_DEBUG") or None,
    }
    raw_args = os.getenv("JQLIVE_TOOL_ARGS")
    if raw_args is not None:
        values["tool_args"] = shlex.split(raw_args)
    return {key: value for key, value in values.items() if value is not None}


class ConfigManager:
    """Loads jqlive settings from ~/.jqlive/jqlive.json, the environment and overrides."""

    def __init__(self, paths: Optional[JqlivePaths] = None, console: Optional[Console] = None) -> None:
        self.paths = paths or JqlivePaths()
        self.console = console or Console(stderr=True)

    def load_settings(self, overrides: Optional[Dict[str, Any]] = None) -> JqliveSettings:
        """Merge defaults, config file, env vars and explicit overrides (last wins)."""
        merged: Dict[str, Any] = {}
        merged.update(self._read_config_file())
        merged.update(_load_env())
        if overrides:
            merged.update({key: value for key, value in overrides.items() if value is not None})
        return self._normalize(merged)

    def _read_config_file(self) -> Dict[str, Any]:
        path = self.paths.config_file
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as exc:
            self._warn(f"Ignoring unreadable config {path}: {exc}")
            return {}
        if not isinstance(data, dict):
            self._warn(f"Ignoring config {path}: expected a JSON object")
            return {}
        return data

    def _normalize(self, raw: Dict[str, Any]) -> JqliveSettings:
        known = {item.name for item in fields(JqliveSettings)}
        values = {key: value for key, value in raw.items() if key in known}
        settings = JqliveSettings(**values)

        if not isinstance(settings.tool, str) or not settings.tool.strip():
            settings.tool = DEFAULT_TOOL
        if isinstance(settings.tool_args, str):
            settings.tool_args = shlex.split(settings.tool_args)
        elif not isinstance(settings.tool_args, (list, tuple)):
            settings.tool_args = []
        settings.tool_args = [str(arg) for arg in settings.tool_args]

        interval = settings.poll_interval_ms
        if isinstance(interval, str):
            interval = _as_int(interval)
        if not isinstance(interval, int) or isinstance(interval, bool) or interval <= 0:
            interval = DEFAULT_POLL_INTERVAL_MS
        settings.poll_interval_ms = interval

        if isinstance(settings.color, str):
            parsed = _as_bool(settings.color)
            settings.color = True if parsed is None else parsed
        settings.color = bool(settings.color)
        return settings

    def _warn(self, message: str) -> None:
        log_warn("config", "config.invalid", message)
        self.console.print(Text(message, style="yellow"))
