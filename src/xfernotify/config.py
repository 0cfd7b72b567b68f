"""Configuration loading: YAML file -> immutable, validated sink settings."""
from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import ConfigError
from .logutil import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = "/etc/xfernotify.yml"
DEFAULT_PIPE_PATH = "/var/run/xferlog.pipe"
DEFAULT_FILE_PATH = "/var/log/xferlog.notify"
DEFAULT_PUSH_URL = "https://api.pushbullet.com/v2/pushes"
DEFAULT_TITLE = "%u %A file %f"
DEFAULT_BODY = "User %u (%c) %A file %F (%S) in %D seconds at %b MB/s"

# Names accepted by syslog(3); resolved to numeric values by the syslog sink.
SYSLOG_FACILITIES = (
    "kern", "user", "mail", "daemon", "auth", "lpr", "news", "uucp", "cron",
    "syslog", "local0", "local1", "local2", "local3", "local4", "local5",
    "local6", "local7", "authpriv",
)
SYSLOG_LEVELS = ("emerg", "alert", "crit", "err", "warning", "notice", "info", "debug")


class SinkConfig(BaseModel):
    # Unrecognized options are ignored; instances are read-only once loaded.
    model_config = ConfigDict(extra="ignore", frozen=True)


class FileSinkConfig(SinkConfig):
    path: str = DEFAULT_FILE_PATH


class SyslogSinkConfig(SinkConfig):
    facility: str = "daemon"
    level: str = "info"

    @field_validator("facility")
    @classmethod
    def _known_facility(cls, value: str) -> str:
        value = value.lower()
        if value not in SYSLOG_FACILITIES:
            raise ValueError(f"unknown syslog facility {value!r}")
        return value

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.lower()
        if value == "warn":
            value = "warning"
        if value not in SYSLOG_LEVELS:
            raise ValueError(f"unknown syslog level {value!r}")
        return value


class PushSinkConfig(SinkConfig):
    # token is required but only checked when a notification is sent
    token: Optional[str] = None
    title: str = DEFAULT_TITLE
    body: str = DEFAULT_BODY
    alert_upload: bool = True
    alert_download: bool = True
    skip_incomplete: bool = True
    filename_filter: str = ".*"
    filesize_min_mb: float = Field(default=1, ge=0)
    url: str = DEFAULT_PUSH_URL
    timeout: float = Field(default=10.0, gt=0)

    @field_validator("filename_filter")
    @classmethod
    def _valid_regex(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as exc:
            raise ValueError(f"invalid filename_filter regex: {exc}") from exc
        return value


# Dispatch order is the order of this mapping.
SINK_CONFIG_TYPES: Dict[str, Type[SinkConfig]] = {
    "file": FileSinkConfig,
    "syslog": SyslogSinkConfig,
    "push": PushSinkConfig,
}
SINK_TYPES: Tuple[str, ...] = tuple(SINK_CONFIG_TYPES)
_ALIASES = {"pushbullet": "push"}

Outputs = Mapping[str, Tuple[SinkConfig, ...]]


@dataclass(frozen=True)
class AppConfig:
    pipe: str = DEFAULT_PIPE_PATH
    outputs: Outputs = field(default_factory=lambda: build_outputs({}))

    def instance_count(self) -> int:
        return sum(len(instances) for instances in self.outputs.values())


def _as_instance_list(sink_type: str, value: Any) -> List[Dict[str, Any]]:
    # `syslog:` with no value enables one instance with defaults.
    if value is None:
        return [{}]
    if isinstance(value, Mapping):
        return [dict(value)]
    if isinstance(value, list):
        instances = []
        for item in value:
            if item is None:
                instances.append({})
            elif isinstance(item, Mapping):
                instances.append(dict(item))
            else:
                raise ConfigError(f"outputs.{sink_type}: each instance must be a mapping, got {type(item).__name__}")
        return instances
    raise ConfigError(f"outputs.{sink_type}: expected a list of mappings, got {type(value).__name__}")


def build_outputs(raw: Mapping[str, Any]) -> Outputs:
    """Validate a ``{sink type: [options, ...]}`` mapping into sink configs.

    Every known sink type is present in the result (possibly with no
    instances) in dispatch order. Unknown sink types are logged and dropped.
    """
    collected: Dict[str, List[SinkConfig]] = {name: [] for name in SINK_TYPES}
    for name, value in raw.items():
        sink_type = _ALIASES.get(str(name).lower(), str(name).lower())
        model = SINK_CONFIG_TYPES.get(sink_type)
        if model is None:
            logger.warning("ignoring unknown output type %r", name)
            continue
        for index, options in enumerate(_as_instance_list(sink_type, value)):
            try:
                collected[sink_type].append(model.model_validate(options))
            except ValidationError as exc:
                raise ConfigError(
                    f"outputs.{sink_type}[{index}]: {exc.error_count()} invalid option(s)",
                    details={"errors": exc.errors(include_url=False)},
                ) from exc
    return MappingProxyType({name: tuple(items) for name, items in collected.items()})


def config_from_mapping(data: Optional[Mapping[str, Any]]) -> AppConfig:
    data = data or {}
    if not isinstance(data, Mapping):
        raise ConfigError("configuration root must be a mapping")
    outputs = data.get("outputs") or {}
    if not isinstance(outputs, Mapping):
        raise ConfigError("'outputs' must be a mapping of output type to instances")
    pipe = data.get("pipe") or DEFAULT_PIPE_PATH
    return AppConfig(pipe=str(pipe), outputs=build_outputs(outputs))


def load_config(path: Optional[str] = None) -> AppConfig:
    """Load and validate the YAML configuration file.

    The path defaults to ``$XFERNOTIFY_CONFIG`` and then
    ``/etc/xfernotify.yml``."""
    path = path or os.environ.get("XFERNOTIFY_CONFIG", DEFAULT_CONFIG_PATH)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as exc:
        raise ConfigError(f"config file {path} not found") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"config file {path} is not valid YAML: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc
    config = config_from_mapping(data)
    logger.info("Loaded config from %s (%d output instance(s))", path, config.instance_count())
    return config


__all__ = [
    "SinkConfig",
    "FileSinkConfig",
    "SyslogSinkConfig",
    "PushSinkConfig",
    "SINK_TYPES",
    "Outputs",
    "AppConfig",
    "build_outputs",
    "config_from_mapping",
    "load_config",
]
