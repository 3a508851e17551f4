"""
PhoneCam configuration.

Defaults live in code; an optional YAML file overrides them and secrets
come from the environment (or a .env file).

Example config.yaml:

    provider:
      answer_backend: gemini
      extraction_backend: accurate
    webcam:
      resolution: 720p
      frame_rate: 60
    scan:
      scan_interval_seconds: 5
    auto_scan: true
    battery_saver: false
"""
import os
import logging
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Type, TypeVar, Union

import yaml
from dotenv import load_dotenv

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


class AnswerBackend(Enum):
    """Question answering backends."""
    OPENAI = "openai"
    GEMINI = "gemini"


class ExtractionBackend(Enum):
    """Text extraction variants."""
    FAST = "fast"          # approximate, lower latency
    ACCURATE = "accurate"  # slower, higher confidence


class TransportKind(Enum):
    """Channel used to deliver the outbound video stream."""
    WIFI = "wifi"
    USB = "usb"


class Resolution(Enum):
    HD = "720p"
    FULL_HD = "1080p"
    UHD = "4K"


class CameraFacing(Enum):
    FRONT = "front"
    BACK = "back"


SUPPORTED_FRAME_RATES = (30, 60)


def coerce_enum(enum_cls: Type[E], value: Any, name: str) -> E:
    """Turn a raw value (or enum member) into a member of enum_cls."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ConfigurationError(f"Invalid {name}: {value!r} (expected one of: {allowed})")


@dataclass(frozen=True)
class ProviderConfig:
    """Backend selection plus the shared credential."""
    answer_backend: AnswerBackend = AnswerBackend.OPENAI
    extraction_backend: ExtractionBackend = ExtractionBackend.FAST
    credential: str = ""
    openai_model: str = "gpt-4o-mini"
    gemini_model: str = "gemini-2.0-flash"

    @property
    def has_credential(self) -> bool:
        return bool(self.credential and self.credential.strip())

    def __repr__(self) -> str:
        # Never leak the key into logs
        return (
            f"ProviderConfig(answer_backend={self.answer_backend.value}, "
            f"extraction_backend={self.extraction_backend.value}, "
            f"credential={'set' if self.has_credential else 'missing'})"
        )


@dataclass(frozen=True)
class WebcamConfig:
    """Outbound webcam stream parameters."""
    resolution: Resolution = Resolution.FULL_HD
    frame_rate: int = 30
    transport: TransportKind = TransportKind.WIFI
    facing: CameraFacing = CameraFacing.FRONT

    def merged(self, changes: Dict[str, Any]) -> "WebcamConfig":
        """
        Return a copy with `changes` applied.

        Raises:
            ConfigurationError: unknown field or unsupported value
        """
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ConfigurationError(f"Unknown webcam config field(s): {', '.join(sorted(unknown))}")

        values = dict(changes)
        if "resolution" in values:
            values["resolution"] = coerce_enum(Resolution, values["resolution"], "resolution")
        if "transport" in values:
            values["transport"] = coerce_enum(TransportKind, values["transport"], "transport")
        if "facing" in values:
            values["facing"] = coerce_enum(CameraFacing, values["facing"], "facing")
        if "frame_rate" in values:
            try:
                rate = int(values["frame_rate"])
            except (TypeError, ValueError):
                rate = None
            if rate not in SUPPORTED_FRAME_RATES:
                raise ConfigurationError(
                    f"Invalid frame_rate: {values['frame_rate']!r} (expected 30 or 60)"
                )
            values["frame_rate"] = rate

        return replace(self, **values)


@dataclass(frozen=True)
class ScanConfig:
    """Scan loop cadence and thresholds."""
    scan_interval_seconds: float = 5.0
    battery_saver_interval: float = 15.0
    similarity_threshold: float = 0.85
    min_text_confidence: float = 0.0

    def __post_init__(self):
        for name in ("scan_interval_seconds", "battery_saver_interval"):
            value = getattr(self, name)
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value}")


@dataclass(frozen=True)
class AppSettings:
    """The single settings object shared by every component."""
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    webcam: WebcamConfig = field(default_factory=WebcamConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
    auto_scan: bool = True
    battery_saver: bool = False
    dark_mode: bool = True


def _provider_from(raw: Dict[str, Any]) -> ProviderConfig:
    config = ProviderConfig()
    if "answer_backend" in raw:
        config = replace(config, answer_backend=coerce_enum(AnswerBackend, raw["answer_backend"], "answer_backend"))
    if "extraction_backend" in raw:
        config = replace(
            config,
            extraction_backend=coerce_enum(ExtractionBackend, raw["extraction_backend"], "extraction_backend"),
        )
    for name in ("credential", "openai_model", "gemini_model"):
        if raw.get(name):
            config = replace(config, **{name: str(raw[name])})
    return config


def _scan_from(raw: Dict[str, Any]) -> ScanConfig:
    known = {f.name for f in fields(ScanConfig)}
    try:
        return ScanConfig(**{k: float(v) for k, v in raw.items() if k in known})
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid scan config: {e}")


def _credential_from_env(backend: AnswerBackend) -> str:
    key = os.getenv("PHONECAM_API_KEY")
    if key:
        return key
    if backend == AnswerBackend.GEMINI:
        return os.getenv("GEMINI_API_KEY", "")
    return os.getenv("OPENAI_API_KEY", "")


def load_settings(config_path: Optional[Union[str, Path]] = None) -> AppSettings:
    """
    Build AppSettings from defaults, an optional YAML file and the environment.

    Args:
        config_path: YAML file; missing file means defaults

    Returns:
        AppSettings instance
    """
    load_dotenv()

    raw: Dict[str, Any] = {}
    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                raw = yaml.safe_load(f) or {}
        else:
            logger.warning(f"Config not found at {path}, using defaults")

    provider = _provider_from(raw.get("provider") or {})
    if os.getenv("PHONECAM_AI_PROVIDER"):
        provider = replace(
            provider,
            answer_backend=coerce_enum(AnswerBackend, os.getenv("PHONECAM_AI_PROVIDER"), "answer_backend"),
        )
    if os.getenv("PHONECAM_OCR_PROVIDER"):
        provider = replace(
            provider,
            extraction_backend=coerce_enum(ExtractionBackend, os.getenv("PHONECAM_OCR_PROVIDER"), "extraction_backend"),
        )
    if not provider.has_credential:
        provider = replace(provider, credential=_credential_from_env(provider.answer_backend))

    settings = AppSettings(
        provider=provider,
        webcam=WebcamConfig().merged(raw.get("webcam") or {}),
        scan=_scan_from(raw.get("scan") or {}),
        auto_scan=bool(raw.get("auto_scan", True)),
        battery_saver=bool(raw.get("battery_saver", False)),
        dark_mode=bool(raw.get("dark_mode", True)),
    )
    logger.debug(f"Loaded settings: {settings.provider!r}")
    return settings
