"""Persistent app settings schema and load/save helpers."""

from __future__ import annotations

import json
import os
import platform
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from .descriptor import normalize_color
from .errors import DescriptorError

CONFIG_VERSION = 2


@dataclass
class RenderConfig:
    default_size: int = 256
    foreground: str = "#000000"
    background: str = "#FFFFFF"
    pattern: str = "squares"
    error_correction: str = "M"
    ready_timeout_ms: int = 5000


@dataclass
class ExportConfig:
    base_name: str = "qrcode"
    svg_mode: str = "embedded"
    output_dir: str | None = None


@dataclass
class DiagnosticsConfig:
    keep_log_files: int = 7
    log_level: str = "INFO"


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    render: RenderConfig = field(default_factory=RenderConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)


def config_root() -> Path:
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "QRStudio"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "QRStudio"
    return Path.home() / ".config" / "qrstudio"


def config_path() -> Path:
    return config_root() / "config.json"


def _merge(dataclass_type, raw: dict[str, Any]):
    defaults = dataclass_type()  # type: ignore[misc]
    for k, v in raw.items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _valid_color(value: str, fallback: str) -> str:
    try:
        return normalize_color(value)
    except DescriptorError:
        return fallback


def _normalize_render(cfg: AppConfig) -> None:
    defaults = RenderConfig()
    cfg.render.default_size = max(64, min(2048, int(cfg.render.default_size)))
    cfg.render.foreground = _valid_color(cfg.render.foreground, defaults.foreground)
    cfg.render.background = _valid_color(cfg.render.background, defaults.background)
    cfg.render.error_correction = str(cfg.render.error_correction).upper()
    if cfg.render.error_correction not in ("L", "M", "Q", "H"):
        cfg.render.error_correction = defaults.error_correction
    cfg.render.ready_timeout_ms = max(100, min(60000, int(cfg.render.ready_timeout_ms)))


def _normalize_export(cfg: AppConfig) -> None:
    if cfg.export.svg_mode not in ("embedded", "vector"):
        cfg.export.svg_mode = "embedded"
    if not cfg.export.base_name:
        cfg.export.base_name = "qrcode"


def _normalize_diagnostics(cfg: AppConfig) -> None:
    cfg.diagnostics.keep_log_files = max(2, int(cfg.diagnostics.keep_log_files))
    cfg.diagnostics.log_level = str(cfg.diagnostics.log_level).upper()
    if cfg.diagnostics.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        cfg.diagnostics.log_level = "INFO"


def _migrate(raw: dict[str, Any]) -> dict[str, Any]:
    version = int(raw.get("config_version", 1))
    data = dict(raw)

    if version < 2:
        # v1 kept rendering defaults flat under "defaults" and had no export section.
        flat = dict(data.pop("defaults", {}) or {})
        render = dict(data.get("render", {}) or {})
        if "size" in flat:
            render.setdefault("default_size", flat["size"])
        for key in ("foreground", "background", "pattern", "error_correction"):
            if key in flat:
                render.setdefault(key, flat[key])
        data["render"] = render
        data.setdefault("export", {})
        data.setdefault("diagnostics", {})
        data["config_version"] = 2

    return data


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except Exception:
        return AppConfig()

    data = _migrate(raw)
    cfg = AppConfig(
        config_version=int(data.get("config_version", CONFIG_VERSION)),
        render=_merge(RenderConfig, data.get("render", {})),
        export=_merge(ExportConfig, data.get("export", {})),
        diagnostics=_merge(DiagnosticsConfig, data.get("diagnostics", {})),
    )

    _normalize_render(cfg)
    _normalize_export(cfg)
    _normalize_diagnostics(cfg)
    return cfg


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path
