"""CLI entrypoints for rendering, exporting, and inspecting QR Studio settings."""

from __future__ import annotations

import argparse
import json
from dataclasses import asdict
from importlib import metadata
from pathlib import Path

from qrstudio_core import (
    AppConfig,
    DescriptorError,
    DescriptorSynchronizer,
    ExportError,
    ExportFormat,
    ExportPipeline,
    LogoSpec,
    StyleDescriptor,
    default_descriptor,
    load_config,
    save_artifact,
    save_config,
)
from qrstudio_core.config import config_path
from qrstudio_core.logging_setup import configure_logging, get_logger
from qrstudio_renderer import PATTERNS, DisplayTarget, PillowRenderInstance, list_patterns


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def _installed_version() -> str:
    try:
        return metadata.version("qrstudio")
    except Exception:
        return "0.1.0"


def descriptor_from_args(args: argparse.Namespace, cfg: AppConfig) -> StyleDescriptor:
    if args.descriptor:
        raw = json.loads(Path(args.descriptor).expanduser().read_text(encoding="utf-8"))
        base = StyleDescriptor.from_dict(raw)
    else:
        base = StyleDescriptor(
            size=cfg.render.default_size,
            foreground=cfg.render.foreground,
            background=cfg.render.background,
            pattern=cfg.render.pattern,
            error_correction=cfg.render.error_correction,
        )

    changes: dict[str, object] = {}
    for attr in ("content", "size", "foreground", "background", "pattern", "error_correction"):
        value = getattr(args, attr, None)
        if value is not None:
            changes[attr] = value
    if args.logo:
        changes["logo"] = LogoSpec(
            source=args.logo,
            width=args.logo_width,
            height=args.logo_height,
            excavate=False if args.no_excavate else None,
        )
    return base.with_changes(**changes) if changes else base


def cmd_render(args: argparse.Namespace) -> int:
    cfg = load_config()
    logger = get_logger("cli")

    try:
        descriptor = descriptor_from_args(args, cfg)
    except (DescriptorError, OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        _print_json({"success": False, "error": str(exc)})
        return 2

    instance = PillowRenderInstance()
    sync = DescriptorSynchronizer(instance)
    pipeline = ExportPipeline(
        sync,
        svg_mode=args.svg_mode or cfg.export.svg_mode,
        base_name=cfg.export.base_name,
    )
    out_dir = Path(args.out_dir or cfg.export.output_dir or ".").expanduser().resolve()
    formats = [ExportFormat.PNG, ExportFormat.SVG] if args.format == "both" else [ExportFormat(args.format)]

    try:
        sync.mount(DisplayTarget("cli"))
        sync.apply(descriptor)
        if not sync.wait_until_ready(cfg.render.ready_timeout_ms / 1000):
            logger.warning("render timed out", extra={"event": "render_timeout"})

        files = []
        for fmt in formats:
            try:
                artifact = pipeline.export(fmt, identifier=args.id)
            except ExportError as exc:
                _print_json({"success": False, "format": fmt.value, "error": exc.user_message()})
                return 3
            path = save_artifact(artifact, out_dir)
            files.append(
                {
                    "path": str(path),
                    "mime_type": artifact.mime_type,
                    "bytes": len(artifact.data),
                    "scalable": artifact.scalable,
                }
            )
    finally:
        instance.close()

    _print_json({"success": True, "descriptor": descriptor.to_dict(), "files": files})
    return 0


def cmd_patterns(_args: argparse.Namespace) -> int:
    _print_json({name: asdict(PATTERNS[name]) for name in list_patterns()})
    return 0


def cmd_descriptor(_args: argparse.Namespace) -> int:
    _print_json(default_descriptor().to_dict())
    return 0


def cmd_config_show(_args: argparse.Namespace) -> int:
    cfg = load_config()
    payload = asdict(cfg)
    payload["path"] = str(config_path())
    _print_json(payload)
    return 0


def cmd_config_reset(_args: argparse.Namespace) -> int:
    path = save_config(AppConfig())
    _print_json({"success": True, "path": str(path)})
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="qrstudio", description="Styled QR code rendering and export")
    parser.add_argument("--version", action="version", version=_installed_version())
    sub = parser.add_subparsers(dest="command", required=True)

    render_cmd = sub.add_parser("render", help="Render a QR code and export it")
    render_cmd.add_argument("content", nargs="?", default=None, help="Text or URL to encode")
    render_cmd.add_argument("--descriptor", default=None, help="JSON style descriptor file")
    render_cmd.add_argument("--size", type=int, default=None)
    render_cmd.add_argument("--fg", dest="foreground", default=None, help="Foreground color")
    render_cmd.add_argument("--bg", dest="background", default=None, help="Background color")
    render_cmd.add_argument("--pattern", default=None, help=f"One of: {', '.join(list_patterns())}")
    render_cmd.add_argument("--level", dest="error_correction", choices=["L", "M", "Q", "H"], default=None)
    render_cmd.add_argument("--logo", default=None, help="Logo image path or data URL")
    render_cmd.add_argument("--logo-width", type=int, default=40)
    render_cmd.add_argument("--logo-height", type=int, default=40)
    render_cmd.add_argument("--no-excavate", action="store_true", help="Keep modules visible under the logo")
    render_cmd.add_argument("--format", choices=["png", "svg", "both"], default="png")
    render_cmd.add_argument("--svg-mode", choices=["embedded", "vector"], default=None)
    render_cmd.add_argument("--id", default=None, help="Identifier added to the file name")
    render_cmd.add_argument("--out-dir", default=None)
    render_cmd.set_defaults(func=cmd_render)

    patterns_cmd = sub.add_parser("patterns", help="List pattern presets and their shapes")
    patterns_cmd.set_defaults(func=cmd_patterns)

    descriptor_cmd = sub.add_parser("descriptor", help="Print the default style descriptor")
    descriptor_cmd.set_defaults(func=cmd_descriptor)

    config_cmd = sub.add_parser("config", help="Show or reset settings")
    config_sub = config_cmd.add_subparsers(dest="config_cmd", required=True)
    show_cmd = config_sub.add_parser("show", help="Print current settings")
    show_cmd.set_defaults(func=cmd_config_show)
    reset_cmd = config_sub.add_parser("reset", help="Restore default settings")
    reset_cmd.set_defaults(func=cmd_config_reset)

    return parser


def main(argv: list[str] | None = None) -> int:
    cfg = load_config()
    configure_logging(keep_files=cfg.diagnostics.keep_log_files, console=False, level=cfg.diagnostics.log_level)
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
