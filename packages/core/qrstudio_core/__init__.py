"""Core services: style descriptors, renderer synchronization, readiness, and export."""

from .config import AppConfig, load_config, save_config
from .descriptor import LogoSpec, PatternId, StyleDescriptor, default_descriptor
from .errors import DescriptorError, ExportError, NotReadyError, QRStudioError, SurfaceUnavailableError
from .export import ExportArtifact, ExportFormat, ExportPipeline, artifact_filename, save_artifact
from .readiness import ReadinessGate, ReadinessState
from .synchronizer import DescriptorSynchronizer, SyncStatus, build_options, logo_fraction

__all__ = [
    "AppConfig",
    "DescriptorError",
    "DescriptorSynchronizer",
    "ExportArtifact",
    "ExportError",
    "ExportFormat",
    "ExportPipeline",
    "LogoSpec",
    "NotReadyError",
    "PatternId",
    "QRStudioError",
    "ReadinessGate",
    "ReadinessState",
    "StyleDescriptor",
    "SurfaceUnavailableError",
    "SyncStatus",
    "artifact_filename",
    "build_options",
    "default_descriptor",
    "load_config",
    "logo_fraction",
    "save_artifact",
    "save_config",
]
