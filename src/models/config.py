"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class DetectionConfig:
    """Group detection configuration. Target color and threshold are per job (CLI arguments)."""
    backend: str = "dfs"
    channel_order: str = "bgr"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectionConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            backend=d.get("backend", "dfs"),
            channel_order=d.get("channel_order", "bgr"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "backend": self.backend,
            "channel_order": self.channel_order,
        }


@dataclass
class RegionsConfig:
    """Region declarations configuration."""
    file: Optional[str] = None
    required: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "RegionsConfig":
        return cls(
            file=d.get("file"),
            required=d.get("required", False),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"required": self.required}
        if self.file is not None:
            d["file"] = self.file
        return d


@dataclass
class StorageConfig:
    """Result storage configuration."""
    result_dir: str = "results"
    write_binarized: bool = True

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "StorageConfig":
        return cls(
            result_dir=d.get("result_dir", "results"),
            write_binarized=d.get("write_binarized", True),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "result_dir": self.result_dir,
            "write_binarized": self.write_binarized,
        }


@dataclass
class Config:
    """
    Complete application configuration.
    
    This is a typed representation of the YAML config structure.
    """
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    regions: RegionsConfig = field(default_factory=RegionsConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    log_path: str = "logs/centroid_tracker.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            detection=DetectionConfig.from_dict(d.get("detection", {}) or {}),
            regions=RegionsConfig.from_dict(d.get("regions", {}) or {}),
            storage=StorageConfig.from_dict(d.get("storage", {}) or {}),
            log_path=d.get("log_path", "logs/centroid_tracker.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or passing to existing code)."""
        return {
            "detection": self.detection.to_dict(),
            "regions": self.regions.to_dict(),
            "storage": self.storage.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
