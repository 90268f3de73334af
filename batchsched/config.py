"""Configuration Management for batchsched

This module provides centralized configuration for the scheduler: cluster
shape, logging, and utilization reporting. Cluster shape is held in an
immutable Pydantic settings object; the remaining sections are validated
dataclasses.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Policy names accepted in ``policy_order``; kept in sync with scheduler.policies
KNOWN_POLICIES = ("fcfs", "smallest", "shortest")
KNOWN_PLACEMENTS = ("first_fit",)


class ClusterConfig(BaseSettings):
    """Immutable cluster shape - fixed for the lifetime of a scheduler."""

    num_nodes: int = Field(default=128, description="Number of worker nodes in the pool")
    cores_per_node: int = Field(default=24, description="Total CPU cores per worker node")
    memory_per_node_gb: int = Field(default=64, description="Total memory (GB) per worker node")

    @field_validator("num_nodes", "cores_per_node", "memory_per_node_gb")
    @classmethod
    def validate_positive(cls, v, info):
        if v <= 0:
            raise ValueError(f"{info.field_name} must be positive")
        return v

    model_config = SettingsConfigDict(env_prefix="BATCHSCHED_", frozen=True)


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    log_level: str = "INFO"
    log_format: str = "console"
    log_file: Optional[str] = None

    def __post_init__(self):
        """Validate logging configuration."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level not in valid_levels:
            raise ValueError(f"Invalid log level: {self.log_level}")

        valid_formats = ["console", "json"]
        if self.log_format not in valid_formats:
            raise ValueError(f"Invalid log format: {self.log_format}")


@dataclass
class ReportConfig:
    """Configuration for the utilization report."""

    output_path: str = "utilization_report.csv"
    precision: int = 2

    def __post_init__(self):
        """Validate report configuration."""
        if not self.output_path:
            raise ValueError("output_path cannot be empty")

        if not 0 <= self.precision <= 6:
            raise ValueError("precision must be between 0 and 6")


@dataclass
class SchedulerConfig:
    """Main configuration class for batchsched."""

    # Immutable cluster shape
    cluster: ClusterConfig = field(default_factory=ClusterConfig)

    # Mutable operational configurations
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    report: ReportConfig = field(default_factory=ReportConfig)

    # Pass sequencing
    policy_order: Tuple[str, ...] = KNOWN_POLICIES
    placement_strategy: str = "first_fit"

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "SchedulerConfig":
        """Load configuration from environment variables."""

        if env_file:
            cls._load_env_file(env_file)

        # BATCHSCHED_NUM_NODES etc. are read by pydantic-settings
        cluster = ClusterConfig()

        logging = LoggingConfig(
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_format=os.getenv("LOG_FORMAT", "console"),
            log_file=os.getenv("LOG_FILE") or None,
        )

        report = ReportConfig(
            output_path=os.getenv("REPORT_PATH", "utilization_report.csv"),
            precision=cls._get_int_env("REPORT_PRECISION", 2),
        )

        raw_order = os.getenv("POLICY_ORDER")
        if raw_order:
            policy_order = tuple(p.strip().lower() for p in raw_order.split(",") if p.strip())
        else:
            policy_order = KNOWN_POLICIES

        return cls(
            cluster=cluster,
            logging=logging,
            report=report,
            policy_order=policy_order,
            placement_strategy=os.getenv("PLACEMENT_STRATEGY", "first_fit"),
        )

    @staticmethod
    def _load_env_file(env_file: str):
        """Load environment variables from file."""
        env_path = Path(env_file)
        if not env_path.exists():
            return

        with open(env_path, "r") as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    os.environ[key.strip()] = value.strip()

    @staticmethod
    def _get_int_env(key: str, default: int) -> int:
        """Get integer environment variable."""
        try:
            return int(os.getenv(key, str(default)))
        except ValueError:
            return default

    def validate(self) -> List[str]:
        """Validate the entire configuration and return any errors."""
        errors = []

        if not self.policy_order:
            errors.append("policy_order must name at least one policy")

        unknown = [p for p in self.policy_order if p not in KNOWN_POLICIES]
        if unknown:
            errors.append(f"Unknown policies in policy_order: {unknown}")

        if len(set(self.policy_order)) != len(self.policy_order):
            errors.append("policy_order must not repeat a policy")

        if self.placement_strategy not in KNOWN_PLACEMENTS:
            errors.append(f"Unknown placement strategy: {self.placement_strategy}")

        if self.cluster.num_nodes > 10_000:
            errors.append("num_nodes > 10000 makes first-fit placement impractical")

        return errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "cluster": {
                "num_nodes": self.cluster.num_nodes,
                "cores_per_node": self.cluster.cores_per_node,
                "memory_per_node_gb": self.cluster.memory_per_node_gb,
            },
            "logging": {
                "log_level": self.logging.log_level,
                "log_format": self.logging.log_format,
                "log_file": self.logging.log_file,
            },
            "report": {
                "output_path": self.report.output_path,
                "precision": self.report.precision,
            },
            "policy_order": list(self.policy_order),
            "placement_strategy": self.placement_strategy,
        }

    def __str__(self) -> str:
        """String representation of configuration."""
        return (
            f"SchedulerConfig(nodes={self.cluster.num_nodes}, "
            f"node={self.cluster.cores_per_node}c/{self.cluster.memory_per_node_gb}GB)"
        )


# Global configuration instance
_global_config: Optional[SchedulerConfig] = None


def get_config() -> SchedulerConfig:
    """Get the global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = SchedulerConfig.from_env()
    return _global_config


def set_config(config: SchedulerConfig):
    """Set the global configuration instance."""
    global _global_config

    errors = config.validate()
    if errors:
        raise ValueError(f"Configuration validation failed: {errors}")

    _global_config = config


def reset_config():
    """Reset the global configuration to default."""
    global _global_config
    _global_config = None
