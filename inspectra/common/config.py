"""Seed data configuration for inspectra.

Handles loading and validation of YAML seed files describing projects,
their approval workflows, and initial trip requests and reports.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


@dataclass
class StageConfig:
    """One approval stage in a seed file."""

    role_name: str
    approver_id: str


@dataclass
class ProjectConfig:
    """Configuration for a single project."""

    name: str
    id: Optional[str] = None
    client: str = ""
    contract_number: str = ""
    branch_id: str = ""
    trip_workflow: List[StageConfig] = field(default_factory=list)
    report_workflow: List[StageConfig] = field(default_factory=list)

    def workflow_documents(self, stages: List[StageConfig]) -> List[Dict[str, Any]]:
        return [
            {"stageIndex": i, "roleName": s.role_name, "approverId": s.approver_id}
            for i, s in enumerate(stages)
        ]


@dataclass
class SeedConfig:
    """Top-level seed file contents."""

    projects: List[ProjectConfig] = field(default_factory=list)
    trips: List[Dict[str, Any]] = field(default_factory=list)
    reports: List[Dict[str, Any]] = field(default_factory=list)


def parse_stage_config(stage_dict: Dict[str, Any]) -> StageConfig:
    """Parse a stage dictionary.

    Approver ids are kept as strings even when YAML reads them as numbers.
    """
    approver = stage_dict.get("approver_id", stage_dict.get("approverId"))
    if approver is None:
        raise ValueError(f"Stage {stage_dict!r} has no approver")
    return StageConfig(
        role_name=stage_dict.get("role_name", stage_dict.get("roleName", "")),
        approver_id=str(approver),
    )


def parse_project_config(project_dict: Dict[str, Any]) -> ProjectConfig:
    """Parse a project configuration dictionary.

    Args:
        project_dict: Project configuration dictionary

    Returns:
        ProjectConfig instance
    """
    if not project_dict.get("name"):
        raise ValueError("Every project needs a name")
    return ProjectConfig(
        name=project_dict["name"],
        id=str(project_dict["id"]) if project_dict.get("id") is not None else None,
        client=project_dict.get("client", ""),
        contract_number=project_dict.get("contract_number", ""),
        branch_id=project_dict.get("branch_id", ""),
        trip_workflow=[parse_stage_config(s) for s in project_dict.get("trip_workflow", [])],
        report_workflow=[parse_stage_config(s) for s in project_dict.get("report_workflow", [])],
    )


def parse_config(config_dict: Dict[str, Any]) -> SeedConfig:
    """Parse the full seed dictionary.

    Args:
        config_dict: Full configuration dictionary

    Returns:
        SeedConfig instance
    """
    return SeedConfig(
        projects=[parse_project_config(p) for p in config_dict.get("projects", [])],
        trips=list(config_dict.get("trips", [])),
        reports=list(config_dict.get("reports", [])),
    )


def load_config(config_path: str) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with config_file.open("r") as f:
        config = yaml.safe_load(f)

    if config is None:
        config = {}

    if not isinstance(config, dict):
        raise TypeError(
            f"Configuration root must be a mapping, got {type(config).__name__}"
        )

    return _expand_env_vars(config)


def _expand_env_vars(obj: Any) -> Any:
    """Recursively expand environment variables in configuration."""
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        return os.path.expandvars(obj)
    else:
        return obj


def load_typed_config(config_path: str) -> SeedConfig:
    """Load and parse a seed file into typed dataclasses."""
    return parse_config(load_config(config_path))
