"""
Configuration system for the security scanner.

Supports YAML and JSON configuration files for the analyzer command,
the generation API, workspace enumeration and the vulnerable library
table.
"""

import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Dict, Any, Optional, List

import yaml

from cognitivetrust.analyzers.dependencies import VULNERABLE_LIBRARIES
from cognitivetrust.analyzers.semgrep import DEFAULT_EXECUTABLE, DEFAULT_RULES_DIR, DEFAULT_TIMEOUT
from cognitivetrust.core.state import DEFAULT_HISTORY_LIMIT
from cognitivetrust.errors import ConfigError
from cognitivetrust.remediation.ai import DEFAULT_ENDPOINT, DEFAULT_MODEL


# Default configuration file names to search for
CONFIG_FILE_NAMES = [
    ".cognitivetrust.yaml",
    ".cognitivetrust.yml",
    ".cognitivetrust.json",
]

DEFAULT_EXCLUDE_DIRS = [
    "node_modules",
    ".git",
    "__pycache__",
    ".venv",
    "venv",
    ".cognitivetrust",
]


@dataclass
class AnalyzerConfig:
    """Configuration for the external analyzer."""
    executable: str = DEFAULT_EXECUTABLE
    rules_dir: str = DEFAULT_RULES_DIR
    timeout: float = DEFAULT_TIMEOUT  # seconds, 0 disables


@dataclass
class AIConfig:
    """Configuration for the generation API."""
    model: str = DEFAULT_MODEL
    endpoint: str = DEFAULT_ENDPOINT
    timeout: float = 60.0


@dataclass
class WorkspaceConfig:
    """Which files a workspace scan visits."""
    source_glob: str = "**/*.py"
    manifest_glob: str = "**/requirements.txt"
    exclude_dirs: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))


@dataclass
class ScanConfig:
    """
    Main configuration for the security scanner.

    Example YAML config:

    ```yaml
    analyzer:
      executable: semgrep
      rules_dir: ./rules
      timeout: 60

    ai:
      model: gemini-2.5-flash-preview-09-2025
      timeout: 60

    workspace:
      exclude_dirs:
        - node_modules
        - .git

    vulnerable_libraries:
      requests: 2.25.0
      flask: 1.1.2

    state_dir: .cognitivetrust
    history_limit: 50
    ```
    """
    analyzer: AnalyzerConfig = field(default_factory=AnalyzerConfig)
    ai: AIConfig = field(default_factory=AIConfig)
    workspace: WorkspaceConfig = field(default_factory=WorkspaceConfig)
    vulnerable_libraries: Dict[str, str] = field(default_factory=lambda: dict(VULNERABLE_LIBRARIES))
    state_dir: str = ".cognitivetrust"
    history_limit: int = DEFAULT_HISTORY_LIMIT

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to a dictionary."""
        return asdict(self)

    def resolve_state_dir(self, root: str) -> str:
        """State directory, relative paths taken from the workspace root."""
        state_dir = Path(self.state_dir).expanduser()
        if not state_dir.is_absolute():
            state_dir = Path(root) / state_dir
        return str(state_dir)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScanConfig":
        """Create config from a dictionary, ignoring unknown keys."""
        data = dict(data)
        sections = {
            "analyzer": AnalyzerConfig,
            "ai": AIConfig,
            "workspace": WorkspaceConfig,
        }
        for name, section_cls in sections.items():
            if isinstance(data.get(name), dict):
                known = {f for f in section_cls.__dataclass_fields__}
                data[name] = section_cls(**{k: v for k, v in data[name].items() if k in known})
            else:
                data.pop(name, None)

        if "vulnerable_libraries" in data:
            libraries = data["vulnerable_libraries"] or {}
            if not isinstance(libraries, dict):
                raise ConfigError("vulnerable_libraries must be a mapping of name to version")
            data["vulnerable_libraries"] = {str(k): str(v) for k, v in libraries.items()}

        # Filter to only known fields
        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered_data = {k: v for k, v in data.items() if k in known_fields}

        return cls(**filtered_data)


def load_config(path: str) -> Dict[str, Any]:
    """
    Load configuration from a file.

    Supports YAML and JSON formats.

    Raises:
        ConfigError: if the file is missing or cannot be parsed.
    """
    path = Path(path)

    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    content = path.read_text(encoding="utf-8")

    try:
        if path.suffix == ".json":
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not parse {path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {path} must be a mapping")
    return data


def find_config(start_path: str = ".") -> Optional[str]:
    """
    Find a configuration file by searching up the directory tree.

    Returns the path to the first config file found, or None.
    """
    current = Path(start_path).resolve()

    while True:
        for name in CONFIG_FILE_NAMES:
            config_path = current / name
            if config_path.exists():
                return str(config_path)
        if current == current.parent:
            return None
        current = current.parent


def load_scan_config(path: Optional[str] = None, start_dir: str = ".") -> ScanConfig:
    """
    Load a ScanConfig from a file or create a default one.

    If path is None, searches for a config file starting from start_dir.
    """
    if path is None:
        path = find_config(start_dir)

    if path is None:
        return ScanConfig()

    return ScanConfig.from_dict(load_config(path))


def create_default_config() -> str:
    """
    Create a default configuration file content.
    """
    config = ScanConfig().to_dict()
    # The packaged rules directory is an install path; leave it implicit.
    config["analyzer"].pop("rules_dir")
    return yaml.safe_dump(config, default_flow_style=False, sort_keys=False)
