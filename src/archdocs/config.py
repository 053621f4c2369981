"""Application configuration defaults and the ``archdocs.toml`` loader."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any, List

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, ValidationError

from archdocs.errors import ConfigError

DEFAULT_CONFIG_NAME = "archdocs.toml"
DEFAULT_DIAGRAM_EXTENSIONS = ["dot", "mdx", "puml"]
DEFAULT_OPENAPI_EXTENSIONS = ["yaml", "yml"]
DEFAULT_GUIDE_EXTENSIONS = ["md", "mdx", "rst", "txt"]
DEFAULT_AGREEMENTS = ["content/docs/backend"]
DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 200


def normalize_extensions(extensions: List[str]) -> List[str]:
    """Trim, drop leading dots, lower-case, de-duplicate and sort."""
    cleaned = {ext.strip().lstrip(".").lower() for ext in extensions}
    return sorted(ext for ext in cleaned if ext)


def normalize_paths(paths: List[str]) -> List[str]:
    return [path.strip() for path in paths if path.strip()]


PathList = Annotated[List[str], AfterValidator(normalize_paths)]
ExtensionList = Annotated[List[str], AfterValidator(normalize_extensions)]


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")


class C4Config(_Section):
    c1: PathList = Field(default_factory=list)
    c2: PathList = Field(default_factory=list)
    c3: PathList = Field(default_factory=list)
    services: PathList = Field(default_factory=list)


class ProjectConfig(_Section):
    name: str
    c4: C4Config = Field(default_factory=C4Config)
    erd: PathList = Field(default_factory=list)
    adr: PathList = Field(default_factory=list)
    openapi: PathList = Field(default_factory=list)


class GuideConfig(_Section):
    name: str
    paths: PathList = Field(default_factory=list)


class ScanConfig(_Section):
    """Which document groups to scan and with which extensions."""

    diagram_extensions: ExtensionList = Field(
        default_factory=lambda: list(DEFAULT_DIAGRAM_EXTENSIONS)
    )
    openapi_extensions: ExtensionList = Field(
        default_factory=lambda: list(DEFAULT_OPENAPI_EXTENSIONS)
    )
    guide_extensions: ExtensionList = Field(
        default_factory=lambda: list(DEFAULT_GUIDE_EXTENSIONS)
    )
    agreements: PathList = Field(default_factory=lambda: list(DEFAULT_AGREEMENTS))
    projects: List[ProjectConfig] = Field(default_factory=list)
    guides: List[GuideConfig] = Field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: dict[str, Any], source: str = "<mapping>") -> "ScanConfig":
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(f"Failed to parse config file '{source}': {exc}") from exc


def load_scan_config(config_path: Path) -> ScanConfig:
    """Read and validate a TOML scan configuration."""
    try:
        with Path(config_path).open("rb") as handle:
            data = tomllib.load(handle)
    except OSError as exc:
        raise ConfigError(f"Failed to read config file '{config_path}': {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse config file '{config_path}': {exc}") from exc
    return ScanConfig.from_mapping(data, source=str(config_path))


@dataclass(slots=True)
class AppConfig:
    docs_root: Path = Path(".")
    config_path: Path | None = None
    host: str = "127.0.0.1"
    port: int = 8010

    def resolve_config_path(self, base_dir: Path | None = None) -> Path:
        path = Path(self.config_path) if self.config_path is not None else Path(DEFAULT_CONFIG_NAME)
        if path.is_absolute() or base_dir is None:
            return path
        return base_dir / path
