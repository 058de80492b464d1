"""Pipeline configuration and config file reader."""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import toml
import yaml

from .errors import ConfigError
from .models import COLLECTIONS


CONFIG_FILENAMES = ["vaultlinks.toml", "vaultlinks.yml", "vaultlinks.yaml"]


@dataclass
class PipelineConfig:
    """Settings shared by the transform passes and the backlink builder."""

    wikilink_class: str = "wikilink"
    excerpt_context: int = 100
    attachment_folder_name: str = "attachments"
    mention_collections: Tuple[str, ...] = field(default_factory=lambda: ("posts",))
    include_drafts: bool = False
    enable_embeds: bool = True
    enable_callouts: bool = True
    enable_image_captions: bool = True

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not isinstance(self.wikilink_class, str) or not self.wikilink_class.strip():
            raise ConfigError("wikilink_class must not be empty")
        if not isinstance(self.excerpt_context, int) or self.excerpt_context < 0:
            raise ConfigError("excerpt_context must be a non-negative integer")
        if not isinstance(self.attachment_folder_name, str) or not self.attachment_folder_name.strip("/"):
            raise ConfigError("attachment_folder_name must not be empty")

        if isinstance(self.mention_collections, str):
            self.mention_collections = (self.mention_collections,)
        self.mention_collections = tuple(self.mention_collections)
        unknown = [c for c in self.mention_collections if c not in COLLECTIONS]
        if unknown:
            raise ConfigError(f"Unknown collections in mention_collections: {', '.join(unknown)}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PipelineConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**dict(data))


def load_config(config_path: Path) -> PipelineConfig:
    """Read a TOML or YAML configuration file.

    Settings may sit at the top level or under a ``[vaultlinks]`` table.

    Raises:
        ConfigError: If the file cannot be read or holds invalid settings
    """
    config_path = Path(config_path)
    try:
        text = config_path.read_text(encoding="utf-8")
        if config_path.suffix == ".toml":
            data = toml.loads(text)
        else:
            data = yaml.safe_load(text)
    except (OSError, yaml.YAMLError, toml.TomlDecodeError) as e:
        raise ConfigError(f"Could not read config {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config {config_path} must contain a mapping")

    section: Dict[str, Any] = data.get("vaultlinks", data)
    if not isinstance(section, dict):
        raise ConfigError(f"[vaultlinks] in {config_path} must be a table")
    return PipelineConfig.from_dict(section)


def find_config(content_dir: Path) -> Optional[Path]:
    """First config file found in the content directory, if any."""
    for filename in CONFIG_FILENAMES:
        config_path = Path(content_dir) / filename
        if config_path.is_file():
            return config_path
    return None
