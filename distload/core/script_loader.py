"""Script file loading utilities."""

import aiofiles
import logging
import yaml
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ConfigurationError
from .presets import MERGE_FIELD


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge two mappings into a new one.

    Values from override win; nested mappings are merged key by key.
    """
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ScriptLoader:
    """Loads YAML or JSON load scripts from the local filesystem."""

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = Path(base_dir or ".").resolve()
        self.logger = logging.getLogger(__name__)

    def resolve_path(self, script_path: str) -> Path:
        """
        Resolve a script path, refusing anything outside base_dir.

        Raises:
            ConfigurationError: If the path escapes base_dir
        """
        path = (self.base_dir / script_path).resolve()
        if path != self.base_dir and self.base_dir not in path.parents:
            raise ConfigurationError("Input script must be a local file path.")
        return path

    async def load(self, script_path: str) -> Dict[str, Any]:
        """
        Read and parse a script file.

        Args:
            script_path: Path relative to base_dir

        Returns:
            The parsed script

        Raises:
            ConfigurationError: If the file cannot be read or is not a mapping
        """
        path = self.resolve_path(script_path)
        try:
            async with aiofiles.open(path, "r") as f:
                content = await f.read()
            data = yaml.safe_load(content)
        except (OSError, yaml.YAMLError) as e:
            self.logger.error(f"Failed to read script {script_path}: {e}")
            raise ConfigurationError(f"Failed to read script {script_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Script {script_path} must contain a mapping")

        self.logger.info(f"Loaded script {path}")
        return data

    async def merge_if(self, payload: Any) -> Any:
        """
        Merge the script file named by the ">>" field into a payload.

        Keys of the payload take precedence over those of the file. Payloads
        without the field are returned as they are.
        """
        if not isinstance(payload, dict) or MERGE_FIELD not in payload:
            return payload
        script_path = payload[MERGE_FIELD]
        if not isinstance(script_path, str):
            raise ConfigurationError("Input script must be a local file path.")
        data = await self.load(script_path)
        rest = {k: v for k, v in payload.items() if k != MERGE_FIELD}
        return deep_merge(data, rest)
