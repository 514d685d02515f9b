import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from utils.errors import ConfigError
from utils.logger import logger

SELECTED_MODEL_KEY = "selectedModel"
CONFIRMATIONS_KEY = "confirmations"


class ConfirmationPolicy(BaseModel):
    """The persisted `confirmations` object: commands that always or never need approval."""

    always: List[str] = Field(default_factory=list)
    never: List[str] = Field(default_factory=list)


class UserStateStore:
    """
    A JSON object persisted per user, holding `selectedModel` and `confirmations`.

    Every read goes to disk and every update is a read-merge-write, so separate
    runs of the tool always see each other's changes. Updates are shallow: a
    top-level key replaces the stored one wholesale and unknown keys survive.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def load(self) -> Dict[str, Any]:
        """
        Reads the stored object.

        Returns:
            The stored mapping, or an empty dict when the file does not exist yet.

        Raises:
            ConfigError: If the file exists but cannot be read or is not a JSON object.
        """
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not read user state at {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"User state at {self.path} is not a JSON object.")
        return data

    def update(self, partial: Dict[str, Any]) -> Dict[str, Any]:
        """Shallow-merges `partial` into the stored object and writes it back."""
        data = self.load()
        data.update(partial)
        self._write(data)
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        # Write to a sibling temp file and swap it in, so an interrupt never leaves half a file.
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=str(self.path.parent))
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                os.unlink(tmp_name)
                raise
        except OSError as e:
            raise ConfigError(f"Could not write user state to {self.path}: {e}") from e
        logger.debug(f"Saved user state to {self.path}")

    def get_selected_model(self) -> Optional[str]:
        value = self.load().get(SELECTED_MODEL_KEY)
        return value if isinstance(value, str) and value else None

    def set_selected_model(self, model: str) -> None:
        self.update({SELECTED_MODEL_KEY: model})

    def get_confirmations(self) -> ConfirmationPolicy:
        raw = self.load().get(CONFIRMATIONS_KEY) or {}
        try:
            return ConfirmationPolicy.model_validate(raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid '{CONFIRMATIONS_KEY}' entry in {self.path}: {e}") from e

    def set_confirmations(self, policy: ConfirmationPolicy) -> None:
        self.update({CONFIRMATIONS_KEY: policy.model_dump()})
