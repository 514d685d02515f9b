import os
from pathlib import Path
from typing import Optional, Union

from dotenv import dotenv_values
from pydantic import BaseModel

from utils.errors import ConfigError
from utils.logger import logger

API_KEY_VAR = "OPENAI_API_KEY"
SELECTED_MODEL_VAR = "SELECTED_MODEL"


class Credentials(BaseModel):
    api_key: Optional[str] = None
    selected_model: Optional[str] = None

    def masked_api_key(self) -> str:
        if not self.api_key:
            return ""
        return f"{self.api_key[:3]}...{self.api_key[-3:]}"


def load_credentials(path: Union[str, Path]) -> Credentials:
    """
    Reads the key=value credentials file.

    A missing file is the normal first-run state and yields empty credentials;
    OPENAI_API_KEY from the environment fills in a missing key.

    Raises:
        ConfigError: If the file exists but cannot be read.
    """
    path = Path(path).expanduser()
    values = {}
    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                values = dotenv_values(stream=f)
        except OSError as e:
            raise ConfigError(f"Could not read credentials at {path}: {e}") from e

    return Credentials(
        api_key=values.get(API_KEY_VAR) or os.getenv(API_KEY_VAR),
        selected_model=values.get(SELECTED_MODEL_VAR),
    )


def save_credentials(path: Union[str, Path], credentials: Credentials) -> Path:
    """Writes the credentials file in full, readable by the current user only."""
    path = Path(path).expanduser()
    lines = []
    if credentials.api_key:
        lines.append(f"{API_KEY_VAR}={credentials.api_key}\n")
    if credentials.selected_model:
        lines.append(f"{SELECTED_MODEL_VAR}={credentials.selected_model}\n")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.writelines(lines)
        os.chmod(path, 0o600)
    except OSError as e:
        raise ConfigError(f"Could not write credentials to {path}: {e}") from e
    logger.info(f"Saved credentials to {path}")
    return path
