import subprocess
from pathlib import Path
from typing import Optional, Union

from core.contracts.models import ExecutionResult
from utils.logger import logger


def execute_command(command: str, cwd: Optional[Union[str, Path]] = None) -> ExecutionResult:
    """
    Runs an approved shell command and captures its output.

    The command is executed exactly as suggested; a launch failure is reported
    through the result like any other failure so the caller can carry on.

    Args:
        command: The literal shell command text.
        cwd: Working directory for the command, defaults to the current one.

    Returns:
        The captured exit code, stdout and stderr.
    """
    logger.info(f"Executing command: {command}")
    try:
        result = subprocess.run(
            command,
            shell=True,
            cwd=str(cwd) if cwd is not None else None,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as e:
        logger.error(f"Could not launch `{command}`: {e}")
        return ExecutionResult(command=command, returncode=-1, stderr=str(e))

    logger.info(f"`{command}` exited with code {result.returncode}")
    if result.stdout:
        logger.debug(f"stdout:\n{result.stdout}")
    if result.stderr:
        logger.debug(f"stderr:\n{result.stderr}")
    return ExecutionResult(
        command=command,
        returncode=result.returncode,
        stdout=result.stdout,
        stderr=result.stderr,
    )
