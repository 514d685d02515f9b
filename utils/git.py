import subprocess
import tempfile
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import BaseModel

from utils.logger import logger

DEFAULT_MAX_OUTPUT_BYTES = 1024 * 1024


class GitQuery(str, Enum):
    """Read-only queries used to build the repository context."""

    CURRENT_BRANCH = "current_branch"
    LAST_COMMIT_MESSAGE = "last_commit_message"
    STATUS = "status"
    RECENT_COMMITS = "recent_commits"
    BRANCH_LIST = "branch_list"
    REMOTE_INFO = "remote_info"
    BRANCH_TRACKING = "branch_tracking"
    COMMIT_COUNT = "commit_count"
    DIFF_PREVIOUS = "diff_previous"
    SHOW_LAST_COMMIT = "show_last_commit"


QUERY_ARGS: Dict[GitQuery, List[str]] = {
    GitQuery.CURRENT_BRANCH: ["branch", "--show-current"],
    GitQuery.LAST_COMMIT_MESSAGE: ["log", "-1", "--pretty=%B"],
    GitQuery.STATUS: ["status", "-s"],
    GitQuery.RECENT_COMMITS: ["log", "--pretty=format:%h - %an, %ar : %s"],
    GitQuery.BRANCH_LIST: ["branch", "-a"],
    GitQuery.REMOTE_INFO: ["remote", "-v"],
    GitQuery.BRANCH_TRACKING: ["branch", "-vv"],
    GitQuery.COMMIT_COUNT: ["rev-list", "--count", "HEAD"],
    GitQuery.DIFF_PREVIOUS: ["diff", "HEAD~1", "HEAD"],
    GitQuery.SHOW_LAST_COMMIT: ["show", "HEAD"],
}


class QueryResult(BaseModel):
    """Outcome of one git query. `output` is None whenever the query failed."""

    output: Optional[str] = None
    exceeded_limit: bool = False

    @property
    def ok(self) -> bool:
        return self.output is not None


class GitRunner:
    """
    Runs read-only git queries and never raises past its own boundary.

    Output is read incrementally and the child process is killed as soon as it
    produces more than the capture limit, so a huge diff costs at most
    `limit + 1` bytes of memory. Stderr goes to a temporary file so a noisy
    git can never block on a full pipe while stdout is being read.
    """

    def __init__(
        self,
        cwd: Optional[Union[str, Path]] = None,
        max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
    ):
        self.cwd = str(cwd) if cwd is not None else None
        self.max_output_bytes = max_output_bytes

    def build_command(self, query: GitQuery, *args: str) -> List[str]:
        return ["git", *QUERY_ARGS[query], *args]

    def query(self, query: GitQuery, *args: str, max_output_bytes: Optional[int] = None) -> QueryResult:
        """
        Executes a query and reports success, failure or an exceeded capture limit.

        Args:
            query: The kind of query to run.
            *args: Extra arguments appended to the query's git arguments.
            max_output_bytes: Overrides the runner's capture limit for this call.

        Returns:
            A QueryResult whose output is the trimmed stdout on success.
        """
        limit = max_output_bytes if max_output_bytes is not None else self.max_output_bytes
        command = self.build_command(query, *args)
        printable = " ".join(command)

        try:
            with tempfile.TemporaryFile() as stderr_file, subprocess.Popen(
                command,
                cwd=self.cwd,
                stdout=subprocess.PIPE,
                stderr=stderr_file,
            ) as proc:
                data = proc.stdout.read(limit + 1)
                if len(data) > limit:
                    proc.kill()
                    proc.wait()
                    logger.warning(f"Output of `{printable}` exceeded the {limit} byte capture limit.")
                    return QueryResult(exceeded_limit=True)

                returncode = proc.wait()
                stderr_file.seek(0)
                stderr = stderr_file.read()
        except (FileNotFoundError, OSError) as e:
            logger.warning(f"Could not execute `{printable}`: {e}")
            return QueryResult()

        if returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip() if stderr else ""
            logger.warning(f"Error executing `{printable}` (exit {returncode}): {message}")
            return QueryResult()

        output = data.decode("utf-8", errors="replace").strip()
        logger.debug(f"`{printable}` returned {len(data)} bytes.")
        return QueryResult(output=output)

    def run(self, query: GitQuery, *args: str, max_output_bytes: Optional[int] = None) -> Optional[str]:
        """Executes a query and returns its trimmed output, or None on any failure."""
        return self.query(query, *args, max_output_bytes=max_output_bytes).output


def is_git_repository(cwd: Optional[Union[str, Path]] = None) -> bool:
    """Checks if the given (or current) directory is inside a Git work tree."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--is-inside-work-tree"],
            cwd=str(cwd) if cwd is not None else None,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip() == "true"
    except (subprocess.CalledProcessError, FileNotFoundError):
        return False

