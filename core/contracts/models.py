from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class NodeKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"
    TRUNCATED = "truncated"


class DirectoryNode(BaseModel):
    """One entry of the summarized working tree, relative to the walk root."""

    name: str
    kind: NodeKind
    depth: int = Field(0, ge=0)
    children: List["DirectoryNode"] = []
    reason: Optional[str] = None  # only set on truncation markers


class RepositoryContext(BaseModel):
    """Snapshot of repository state sent along with the user's request."""

    directory_tree: Optional[str] = None
    current_branch: Optional[str] = None
    last_commit_message: Optional[str] = None
    status_lines: Optional[List[str]] = None
    recent_commits: Optional[List[str]] = None
    branch_list: Optional[List[str]] = None
    remote_info: Optional[List[str]] = None
    branch_tracking_info: Optional[List[str]] = None
    diff: Optional[str] = None


class CommandDecision(BaseModel):
    """Structured answer of the completion service."""

    model_config = ConfigDict(populate_by_name=True)

    is_runnable: bool = Field(alias="isRunnable")
    message: str
    explanation: str
    command: Optional[str] = None

    @model_validator(mode="after")
    def _command_required_when_runnable(self) -> "CommandDecision":
        if self.is_runnable and not (self.command and self.command.strip()):
            raise ValueError("'command' is required when 'isRunnable' is true")
        return self


class DecisionResult(BaseModel):
    """Either a decision or the reason the completion call failed."""

    decision: Optional[CommandDecision] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.decision is not None

    @classmethod
    def success(cls, decision: CommandDecision) -> "DecisionResult":
        return cls(decision=decision)

    @classmethod
    def failure(cls, error: str) -> "DecisionResult":
        return cls(error=error)


class ExecutionResult(BaseModel):
    command: str
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def failed(self) -> bool:
        return self.returncode != 0 or bool(self.stderr.strip())
