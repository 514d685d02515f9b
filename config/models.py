from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

class ModelConfig(BaseModel):
    provider: str = "openai"
    name: str = "gpt-4o-mini"
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    timeout_sec: int = 60
    parameters: Dict[str, Any] = Field(default_factory=dict)

class ContextConfig(BaseModel):
    max_depth: int = Field(10, ge=0, description="Deepest directory level whose contents are listed")
    max_subdirectories: int = Field(10, ge=0, description="Subdirectories traversed per directory")
    excluded_names: List[str] = Field(default_factory=lambda: ["node_modules", ".git", "dist", "build"])
    hidden_prefix: str = "."
    sort_entries: bool = Field(True, description="Sort directory entries by name instead of OS order")
    recent_commit_count: int = Field(5, gt=0)
    max_output_bytes: int = Field(1024 * 1024, gt=0, description="Capture limit for git queries")
    max_diff_bytes: int = Field(10 * 1024 * 1024, gt=0, description="Capture limit for the diff query")

class PolicyConfig(BaseModel):
    key: Literal["message", "command"] = Field("message", description="What confirmation choices are remembered by")

class LoggingConfig(BaseModel):
    level: str = "WARNING"
    file: Optional[str] = "~/.gait/gait.log"

class PathsConfig(BaseModel):
    state_file: str = "~/.gait/state.json"
    credentials_file: str = "~/.gait.env"

class Config(BaseModel):
    model: ModelConfig = Field(default_factory=ModelConfig, description="Completion service settings")
    context: ContextConfig = Field(default_factory=ContextConfig, description="Repository context limits")
    policy: PolicyConfig = Field(default_factory=PolicyConfig, description="Confirmation policy settings")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging settings")
    paths: PathsConfig = Field(default_factory=PathsConfig, description="Locations of user state and credentials")
