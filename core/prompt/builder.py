from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from core.contracts.models import RepositoryContext
from utils.errors import GaitException


class PromptBuilder:
    """Renders the completion prompt from a Jinja2 template."""

    def __init__(
        self,
        template_dir: Optional[str] = None,
        template_name: str = "decision.j2",
    ):
        if template_dir is None:
            # Default template directory relative to this file
            template_dir = str(Path(__file__).parent / "templates")

        self.template_dir = template_dir
        self.template_name = template_name
        self.env = Environment(
            loader=FileSystemLoader(self.template_dir),
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
            keep_trailing_newline=False,
        )

    def build(self, ctx: RepositoryContext, request: str) -> str:
        """
        Combines the instructions, the repository context and the user's request.

        Raises:
            GaitException: If the template is missing or fails to render.
        """
        try:
            template = self.env.get_template(self.template_name)
            return template.render(ctx=ctx, request=request)
        except Exception as e:
            raise GaitException(f"Failed to render prompt template {self.template_name}: {e}") from e
