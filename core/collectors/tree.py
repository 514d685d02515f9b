import os
from pathlib import Path
from typing import Iterable, List, Tuple, Union

from config.models import ContextConfig
from core.contracts.models import DirectoryNode, NodeKind
from utils.logger import logger

DEPTH_LIMIT_REASON = "Depth limit reached"
FAN_OUT_REASON = "Too many subdirectories"
INDENT = "    "


class DirectoryTreeSummarizer:
    """
    Summarizes a working tree as indented text with hard bounds on its size.

    A directory whose entries sit deeper than `max_depth` is shown with a
    "[Depth limit reached]" marker instead of its contents. Within one directory,
    only the first `max_subdirectories` eligible subdirectories are traversed;
    later ones are shown as "<name>/ [Too many subdirectories]". Hidden entries
    and the excluded names are skipped before anything is counted.
    """

    def __init__(
        self,
        max_depth: int = 10,
        max_subdirectories: int = 10,
        excluded_names: Iterable[str] = ("node_modules", ".git", "dist", "build"),
        hidden_prefix: str = ".",
        sort_entries: bool = True,
    ):
        self.max_depth = max_depth
        self.max_subdirectories = max_subdirectories
        self.excluded_names = frozenset(excluded_names)
        self.hidden_prefix = hidden_prefix
        self.sort_entries = sort_entries

    @classmethod
    def from_config(cls, config: ContextConfig) -> "DirectoryTreeSummarizer":
        return cls(
            max_depth=config.max_depth,
            max_subdirectories=config.max_subdirectories,
            excluded_names=config.excluded_names,
            hidden_prefix=config.hidden_prefix,
            sort_entries=config.sort_entries,
        )

    def summarize(self, root_path: Union[str, Path]) -> str:
        """Walks `root_path` and returns the rendered tree."""
        return self.render(self.build(root_path))

    def is_excluded(self, name: str) -> bool:
        return (bool(self.hidden_prefix) and name.startswith(self.hidden_prefix)) or name in self.excluded_names

    def build(self, root_path: Union[str, Path]) -> List[DirectoryNode]:
        """
        Builds the node tree for the contents of `root_path`.

        The walk uses an explicit stack of (path, node) pairs instead of
        recursion. A directory that cannot be listed becomes a truncation marker
        carrying the error instead of aborting the walk.
        """
        root_path = Path(root_path)
        top = DirectoryNode(name=str(root_path), kind=NodeKind.DIRECTORY, depth=0)
        stack: List[Tuple[Path, DirectoryNode, int]] = [(root_path, top, 0)]

        while stack:
            path, node, depth = stack.pop()
            entries = self._list_entries(path)
            if isinstance(entries, OSError):
                if node is top:
                    raise entries
                node.kind = NodeKind.TRUNCATED
                node.reason = f"Unreadable: {entries.strerror or entries}"
                continue

            subdir_count = 0
            for name, is_dir in entries:
                if not is_dir:
                    node.children.append(DirectoryNode(name=name, kind=NodeKind.FILE, depth=depth))
                    continue

                subdir_count += 1
                if subdir_count > self.max_subdirectories:
                    node.children.append(
                        DirectoryNode(name=name, kind=NodeKind.TRUNCATED, depth=depth, reason=FAN_OUT_REASON)
                    )
                    continue

                if depth >= self.max_depth:
                    node.children.append(
                        DirectoryNode(name=name, kind=NodeKind.TRUNCATED, depth=depth, reason=DEPTH_LIMIT_REASON)
                    )
                    continue

                child = DirectoryNode(name=name, kind=NodeKind.DIRECTORY, depth=depth)
                node.children.append(child)
                stack.append((path / name, child, depth + 1))

        return top.children

    def _list_entries(self, path: Path) -> Union[List[Tuple[str, bool]], OSError]:
        try:
            with os.scandir(path) as it:
                entries = [(entry.name, self._is_dir(entry)) for entry in it if not self.is_excluded(entry.name)]
        except OSError as e:
            logger.warning(f"Could not list directory {path}: {e}")
            return e
        if self.sort_entries:
            entries.sort(key=lambda entry: entry[0])
        return entries

    @staticmethod
    def _is_dir(entry: os.DirEntry) -> bool:
        try:
            return entry.is_dir()
        except OSError:
            return False

    def render(self, nodes: List[DirectoryNode]) -> str:
        lines: List[str] = []
        stack: List[DirectoryNode] = list(reversed(nodes))
        while stack:
            node = stack.pop()
            lines.append(INDENT * node.depth + self._render_line(node))
            if node.kind is NodeKind.DIRECTORY:
                stack.extend(reversed(node.children))
        return "\n".join(lines)

    @staticmethod
    def _render_line(node: DirectoryNode) -> str:
        if node.kind is NodeKind.FILE:
            return node.name
        if node.kind is NodeKind.TRUNCATED:
            return f"{node.name}{os.sep} [{node.reason}]"
        return f"{node.name}{os.sep}"
