import os
from pathlib import Path
from typing import List, Optional, Union

from config.models import ContextConfig
from core.collectors.tree import DirectoryTreeSummarizer
from core.contracts.models import RepositoryContext
from utils.git import GitQuery, GitRunner
from utils.logger import logger

NO_COMMITS_MESSAGE = "No commits yet."
DIFF_TOO_LARGE_MESSAGE = "Diff too large to display."


def split_lines(output: Optional[str]) -> Optional[List[str]]:
    """Splits query output into lines, keeping None for a failed query."""
    if output is None:
        return None
    return output.splitlines()


def parse_commit_count(output: Optional[str]) -> int:
    """
    Interprets `git rev-list --count HEAD`.

    The query fails on a repository without commits because HEAD does not
    resolve yet, so a missing count is read as zero.
    """
    if output is None:
        return 0
    try:
        return max(int(output.strip()), 0)
    except ValueError:
        logger.warning(f"Unexpected commit count output: {output!r}")
        return 0


class RepositoryContextCollector:
    """
    Gathers the repository snapshot sent to the completion service.

    Queries run one after another in a fixed order. Each field is filled on a
    best-effort basis: a failed query leaves its field as None and collection
    carries on with the rest.
    """

    def __init__(
        self,
        config: Optional[ContextConfig] = None,
        runner: Optional[GitRunner] = None,
        summarizer: Optional[DirectoryTreeSummarizer] = None,
    ):
        self.config = config or ContextConfig()
        self._runner = runner
        self.summarizer = summarizer or DirectoryTreeSummarizer.from_config(self.config)

    def _get_runner(self, working_directory: Path) -> GitRunner:
        if self._runner is not None:
            return self._runner
        return GitRunner(cwd=working_directory, max_output_bytes=self.config.max_output_bytes)

    def collect(self, working_directory: Optional[Union[str, Path]] = None) -> RepositoryContext:
        """
        Collects the full context for `working_directory` (defaults to the current directory).

        Returns:
            A RepositoryContext; any field may be None if its query failed.
        """
        cwd = Path(working_directory) if working_directory is not None else Path(os.getcwd())
        runner = self._get_runner(cwd)
        logger.info(f"Collecting repository context in {cwd}")

        current_branch = runner.run(GitQuery.CURRENT_BRANCH)
        last_commit_message = runner.run(GitQuery.LAST_COMMIT_MESSAGE)
        status = runner.run(GitQuery.STATUS)
        recent_commits = runner.run(GitQuery.RECENT_COMMITS, "-n", str(self.config.recent_commit_count))
        branch_list = runner.run(GitQuery.BRANCH_LIST)
        remote_info = runner.run(GitQuery.REMOTE_INFO)
        branch_tracking = runner.run(GitQuery.BRANCH_TRACKING)
        commit_count = parse_commit_count(runner.run(GitQuery.COMMIT_COUNT))
        diff = self.select_diff(runner, commit_count)

        return RepositoryContext(
            directory_tree=self._summarize_tree(cwd),
            current_branch=current_branch,
            last_commit_message=last_commit_message,
            status_lines=split_lines(status),
            recent_commits=split_lines(recent_commits),
            branch_list=split_lines(branch_list),
            remote_info=split_lines(remote_info),
            branch_tracking_info=split_lines(branch_tracking),
            diff=diff,
        )

    def select_diff(self, runner: GitRunner, commit_count: int) -> Optional[str]:
        """
        Picks the diff shown to the model from the number of commits.

        0 commits gives a fixed notice, 1 commit shows that commit, and more
        compare HEAD with its parent under the larger capture limit.
        """
        if commit_count == 0:
            return NO_COMMITS_MESSAGE

        query = GitQuery.SHOW_LAST_COMMIT if commit_count == 1 else GitQuery.DIFF_PREVIOUS
        result = runner.query(query, max_output_bytes=self.config.max_diff_bytes)
        if result.exceeded_limit:
            return DIFF_TOO_LARGE_MESSAGE
        return result.output

    def _summarize_tree(self, cwd: Path) -> Optional[str]:
        try:
            return self.summarizer.summarize(cwd)
        except OSError as e:
            logger.warning(f"Could not summarize directory tree at {cwd}: {e}")
            return None
