# Monorepo Agent Git Module
# Version-control collaborator used for registry bookkeeping

from monorepo_agent.git.operations import GitError, get_repo_root, is_git_repo, stage_files

__all__ = [
    "GitError",
    "get_repo_root",
    "is_git_repo",
    "stage_files",
]
