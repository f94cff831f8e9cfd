# git.py
# Small, focused wrapper around the Git CLI.
# This module centralizes all Git interactions so the rest of the codebase
# never needs to call subprocess("git ...") directly.

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Mapping, Optional

MAIN_BRANCHES = ("master", "main")

# Branch variables exported by common CI servers, checked in order when the
# checkout is a detached HEAD (the usual state on a build agent).
CI_BRANCH_VARIABLES = (
    "GITHUB_HEAD_REF",
    "GITHUB_REF_NAME",
    "BUILD_SOURCEBRANCHNAME",
    "APPVEYOR_REPO_BRANCH",
    "TRAVIS_BRANCH",
    "CI_COMMIT_REF_NAME",
    "BRANCH_NAME",
    "GIT_BRANCH",
)


def _git(args: list[str], cwd: Optional[str | Path] = None) -> str:
    """
    Execute a git command and return its stdout as a clean string.

    This is the single low-level entry point for all Git operations in this file.

    Args:
        args: List of git arguments (e.g. ["rev-parse", "HEAD"])
        cwd: Optional working directory in which to run the git command.

    Returns:
        Stdout from the git command with surrounding whitespace removed.

    Raises:
        subprocess.CalledProcessError if git exits non-zero,
        FileNotFoundError if git is not installed.
    """
    out = subprocess.check_output(
        ["git", *args],
        cwd=str(cwd) if cwd is not None else None,
        text=True,
        stderr=subprocess.DEVNULL,
    )
    return out.strip()


def repo_root(cwd: Optional[str | Path] = None) -> Path:
    """
    Return the absolute path to the root of the current Git repository.

    Uses git itself as the source of truth rather than guessing based
    on filesystem layout.
    """
    return Path(_git(["rev-parse", "--show-toplevel"], cwd=cwd))


def head_sha(cwd: Optional[str | Path] = None) -> str:
    """Return the full SHA hash of the current HEAD commit."""
    return _git(["rev-parse", "HEAD"], cwd=cwd)


def get_current_ref(cwd: Optional[str | Path] = None) -> str:
    """
    Return the current branch name, or "HEAD" when detached.
    """
    return _git(["rev-parse", "--abbrev-ref", "HEAD"], cwd=cwd)


def get_remote_url(remote: str = "origin", cwd: Optional[str | Path] = None) -> str:
    """Return the fetch URL of a remote."""
    return _git(["remote", "get-url", remote], cwd=cwd)


def repository_name(root: str | Path, remote: str = "origin") -> str:
    """
    Short repository name for display: the last path segment of the remote
    URL without ".git", or the root directory's name when there is no remote.
    """
    try:
        url = get_remote_url(remote, cwd=root)
    except (subprocess.CalledProcessError, FileNotFoundError):
        url = ""
    name = url.rstrip("/").split("/")[-1].split(":")[-1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    return name or Path(root).resolve().name


def describe(cwd: Optional[str | Path] = None) -> str:
    """
    Return `git describe --tags --long` for HEAD, e.g. "v1.2.3-4-gabc1234".

    Raises CalledProcessError when the repository has no tags.
    """
    return _git(["describe", "--tags", "--long"], cwd=cwd)


def commit_count(cwd: Optional[str | Path] = None) -> int:
    """Number of commits reachable from HEAD."""
    return int(_git(["rev-list", "--count", "HEAD"], cwd=cwd))


def branch_from_env(env: Mapping[str, str]) -> Optional[str]:
    """First non-empty CI branch variable, if any."""
    for name in CI_BRANCH_VARIABLES:
        value = env.get(name, "").strip()
        if value:
            return normalize_branch(value)
    return None


def normalize_branch(branch: str) -> str:
    """Strip ref prefixes: 'refs/heads/main' and 'origin/main' both become 'main'."""
    for prefix in ("refs/heads/", "origin/"):
        if branch.startswith(prefix):
            branch = branch[len(prefix):]
    return branch


def current_branch(
    cwd: Optional[str | Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Optional[str]:
    """
    Branch name of the checkout.

    On a detached HEAD (or outside a repository) fall back to the CI
    server's branch variables. Returns None when nothing is known.
    """
    env = os.environ if env is None else env
    try:
        ref = get_current_ref(cwd)
    except (subprocess.CalledProcessError, FileNotFoundError):
        ref = "HEAD"
    if ref and ref != "HEAD":
        return normalize_branch(ref)
    return branch_from_env(env)


def is_on_main_branch(branch: Optional[str]) -> bool:
    """True for master/main (case-insensitive)."""
    if not branch:
        return False
    return normalize_branch(branch).lower() in MAIN_BRANCHES
