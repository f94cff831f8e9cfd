"""Semantic version metadata derived from git tags."""

from __future__ import annotations

import re
import subprocess
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict

from . import git
from .git import is_on_main_branch

_DESCRIBE_RE = re.compile(
    r"^v?(?P<major>\d+)\.(?P<minor>\d+)(?:\.(?P<patch>\d+))?"
    r"(?:-[0-9A-Za-z.-]+?)?-(?P<commits>\d+)-g(?P<sha>[0-9a-f]+)$"
)


class VersionInfo(BaseModel):
    """Version numbers in the shapes the .NET toolchain expects."""

    model_config = ConfigDict(frozen=True)

    major: int
    minor: int
    patch: int
    commits_since_tag: int = 0
    pre_release_label: str = ""
    branch: str = ""
    sha: str = ""

    @property
    def major_minor_patch(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    @property
    def assembly_sem_ver(self) -> str:
        return f"{self.major_minor_patch}.0"

    @property
    def assembly_sem_file_ver(self) -> str:
        return f"{self.major_minor_patch}.0"

    @property
    def nuget_version_v2(self) -> str:
        if not self.pre_release_label:
            return self.major_minor_patch
        return f"{self.major_minor_patch}-{self.pre_release_label}{self.commits_since_tag:04d}"

    @property
    def informational_version(self) -> str:
        meta = [str(self.commits_since_tag)]
        if self.branch:
            meta += ["Branch", _label(self.branch)]
        if self.sha:
            meta += ["Sha", self.sha]
        return f"{self.nuget_version_v2}+{'.'.join(meta)}"


def _label(branch: str) -> str:
    """Branch name reduced to a SemVer-safe identifier."""
    return re.sub(r"[^0-9A-Za-z]+", "-", branch).strip("-") or "branch"


def compute_version(
    *,
    major: int,
    minor: int,
    patch: int,
    commits: int,
    branch: Optional[str],
    sha: str = "",
) -> VersionInfo:
    """
    A tagged commit builds exactly the tag version. Commits after the tag
    bump the patch number; off the main branch they also get a pre-release
    label named after the branch (e.g. 1.2.4-feature-x0003).
    """
    if commits > 0:
        patch += 1
    label = ""
    if commits > 0 and not is_on_main_branch(branch):
        label = _label(branch or "ci").lower()
    return VersionInfo(
        major=major,
        minor=minor,
        patch=patch,
        commits_since_tag=commits,
        pre_release_label=label,
        branch=branch or "",
        sha=sha,
    )


def parse_describe(output: str, branch: Optional[str]) -> Optional[VersionInfo]:
    """Parse `git describe --tags --long` output; None when it is not a version tag."""
    m = _DESCRIBE_RE.match(output.strip())
    if not m:
        return None
    return compute_version(
        major=int(m["major"]),
        minor=int(m["minor"]),
        patch=int(m["patch"] or 0),
        commits=int(m["commits"]),
        branch=branch,
        sha=m["sha"],
    )


def detect_version(cwd: Optional[str | Path], branch: Optional[str]) -> Optional[VersionInfo]:
    """
    Version of the checkout at cwd.

    Untagged repositories count every commit from 0.1.0. Returns None when
    git or the repository is unavailable.
    """
    try:
        output = git.describe(cwd)
    except FileNotFoundError:
        return None
    except subprocess.CalledProcessError:
        output = ""

    info = parse_describe(output, branch) if output else None
    if info is not None:
        return info

    try:
        commits = git.commit_count(cwd)
        sha = git.head_sha(cwd)[:7]
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None
    return compute_version(major=0, minor=1, patch=0, commits=commits, branch=branch, sha=sha)
