# step_workflows/sonar.py
# SonarScanner for .NET wraps a build: `begin` before compiling, `end` after
# the tests have written their coverage report.
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from .dotnet import DOTNET


def begin_args(
    *,
    login: str,
    project_key: Optional[str],
    organization: str,
    server: str,
    version: Optional[str] = None,
    opencover_report: Optional[Path] = None,
) -> List[str]:
    args = [DOTNET, "sonarscanner", "begin"]
    if project_key:
        args.append(f"/k:{project_key}")
    args += [
        f"/o:{organization}",
        f"/d:sonar.host.url={server}",
        f"/d:sonar.login={login}",
    ]
    if version:
        args.append(f"/v:{version}")
    if opencover_report is not None:
        args.append(f"/d:sonar.cs.opencover.reportsPaths={opencover_report}")
    return args


def end_args(*, login: str) -> List[str]:
    return [DOTNET, "sonarscanner", "end", f"/d:sonar.login={login}"]
