"""GitHub CLI client that produces workflow snapshots for the dashboard."""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
import re
import subprocess
from typing import Any, Callable, Iterator

from lazyactions.config.schema import FetchFilters
from lazyactions.core.models import Job, WorkflowRun, WorkflowSnapshot
from lazyactions.observability.logging import get_logger, log_event


_LOGGER = get_logger("lazyactions.gh")

_ACCEPT_HEADER = "Accept: application/vnd.github+json"
_RAW_ACCEPT_HEADER = "Accept: application/vnd.github.v3+raw"
_LOGIN_PATTERN = re.compile(r"Logged in to \S+ (?:account|as) (\S+)")

_RUNS_JQ = (
    ".workflow_runs[0:{window}][] | "
    "{{id: .id, actor_login: .actor.login, head_branch: .head_branch, "
    "repo: .repository.full_name}}"
)
_JOBS_JQ = (
    ".jobs[] | {id: .id, name: .name, run_url: .run_url, status: .status, "
    "conclusion: .conclusion, started_at: .started_at, "
    "completed_at: .completed_at, html_url: .html_url}"
)

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


class GhCliError(RuntimeError):
    """A `gh` or `git` invocation failed or returned unusable output."""


@dataclass(frozen=True, slots=True)
class RepoInfo:
    owner: str = ""
    name: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


def _iter_json_lines(text: str, *, context: str) -> Iterator[dict[str, Any]]:
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            payload = json.loads(line)
        except json.JSONDecodeError as exc:
            raise GhCliError(f"Failed to parse {context} JSON line: {line}") from exc
        if not isinstance(payload, dict):
            raise GhCliError(f"Expected a JSON object in {context} output: {line}")
        yield payload


def parse_login(auth_status: str) -> str | None:
    """Extract the account name from `gh auth status` output."""

    match = _LOGIN_PATTERN.search(auth_status)
    if match is None:
        return None
    return match.group(1).strip("()")


class GhCli:
    """Thin wrapper over the `gh` CLI bound to one repository and filter set."""

    def __init__(
        self,
        filters: FetchFilters,
        *,
        repo: RepoInfo | None = None,
        current_user: str = "",
        current_branch: str = "",
        timeout: float = 60.0,
        runner: Runner = subprocess.run,
    ) -> None:
        self.filters = filters
        self.repo = repo or RepoInfo()
        self.current_user = current_user
        self.current_branch = current_branch
        self.timeout = timeout
        self._runner = runner

    @classmethod
    def from_environment(
        cls,
        filters: FetchFilters,
        *,
        timeout: float = 60.0,
        runner: Runner = subprocess.run,
    ) -> "GhCli":
        """Build a client and resolve repository, user and branch once."""

        client = cls(filters, timeout=timeout, runner=runner)
        client.resolve()
        return client

    def _run(self, command: list[str], *, error_msg: str) -> str:
        try:
            completed = self._runner(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise GhCliError(f"{error_msg}: {type(exc).__name__}: {exc}") from exc

        if completed.returncode != 0:
            raise GhCliError(
                f"{error_msg}. Command `{' '.join(command)}` failed with exit code "
                f"{completed.returncode}:\nStdout: {completed.stdout}\nStderr: {completed.stderr}"
            )
        return completed.stdout or ""

    def check_auth(self) -> str:
        """Return `gh auth status` output, raising when gh is unusable."""

        try:
            completed = self._runner(
                ["gh", "auth", "status"],
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise GhCliError(
                "GitHub CLI is not installed or not reachable. "
                "Please install it and run 'gh auth login'."
            ) from exc
        if completed.returncode != 0:
            raise GhCliError(
                "GitHub CLI is not authenticated. Please run 'gh auth login'."
            )
        # Older gh releases print the status report on stderr.
        return f"{completed.stdout or ''}{completed.stderr or ''}"

    def fetch_repo_info(self) -> RepoInfo:
        raw = self._run(
            ["gh", "repo", "view", "--json", "owner,name"],
            error_msg="Failed to fetch repo info",
        )
        try:
            payload = json.loads(raw)
            return RepoInfo(owner=payload["owner"]["login"], name=payload["name"])
        except (json.JSONDecodeError, KeyError, TypeError) as exc:
            raise GhCliError(f"Failed to parse `gh repo view` JSON: {raw}") from exc

    def fetch_current_user(self) -> str:
        login = parse_login(self.check_auth())
        if login is None:
            raise GhCliError("Could not parse current GitHub user from `gh auth status` output")
        return login

    def fetch_current_branch(self) -> str:
        return self._run(
            ["git", "rev-parse", "--abbrev-ref", "HEAD"],
            error_msg="Failed to fetch current Git branch",
        ).strip()

    def resolve(self) -> None:
        """Resolve repository, user and branch, keeping empty values on failure."""

        try:
            self.repo = self.fetch_repo_info()
        except GhCliError as exc:
            log_event(_LOGGER, "repo_info_unavailable", level=logging.WARNING, error=str(exc))
        try:
            self.current_user = self.fetch_current_user()
        except GhCliError as exc:
            log_event(_LOGGER, "current_user_unavailable", level=logging.WARNING, error=str(exc))
        try:
            self.current_branch = self.fetch_current_branch()
        except GhCliError as exc:
            log_event(_LOGGER, "current_branch_unavailable", level=logging.WARNING, error=str(exc))

    def _api(self, path: str, *, jq: str | None = None, paginate: bool = False) -> str:
        command = ["gh", "api"]
        if paginate:
            command.append("--paginate")
        command.extend(["-H", _ACCEPT_HEADER, path])
        if jq is not None:
            command.extend(["--jq", jq])
        return self._run(command, error_msg=f"GitHub API request for {path} failed")

    def _keep_run(self, run: WorkflowRun) -> bool:
        if self.filters.user and run.actor_login != self.current_user:
            return False
        if self.filters.branch and run.head_branch != self.current_branch:
            return False
        return True

    def fetch_runs(self) -> list[WorkflowRun]:
        raw = self._api(
            f"/repos/{self.repo.full_name}/actions/runs",
            jq=_RUNS_JQ.format(window=self.filters.run_window),
        )
        runs: list[WorkflowRun] = []
        for payload in _iter_json_lines(raw, context="workflow run"):
            try:
                run = WorkflowRun(
                    id=int(payload["id"]),
                    actor_login=str(payload.get("actor_login") or ""),
                    head_branch=str(payload.get("head_branch") or ""),
                    repo=str(payload.get("repo") or self.repo.full_name),
                )
            except (KeyError, TypeError, ValueError) as exc:
                raise GhCliError(f"Malformed workflow run payload: {payload}") from exc
            if self._keep_run(run):
                runs.append(run)
        return runs

    def fetch_run_jobs(self, run: WorkflowRun) -> list[Job]:
        raw = self._api(
            f"/repos/{self.repo.full_name}/actions/runs/{run.id}/jobs",
            jq=_JOBS_JQ,
            paginate=True,
        )
        jobs: list[Job] = []
        for payload in _iter_json_lines(raw, context=f"job for run {run.id}"):
            payload = {
                **payload,
                "run_id": run.id,
                "actor_login": run.actor_login,
                "head_branch": run.head_branch,
                "repo": run.repo,
            }
            try:
                jobs.append(Job.from_payload(payload))
            except ValueError as exc:
                raise GhCliError(f"Malformed job payload for run {run.id}: {exc}") from exc
        return jobs

    def fetch_workflow_data(self) -> WorkflowSnapshot:
        """Fetch the filtered recent runs and every job belonging to them."""

        runs = self.fetch_runs()
        jobs: list[Job] = []
        for run in runs:
            jobs.extend(self.fetch_run_jobs(run))
        return WorkflowSnapshot(jobs=tuple(jobs), runs=tuple(runs))

    def fetch_job_logs(self, job_id: int) -> str:
        command = [
            "gh",
            "api",
            "-H",
            _RAW_ACCEPT_HEADER,
            f"/repos/{self.repo.full_name}/actions/jobs/{job_id}/logs",
        ]
        return self._run(command, error_msg=f"Failed to fetch logs for job {job_id}")
