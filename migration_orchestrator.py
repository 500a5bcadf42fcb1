#!/usr/bin/env python3
"""Main orchestrator for forking an organization's repositories into another."""

from __future__ import annotations

from typing import Callable, List, Optional, TextIO

from catalog import MigrationOutcome, RepoCatalog, RepoDescriptor, StageReport
from config import Config, FailurePolicy, GitHubClientConfig
from exceptions import PlatformAuthError, PlatformError
from github_client import GitHubClient
from logging_utils import Logger
from table_printer import print_catalog
from utils import normalize_topic, security_coverage_url

# Exit codes
EXIT_SUCCESS = 0
EXIT_EXECUTION_ERROR = 1
EXIT_PARTIAL_FAILURE = 3
EXIT_GITHUB_ERROR = 31
EXIT_AUTH_ERROR = 40

CONFIRM_TOKEN = "y"

STAGE_FORK = "fork"
STAGE_TOPIC = "topic"
STAGE_CODE_SCANNING = "code-scanning"


class FailFastAbort(Exception):
    """Raised to stop the run on the first per-repository error."""

    def __init__(self, stage: str, target: str, reason: str) -> None:
        super().__init__(f"{stage} failed for {target}: {reason}")
        self.stage = stage
        self.target = target
        self.reason = reason


class MigrationOrchestrator:
    """Runs Discover -> Confirm -> Fork -> Tag -> Enable code scanning."""

    def __init__(
        self,
        cfg: Config,
        client: Optional[GitHubClient] = None,
        input_func: Callable[[str], str] = input,
        out: Optional[TextIO] = None,
    ) -> None:
        self.cfg = cfg
        self.gh = client or GitHubClient(
            GitHubClientConfig(
                api_url=cfg.github.api_url.rstrip("/"),
                token=cfg.github.token,
                retry_delay_s=cfg.behavior.retry_delay_s,
            )
        )
        self.input_func = input_func
        self.out = out
        self.reports: List[StageReport] = []
        self.topic: Optional[str] = None

    @property
    def dest_org(self) -> str:
        return self.cfg.github.dest_org

    def run(self) -> int:
        try:
            self.gh.connect()
            self.gh.check_org_access(self.dest_org)

            catalog = self._discover()

            if self.cfg.source.single_repo:
                if self.cfg.behavior.dry_run:
                    return self._dry_run(catalog)
                Logger.info(f"forking {self.cfg.source.repo}")
                self._migrate(catalog)
                return self._finish()

            if not catalog:
                count = self._render(catalog)
                Logger.warn(f"no repositories matched; nothing to migrate ({count} repos)")
                return EXIT_SUCCESS
            if self.cfg.behavior.dry_run:
                return self._dry_run(catalog)
            if not self._confirm(catalog):
                Logger.info("exiting...")
                return EXIT_SUCCESS

            outcomes = self._migrate(catalog)
            self._post_migrate(outcomes)
            return self._finish()
        except FailFastAbort as e:
            Logger.error(f"aborting (fail-fast): {e}")
            self._print_summary()
            return EXIT_GITHUB_ERROR
        except PlatformAuthError as e:
            Logger.error(e.reason)
            return EXIT_AUTH_ERROR
        except PlatformError as e:
            Logger.error(e.reason)
            return EXIT_GITHUB_ERROR
        except Exception as e:
            Logger.error(f"unexpected error: {e}")
            return EXIT_EXECUTION_ERROR

    def _discover(self) -> RepoCatalog:
        """Build the catalog from the named repository or the source org.

        Listing errors propagate; no partial catalog is ever used.
        """
        catalog = RepoCatalog()
        if self.cfg.source.single_repo:
            catalog.add(RepoDescriptor.from_full_name(self.cfg.source.repo))
            return catalog

        org = self.cfg.source.org
        Logger.info(f"discovering repositories under: {org}")
        for language in self.cfg.behavior.languages:
            found = self.gh.list_repos(org, language)
            added = 0
            for descriptor in found:
                if catalog.add(descriptor):
                    added += 1
                    Logger.debug(f"found: {descriptor.full_name} ({language})")
                else:
                    Logger.warn(f"skipping duplicate: {descriptor.full_name}")
            Logger.info(f"{language}: {added} repositories")

        Logger.info(f"found {len(catalog)} repositories to migrate")
        return catalog

    def _render(self, catalog: RepoCatalog) -> int:
        return print_catalog(
            catalog,
            out=self.out,
            show_language=not self.cfg.source.single_repo,
        )

    def _dry_run(self, catalog: RepoCatalog) -> int:
        Logger.info(f"would fork into {self.dest_org}:")
        count = self._render(catalog)
        Logger.info(f"dry-run completed ({count} repos)")
        return EXIT_SUCCESS

    def _confirm(self, catalog: RepoCatalog) -> bool:
        """Show the catalog and ask the operator before any mutation."""
        Logger.info("forking the following repos")
        count = self._render(catalog)
        if self.cfg.behavior.assume_yes:
            Logger.info(f"proceeding without confirmation ({count} repos)")
            return True
        try:
            answer = self.input_func(f"\nDo you want to continue ({count} repos)? (y/n) ")
        except (EOFError, KeyboardInterrupt):
            return False
        return answer.strip("\r\n") == CONFIRM_TOKEN

    def _new_report(self, stage: str) -> StageReport:
        report = StageReport(stage)
        self.reports.append(report)
        return report

    def _record_failure(
        self, report: StageReport, target: str, error: PlatformError
    ) -> None:
        report.record_failure(target, error.reason)
        Logger.error(error.reason)
        if self.cfg.behavior.failure_policy == FailurePolicy.FAIL_FAST:
            raise FailFastAbort(report.stage, target, error.reason)

    def _migrate(self, catalog: RepoCatalog) -> List[MigrationOutcome]:
        report = self._new_report(STAGE_FORK)
        outcomes: List[MigrationOutcome] = []
        total = len(catalog)
        for idx, descriptor in enumerate(catalog, start=1):
            Logger.info(f"[{idx}/{total}] fork: {descriptor.full_name} -> {self.dest_org}")
            try:
                fork_name = self.gh.fork_repo(descriptor.full_name, self.dest_org)
            except PlatformAuthError:
                raise
            except PlatformError as e:
                outcomes.append(MigrationOutcome.failure(descriptor, e.reason))
                self._record_failure(report, descriptor.full_name, e)
                continue

            outcomes.append(MigrationOutcome.success(descriptor, fork_name))
            report.record_success(descriptor.full_name)
            Logger.success(f"forked: {descriptor.full_name} -> {fork_name}")
            if fork_name != f"{self.dest_org}/{descriptor.name}" and descriptor.name:
                Logger.warn(f"fork of {descriptor.full_name} was named {fork_name}")
        return outcomes

    def _post_migrate(self, outcomes: List[MigrationOutcome]) -> None:
        migrated = [o for o in outcomes if o.succeeded]
        if not migrated:
            Logger.warn("no repositories were forked; skipping post-migration")
            return
        self._assign_topics(migrated)
        self._enable_code_scanning(migrated)

    def _dest_repo(self, outcome: MigrationOutcome) -> str:
        return outcome.dest_full_name or f"{self.dest_org}/{outcome.descriptor.name}"

    def _assign_topics(self, migrated: List[MigrationOutcome]) -> Optional[str]:
        report = self._new_report(STAGE_TOPIC)
        for outcome in migrated:
            topic = normalize_topic(outcome.descriptor.owner_login)
            dest_repo = self._dest_repo(outcome)
            if self.cfg.behavior.wait:
                self.gh.wait_repo_available(dest_repo)
            try:
                self.gh.edit_repo_topics(dest_repo, add_topic=topic)
            except PlatformAuthError:
                raise
            except PlatformError as e:
                self._record_failure(report, dest_repo, e)
                continue
            self.topic = topic
            report.record_success(dest_repo)
            Logger.info(f"tagged {dest_repo} with topic '{topic}'")
        return self.topic

    def _enable_code_scanning(self, migrated: List[MigrationOutcome]) -> None:
        report = self._new_report(STAGE_CODE_SCANNING)
        for outcome in migrated:
            dest_repo = self._dest_repo(outcome)
            owner, repo_name = dest_repo.split("/", 1)
            try:
                self.gh.enable_default_code_scanning(owner, repo_name)
            except PlatformAuthError:
                raise
            except PlatformError as e:
                self._record_failure(report, dest_repo, e)
                continue
            report.record_success(dest_repo)
            Logger.info(f"code scanning default setup configured: {dest_repo}")

    def _print_summary(self) -> None:
        for report in self.reports:
            line = (
                f"{report.stage}: {len(report.succeeded)} succeeded, "
                f"{len(report.failed)} failed"
            )
            if report.has_failures:
                Logger.warn(line)
                for target, reason in report.failed.items():
                    Logger.warn(f"  {target}: {reason}")
            else:
                Logger.info(line)

    def _finish(self) -> int:
        self._print_summary()
        failed = any(report.has_failures for report in self.reports)

        if self.topic:
            Logger.success(f"done, topic: {self.topic}")
            url = security_coverage_url(
                self.cfg.github.api_url, self.dest_org, self.topic
            )
            Logger.info(f"review code scanning coverage: {url}")
        else:
            Logger.success("done")

        return EXIT_PARTIAL_FAILURE if failed else EXIT_SUCCESS
