"""Run orchestration: one lock-protected wiki generation or update.

State machine:

    idle -> locking -> classifying -> generating -> committing -> done
                                                              \\-> failed

The commit guard is consulted before the lock is taken, so the hook run
fired by repowiki's own auto-commit ends immediately. Every terminal
transition releases the lock before control returns to the caller.
"""

import logging
from collections.abc import Sequence
from pathlib import Path

from ..config import RepowikiConfig, get_log_dir, get_repowiki_dir, update_last_run
from ..engines import EngineRegistry, registry
from ..errors import ConfigError
from ..logging import run_log
from ..models import ChangeSet, Decision, DecisionKind, EngineRequest, Run, RunMode, RunState
from ..services.git import GitProvider
from .classifier import classify
from .commit_guard import CommitGuard
from .lock_manager import FileLockProvider, LockProvider
from .prompts import build_full_prompt, build_incremental_prompt


def wiki_exists(repo_root: Path, config: RepowikiConfig) -> bool:
    """Check if the wiki content directory has any entries."""
    content_dir = config.wiki.content_dir(repo_root)
    return content_dir.is_dir() and any(content_dir.iterdir())


class Orchestrator:
    """Runs wiki generation for one repository.

    Args:
        config: Repowiki configuration, passed explicitly
        git: Git provider rooted at the repository
        lock: Lock provider (defaults to a file lock in .repowiki/)
        engines: Engine registry to resolve ``config.engine.name``
        repowiki_dir: State directory (defaults to <root>/.repowiki)
    """

    def __init__(
        self,
        config: RepowikiConfig,
        git: GitProvider,
        lock: LockProvider | None = None,
        engines: EngineRegistry = registry,
        repowiki_dir: Path | None = None,
    ):
        self.config = config
        self.git = git
        self.repo_root = git.root
        self.repowiki_dir = repowiki_dir or get_repowiki_dir(self.repo_root)
        self.lock = lock or FileLockProvider(self.repowiki_dir, config.lock.timeout_seconds)
        self.engines = engines
        self.guard = CommitGuard(git, config.commit.prefix, config.wiki.path)
        self.current_run: Run | None = None

    def generate(self) -> Run:
        """Explicit full wiki generation."""
        return self.run(full=True)

    def update(
        self,
        changed_paths: Sequence[str] | None = None,
        revision: str = "HEAD",
        from_hook: bool = False,
    ) -> Run:
        """Incremental update for a commit, a range, or explicit paths."""
        return self.run(changed_paths=changed_paths, revision=revision, from_hook=from_hook)

    def run(
        self,
        full: bool = False,
        changed_paths: Sequence[str] | None = None,
        revision: str = "HEAD",
        from_hook: bool = False,
    ) -> Run:
        """Execute one run to a terminal state.

        Args:
            full: Regenerate everything, bypassing classification
            changed_paths: Paths to classify (read from git when None)
            revision: Commit or ``A..B`` range to read changed paths from
            from_hook: True when invoked by the post-commit hook

        Returns:
            The finished Run (state DONE)

        Raises:
            LockHeld: Another live run holds the lock
            EngineNotFound: No engine executable could be resolved
            EngineInvocationFailed: The engine failed
            CommitFailed: Content generated but auto-commit failed
        """
        run = Run(mode=RunMode.FULL if full else RunMode.INCREMENTAL, from_hook=from_hook)
        self.current_run = run

        with run_log(get_log_dir(self.repowiki_dir)) as log:
            log.info(
                "starting %s run%s (engine: %s)",
                run.mode.value,
                " from hook" if from_hook else "",
                self.config.engine.name,
            )

            skip_reason = self._precheck(full, from_hook)
            if skip_reason:
                run.decision = Decision.skip(skip_reason)
                run.advance(RunState.DONE)
                log.info("skipped: %s", skip_reason)
                return run

            run.advance(RunState.LOCKING)
            try:
                self.lock.acquire("update --from-hook" if from_hook else run.mode.value)
            except Exception as e:
                self._fail(run, log, e)
                raise

            try:
                self._run_locked(run, log, full, changed_paths, revision)
            except Exception as e:
                self._fail(run, log, e)
                raise
            finally:
                self.lock.release()

        return run

    def _precheck(self, full: bool, from_hook: bool) -> str | None:
        """Reasons to finish before taking the lock, or None to proceed."""
        if from_hook and not self.config.enabled:
            return "repowiki is disabled"
        # Only an operator-initiated full generation bypasses the guard
        if (from_hook or not full) and self.guard.should_skip():
            return "latest commit was made by repowiki"
        return None

    def _classify(
        self, run: Run, changed_paths: Sequence[str] | None, revision: str
    ) -> Decision:
        run.advance(RunState.CLASSIFYING)
        if changed_paths is not None:
            change_set = ChangeSet.from_paths(list(changed_paths), revision=None)
        else:
            change_set = self.git.changed_paths(revision)

        changes = self.config.changes
        decision = classify(
            change_set.paths,
            excluded_prefixes=self.config.excluded_prefixes(),
            full_threshold=changes.full_generate_threshold,
            section_rules=changes.sections,
        )
        if decision.kind == DecisionKind.INCREMENTAL and not wiki_exists(
            self.repo_root, self.config
        ):
            decision = Decision(
                kind=DecisionKind.FULL, paths=decision.paths, reason="wiki not generated yet"
            )
        return decision

    def _run_locked(
        self,
        run: Run,
        log: logging.Logger,
        full: bool,
        changed_paths: Sequence[str] | None,
        revision: str,
    ) -> None:
        run.source_commit = self.git.head_sha()

        if full:
            decision = Decision(kind=DecisionKind.FULL, reason="explicit full generation")
        else:
            decision = self._classify(run, changed_paths, revision)
        run.decision = decision

        if decision.kind == DecisionKind.INCREMENTAL:
            log.info(
                "decision: incremental, %s; affected sections: %s",
                decision.reason,
                ", ".join(decision.sections),
            )
        else:
            log.info("decision: %s, %s", decision.kind.value, decision.reason)

        if decision.kind == DecisionKind.SKIP:
            run.advance(RunState.DONE)
            return

        run.advance(RunState.GENERATING)
        if decision.kind == DecisionKind.FULL:
            prompt = build_full_prompt(self.config)
            description = "full wiki generation"
        else:
            prompt = build_incremental_prompt(self.config, decision.paths, decision.sections)
            description = f"update wiki for {len(decision.paths)} changed files"

        engine_cfg = self.config.engine
        engine = self.engines.create(engine_cfg.name, engine_cfg.path)
        executable = engine.locate()
        result = engine.invoke(
            EngineRequest(
                prompt=prompt,
                cwd=self.repo_root,
                max_turns=engine_cfg.max_turns,
                model=engine_cfg.model,
            ),
            executable,
            on_wait=lambda: self._heartbeat(log),
        )
        run.output_length = len(result.output)
        log.info(
            "engine completed, exit code: %d, output length: %d",
            result.exit_code,
            run.output_length,
        )

        if self.config.commit.auto_commit:
            run.advance(RunState.COMMITTING)
            run.commit = self.guard.commit(description)
            if run.commit:
                log.info("wiki changes committed: %s", run.commit.sha[:12])
            else:
                log.info("no wiki changes to commit")

        run.advance(RunState.DONE)
        self._record_last_run(run, log)

    def _heartbeat(self, log: logging.Logger) -> None:
        try:
            self.lock.heartbeat()
        except OSError as e:
            log.warning("could not refresh lock heartbeat: %s", e)

    def _record_last_run(self, run: Run, log: logging.Logger) -> None:
        try:
            update_last_run(self.repowiki_dir, run.source_commit)
        except (ConfigError, OSError) as e:
            log.warning("could not record last run: %s", e)

    def _fail(self, run: Run, log: logging.Logger, error: Exception) -> None:
        failed_in = run.state
        run.error = str(error)
        if not run.state.is_terminal:
            run.advance(RunState.FAILED)
        log.error("run failed in %s: %s", failed_in.value, error)
