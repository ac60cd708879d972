"""
Script: buildx_tools/git_state.py
What: Saves and restores the git working tree around a build.
Doing: Stashes uncommitted changes, optionally checks out a target commit, and puts everything back on exit.
Why: Builds must use committed content only, without losing local work.
Goal: Leave the working tree exactly as it was, even when the build fails or is interrupted.
"""

from __future__ import annotations

import atexit
import signal
import threading
from datetime import datetime, timezone
from typing import NamedTuple

from buildx_tools.common import BuildInterrupted, BuildToolError, cmd_succeeds, run_cmd, warn
from buildx_tools.tags import sanitize_branch_name


SHORT_HASH_LENGTH = 7
# `git rev-parse --abbrev-ref HEAD` prints this when no branch is checked out.
DETACHED_HEAD = "HEAD"
HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class BuildTarget(NamedTuple):
    requested: str | None
    commit: str
    short_commit: str
    branch: str

    @property
    def sanitized_branch(self) -> str:
        return sanitize_branch_name(self.branch)


class GitRepo:
    """Small wrapper around the `git` CLI for one working tree."""

    def __init__(self, cwd: str | None = None) -> None:
        self.cwd = cwd

    def run(self, *args: str) -> str:
        return run_cmd(["git", *args], cwd=self.cwd).strip()

    def succeeds(self, *args: str) -> bool:
        return cmd_succeeds(["git", *args], cwd=self.cwd)

    def current_branch(self) -> str:
        return self.run("rev-parse", "--abbrev-ref", "HEAD")

    def resolve_commit(self, ref: str) -> str:
        """Return the full hash `ref` points to, or raise if it is not a commit."""
        try:
            return self.run("rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}")
        except BuildToolError as exc:
            raise BuildToolError(f"Commit not found: {ref}") from exc

    def short_hash(self, commit: str) -> str:
        return self.run("rev-parse", f"--short={SHORT_HASH_LENGTH}", commit)

    def is_dirty(self) -> bool:
        """True when tracked files have staged or unstaged changes."""
        # Refresh cached stat data so files that were only touched do not count.
        self.succeeds("update-index", "-q", "--refresh")
        return not self.succeeds("diff-index", "--quiet", "HEAD", "--")

    def stash_all(self, message: str) -> None:
        # One entry holds staged, unstaged and untracked changes.
        self.run("stash", "push", "--include-untracked", "-m", message)

    def stash_pop(self) -> None:
        # `--index` brings staged changes back as staged; untracked files stay untracked.
        self.run("stash", "pop", "--index")

    def checkout(self, ref: str) -> None:
        self.run("checkout", "--quiet", ref)

    def remote_branches_containing(self, commit: str) -> list[str]:
        return parse_remote_branches(self.run("branch", "-r", "--contains", commit))


def parse_remote_branches(output: str) -> list[str]:
    """
    Parse `git branch -r --contains` output into branch names.

    The remote name is dropped (`origin/feature/x` becomes `feature/x`).
    Symbolic lines such as `origin/HEAD -> origin/main` are skipped.
    """
    branches: list[str] = []
    for line in output.splitlines():
        name = line.strip()
        if not name or "->" in name:
            continue
        _remote, _, branch = name.partition("/")
        branches.append(branch or name)
    return branches


def branch_label(short_commit: str, remote_branches: list[str]) -> str:
    """First remote branch holding the commit, else `detached-<hash>`."""
    if remote_branches:
        return remote_branches[0]
    return f"detached-{short_commit}"


def _raise_interrupted(signum: int, _frame: object) -> None:
    raise BuildInterrupted(f"Interrupted by {signal.Signals(signum).name}")


class GitStateGuard:
    """
    Context manager that snapshots the working tree and restores it on exit.

    Usage:

        with GitStateGuard(GitRepo(), target_commit="abc1234") as guard:
            build(guard.target)

    On enter it records the current branch and commit, stashes uncommitted
    changes, and checks out `target_commit` when that differs from HEAD.
    On exit, whatever the cause, it checks the original branch back out and
    pops the stash. Restore runs once per guard even when several exit paths
    reach it (context exit, signal, interpreter shutdown).
    """

    def __init__(
        self,
        repo: GitRepo,
        *,
        target_commit: str | None = None,
        stash_label: str = "Docker build",
        install_signal_handlers: bool = True,
    ) -> None:
        self.repo = repo
        self.target_commit = target_commit or None
        self.stash_label = stash_label
        self.install_signal_handlers = install_signal_handlers

        # Repository state snapshot.
        self.original_branch = ""
        self.original_commit = ""
        self.stashed = False
        self.checked_out = False
        self.restored = False

        self.target: BuildTarget | None = None
        self._previous_handlers: dict[int, object] = {}

    def __enter__(self) -> GitStateGuard:
        self._install_handlers()
        atexit.register(self.restore)
        try:
            self.target = self.prepare()
        except BaseException:
            self._cleanup()
            raise
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self._cleanup()
        return False

    def stash_message(self) -> str:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        return f"Auto-stash before {self.stash_label} at {timestamp}"

    def prepare(self) -> BuildTarget:
        """Snapshot, stash and check out. Returns what will be built."""
        print("Checking git status...")
        self.original_branch = self.repo.current_branch()
        self.original_commit = self.repo.resolve_commit("HEAD")
        print(f"Current branch: {self.original_branch}")
        print(f"Current commit: {self.repo.short_hash(self.original_commit)}")

        # A bad commit reference must fail before the working tree is touched.
        commit = self.original_commit
        if self.target_commit:
            commit = self.repo.resolve_commit(self.target_commit)

        if self.repo.is_dirty():
            print("Saving uncommitted changes...")
            self.repo.stash_all(self.stash_message())
            self.stashed = True
        else:
            print("No uncommitted changes detected")

        short_commit = self.repo.short_hash(commit)
        if commit != self.original_commit:
            print(f"Checking out commit {short_commit}...")
            self.checked_out = True
            self.repo.checkout(commit)

        if commit == self.original_commit and self.original_branch != DETACHED_HEAD:
            branch = self.original_branch
        else:
            branch = branch_label(short_commit, self.repo.remote_branches_containing(commit))

        print(f"Building commit {short_commit} from branch {branch}")
        return BuildTarget(
            requested=self.target_commit,
            commit=commit,
            short_commit=short_commit,
            branch=branch,
        )

    def restore(self) -> None:
        """Put the original branch and stashed changes back. Only the first call acts."""
        if self.restored:
            return
        self.restored = True

        if self.checked_out:
            original_ref = self.original_branch
            if original_ref == DETACHED_HEAD:
                original_ref = self.original_commit
            print(f"Returning to {original_ref}...")
            try:
                self.repo.checkout(original_ref)
            except BuildToolError as exc:
                warn(f"Could not check out {original_ref}: {exc}")

        if self.stashed:
            print("Restoring uncommitted changes...")
            try:
                self.repo.stash_pop()
            except BuildToolError as exc:
                warn(
                    f"Could not restore stashed changes: {exc}\n"
                    "Your changes are still saved in the stash. Recover them with:\n"
                    "  git stash list\n"
                    "  git stash pop --index"
                )
            else:
                print("Changes restored")

    def _cleanup(self) -> None:
        # Interrupts arriving during restore are held back until it finishes.
        blocked = self._block_signals()
        try:
            self.restore()
        finally:
            atexit.unregister(self.restore)
            received = self._unblock_signals(blocked)
            self._remove_handlers()
        if received:
            raise BuildInterrupted(f"Interrupted by {signal.Signals(received[0]).name}")

    def _block_signals(self) -> bool:
        # Only block when our handlers are active; pthread_sigmask is POSIX only.
        if not self._previous_handlers or not hasattr(signal, "pthread_sigmask"):
            return False
        signal.pthread_sigmask(signal.SIG_BLOCK, HANDLED_SIGNALS)
        return True

    def _unblock_signals(self, blocked: bool) -> list[int]:
        """Unblock handled signals, consuming and returning any that arrived meanwhile."""
        if not blocked:
            return []
        received = [signum for signum in HANDLED_SIGNALS if signum in signal.sigpending()]
        for signum in received:
            # The signal is pending, so this returns at once and clears it.
            signal.sigwait([signum])
        signal.pthread_sigmask(signal.SIG_UNBLOCK, HANDLED_SIGNALS)
        return received

    def _install_handlers(self) -> None:
        # Python only allows signal handlers in the main thread.
        if not self.install_signal_handlers:
            return
        if threading.current_thread() is not threading.main_thread():
            return
        for signum in HANDLED_SIGNALS:
            self._previous_handlers[signum] = signal.signal(signum, _raise_interrupted)

    def _remove_handlers(self) -> None:
        for signum, handler in self._previous_handlers.items():
            if handler is not None:
                signal.signal(signum, handler)
        self._previous_handlers.clear()
