"""Git notes storage for documentation memories.

Wraps the ``git notes`` plumbing for a single notes namespace in the local
checkout. Notes live under ``refs/notes/<namespace>`` and are pushed to the
remote so they show up next to the commit.
"""

import logging
import os
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

BOT_NAME = "github-actions[bot]"
BOT_EMAIL = "github-actions[bot]@users.noreply.github.com"


@dataclass
class NoteRef:
    """One entry of ``git notes list``."""

    note_sha: str
    commit_sha: str


class GitNotesStore:
    """Read and write notes in one namespace of a local repository."""

    def __init__(
        self,
        namespace: str = "documentation/memories",
        repo_path: str | Path = ".",
        remote: str = "origin",
    ):
        self.namespace = namespace
        self.repo_path = Path(repo_path)
        self.remote = remote

    @property
    def ref(self) -> str:
        return f"refs/notes/{self.namespace}"

    def _git(self, *args: str) -> subprocess.CompletedProcess:
        """Run a git command in the repository without raising on failure."""
        return subprocess.run(
            ["git", *args],
            cwd=self.repo_path,
            capture_output=True,
            text=True,
            check=False,
        )

    @staticmethod
    def _output(result: subprocess.CompletedProcess) -> str:
        return ((result.stdout or "") + (result.stderr or "")).strip()

    def show(self, commit_sha: str) -> str | None:
        """Note attached to a commit, or None."""
        result = self._git("notes", f"--ref={self.namespace}", "show", commit_sha)
        if result.returncode != 0:
            return None
        return result.stdout

    def exists(self, commit_sha: str) -> bool:
        return self.show(commit_sha) is not None

    def list(self) -> list[NoteRef]:
        """All notes in the namespace."""
        result = self._git("notes", f"--ref={self.namespace}", "list")
        if result.returncode != 0:
            return []

        notes = []
        for line in result.stdout.splitlines():
            parts = line.strip().split()
            if len(parts) == 2:
                notes.append(NoteRef(note_sha=parts[0], commit_sha=parts[1]))
        return notes

    def configure_identity(self) -> None:
        """Set a local bot identity unless one is already configured."""
        user_name = self._git("config", "--local", "user.name").stdout.strip()
        user_email = self._git("config", "--local", "user.email").stdout.strip()

        if user_name and user_email:
            logger.info(f"✅ Git identity already configured: {user_name} <{user_email}>")
            return

        logger.info("🔧 Configuring git identity for GitHub Actions...")
        self._git("config", "--local", "user.name", BOT_NAME)
        self._git("config", "--local", "user.email", BOT_EMAIL)
        logger.info(f"✅ Git identity configured: {BOT_NAME} <{BOT_EMAIL}>")

    def fetch(self) -> bool:
        """Fetch remote notes. Missing remote notes are not an error."""
        result = self._git("fetch", self.remote, f"+{self.ref}:{self.ref}")
        if result.returncode == 0:
            logger.info("✅ Successfully fetched remote git notes")
            return True
        logger.info(f"ℹ️  No remote git notes to fetch (or fetch failed): {self._output(result)}")
        return False

    def commit_exists(self, commit_sha: str) -> bool:
        return self._git("cat-file", "-e", commit_sha).returncode == 0

    def add(self, commit_sha: str, content: str, force: bool = False) -> bool:
        """Attach ``content`` to a commit, overwriting when ``force`` is set."""
        fd, temp_path = tempfile.mkstemp(prefix=f"git_note_{commit_sha}_")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)

            args = ["notes", f"--ref={self.namespace}", "add"]
            if force:
                args.append("-f")
            args += ["-F", temp_path, commit_sha]
            result = self._git(*args)
        finally:
            os.unlink(temp_path)

        if result.returncode != 0:
            logger.warning(f"⚠️  Failed to store git note: {self._output(result)}")
            return False
        return True

    def push(self) -> bool:
        """Push the notes ref, forcing once if the remote moved ahead."""
        result = self._git("push", self.remote, self.ref)
        if result.returncode == 0:
            logger.info("✅ Successfully pushed git notes to remote")
            return True

        output = self._output(result)
        logger.warning(f"⚠️  Failed to push git notes to remote: {output}")

        if "rejected" in output and "fetch first" in output:
            logger.info("🔄 Attempting force push to resolve conflicts...")
            forced = self._git("push", "--force", self.remote, self.ref)
            if forced.returncode == 0:
                logger.info("✅ Successfully force-pushed git notes to remote")
                return True
            logger.warning(f"⚠️  Force push also failed: {self._output(forced)}")

        logger.info("ℹ️  Note is stored locally but may not be visible in GitHub UI")
        return False

    def store(self, commit_sha: str, content: str) -> bool:
        """Store a note for a commit and push it.

        Returns:
            True if the note was written locally. A failed push only logs a
            warning.
        """
        logger.info(f"📝 Creating git note in namespace: {self.namespace}")
        self.configure_identity()

        logger.info("🔄 Fetching remote git notes before creating new note...")
        self.fetch()

        if not self.commit_exists(commit_sha):
            logger.error(f"❌ Commit {commit_sha} does not exist")
            return False

        note_exists = self.exists(commit_sha)
        if note_exists:
            logger.info("ℹ️  Note already exists for commit, updating...")
        else:
            logger.info("📝 Creating new note...")

        if not self.add(commit_sha, content, force=note_exists):
            return False

        if not self.exists(commit_sha):
            logger.error("❌ Note verification failed")
            return False

        logger.info(f"✅ Successfully stored git note for commit {commit_sha}")
        logger.info(f"🔗 Retrieve via: git notes --ref={self.namespace} show {commit_sha}")

        self.push()
        return True
