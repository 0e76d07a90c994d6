"""Core backup functionality: one git bundle per registered project."""

import logging
import subprocess
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from .config import AppConfig
from .registry import Entry


class BundleResult:
    """Result of a bundle operation."""

    def __init__(
        self,
        project: str,
        working_path: str,
        backup_path: str,
        success: bool,
        output: str = "",
        error_message: str = "",
        return_code: Optional[int] = None,
        execution_time: float = 0.0,
    ):
        self.project = project
        self.working_path = working_path
        self.backup_path = backup_path
        self.success = success
        self.output = output
        self.error_message = error_message
        self.return_code = return_code
        self.execution_time = execution_time


def bundle_command(backup_path: str) -> List[str]:
    """Command line that snapshots every ref of a repository into a bundle."""
    return ["git", "bundle", "create", backup_path, "--all"]


def format_backup_summary(results: List[BundleResult], total_execution_time: float) -> str:
    """Format bundle results into a readable summary."""
    summary = []
    summary.append("=== Git Bundle Backup Summary ===\n")

    successful_count = sum(1 for r in results if r.success)
    failed_count = len(results) - successful_count

    summary.append(f"Total projects processed: {len(results)}")
    summary.append(f"Successful: {successful_count}")
    summary.append(f"Failed: {failed_count}")
    summary.append(f"Total execution time: {total_execution_time:.2f} seconds")
    summary.append("")

    summary.append("=== Individual Project Results ===")
    for result in results:
        status = "SUCCESS" if result.success else "FAILED"
        summary.append(f"\n[{status}] {result.project}")
        summary.append(f"  Working path: {result.working_path}")
        summary.append(f"  Bundle: {result.backup_path}")
        summary.append(f"  Execution time: {result.execution_time:.2f} seconds")
        if not result.success:
            summary.append(f"  Error: {result.error_message}")

    return "\n".join(summary)


def format_result_line(result: BundleResult) -> str:
    """One-line status for a project, as printed after each run."""
    if result.success:
        return f"OK      {result.project} -> {result.backup_path}"
    return f"FAILED  {result.project}: {result.error_message}"


class GitBundler:
    """Handles git operations and validations."""

    def __init__(self, timeout: int = 3600):
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def validate_git_installation(self) -> bool:
        """Check if git is installed and accessible."""
        try:
            result = subprocess.run(
                ["git", "--version"],
                capture_output=True,
                text=True,
                timeout=30,
            )
            return result.returncode == 0
        except (subprocess.TimeoutExpired, FileNotFoundError, subprocess.SubprocessError):
            return False

    def create_bundle(
        self, working_path: str, backup_path: str
    ) -> Tuple[bool, str, str, Optional[int]]:
        """
        Write a bundle of the repository at working_path.

        Returns:
            Tuple of (success, output, error_message, return_code)
        """
        cmd = bundle_command(backup_path)
        self.logger.info(f"Running git command in {working_path}: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                cwd=working_path,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            error_msg = f"git bundle timed out after {self.timeout} seconds"
            self.logger.error(error_msg)
            return False, "", error_msg, None
        except (OSError, subprocess.SubprocessError) as e:
            error_msg = f"git bundle subprocess error: {e}"
            self.logger.error(error_msg)
            return False, "", error_msg, None

        # git bundle reports progress on stderr even when it succeeds
        output = "\n".join(part for part in (result.stdout, result.stderr) if part).strip()
        if result.returncode == 0:
            return True, output, "", result.returncode

        error_msg = f"git bundle failed with exit code {result.returncode}: {output}"
        self.logger.error(error_msg)
        return False, output, error_msg, result.returncode


class BackupManager:
    """Main backup management class."""

    def __init__(self, config: AppConfig, root_directory: str, bundler: Optional[GitBundler] = None):
        self.config = config
        self.root_directory = root_directory
        self.bundler = bundler or GitBundler(timeout=config.bundle_timeout)
        self.logger = logging.getLogger(__name__)

    def validate_destination(self) -> bool:
        """Check if the backup root directory is writable."""
        if not self.root_directory:
            self.logger.error("No backup root directory configured")
            return False
        try:
            root = Path(self.root_directory)
            root.mkdir(parents=True, exist_ok=True)

            test_file = root / ".write_test"
            test_file.write_text("test")
            test_file.unlink()

            return True
        except OSError as e:
            self.logger.error(f"Backup root not writable: {e}")
            return False

    def perform_preflight_checks(self, entries: List[Entry]) -> List[str]:
        """
        Perform pre-flight checks before starting backups.

        Returns:
            List of error messages (empty if all checks pass)
        """
        errors = []

        if not self.bundler.validate_git_installation():
            errors.append("git is not installed or not accessible")
            return errors

        if entries and not self.validate_destination():
            errors.append(
                f"Backup root not accessible or writable: {self.root_directory or '(unset)'}"
            )

        return errors

    def create_backup(self, entry: Entry) -> BundleResult:
        """Create a single project bundle."""
        start_time = datetime.now()
        project = str(entry.identity)
        self.logger.info(f"Starting backup: {project}")

        try:
            working_tree = Path(entry.working_path)
            if not working_tree.is_dir():
                success, output, error_message, return_code = (
                    False, "", f"Working path does not exist: {entry.working_path}", None
                )
            elif not (working_tree / ".git").exists():
                success, output, error_message, return_code = (
                    False, "", f"Not a git working tree: {entry.working_path}", None
                )
            else:
                Path(entry.backup_path).parent.mkdir(parents=True, exist_ok=True)
                success, output, error_message, return_code = self.bundler.create_bundle(
                    entry.working_path, entry.backup_path
                )

            execution_time = (datetime.now() - start_time).total_seconds()
            result = BundleResult(
                project=project,
                working_path=entry.working_path,
                backup_path=entry.backup_path,
                success=success,
                output=output,
                error_message=error_message,
                return_code=return_code,
                execution_time=execution_time,
            )

            if success:
                self.logger.info(
                    f"Backup '{project}' completed successfully in {execution_time:.2f}s"
                )
            else:
                self.logger.error(f"Backup '{project}' failed: {error_message}")

            return result

        except Exception as e:
            execution_time = (datetime.now() - start_time).total_seconds()
            error_message = f"Unexpected error during backup: {e}"
            self.logger.error(error_message)

            return BundleResult(
                project=project,
                working_path=entry.working_path,
                backup_path=entry.backup_path,
                success=False,
                error_message=error_message,
                execution_time=execution_time,
            )

    def run_all(self, entries: List[Entry]) -> List[BundleResult]:
        """Bundle every entry in order; a failed project never stops the batch."""
        results = []
        for entry in entries:
            results.append(self.create_backup(entry))
        return results

    def dry_run(self, entries: List[Entry]) -> List[Tuple[Entry, List[str]]]:
        """List the bundle command each entry would run, without running it."""
        planned = []
        for entry in entries:
            planned.append((entry, bundle_command(entry.backup_path)))
        self.logger.info(f"Dry run planned {len(planned)} bundle commands")
        return planned
