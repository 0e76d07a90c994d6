#!/usr/bin/env python3
"""
bundle-backup: git bundle snapshots of registered projects.

Main entry point for the backup application.
"""

import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from bundle_backup import identity as identities
from bundle_backup.backup_manager import (
    BackupManager,
    format_backup_summary,
    format_result_line,
)
from bundle_backup.config import AppConfig, load_config
from bundle_backup.errors import ConfigurationError, InvalidInvocationError, StoreError
from bundle_backup.options import (
    ACTION_ADD,
    ACTION_LIST,
    ACTION_REMOVE,
    RuntimeOptions,
    guess_working_path,
    parse_arguments,
)
from bundle_backup.registry import Registry
from bundle_backup.schedule_checker import ScheduleChecker

LOGGER_NAME = "bundle_backup"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(message)s"


def setup_logging(config: AppConfig, cli_mode: bool = False) -> logging.Logger:
    """Set up logging configuration."""
    log_file_path = Path(config.log_file)
    log_dir = log_file_path.parent
    log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(config.log_level)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)

    file_handler = logging.handlers.RotatingFileHandler(
        log_file_path, maxBytes=1024 * 1024, backupCount=5, encoding="utf-8"
    )
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if cli_mode:
        # In CLI mode, log to both console and file
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        console_handler.setLevel(logging.WARNING)
        logger.addHandler(console_handler)

    return logger


def add_project(
    registry: Registry,
    options: RuntimeOptions,
    config: AppConfig,
    logger: logging.Logger,
    working_path: str,
) -> int:
    """Register the working tree found in the current directory."""
    project = identities.create(options.project)
    if not project.known:
        project = identities.deduce_from_path(working_path)

    entry = registry.add(project, working_path)
    if entry is False:
        print(f"Project '{project}' is already registered, nothing to do")
        logger.info(f"Rejected duplicate project: {project}")
        return 0

    registry.save(config.registry_file)
    print(f"Added project '{entry.identity}'")
    print(f"  working path: {entry.working_path}")
    print(f"  backup path:  {entry.backup_path}")
    logger.info(f"Added project '{entry.identity}' from {entry.working_path}")
    return 0


def remove_project(
    registry: Registry, options: RuntimeOptions, config: AppConfig, logger: logging.Logger
) -> int:
    """Unregister a project by name."""
    project = identities.create(options.project)

    if not registry.remove(project):
        print(f"Project '{options.project}' is not registered, nothing to remove")
        logger.info(f"Rejected removal of unknown project: {options.project}")
        return 0

    registry.save(config.registry_file)
    print(f"Removed project '{project}'")
    logger.info(f"Removed project '{project}'")
    return 0


def run_dry_run_mode(backup_manager: BackupManager, registry: Registry, logger: logging.Logger) -> int:
    """Show what a run would do."""
    logger.info("Running in DRY RUN mode - no bundles will be written")

    if not registry.entries:
        print(registry.describe())
        return 0

    for entry, cmd in backup_manager.dry_run(registry.entries):
        print(f"{entry.identity}: (cd {entry.working_path} && {' '.join(cmd)})")

    return 0


def run_backups(
    registry: Registry, options: RuntimeOptions, config: AppConfig, logger: logging.Logger
) -> int:
    """Bundle every registered project."""
    start_time = datetime.now()

    if not (options.force or options.dry_run):
        if not ScheduleChecker.should_run(config.schedule, start_time):
            logger.info(
                f"Schedule '{config.schedule}' not due today, next run at "
                f"{ScheduleChecker.next_run_time(config.schedule, start_time)}"
            )
            return 0

    backup_manager = BackupManager(config, registry.root_directory)

    if options.dry_run:
        return run_dry_run_mode(backup_manager, registry, logger)

    logger.info(f"Registry loaded with {len(registry)} projects")
    if not registry.entries:
        logger.info("No projects registered, nothing to back up")
        return 0

    logger.info("Performing pre-flight checks...")
    preflight_errors = backup_manager.perform_preflight_checks(registry.entries)
    if preflight_errors:
        logger.critical("Pre-flight checks failed:")
        for error in preflight_errors:
            logger.critical(f"  - {error}")
            print(f"ERROR: {error}", file=sys.stderr)
        return 1

    results = backup_manager.run_all(registry.entries)
    for result in results:
        print(format_result_line(result))
        if not result.success and result.output:
            print(result.output)

    total_execution_time = (datetime.now() - start_time).total_seconds()
    logger.info("\n" + format_backup_summary(results, total_execution_time))

    if any(not result.success for result in results):
        logger.warning("Some backups failed - check logs for details")
        return 2

    logger.info("All backups completed successfully")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point."""
    start_time = datetime.now()
    logger = None

    try:
        # Parse command line arguments before touching the registry
        options = parse_arguments(argv)

        config = load_config(options.config_path)
        logger = setup_logging(config, cli_mode=options.interactive or sys.stdout.isatty())

        working_path = None
        if options.action == ACTION_ADD:
            # Fail on a non-git directory before loading anything
            working_path = guess_working_path()

        registry = Registry.load_or_create(config.registry_file, config.default_backup_root)

        if options.action == ACTION_ADD:
            return add_project(registry, options, config, logger, working_path)
        if options.action == ACTION_REMOVE:
            return remove_project(registry, options, config, logger)
        if options.action == ACTION_LIST:
            print(registry.describe())
            return 0

        logger.info("Starting bundle-backup run")
        return run_backups(registry, options, config, logger)

    except InvalidInvocationError as e:
        error_msg = f"Invalid invocation: {e}"
        print(f"ERROR: {error_msg}", file=sys.stderr)
        if logger:
            logger.error(error_msg)
        return 1

    except ConfigurationError as e:
        error_msg = f"Configuration error: {e}"
        print(f"ERROR: {error_msg}", file=sys.stderr)
        if logger:
            logger.critical(error_msg)
        return 1

    except StoreError as e:
        error_msg = f"Project store error: {e}"
        print(f"ERROR: {error_msg}", file=sys.stderr)
        if logger:
            logger.critical(error_msg)
        return 1

    except KeyboardInterrupt:
        error_msg = "Backup process interrupted by user"
        print(f"\nINTERRUPTED: {error_msg}", file=sys.stderr)
        if logger:
            logger.warning(error_msg)
        return 130

    except Exception as e:
        error_msg = f"Unexpected error: {e}"
        print(f"ERROR: {error_msg}", file=sys.stderr)
        if logger:
            logger.critical(error_msg, exc_info=True)
        return 1

    finally:
        if logger:
            total_time = (datetime.now() - start_time).total_seconds()
            logger.debug(f"bundle-backup completed in {total_time:.2f} seconds")


if __name__ == "__main__":
    exit_code = main()
    sys.exit(exit_code)
