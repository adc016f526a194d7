"""
app/main.py -- Application entry point.

Configures logging, creates the Qt application object and the recovery
services, validates any character files given on the command line (backing
up the valid ones), then shuts the services down.

Usage::

    python -m app.main [--storage-dir DIR] [character.json ...]
    # or, once installed
    character-recovery character.json
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import traceback

# Ensure project root is on sys.path
_THIS_DIR = os.path.dirname(os.path.abspath(__file__))
_PROJECT_ROOT = os.path.dirname(_THIS_DIR)
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from app.logging_setup import setup_logging
from app.paths import get_storage_dir
from app.services.recovery_service import RecoveryService
from app.services.validation_service import (
    CharacterValidationService,
    EnhancedValidationResult,
    ValidationContext,
)

logger = logging.getLogger("app")


def _global_exception_hook(exc_type, exc_value, exc_tb):
    """Last-resort handler for uncaught exceptions."""
    logger.critical(
        "Uncaught exception: %s",
        "".join(traceback.format_exception(exc_type, exc_value, exc_tb)),
    )


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="character-recovery",
        description="Validate character drafts and keep recovery backups.",
    )
    parser.add_argument("files", nargs="*", help="character JSON files to validate")
    parser.add_argument("--storage-dir", default="", help="snapshot directory override")
    parser.add_argument("--user", default="local", help="user id recorded in the context")
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    return parser.parse_args(argv)


def bootstrap(storage_dir: str = "") -> tuple[RecoveryService, CharacterValidationService]:
    """Create the recovery service singleton and a validation service over it.

    A ``QCoreApplication`` must already exist.
    """
    service = RecoveryService.instance(storage_dir or get_storage_dir())
    validation = CharacterValidationService(service.recovery)
    return service, validation


def _report(path: str, result: EnhancedValidationResult) -> None:
    if result.success:
        logger.info("%s: valid", path)
        return
    logger.warning("%s: %d validation error(s)", path, len(result.errors))
    for error in result.errors:
        logger.warning("  %s: %s (%s)", error.field_path, error.message, error.suggested_fix)
    for suggestion in result.suggestions:
        logger.info("  suggestion: %s", suggestion)
    if result.auto_fixable:
        logger.info("  automatic fixes are available for this draft")


def validate_files(
    validation: CharacterValidationService,
    paths: list[str],
    user_id: str = "local",
) -> bool:
    """Validate each JSON file; returns True if every file is valid."""
    all_valid = True
    for path in paths:
        try:
            with open(path, "r", encoding="utf-8") as fh:
                draft = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Could not read %s: %s", path, exc)
            all_valid = False
            continue

        character_id = os.path.splitext(os.path.basename(path))[0]
        result = validation.validate_character_import(
            draft, ValidationContext(user_id, character_id),
        )
        _report(path, result)
        all_valid = all_valid and result.success
    return all_valid


def main(argv: list[str] | None = None) -> int:
    """Launch the character recovery host."""
    args = _parse_args(argv)
    setup_logging(logging.DEBUG if args.debug else logging.INFO)
    logger.info("Starting character recovery")

    # Install global exception hook
    sys.excepthook = _global_exception_hook

    # Must create the Qt application before any QObject
    from PySide6.QtCore import QCoreApplication
    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])

    service, validation = bootstrap(args.storage_dir)

    slot = service.recovery.get_auto_saved_data()
    if slot is not None:
        logger.info(
            "Unsaved draft from %s available (character=%s)",
            slot.timestamp.isoformat(), slot.character_id,
        )

    try:
        ok = validate_files(validation, args.files, args.user)
    finally:
        logger.info("Shutting down...")
        try:
            RecoveryService.reset()
            app.processEvents()
        except Exception:
            logger.exception("Error during recovery service shutdown")

    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
