"""
Cross-Version Sanity Checker

Re-checks, independently of the Diff Engine, that all records of a class
are structurally equal. The Diff Engine should already have raised on any
real divergence, so a failure here means the verifier itself is wrong and
the run must stop.
"""

from collections.abc import Iterable

from codegraph_bytecode.errors import FatalInconsistency
from codegraph_bytecode.logging import get_logger
from codegraph_bytecode.models import BytecodeRecord

logger = get_logger(__name__)


def group_by_class(records: Iterable[BytecodeRecord]) -> dict[str | None, list[BytecodeRecord]]:
    """Group records by class name; groups and members keep first-seen order."""
    groups: dict[str | None, list[BytecodeRecord]] = {}
    for record in records:
        groups.setdefault(record.class_name, []).append(record)
    return groups


def sanity_check(records: Iterable[BytecodeRecord]) -> None:
    """
    Raise FatalInconsistency unless every class's records are pairwise equal.

    The equality flag is fused across all groups and evaluated once at the end.
    """
    all_equal = True
    for group in group_by_class(records).values():
        previous: BytecodeRecord | None = None
        for record in group:
            if previous is not None:
                all_equal &= previous.structurally_equals(record)
            previous = record

    if not all_equal:
        raise FatalInconsistency()


class CrossVersionSanityChecker:
    """sanity_check with logging around it."""

    def check(self, records: Iterable[BytecodeRecord]) -> None:
        records = list(records)
        logger.info("sanity_check_started", records=len(records))
        try:
            sanity_check(records)
        except FatalInconsistency:
            logger.error("sanity_check_failed", records=len(records))
            raise
        logger.info("sanity_check_passed", records=len(records))
