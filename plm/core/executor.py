"""Execution of file operations with per-target aggregation."""
import logging
from typing import Dict, List, Sequence, Tuple

from plm.core.fs import FileSystem
from plm.models.operation import (
    AffectedTargets,
    FileOperation,
    OperationKind,
    OperationResult,
    TargetId,
)

logger = logging.getLogger(__name__)


def group_by_target(
    operations: Sequence[Tuple[TargetId, FileOperation]]
) -> Dict[TargetId, List[FileOperation]]:
    """Group operations per target, keeping first-seen target order."""
    groups: Dict[TargetId, List[FileOperation]] = {}
    for target, operation in operations:
        groups.setdefault(target, []).append(operation)
    return groups


def run_operation(operation: FileOperation, fs: FileSystem) -> None:
    """
    Perform one file operation.

    Copies overwrite existing files; removals of missing paths succeed.

    Raises:
        OSError: If the filesystem call fails
    """
    logger.debug("Executing %s", operation.describe())
    if operation.kind == OperationKind.COPY_FILE:
        fs.copy_file(operation.source, operation.target)
    elif operation.kind == OperationKind.COPY_DIR:
        fs.copy_dir(operation.source, operation.target)
    elif operation.kind == OperationKind.REMOVE_FILE:
        fs.remove_file(operation.target)
    elif operation.kind == OperationKind.REMOVE_DIR:
        fs.remove_dir_all(operation.target)
    else:
        raise ValueError(f"Unknown operation kind: {operation.kind}")


def execute_operations(
    operations: Sequence[Tuple[TargetId, FileOperation]],
    fs: FileSystem
) -> OperationResult:
    """
    Execute operations target by target.

    Within a target, the first failure stops that target's remaining
    operations; other targets still run.

    Args:
        operations: ``(target_id, operation)`` pairs, as from PluginIntent.expand
        fs: Filesystem to act on

    Returns:
        OperationResult, successful iff no target failed
    """
    affected = AffectedTargets()
    for target, group in group_by_target(operations).items():
        completed = 0
        try:
            for operation in group:
                run_operation(operation, fs)
                completed += 1
        except OSError as e:
            logger.warning("%s failed after %d operations: %s", target, completed, e)
            affected.record_error(target, str(e))
            continue
        affected.record_success(target, completed)
    return affected.into_result()
