"""Writing generated workflows to disk."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

from atomicwrites import atomic_write  # type: ignore[import-untyped]

from weaver.coordination.models import ConflictResolution, WorkflowGenerationResult
from weaver.exceptions import WorkflowWriteError
from weaver.logging import get_logger

__all__ = ["write_workflow_files"]

logger = get_logger(__name__)


def _free_filename(filename: str, taken: set[str]) -> str:
    path = Path(filename)
    n = 2
    while (candidate := f"{path.stem}-{n}{path.suffix}") in taken:
        n += 1
    return candidate


def write_workflow_files(
    results: Sequence[WorkflowGenerationResult],
    output_directory: Path,
    *,
    conflict_resolution: ConflictResolution = "merge",
    confirm: Callable[[Path], bool] | None = None,
) -> list[Path]:
    """Write each result to ``output_directory / result.filename``.

    Files are replaced atomically. ``conflict_resolution`` decides what
    happens when two results share a filename, or a file is already there:

    ========== ================================== ==========================
    Policy     Same filename within the batch     File already on disk
    ========== ================================== ==========================
    merge      later one renamed (``ci-2.yml``)   replaced
    override   later one replaces the earlier     replaced
    prompt     later one renamed (``ci-2.yml``)   replaced if ``confirm(path)``
    ========== ================================== ==========================

    A renamed result has its ``filename`` updated. Under ``prompt`` without a
    ``confirm`` callback, existing files are kept.

    Args:
        results: Generated workflows, in execution order.
        output_directory: Created if missing.
        conflict_resolution: One of ``merge``, ``override`` or ``prompt``.
        confirm: Asked once per existing file under ``prompt``.

    Returns:
        Paths that were written, in ``results`` order, without repeats.

    Raises:
        WorkflowWriteError: A file could not be written.
    """
    written: list[Path] = []
    taken: set[str] = set()

    for result in results:
        if result.filename in taken:
            if conflict_resolution == "override":
                logger.warning(
                    "workflow_filename_conflict",
                    filename=result.filename,
                    template_id=result.template_id,
                    resolution="override",
                )
            else:
                renamed = _free_filename(result.filename, taken)
                logger.warning(
                    "workflow_filename_conflict",
                    filename=result.filename,
                    template_id=result.template_id,
                    resolution="rename",
                    renamed_to=renamed,
                )
                result.filename = renamed

        taken.add(result.filename)
        path = output_directory / result.filename
        if (
            conflict_resolution == "prompt"
            and path.exists()
            and not (confirm is not None and confirm(path))
        ):
            logger.warning(
                "workflow_file_kept", path=str(path), template_id=result.template_id
            )
            continue

        try:
            output_directory.mkdir(parents=True, exist_ok=True)
            with atomic_write(str(path), mode="w", encoding="utf-8", overwrite=True) as f:
                f.write(result.content)
        except OSError as e:
            raise WorkflowWriteError(f"Failed to write {path}: {e}", path) from e

        logger.debug("workflow_written", path=str(path), template_id=result.template_id)
        if path not in written:
            written.append(path)

    return written
