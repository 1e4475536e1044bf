"""Template record locator.

Finds the ``*.json`` template records in one source directory without parsing
them. A missing or unreadable directory is not an error: the locator logs a
warning and returns nothing, so the catalog still loads from the remaining
sources.

Example:
    ```python
    from weaver.templates.locator import TemplateLocator

    for path in TemplateLocator().scan(Path("~/.config/weaver/templates")):
        print(path.name)
    ```
"""

from __future__ import annotations

from pathlib import Path

from weaver.logging import get_logger

__all__ = ["CUSTOMIZATIONS_FILENAME", "TemplateLocator"]

logger = get_logger(__name__)

# Lives next to the custom templates but is not a template record.
CUSTOMIZATIONS_FILENAME = "customizations.json"


class TemplateLocator:
    """Lists template record files in a directory.

    The scan is non-recursive and returns paths sorted by file name so that
    load order, and therefore duplicate-id resolution, is deterministic.
    """

    def scan(self, directory: Path) -> list[Path]:
        """Return the template record files in ``directory``.

        Args:
            directory: Source directory to scan.

        Returns:
            Sorted ``*.json`` files, excluding the customizations file. Empty
            when the directory does not exist or cannot be read.
        """
        if not directory.exists():
            logger.warning("template_source_missing", directory=str(directory))
            return []

        if not directory.is_dir():
            logger.warning("template_source_not_a_directory", directory=str(directory))
            return []

        try:
            records = sorted(
                path
                for path in directory.glob("*.json")
                if path.is_file() and path.name != CUSTOMIZATIONS_FILENAME
            )
        except OSError as e:
            logger.warning(
                "template_source_unreadable", directory=str(directory), error=str(e)
            )
            return []

        logger.debug("template_source_scanned", directory=str(directory), count=len(records))
        return records
