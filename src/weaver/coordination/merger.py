"""Reapplication of saved customizations to generated workflows.

Customizations are a text patch, not a structured YAML rewrite: the block of a
top-level key is replaced wholesale by ``key: <JSON value>``. JSON scalars,
lists and objects are all valid YAML flow syntax, so the result still parses.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Sequence

from weaver.coordination.models import WorkflowGenerationResult
from weaver.logging import get_logger
from weaver.templates.models import TemplateCustomization

__all__ = ["CustomizationMerger", "key_region_pattern"]

logger = get_logger(__name__)


def key_region_pattern(key: str) -> re.Pattern[str]:
    """Match a top-level ``key:`` line and its indented continuation.

    The region ends before the next line that starts with a non-whitespace
    character, or at the end of the content (a final newline is kept).
    """
    return re.compile(
        rf"^{re.escape(key)}:.*?(?=\n\S|\n?\Z)",
        re.MULTILINE | re.DOTALL,
    )


class CustomizationMerger:
    """Applies ``preserve_on_update`` customizations to results in place."""

    def apply(
        self,
        result: WorkflowGenerationResult,
        customization: TemplateCustomization | None,
    ) -> WorkflowGenerationResult:
        """Patch ``result.content`` with the preserved keys of ``customization``.

        Never raises: a key missing from the content or a value JSON cannot
        encode leaves the content as it was and adds a warning.
        """
        if customization is None or customization.template_id != result.template_id:
            return result

        preserved = set(customization.preserve_on_update)
        for key, value in customization.customizations.items():
            if key not in preserved:
                continue

            try:
                encoded = json.dumps(value)
            except (TypeError, ValueError) as e:
                result.warnings.append(
                    f"{result.template_id}: customization '{key}' could not be "
                    f"serialized: {e}"
                )
                continue

            content, count = key_region_pattern(key).subn(
                lambda _: f"{key}: {encoded}", result.content, count=1
            )
            if not count:
                result.warnings.append(
                    f"{result.template_id}: customization key '{key}' not found "
                    "in workflow content"
                )
                continue

            result.content = content
            result.customized = True

        if result.customized:
            logger.debug(
                "customizations_applied",
                template_id=result.template_id,
                keys=sorted(preserved & customization.customizations.keys()),
            )
        return result

    def apply_all(
        self,
        results: Sequence[WorkflowGenerationResult],
        customizations: Iterable[TemplateCustomization],
    ) -> list[WorkflowGenerationResult]:
        """Apply to each result the customization recorded for its template."""
        by_template = {c.template_id: c for c in customizations}
        return [self.apply(r, by_template.get(r.template_id)) for r in results]
