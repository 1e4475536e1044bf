"""Template selection for one workflow configuration."""

from __future__ import annotations

from collections.abc import Sequence

from weaver.coordination.models import WorkflowConfiguration
from weaver.exceptions import TemplateNotFoundError
from weaver.logging import get_logger
from weaver.templates.store import TemplateStore

__all__ = ["TemplateSelector"]

logger = get_logger(__name__)


class TemplateSelector:
    """Picks the best template for each workflow type of a configuration.

    For every requested type, in order, the candidates of that type are ranked
    by usage count (most used first; ties keep candidate order) and only the
    top one is taken. A type without any candidate is skipped.
    """

    def __init__(self, store: TemplateStore) -> None:
        self._store = store

    def select(
        self,
        config: WorkflowConfiguration,
        candidate_ids: Sequence[str],
    ) -> list[str]:
        """Return the selected template ids, at most one per workflow type.

        Unknown candidate ids are ignored. The same id is never returned twice.
        """
        known = [cid for cid in dict.fromkeys(candidate_ids) if self._store.has(cid)]
        selected: list[str] = []

        for workflow_type in config.workflow_types:
            matching = []
            for cid in known:
                try:
                    template = self._store.get(cid)
                except TemplateNotFoundError:
                    continue
                if template.type is workflow_type and cid not in selected:
                    matching.append(template)

            if not matching:
                logger.debug(
                    "no_template_for_type",
                    workflow_type=workflow_type.value,
                    candidates=len(known),
                )
                continue

            # sorted() is stable: equal usage keeps candidate order.
            best = sorted(matching, key=lambda t: -t.usage)[0]
            selected.append(best.id)

        return selected
