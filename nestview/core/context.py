"""
Tree context

The top-level container of the view tree. It owns the top-level views and
the host's item catalog, and carries the serializer, aggregator and
reconciliation engine configured for this tree. Pass it around explicitly;
there is no global instance.
"""

from typing import Any, List, Optional

from .aggregator import StatusAggregator
from .nodes import ContainerNode
from .reconcile import ReconciliationEngine, ReconciliationResult
from .registry import ChildRegistry
from .serializer import Serializer
from .validation import ValidationResult
from .work_items import ItemCatalog, Outcome
from ..config import NestViewConfig, get_default_config
from ..exceptions.errors import NodeNotFoundError
from ..utils.logging import get_logger

logger = get_logger(__name__)


class TreeContext:
    """
    Root of a view tree

    Attributes:
        catalog: work items known to the host
        config: settings for aggregation and serialization
        registry: top-level views
    """

    owner = None
    url = ""
    full_name = ""

    def __init__(
        self,
        catalog: Optional[ItemCatalog] = None,
        config: Optional[NestViewConfig] = None,
    ):
        self.catalog = catalog if catalog is not None else ItemCatalog()
        self.config = config or get_default_config()
        self.registry = ChildRegistry(self)
        self.serializer = Serializer(self.catalog, self.config.document_format)
        self.aggregator = StatusAggregator(strict=self.config.strict_aggregation)
        self.engine = ReconciliationEngine(self.serializer)

    def add_view(self, view: ContainerNode) -> ContainerNode:
        return self.registry.add(view)

    def remove_view(self, name: str) -> Optional[ContainerNode]:
        return self.registry.remove(name)

    def get_view(self, name: str) -> Optional[ContainerNode]:
        return self.registry.get(name)

    def views(self) -> List[ContainerNode]:
        return self.registry.list()

    def check_name_available(
        self, candidate: Optional[str], excluding: Optional[str] = None
    ) -> ValidationResult:
        return self.registry.check_name_available(candidate, excluding)

    def find(self, path: str) -> Optional[ContainerNode]:
        """
        Look up a view by slash separated path, e.g. ``outer/inner``

        Returns None if any step is missing or passes through a leaf.
        """
        parts = [part for part in path.strip("/").split("/") if part]
        if not parts:
            return None

        node = self.get_view(parts[0])
        for part in parts[1:]:
            if node is None or not node.is_composite:
                return None
            node = node.get_child(part)
        return node

    def get_worst_result(self, path: str, strict: Optional[bool] = None) -> Optional[Outcome]:
        node = self.find(path)
        if node is None:
            raise NodeNotFoundError(f"No view at {path!r}", {"path": path})
        return self.aggregator.get_worst_result(node, strict=strict)

    def load_view(self, document: Any) -> ContainerNode:
        """Create a top-level view from a description"""
        view = self.serializer.deserialize(document)
        self.add_view(view)
        logger.info("view_loaded", view=view.name, kind=view.kind.value)
        return view

    def reload_view(self, path: str, document: Any) -> ReconciliationResult:
        """Replace the view at ``path`` with the one ``document`` describes"""
        node = self.find(path)
        if node is None:
            raise NodeNotFoundError(f"No view at {path!r}", {"path": path})
        return self.engine.replace_from_description(node, document)

    def describe_view(self, path: str, fmt: Optional[str] = None) -> str:
        """Description text of the view at ``path``"""
        node = self.find(path)
        if node is None:
            raise NodeNotFoundError(f"No view at {path!r}", {"path": path})
        return self.serializer.serialize(node, fmt)
