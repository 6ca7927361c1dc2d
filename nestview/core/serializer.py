"""
View serializer

Turns view descriptions (YAML or JSON text, mappings, or description models)
into detached node subtrees, and live subtrees back into descriptions.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError as PydanticValidationError

from .document import (
    AllViewDescription,
    ListViewDescription,
    NestedViewDescription,
    ViewDescription,
    ViewDescriptionBase,
    parse_description,
)
from .nodes import CompositeNode, ContainerNode, LeafNode, ViewKind
from .work_items import AllItemsSource, FilteredItemsSource, ItemCatalog
from ..exceptions.errors import InvalidDescriptionError


class Serializer:
    """
    Description loader and dumper

    Leaves are bound to ``catalog`` when they are materialized.
    """

    def __init__(
        self, catalog: Optional[ItemCatalog] = None, document_format: str = "yaml"
    ):
        self.catalog = catalog if catalog is not None else ItemCatalog()
        self.document_format = document_format

    # Loading

    def load(self, document: Any) -> ViewDescription:
        """
        Parse and validate a description

        Args:
            document: YAML/JSON text, bytes, a mapping, or a description model

        Raises:
            InvalidDescriptionError: unparseable or structurally invalid
        """
        if isinstance(document, ViewDescriptionBase):
            return document

        if isinstance(document, bytes):
            try:
                document = document.decode("utf-8")
            except UnicodeDecodeError as e:
                raise InvalidDescriptionError(
                    f"View description is not valid UTF-8: {e}", {"cause": str(e)}
                ) from e

        if isinstance(document, str):
            try:
                document = yaml.safe_load(document)
            except (yaml.YAMLError, RecursionError) as e:
                raise InvalidDescriptionError(
                    f"Cannot parse view description: {e}", {"cause": str(e)}
                ) from e

        try:
            return parse_description(document)
        except PydanticValidationError as e:
            raise InvalidDescriptionError(
                f"Invalid view description: {e.error_count()} error(s)",
                {"errors": e.errors(include_url=False, include_input=False)},
            ) from e
        except (ValueError, TypeError) as e:
            raise InvalidDescriptionError(
                f"Invalid view description: {e}", {"cause": str(e)}
            ) from e
        except RecursionError as e:
            raise InvalidDescriptionError(
                "View description refers to itself", {"cause": str(e)}
            ) from e

    def build(self, description: ViewDescription) -> ContainerNode:
        """Materialize a detached subtree from a validated description"""
        if isinstance(description, NestedViewDescription):
            return CompositeNode(
                description.name,
                children=[self.build(view) for view in description.views],
                default_child_name=description.default_view,
            )
        if isinstance(description, ListViewDescription):
            return LeafNode.list_view(
                description.name,
                self.catalog,
                jobs=description.jobs,
                include_regex=description.include_regex,
            )
        if isinstance(description, AllViewDescription):
            return LeafNode.all_view(description.name, self.catalog)
        raise InvalidDescriptionError(
            f"Unsupported description type: {type(description).__name__}"
        )

    def deserialize(self, document: Any) -> ContainerNode:
        """Load ``document`` and build a detached subtree from it"""
        return self.build(self.load(document))

    def read(self, path: Union[str, Path]) -> ContainerNode:
        """Build a subtree from a description file"""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"View description not found: {path}")
        return self.deserialize(path.read_text(encoding="utf-8"))

    # Dumping

    def describe(self, node: ContainerNode) -> ViewDescription:
        """
        Description of a live subtree

        Raises:
            ValueError: the subtree holds a leaf with a custom source
        """
        if isinstance(node, CompositeNode):
            return NestedViewDescription(
                name=node.name,
                default_view=node.default_child_name,
                views=[self.describe(child) for child in node.list_children()],
            )
        if node.kind == ViewKind.LIST:
            source: FilteredItemsSource = node.source
            return ListViewDescription(
                name=node.name,
                jobs=sorted(source.names),
                include_regex=source.include_regex,
            )
        if node.kind == ViewKind.ALL and isinstance(node.source, AllItemsSource):
            return AllViewDescription(name=node.name)
        raise ValueError(f"View {node.full_name!r} has no serializable description")

    def to_dict(self, node: ContainerNode) -> Dict[str, Any]:
        return self.describe(node).model_dump(exclude_none=True)

    def serialize(self, node: ContainerNode, fmt: Optional[str] = None) -> str:
        """Description text of ``node`` in YAML (default) or JSON"""
        fmt = fmt or self.document_format
        data = self.to_dict(node)
        if fmt == "json":
            return json.dumps(data, indent=2)
        if fmt == "yaml":
            return yaml.safe_dump(data, sort_keys=False)
        raise ValueError(f"Unsupported document format: {fmt}")

    def save(self, node: ContainerNode, path: Union[str, Path]) -> Path:
        """Write the description of ``node``; format follows the suffix"""
        path = Path(path)
        fmt = "json" if path.suffix.lower() == ".json" else "yaml"
        path.write_text(self.serialize(node, fmt), encoding="utf-8")
        return path
