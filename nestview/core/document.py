"""
View descriptions

Serialized form of a view subtree. A description is plain data: building
live nodes from it is the serializer's job.

    name: outer
    type: nested
    default_view: jobs
    views:
      - name: jobs
        type: list
        include_regex: "E.*"
      - name: everything
        type: all
"""

import re
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ViewDescriptionBase(BaseModel):
    """
    Fields shared by every view description

    Must contain:
    - name: view name, unique among siblings
    - type: nested/list/all
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    type: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("View name must not be blank")
        if "/" in v:
            raise ValueError(f"View name must not contain '/': {v!r}")
        return v


class ListViewDescription(ViewDescriptionBase):
    """Items picked by name or by regular expression"""

    type: Literal["list"] = "list"
    jobs: List[str] = Field(default_factory=list)
    include_regex: Optional[str] = None

    @field_validator("include_regex")
    @classmethod
    def validate_regex(cls, v):
        if v is None:
            return v
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid include_regex {v!r}: {e}")
        return v


class AllViewDescription(ViewDescriptionBase):
    """Every item known to the host"""

    type: Literal["all"] = "all"


class NestedViewDescription(ViewDescriptionBase):
    """
    Nested view

    ``default_view`` may name a child that is not listed in ``views``.
    """

    type: Literal["nested"] = "nested"
    default_view: Optional[str] = None
    views: List[
        Annotated[
            Union["NestedViewDescription", ListViewDescription, AllViewDescription],
            Field(discriminator="type"),
        ]
    ] = Field(default_factory=list)

    @field_validator("views", mode="before")
    @classmethod
    def parse_views(cls, v):
        if v is None:
            return []
        if not isinstance(v, list):
            raise ValueError("views must be a list")
        return v

    @model_validator(mode="after")
    def check_unique_names(self):
        seen = set()
        for view in self.views:
            if view.name in seen:
                raise ValueError(
                    f"Duplicate view name {view.name!r} in nested view {self.name!r}"
                )
            seen.add(view.name)
        return self


NestedViewDescription.model_rebuild()

ViewDescription = Annotated[
    Union[NestedViewDescription, ListViewDescription, AllViewDescription],
    Field(discriminator="type"),
]

DESCRIPTION_TYPES = {
    "nested": NestedViewDescription,
    "list": ListViewDescription,
    "all": AllViewDescription,
}


def parse_description(data: Dict[str, Any]) -> ViewDescription:
    """Parse a view description from a dictionary"""
    if not isinstance(data, dict):
        raise ValueError(f"View description must be a mapping, got {type(data).__name__}")

    view_type = data.get("type")
    model = DESCRIPTION_TYPES.get(view_type)
    if model is None:
        raise ValueError(f"Unknown view type: {view_type}")
    return model(**data)
