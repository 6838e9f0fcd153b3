"""
CMIS type and property definitions.

Represents the JSON documents returned by the ``typeDefinition`` and
``typeChildren`` selectors.  They are read-only descriptors; callers use
them to learn which properties a type declares.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from cmisbrowser.protocol.types import PropertyKind


@dataclass
class PropertyDefinition:
    """A property declared by a CMIS type.

    Attributes:
        id: Property id, e.g. ``"cmis:name"``.
        property_type: The PropertyKind the values of this property have.
        wire_type: The property type as the server spells it
            (``"integer"``, ``"html"`` ...).
        cardinality: ``"single"`` or ``"multi"``.
        updatability: ``"readonly"``, ``"readwrite"``, ``"whencheckedout"``
            or ``"oncreate"``.
    """

    id: str
    property_type: PropertyKind = PropertyKind.STRING
    wire_type: str = "string"
    local_name: str | None = None
    display_name: str | None = None
    query_name: str | None = None
    description: str | None = None
    cardinality: str = "single"
    updatability: str = "readonly"
    inherited: bool = False
    required: bool = False
    queryable: bool = False
    orderable: bool = False
    choices: list = field(default_factory=list)

    @classmethod
    def from_json(cls, data: dict) -> PropertyDefinition:
        wire_type = data.get("propertyType", "string")
        return cls(
            id=data["id"],
            property_type=PropertyKind.from_wire_type(wire_type),
            wire_type=wire_type,
            local_name=data.get("localName"),
            display_name=data.get("displayName"),
            query_name=data.get("queryName"),
            description=data.get("description"),
            cardinality=data.get("cardinality", "single"),
            updatability=data.get("updatability", "readonly"),
            inherited=data.get("inherited", False),
            required=data.get("required", False),
            queryable=data.get("queryable", False),
            orderable=data.get("orderable", False),
            choices=data.get("choice", []),
        )

    @property
    def multivalued(self) -> bool:
        return self.cardinality == "multi"

    @property
    def updatable(self) -> bool:
        return self.updatability in ("readwrite", "oncreate")


@dataclass
class TypeDefinition:
    """A CMIS object type.

    Attributes:
        id: Type id, e.g. ``"cmis:document"`` or ``"my:invoice"``.
        base_id: The base type id, one of the five CMIS base types.
        parent_id: The type this one derives from, None for base types.
        property_definitions: property id -> PropertyDefinition, in the
            order the server listed them.
    """

    id: str
    base_id: str
    parent_id: str | None = None
    local_name: str | None = None
    display_name: str | None = None
    query_name: str | None = None
    description: str | None = None
    creatable: bool = False
    fileable: bool = False
    queryable: bool = False
    property_definitions: dict[str, PropertyDefinition] = field(default_factory=dict)
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_json(cls, data: dict) -> TypeDefinition:
        """Construct a TypeDefinition from the JSON type document.

        Unknown keys are ignored; they remain available through ``raw``.
        """
        return cls(
            id=data["id"],
            base_id=data["baseId"],
            parent_id=data.get("parentId"),
            local_name=data.get("localName"),
            display_name=data.get("displayName"),
            query_name=data.get("queryName"),
            description=data.get("description"),
            creatable=data.get("creatable", False),
            fileable=data.get("fileable", False),
            queryable=data.get("queryable", False),
            property_definitions={
                pid: PropertyDefinition.from_json(pdef)
                for pid, pdef in (data.get("propertyDefinitions") or {}).items()
            },
            raw=data,
        )

    def property_kind(self, property_id: str) -> PropertyKind | None:
        pdef = self.property_definitions.get(property_id)
        return pdef.property_type if pdef else None
