"""
Maps raw object payloads onto the CMISObject variants.

The variant is picked from the ``cmis:baseTypeId`` property through a
closed table; there is one entry per CMIS base type and anything else
is rejected.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Optional

from cmisbrowser.cmisobject import CMISObject, Document, Folder, Item, Policy, Relationship
from cmisbrowser.lib import error
from cmisbrowser.protocol.types import PropertyKind, PropertyValue

if TYPE_CHECKING:
    from cmisbrowser.repository import Repository
    from cmisbrowser.typedefinition import TypeDefinition

OBJECT_CLASSES: Mapping[str, type[CMISObject]] = {
    "cmis:folder": Folder,
    "cmis:document": Document,
    "cmis:relationship": Relationship,
    "cmis:policy": Policy,
    "cmis:item": Item,
}

#: Kinds of the CMIS standard properties.  Succinct payloads carry bare
#: values, this is how their kind is known.
STANDARD_PROPERTY_KINDS: Mapping[str, PropertyKind] = {
    "cmis:objectId": PropertyKind.ID,
    "cmis:baseTypeId": PropertyKind.ID,
    "cmis:objectTypeId": PropertyKind.ID,
    "cmis:secondaryObjectTypeIds": PropertyKind.ID,
    "cmis:parentId": PropertyKind.ID,
    "cmis:allowedChildObjectTypeIds": PropertyKind.ID,
    "cmis:sourceId": PropertyKind.ID,
    "cmis:targetId": PropertyKind.ID,
    "cmis:contentStreamId": PropertyKind.ID,
    "cmis:versionSeriesId": PropertyKind.ID,
    "cmis:versionSeriesCheckedOutId": PropertyKind.ID,
    "cmis:policyId": PropertyKind.ID,
    "cmis:name": PropertyKind.STRING,
    "cmis:description": PropertyKind.STRING,
    "cmis:createdBy": PropertyKind.STRING,
    "cmis:lastModifiedBy": PropertyKind.STRING,
    "cmis:changeToken": PropertyKind.STRING,
    "cmis:path": PropertyKind.STRING,
    "cmis:policyText": PropertyKind.STRING,
    "cmis:contentStreamMimeType": PropertyKind.STRING,
    "cmis:contentStreamFileName": PropertyKind.STRING,
    "cmis:versionLabel": PropertyKind.STRING,
    "cmis:checkinComment": PropertyKind.STRING,
    "cmis:creationDate": PropertyKind.DATETIME,
    "cmis:lastModificationDate": PropertyKind.DATETIME,
    "cmis:contentStreamLength": PropertyKind.NUMBER,
    "cmis:isImmutable": PropertyKind.BOOLEAN,
    "cmis:isLatestVersion": PropertyKind.BOOLEAN,
    "cmis:isMajorVersion": PropertyKind.BOOLEAN,
    "cmis:isLatestMajorVersion": PropertyKind.BOOLEAN,
    "cmis:isPrivateWorkingCopy": PropertyKind.BOOLEAN,
    "cmis:isVersionSeriesCheckedOut": PropertyKind.BOOLEAN,
}


def decode_properties(
    raw: Mapping[str, Any], type_definition: Optional["TypeDefinition"] = None
) -> dict[str, PropertyValue]:
    """
    Decode the properties of an object payload, in payload order.

    Full payloads (``properties``) describe every property with its
    ``type`` and ``cardinality``.  Succinct payloads
    (``succinctProperties``) only carry the values; the kind then comes
    from STANDARD_PROPERTY_KINDS, from the type definition of the object
    type or, when neither knows the property, from the JSON type of the
    value.
    """
    properties: dict[str, PropertyValue] = {}
    if "succinctProperties" in raw:
        for property_id, value in (raw["succinctProperties"] or {}).items():
            kind = STANDARD_PROPERTY_KINDS.get(property_id)
            if kind is None and type_definition is not None:
                kind = type_definition.property_kind(property_id)
            if kind is None:
                properties[property_id] = PropertyValue.of(value)
            else:
                properties[property_id] = PropertyValue.from_wire(
                    kind, value, multivalued=isinstance(value, list)
                )
    else:
        for property_id, prop in (raw.get("properties") or {}).items():
            properties[property_id] = PropertyValue.from_wire(
                PropertyKind.from_wire_type(prop.get("type")),
                prop.get("value"),
                multivalued=prop.get("cardinality") == "multi",
            )
    return properties


def create_object(repository: Optional["Repository"], raw: Mapping[str, Any]) -> CMISObject:
    """
    Build the CMISObject variant matching the base type of a payload.

    Succinct payloads with non-standard properties need the type
    definition of the object type to decode them; it is looked up
    through the repository, which caches it.

    Args:
        repository: The Repository the object belongs to
        raw: The object payload as parsed from JSON

    Raises:
        UnsupportedTypeError: the base type id is not one of the five
            CMIS base types
    """
    type_definition = None
    object_type_id = _untyped_object_type_id(raw)
    if repository is not None and object_type_id is not None:
        type_definition = repository.cached_type_definition(object_type_id)
    properties = decode_properties(raw, type_definition)
    base_type = properties.get("cmis:baseTypeId")
    base_type_id = base_type.first if base_type is not None else None
    cls = OBJECT_CLASSES.get(base_type_id)
    if cls is None:
        raise error.UnsupportedTypeError(base_type_id)
    return cls(repository=repository, properties=properties, raw=dict(raw))


def _untyped_object_type_id(raw: Mapping[str, Any]) -> Optional[str]:
    """
    The object type id of a succinct payload carrying properties outside
    STANDARD_PROPERTY_KINDS, None if the payload decodes without it
    """
    succinct = raw.get("succinctProperties")
    if not succinct:
        return None
    if all(property_id in STANDARD_PROPERTY_KINDS for property_id in succinct):
        return None
    return succinct.get("cmis:objectTypeId")
