import logging
from datetime import datetime
from typing import Any
from typing import ClassVar
from typing import Dict
from typing import List
from typing import Mapping
from typing import Optional
from typing import TYPE_CHECKING

from .protocol.types import ContentStream
from .protocol.types import PropertyKind
from .protocol.types import PropertyValue

if TYPE_CHECKING:
    from .repository import Repository

log = logging.getLogger("cmisbrowser")


"""
This file contains the CMISObject base class and its five variants,
Document, Folder, Item, Policy and Relationship.  Objects are either
*persisted* (built by the object factory from a server response, they
have an object id) or *detached* (built locally through
Repository.new_document() and friends, no object id yet).  A detached
object becomes persisted by a create operation, which returns a new
object.
"""


class CMISObject:
    """
    Base class for all CMIS objects.  Holds the property bag and a
    reference to the repository the object lives in; the repository is
    used to route operations only.
    """

    base_type_id: ClassVar[str] = ""
    create_action: ClassVar[Optional[str]] = None

    repository: Optional["Repository"] = None

    def __init__(
        self,
        repository: Optional["Repository"] = None,
        properties: Optional[Mapping[str, Any]] = None,
        raw: Optional[dict] = None,
    ) -> None:
        """
        Args:
          repository: The Repository the object belongs to
          properties: property id -> PropertyValue (or plain values,
            which will be tagged)
          raw: The JSON payload the object was built from, if any
        """
        self.repository = repository
        self.properties: Dict[str, PropertyValue] = {}
        for property_id, value in (properties or {}).items():
            self.properties[property_id] = PropertyValue.of(value)
        self.raw = raw or {}

    def __repr__(self) -> str:
        return "%s(%s)" % (self.__class__.__name__, self.object_id or "detached")

    def get_property(self, property_id: str, default=None):
        """The value of a property, or default if not set"""
        prop = self.properties.get(property_id)
        if prop is None:
            return default
        return prop.value

    def set_property(
        self, property_id: str, value, kind: Optional[PropertyKind] = None
    ) -> None:
        self.properties[property_id] = PropertyValue.of(value, kind)

    @property
    def detached(self) -> bool:
        return self.object_id is None

    @property
    def object_id(self) -> Optional[str]:
        return self.get_property("cmis:objectId")

    @property
    def object_type_id(self) -> Optional[str]:
        return self.get_property("cmis:objectTypeId")

    @object_type_id.setter
    def object_type_id(self, value: str) -> None:
        self.set_property("cmis:objectTypeId", value, PropertyKind.ID)

    @property
    def name(self) -> Optional[str]:
        return self.get_property("cmis:name")

    @name.setter
    def name(self, value: str) -> None:
        self.set_property("cmis:name", value, PropertyKind.STRING)

    @property
    def description(self) -> Optional[str]:
        return self.get_property("cmis:description")

    @description.setter
    def description(self, value: str) -> None:
        self.set_property("cmis:description", value, PropertyKind.STRING)

    @property
    def created_by(self) -> Optional[str]:
        return self.get_property("cmis:createdBy")

    @property
    def creation_date(self) -> Optional[datetime]:
        return self.get_property("cmis:creationDate")

    @property
    def last_modified_by(self) -> Optional[str]:
        return self.get_property("cmis:lastModifiedBy")

    @property
    def last_modification_date(self) -> Optional[datetime]:
        return self.get_property("cmis:lastModificationDate")

    @property
    def change_token(self) -> Optional[str]:
        return self.get_property("cmis:changeToken")

    def _require_repository(self) -> "Repository":
        if self.repository is None:
            raise ValueError("Unexpected value None for self.repository")
        return self.repository

    def _perform(self, required: Dict[str, Any], optional: Optional[Dict[str, Any]] = None):
        return self._require_repository().perform(required, optional)

    def _require_object_id(self) -> str:
        if self.object_id is None:
            raise ValueError(
                "%s is detached, create it on the server first" % self.__class__.__name__
            )
        return self.object_id

    def _object(self, raw: dict) -> "CMISObject":
        ## Late import to avoid circular imports
        from .object_factory import create_object

        return create_object(self.repository, raw)

    def _wire_properties(self) -> Dict[str, PropertyValue]:
        properties = dict(self.properties)
        properties.setdefault(
            "cmis:objectTypeId", PropertyValue(PropertyKind.ID, self.base_type_id)
        )
        return properties

    def create_in_folder(self, folder_id: str) -> "CMISObject":
        """
        Create this (detached) object on the server, filed in the
        folder with the given id.

        Returns:
            A new, persisted object as returned by the server
        """
        return self._object(
            self._perform(
                {
                    "cmisaction": self.create_action,
                    "objectId": folder_id,
                    "properties": self._wire_properties(),
                }
            )
        )

    def refresh(self) -> "CMISObject":
        """
        Reload the properties from the server
        """
        fresh = self._require_repository().object(self._require_object_id())
        self.properties = fresh.properties
        self.raw = fresh.raw
        return self

    def delete(self, all_versions: bool = True) -> None:
        """
        Delete the object on the server.  The local handle stays around,
        but any further request for the object id will fail with
        ObjectNotFound.
        """
        self._perform(
            {"cmisaction": "delete", "objectId": self._require_object_id()},
            {"allVersions": all_versions},
        )

    def update_properties(self, properties: Mapping[str, Any]) -> "CMISObject":
        """
        Update the given properties on the server.  The properties of
        this object are replaced with the ones the server returns.
        """
        result = self._perform(
            {
                "cmisaction": "update",
                "objectId": self._require_object_id(),
                "properties": properties,
            },
            {"changeToken": self.change_token},
        )
        if result:
            self.properties = self._object(result).properties
        return self

    def parents(self) -> List["CMISObject"]:
        """
        The folders this object is filed in
        """
        result = self._perform(
            {"cmisselector": "parents", "objectId": self._require_object_id()}
        )
        return [self._object(entry["object"]) for entry in result or []]

    def move(self, target_folder_id: str, source_folder_id: Optional[str] = None) -> "CMISObject":
        """
        Move the object from source folder to target folder.  The
        source folder defaults to the (only) parent of the object.
        """
        if source_folder_id is None:
            parents = self.parents()
            if len(parents) != 1:
                raise ValueError(
                    "source_folder_id is needed for objects filed in %i folders"
                    % len(parents)
                )
            source_folder_id = parents[0].object_id
        return self._object(
            self._perform(
                {
                    "cmisaction": "move",
                    "objectId": self._require_object_id(),
                    "targetFolderId": target_folder_id,
                    "sourceFolderId": source_folder_id,
                }
            )
        )


class Document(CMISObject):
    """
    A CMIS document.  A detached document may hold a staged content
    stream, which is uploaded together with the properties when the
    document is created.
    """

    base_type_id = "cmis:document"
    create_action = "createDocument"

    def __init__(self, *largs, **kwargs) -> None:
        super().__init__(*largs, **kwargs)
        self.content_stream: Optional[ContentStream] = None

    @property
    def content_stream_mime_type(self) -> Optional[str]:
        return self.get_property("cmis:contentStreamMimeType")

    @property
    def content_stream_file_name(self) -> Optional[str]:
        return self.get_property("cmis:contentStreamFileName")

    @property
    def content_stream_length(self) -> Optional[int]:
        return self.get_property("cmis:contentStreamLength")

    @property
    def content_stream_id(self) -> Optional[str]:
        return self.get_property("cmis:contentStreamId")

    def set_content(self, stream, mime_type: str, filename: Optional[str] = None) -> None:
        """
        Stage content on a detached document.

        Replacing the content of a persisted document is not supported.
        """
        if not self.detached:
            ## TODO: setContent on persisted documents, once the request
            ## shape (overwriteFlag, changeToken) is settled
            raise NotImplementedError(
                "set_content is only supported on detached documents"
            )
        self.content_stream = ContentStream(
            stream=stream, mime_type=mime_type, filename=filename
        )

    def content(self) -> Optional[bytes]:
        """
        The content stream as bytes.  For a detached document this is
        the staged content (None if nothing is staged), otherwise the
        content is fetched from the server.
        """
        if self.detached:
            if self.content_stream is None:
                return None
            return self.content_stream.read()
        return self._perform(
            {"cmisselector": "content", "objectId": self.object_id}
        )

    def create_in_folder(self, folder_id: str) -> "Document":
        """
        Create the document in the folder with the given id.  Staged
        content is sent along, in which case the request goes out as
        multipart/form-data.
        """
        return self._object(
            self._perform(
                {
                    "cmisaction": self.create_action,
                    "objectId": folder_id,
                    "properties": self._wire_properties(),
                },
                {"content": self.content_stream},
            )
        )


class Folder(CMISObject):
    base_type_id = "cmis:folder"
    create_action = "createFolder"

    @property
    def parent_id(self) -> Optional[str]:
        return self.get_property("cmis:parentId")

    @property
    def path(self) -> Optional[str]:
        return self.get_property("cmis:path")

    @property
    def is_root(self) -> bool:
        return self.object_id is not None and self.parent_id is None

    def children(
        self,
        max_items: Optional[int] = None,
        skip_count: Optional[int] = None,
        order_by: Optional[str] = None,
        include_relationships: Optional[str] = None,
        filter: Optional[str] = None,
    ) -> List[CMISObject]:
        """
        List the objects filed in this folder.

        Args:
          max_items: page size
          skip_count: number of children to skip
          order_by: e.g. "cmis:name ASC"
          include_relationships: none, source, target or both
          filter: comma separated list of property ids to return
        """
        result = self._perform(
            {"cmisselector": "children", "objectId": self._require_object_id()},
            {
                "maxItems": max_items,
                "skipCount": skip_count,
                "orderBy": order_by,
                "includeRelationships": include_relationships,
                "filter": filter,
            },
        )
        return [self._object(entry["object"]) for entry in result.get("objects", [])]

    def parent(self) -> Optional["Folder"]:
        """
        The parent folder, None for the root folder
        """
        if self.parent_id is None:
            return None
        return self._object(
            self._perform(
                {"cmisselector": "parent", "objectId": self._require_object_id()}
            )
        )

    def create(self, obj: CMISObject) -> CMISObject:
        """
        Create a detached object inside this folder
        """
        return obj.create_in_folder(self._require_object_id())

    def delete_tree(
        self,
        all_versions: bool = True,
        unfile_objects: Optional[str] = None,
        continue_on_failure: bool = False,
    ) -> List[str]:
        """
        Delete the folder and everything in it.

        Returns:
            The ids of the objects that could not be deleted
        """
        result = self._perform(
            {"cmisaction": "deleteTree", "objectId": self._require_object_id()},
            {
                "allVersions": all_versions,
                "unfileObjects": unfile_objects,
                "continueOnFailure": continue_on_failure,
            },
        )
        if isinstance(result, dict):
            return list(result.get("ids", []))
        return []


class Item(CMISObject):
    base_type_id = "cmis:item"
    create_action = "createItem"


class Policy(CMISObject):
    base_type_id = "cmis:policy"
    create_action = "createPolicy"

    @property
    def policy_text(self) -> Optional[str]:
        return self.get_property("cmis:policyText")

    @policy_text.setter
    def policy_text(self, value: str) -> None:
        self.set_property("cmis:policyText", value, PropertyKind.STRING)


class Relationship(CMISObject):
    """
    A relationship between a source and a target object.
    Relationships are not fileable, they are created with create()
    instead of create_in_folder().
    """

    base_type_id = "cmis:relationship"
    create_action = "createRelationship"

    @property
    def source_id(self) -> Optional[str]:
        return self.get_property("cmis:sourceId")

    @source_id.setter
    def source_id(self, value: str) -> None:
        self.set_property("cmis:sourceId", value, PropertyKind.ID)

    @property
    def target_id(self) -> Optional[str]:
        return self.get_property("cmis:targetId")

    @target_id.setter
    def target_id(self, value: str) -> None:
        self.set_property("cmis:targetId", value, PropertyKind.ID)

    def source(self) -> CMISObject:
        return self._require_repository().object(self.source_id)

    def target(self) -> CMISObject:
        return self._require_repository().object(self.target_id)

    def create(self) -> "Relationship":
        return self._object(
            self._perform(
                {
                    "cmisaction": self.create_action,
                    "properties": self._wire_properties(),
                }
            )
        )

    def create_in_folder(self, folder_id: str) -> "Relationship":
        raise ValueError("relationships are not fileable, use create()")
