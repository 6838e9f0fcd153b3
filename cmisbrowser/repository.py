import logging
from typing import Any
from typing import Dict
from typing import List
from typing import Mapping
from typing import Optional
from typing import TYPE_CHECKING

from .cmisobject import CMISObject
from .cmisobject import Document
from .cmisobject import Folder
from .cmisobject import Item
from .cmisobject import Policy
from .cmisobject import Relationship
from .lib import error
from .object_factory import create_object
from .typedefinition import TypeDefinition

if TYPE_CHECKING:
    from .cmisclient import CMISClient

log = logging.getLogger("cmisbrowser")

_MISSING = object()


class Repository:
    """
    A CMIS repository, as listed by the service root.

    Operations on the repository and on its objects are routed through
    the client, with the repository id added to the request.
    """

    def __init__(self, client: "CMISClient", info: Mapping[str, Any]) -> None:
        """
        Args:
          client: The CMISClient the repository was found through
          info: The repository info mapping from the service root
        """
        self.client = client
        self.info = dict(info)
        self.id: str = self.info["repositoryId"]

    def __repr__(self) -> str:
        return "Repository(%s)" % self.id

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Repository) and other.id == self.id and other.client is self.client

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def name(self) -> Optional[str]:
        return self.info.get("repositoryName")

    @property
    def description(self) -> Optional[str]:
        return self.info.get("repositoryDescription")

    @property
    def root_folder_id(self) -> Optional[str]:
        return self.info.get("rootFolderId")

    @property
    def product_name(self) -> Optional[str]:
        return self.info.get("productName")

    @property
    def cmis_version_supported(self) -> Optional[str]:
        return self.info.get("cmisVersionSupported")

    def perform(
        self, required: Dict[str, Any], optional: Optional[Dict[str, Any]] = None
    ):
        """
        Send a request for this repository, see CMISClient.perform_request
        """
        params = {"repositoryId": self.id}
        params.update(required)
        return self.client.perform_request(params, optional)

    def object(
        self,
        object_id: str,
        filter: Optional[str] = None,
        include_relationships: Optional[str] = None,
    ) -> CMISObject:
        """
        Fetch an object by id.

        Raises ObjectNotFound if the server does not know the id.
        """
        return create_object(
            self,
            self.perform(
                {"cmisselector": "object", "objectId": object_id},
                {"filter": filter, "includeRelationships": include_relationships},
            ),
        )

    def root(self) -> Folder:
        """
        The root folder
        """
        return self.object(self.root_folder_id)

    def type_definition(self, type_id: str) -> TypeDefinition:
        return TypeDefinition.from_json(
            self.perform({"cmisselector": "typeDefinition", "typeId": type_id})
        )

    def cached_type_definition(self, type_id: str) -> Optional[TypeDefinition]:
        """
        The type definition of type_id, fetched once and then served
        from the client's type definition cache.  None if the server
        does not know the type.
        """
        key = (self.id, type_id)
        type_definition = self.client.type_definitions.get(key, _MISSING)
        if type_definition is not _MISSING:
            return type_definition
        try:
            type_definition = self.type_definition(type_id)
        except error.ObjectNotFound:
            log.warning(
                "type %s not found in repository %s, property kinds are guessed"
                % (type_id, self.id)
            )
            type_definition = None
        self.client.type_definitions.put(key, type_definition)
        return type_definition

    def type_children(
        self, type_id: Optional[str] = None, include_property_definitions: bool = False
    ) -> List[TypeDefinition]:
        """
        The types directly derived from type_id, or the base types if
        type_id is None
        """
        result = self.perform(
            {
                "cmisselector": "typeChildren",
                "includePropertyDefinitions": include_property_definitions,
            },
            {"typeId": type_id},
        )
        return [TypeDefinition.from_json(t) for t in result.get("types", [])]

    def new_document(self) -> Document:
        return Document(self)

    def new_folder(self) -> Folder:
        return Folder(self)

    def new_item(self) -> Item:
        return Item(self)

    def new_policy(self) -> Policy:
        return Policy(self)

    def new_relationship(self) -> Relationship:
        return Relationship(self)

    def create_relationship(self, relationship: Relationship) -> Relationship:
        return relationship.create()
