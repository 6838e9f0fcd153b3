"""
An in-memory CMIS browser binding server for the unit tests.

It implements the SyncIOProtocol, so it can be handed to CMISClient as
its transport.  Only the selectors and actions the tests need are
supported.  Every request is recorded in ``self.requests``.
"""

import json
import re
from typing import Any, Dict, List

from cmisbrowser.protocol.types import CMISRequest, CMISResponse

SERVICE_URL = "http://cmis.example/browser"
_PROPERTY_ID = re.compile(r"^propertyId\[(\d+)\]$")


class FakeCMISServer:
    def __init__(self, repository_ids=("test_document",)) -> None:
        self.requests: List[CMISRequest] = []
        self.repositories: Dict[str, Dict[str, Any]] = {}
        self.objects: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.contents: Dict[str, Dict[str, Any]] = {}
        self.types: Dict[str, Dict[str, Any]] = {
            "my:invoice": {
                "id": "my:invoice",
                "baseId": "cmis:document",
                "parentId": "cmis:document",
                "creatable": True,
                "fileable": True,
                "propertyDefinitions": {
                    "my:dueDate": {
                        "id": "my:dueDate",
                        "propertyType": "datetime",
                        "cardinality": "single",
                        "updatability": "readwrite",
                    },
                },
            },
        }
        self._next_id = 100
        for repository_id in repository_ids:
            self.add_repository(repository_id)

    def add_repository(self, repository_id: str) -> None:
        root_id = f"{repository_id}-root"
        self.repositories[repository_id] = {
            "repositoryId": repository_id,
            "repositoryName": f"{repository_id} repository",
            "repositoryDescription": "in-memory test repository",
            "productName": "FakeCMISServer",
            "cmisVersionSupported": "1.1",
            "rootFolderId": root_id,
            "repositoryUrl": f"{SERVICE_URL}/{repository_id}",
            "rootFolderUrl": f"{SERVICE_URL}/{repository_id}/root",
        }
        self.objects[repository_id] = {
            root_id: {
                "cmis:objectId": root_id,
                "cmis:baseTypeId": "cmis:folder",
                "cmis:objectTypeId": "cmis:folder",
                "cmis:name": "",
                "cmis:path": "/",
                "cmis:parentId": None,
                "cmis:creationDate": 1262304000000,
            }
        }

    def requests_to(self, url: str) -> List[CMISRequest]:
        return [r for r in self.requests if r.url == url]

    def close(self) -> None:
        pass

    def execute(self, request: CMISRequest) -> CMISResponse:
        self.requests.append(request)
        if request.url == SERVICE_URL:
            return self._json(self.repositories)

        repository_id = self._repository_for(request.url)
        if repository_id is None:
            return CMISResponse(status=404, content_type="text/html", body=b"<h1>Not Found</h1>")
        params = request.params
        if "cmisaction" in params:
            return self._action(repository_id, request)
        return self._selector(repository_id, params)

    def _repository_for(self, url: str):
        for repository_id, info in self.repositories.items():
            if url in (info["repositoryUrl"], info["rootFolderUrl"]):
                return repository_id
        return None

    def _json(self, data, status: int = 200) -> CMISResponse:
        return CMISResponse(
            status=status,
            content_type="application/json; charset=UTF-8",
            body=json.dumps(data).encode("utf-8"),
        )

    def _not_found(self, object_id) -> CMISResponse:
        return self._json(
            {"exception": "objectNotFound", "message": f"Object not found: {object_id}"},
            status=404,
        )

    def _payload(self, properties: Dict[str, Any], succinct: bool) -> Dict[str, Any]:
        if succinct:
            return {"succinctProperties": dict(properties)}
        types = {
            "cmis:creationDate": "datetime",
            "cmis:contentStreamLength": "integer",
        }
        return {
            "properties": {
                pid: {
                    "id": pid,
                    "type": types.get(pid, "id" if pid.endswith("Id") else "string"),
                    "cardinality": "single",
                    "value": value,
                }
                for pid, value in properties.items()
            }
        }

    def _selector(self, repository_id: str, params: Dict[str, Any]) -> CMISResponse:
        succinct = params.get("succinct") == "true"
        objects = self.objects[repository_id]
        selector = params.get("cmisselector")
        object_id = params.get("objectId")
        if selector == "repositoryInfo":
            return self._json({repository_id: self.repositories[repository_id]})
        if selector == "typeDefinition":
            type_id = params.get("typeId")
            if type_id not in self.types:
                return self._not_found(type_id)
            return self._json(self.types[type_id])
        if object_id is not None and object_id not in objects:
            return self._not_found(object_id)
        if selector == "object":
            return self._json(self._payload(objects[object_id], succinct))
        if selector == "content":
            content = self.contents.get(object_id)
            if content is None:
                return self._json(
                    {"exception": "constraint", "message": "Document has no content!"},
                    status=409,
                )
            return CMISResponse(
                status=200, content_type=content["mime_type"], body=content["data"]
            )
        if selector == "children":
            children = [
                {"object": self._payload(props, succinct)}
                for props in objects.values()
                if props.get("cmis:parentId") == object_id
            ]
            return self._json(
                {"objects": children, "hasMoreItems": False, "numItems": len(children)}
            )
        return self._json(
            {"exception": "notSupported", "message": f"selector {selector}"}, status=400
        )

    def _properties_from(self, params: Dict[str, Any]) -> Dict[str, Any]:
        properties = {}
        for key, value in params.items():
            m = _PROPERTY_ID.match(key)
            if m:
                properties[value] = params.get(f"propertyValue[{m.group(1)}]")
        return properties

    def _action(self, repository_id: str, request: CMISRequest) -> CMISResponse:
        params = request.params
        objects = self.objects[repository_id]
        action = params["cmisaction"]
        object_id = params.get("objectId")
        if object_id is not None and object_id not in objects:
            return self._not_found(object_id)

        if action in ("createDocument", "createFolder"):
            self._next_id += 1
            new_id = f"obj-{self._next_id}"
            properties = self._properties_from(params)
            properties.update(
                {
                    "cmis:objectId": new_id,
                    "cmis:baseTypeId": action.replace("create", "cmis:").lower(),
                    "cmis:parentId": object_id,
                    "cmis:creationDate": 1262304000000,
                }
            )
            if request.content is not None:
                data = request.content.read()
                self.contents[new_id] = {
                    "data": data,
                    "mime_type": request.content.mime_type,
                }
                properties.update(
                    {
                        "cmis:contentStreamMimeType": request.content.mime_type,
                        "cmis:contentStreamFileName": request.content.filename,
                        "cmis:contentStreamLength": len(data),
                    }
                )
            objects[new_id] = properties
            return self._json(
                self._payload(properties, params.get("succinct") == "true"), status=201
            )
        if action == "delete":
            del objects[object_id]
            self.contents.pop(object_id, None)
            return CMISResponse(status=200, content_type="", body=b"")
        return self._json(
            {"exception": "notSupported", "message": f"action {action}"}, status=400
        )
