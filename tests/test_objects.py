from datetime import datetime
from datetime import timezone
from unittest import mock

import pytest

from cmisbrowser.cmisobject import Document
from cmisbrowser.cmisobject import Folder
from cmisbrowser.cmisobject import Item
from cmisbrowser.cmisobject import Policy
from cmisbrowser.cmisobject import Relationship
from cmisbrowser.lib import error
from cmisbrowser.object_factory import create_object
from cmisbrowser.object_factory import decode_properties
from cmisbrowser.protocol import ContentStream
from cmisbrowser.protocol import PropertyKind
from cmisbrowser.typedefinition import TypeDefinition


def succinct(base_type_id, **extra):
    props = {"cmis:objectId": "abc", "cmis:baseTypeId": base_type_id}
    props.update(extra)
    return {"succinctProperties": props}


class TestObjectFactory:
    @pytest.mark.parametrize(
        "base_type_id,cls",
        [
            ("cmis:folder", Folder),
            ("cmis:document", Document),
            ("cmis:relationship", Relationship),
            ("cmis:policy", Policy),
            ("cmis:item", Item),
        ],
    )
    def test_dispatch(self, base_type_id, cls):
        repository = mock.MagicMock()
        obj = create_object(repository, succinct(base_type_id))
        assert type(obj) is cls
        assert obj.base_type_id == base_type_id
        assert obj.repository is repository
        assert obj.object_id == "abc"

    def test_unknown_base_type(self):
        with pytest.raises(error.UnsupportedTypeError) as excinfo:
            create_object(None, succinct("cmis:secondary"))
        assert excinfo.value.base_type_id == "cmis:secondary"

    def test_missing_base_type(self):
        with pytest.raises(error.UnsupportedTypeError):
            create_object(None, {"succinctProperties": {"cmis:objectId": "abc"}})

    def test_full_properties(self):
        raw = {
            "properties": {
                "cmis:objectId": {"type": "id", "cardinality": "single", "value": "abc"},
                "cmis:baseTypeId": {
                    "type": "id",
                    "cardinality": "single",
                    "value": "cmis:document",
                },
                "cmis:creationDate": {
                    "type": "datetime",
                    "cardinality": "single",
                    "value": 1262304000000,
                },
                "my:tags": {
                    "type": "string",
                    "cardinality": "multi",
                    "value": ["a", "b"],
                },
                "my:size": {"type": "integer", "cardinality": "single", "value": 7},
            }
        }
        doc = create_object(None, raw)
        assert isinstance(doc, Document)
        assert doc.creation_date == datetime(2010, 1, 1, tzinfo=timezone.utc)
        assert doc.properties["my:tags"].multivalued
        assert doc.get_property("my:tags") == ["a", "b"]
        assert doc.properties["my:size"].kind is PropertyKind.NUMBER
        assert list(doc.properties) == [
            "cmis:objectId",
            "cmis:baseTypeId",
            "cmis:creationDate",
            "my:tags",
            "my:size",
        ]

    def test_succinct_standard_properties(self):
        props = decode_properties(
            succinct(
                "cmis:document",
                **{
                    "cmis:lastModificationDate": 1262304000000,
                    "cmis:contentStreamLength": 8,
                    "cmis:secondaryObjectTypeIds": ["x:aspect"],
                },
            )
        )
        assert props["cmis:lastModificationDate"].value == datetime(
            2010, 1, 1, tzinfo=timezone.utc
        )
        assert props["cmis:contentStreamLength"].kind is PropertyKind.NUMBER
        assert props["cmis:secondaryObjectTypeIds"].multivalued
        assert props["cmis:objectId"].kind is PropertyKind.ID


    def test_succinct_custom_datetime_uses_type_definition(self):
        repository = mock.MagicMock()
        repository.cached_type_definition.return_value = TypeDefinition.from_json(
            {
                "id": "my:invoice",
                "baseId": "cmis:document",
                "propertyDefinitions": {
                    "my:dueDate": {
                        "id": "my:dueDate",
                        "propertyType": "datetime",
                        "cardinality": "single",
                    },
                },
            }
        )
        doc = create_object(
            repository,
            succinct(
                "cmis:document",
                **{"cmis:objectTypeId": "my:invoice", "my:dueDate": 1262304000000},
            ),
        )
        repository.cached_type_definition.assert_called_once_with("my:invoice")
        assert doc.properties["my:dueDate"].kind is PropertyKind.DATETIME
        assert doc.get_property("my:dueDate") == datetime(2010, 1, 1, tzinfo=timezone.utc)

    def test_standard_properties_need_no_type_definition(self):
        repository = mock.MagicMock()
        create_object(
            repository,
            succinct("cmis:document", **{"cmis:objectTypeId": "my:invoice"}),
        )
        repository.cached_type_definition.assert_not_called()

    def test_succinct_custom_without_type_definition(self):
        props = decode_properties(
            succinct("cmis:document", **{"my:dueDate": 1262304000000})
        )
        assert props["my:dueDate"].kind is PropertyKind.NUMBER
        assert props["my:dueDate"].value == 1262304000000


class TestDetachedObjects:
    def test_properties_are_tagged(self):
        doc = Document(None)
        doc.name = "doc1"
        doc.object_type_id = "cmis:document"
        assert doc.detached
        assert doc.properties["cmis:objectTypeId"].kind is PropertyKind.ID
        assert doc.properties["cmis:name"].kind is PropertyKind.STRING
        assert repr(doc) == "Document(detached)"

    def test_staged_content(self):
        doc = Document(None)
        doc.set_content(b"content1", "text/plain", "doc1.txt")
        assert doc.content_stream == ContentStream(b"content1", "text/plain", "doc1.txt")
        assert doc.content() == b"content1"

    def test_no_staged_content(self):
        assert Document(None).content() is None

    def test_set_content_on_persisted_document(self):
        doc = create_object(None, succinct("cmis:document"))
        with pytest.raises(NotImplementedError):
            doc.set_content(b"content3", "text/plain", "doc3.txt")

    def test_operations_need_object_id(self):
        folder = Folder(mock.MagicMock())
        with pytest.raises(ValueError):
            folder.children()
        with pytest.raises(ValueError):
            folder.delete()

    def test_operations_need_repository(self):
        doc = create_object(None, succinct("cmis:document"))
        with pytest.raises(ValueError):
            doc.refresh()
        rel = Relationship(None)
        rel.source_id = "a"
        rel.target_id = "b"
        with pytest.raises(ValueError):
            rel.source()
        with pytest.raises(ValueError):
            rel.target()

    def test_relationships_are_not_fileable(self):
        with pytest.raises(ValueError):
            Relationship(mock.MagicMock()).create_in_folder("folder")

    def test_relationship_ends(self):
        rel = Relationship(None)
        rel.source_id = "a"
        rel.target_id = "b"
        assert rel.properties["cmis:sourceId"].kind is PropertyKind.ID
        assert (rel.source_id, rel.target_id) == ("a", "b")


class TestObjectOperations:
    def test_create_in_folder_request(self):
        repository = mock.MagicMock()
        repository.perform.return_value = succinct("cmis:document", **{"cmis:name": "doc1"})
        doc = Document(repository)
        doc.name = "doc1"
        doc.set_content(b"content1", "text/plain", "doc1.txt")
        created = doc.create_in_folder("root-id")

        required, optional = repository.perform.call_args.args
        assert required["cmisaction"] == "createDocument"
        assert required["objectId"] == "root-id"
        assert list(required["properties"]) == ["cmis:name", "cmis:objectTypeId"]
        assert required["properties"]["cmis:objectTypeId"].value == "cmis:document"
        assert optional["content"] is doc.content_stream
        assert isinstance(created, Document)
        assert created.name == "doc1"
        assert not created.detached

    def test_folder_children(self):
        repository = mock.MagicMock()
        repository.perform.return_value = {
            "objects": [
                {"object": succinct("cmis:document")},
                {"object": succinct("cmis:folder")},
            ],
            "hasMoreItems": False,
        }
        folder = create_object(repository, succinct("cmis:folder"))
        children = folder.children(max_items=10)
        assert [type(c) for c in children] == [Document, Folder]
        required, optional = repository.perform.call_args.args
        assert required == {"cmisselector": "children", "objectId": "abc"}
        assert optional["maxItems"] == 10

    def test_root_folder_has_no_parent(self):
        repository = mock.MagicMock()
        folder = create_object(repository, succinct("cmis:folder"))
        assert folder.is_root
        assert folder.parent() is None
        repository.perform.assert_not_called()

    def test_delete_tree_failed_ids(self):
        repository = mock.MagicMock()
        repository.perform.return_value = {"ids": ["x1"]}
        folder = create_object(repository, succinct("cmis:folder", **{"cmis:parentId": "p"}))
        assert folder.delete_tree(unfile_objects="delete") == ["x1"]
        required, optional = repository.perform.call_args.args
        assert required["cmisaction"] == "deleteTree"
        assert optional["unfileObjects"] == "delete"

    def test_update_properties(self):
        repository = mock.MagicMock()
        repository.perform.return_value = succinct("cmis:document", **{"cmis:name": "renamed"})
        doc = create_object(
            repository, succinct("cmis:document", **{"cmis:changeToken": "t1"})
        )
        assert doc.update_properties({"cmis:name": "renamed"}) is doc
        assert doc.name == "renamed"
        required, optional = repository.perform.call_args.args
        assert required["cmisaction"] == "update"
        assert optional == {"changeToken": "t1"}

    def test_move_uses_single_parent(self):
        repository = mock.MagicMock()
        repository.perform.side_effect = [
            [{"object": succinct("cmis:folder", **{"cmis:objectId": "src"})}],
            succinct("cmis:document"),
        ]
        doc = create_object(repository, succinct("cmis:document"))
        moved = doc.move("dst")
        assert isinstance(moved, Document)
        required, _ = repository.perform.call_args.args
        assert required["sourceFolderId"] == "src"
        assert required["targetFolderId"] == "dst"


class TestTypeDefinition:
    def test_from_json(self):
        data = {
            "id": "my:invoice",
            "baseId": "cmis:document",
            "parentId": "cmis:document",
            "displayName": "Invoice",
            "creatable": True,
            "fileable": True,
            "propertyDefinitions": {
                "my:amount": {
                    "id": "my:amount",
                    "propertyType": "decimal",
                    "cardinality": "single",
                    "updatability": "readwrite",
                    "required": True,
                },
                "my:tags": {
                    "id": "my:tags",
                    "propertyType": "string",
                    "cardinality": "multi",
                },
            },
        }
        tdef = TypeDefinition.from_json(data)
        assert tdef.base_id == "cmis:document"
        assert tdef.creatable
        assert tdef.property_kind("my:amount") is PropertyKind.NUMBER
        assert tdef.property_definitions["my:amount"].updatable
        assert tdef.property_definitions["my:amount"].required
        assert tdef.property_definitions["my:tags"].multivalued
        assert tdef.property_kind("nope") is None
