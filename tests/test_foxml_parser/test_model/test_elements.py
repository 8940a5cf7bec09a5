"""Tests for the Digital Object Model node types."""

import pickle
from datetime import datetime, timezone

import pytest

from foxml_parser.errors import FinalizedNodeError
from foxml_parser.model import (
    BinaryContent,
    ContentMetadata,
    Datastream,
    DatastreamVersion,
    DigitalObject,
    GenericElement,
    ObjectProperties,
    ObjectProperty,
    default_registry,
    foxml_tag,
    parse_foxml_datetime,
)
from foxml_parser.model.elements import PROPERTY_CREATED, PROPERTY_STATE


def finalized(node):
    node.finalize()
    return node


class TestParseFoxmlDatetime:
    """Test Fedora timestamp conversion."""

    def test_utc_with_milliseconds(self) -> None:
        assert parse_foxml_datetime("2012-05-17T14:33:21.123Z") == datetime(
            2012, 5, 17, 14, 33, 21, 123000, tzinfo=timezone.utc
        )

    def test_short_fraction_is_padded(self) -> None:
        parsed = parse_foxml_datetime("2012-05-17T14:33:21.1Z")
        assert parsed is not None
        assert parsed.microsecond == 100000

    def test_without_fraction_or_zone(self) -> None:
        parsed = parse_foxml_datetime("2012-05-17T14:33:21")
        assert parsed == datetime(2012, 5, 17, 14, 33, 21, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "yesterday", "2012-13-45T00:00:00Z"])
    def test_unparseable_values_return_none(self, value) -> None:
        assert parse_foxml_datetime(value) is None


class TestElementNode:
    """Test the uniform append/finalize contract."""

    def test_text_segments_are_concatenated(self) -> None:
        node = GenericElement("title")
        node.append_text("Café ")
        node.append_text("au ")
        node.append_text("lait")
        node.finalize()

        assert node.text == "Café au lait"

    def test_whitespace_only_text_is_discarded(self) -> None:
        node = GenericElement("wrapper")
        node.append_text("\n    ")
        node.finalize()

        assert node.text == ""

    def test_whitespace_kept_when_requested(self) -> None:
        node = GenericElement("wrapper")
        node.append_text("  ")
        node.finalize(discard_whitespace=False)

        assert node.text == "  "

    def test_finalized_node_rejects_mutation(self) -> None:
        node = finalized(GenericElement("leaf"))

        with pytest.raises(FinalizedNodeError):
            node.append_text("late")
        with pytest.raises(FinalizedNodeError):
            node.append_child("x", finalized(GenericElement("x")))
        with pytest.raises(FinalizedNodeError):
            node.text = "changed"
        with pytest.raises(FinalizedNodeError):
            node.finalize()

    def test_children_must_be_finalized_before_attaching(self) -> None:
        parent = GenericElement("parent")
        with pytest.raises(ValueError, match="must be finalized"):
            parent.append_child("child", GenericElement("child"))

    def test_empty_tag_rejected(self) -> None:
        with pytest.raises(ValueError, match="Element tag cannot be empty"):
            GenericElement("")

    def test_local_name_and_namespace(self) -> None:
        node = GenericElement("{http://purl.org/dc/elements/1.1/}title")
        assert node.local_name == "title"
        assert node.namespace == "http://purl.org/dc/elements/1.1/"
        assert GenericElement("plain").namespace is None

    def test_generic_label_is_tag(self) -> None:
        assert GenericElement("{urn:x}thing").label == "{urn:x}thing"

    def test_find_and_iter_follow_document_order(self) -> None:
        first = finalized(GenericElement("item"))
        inner = GenericElement("group")
        second = finalized(GenericElement("item"))
        inner.append_child("item", second)
        inner.finalize()
        root = GenericElement("root")
        root.append_child("item", first)
        root.append_child("group", inner)
        root.finalize()

        assert root.find("item") is first
        assert [node.tag for node in root.iter()] == ["root", "item", "group", "item"]
        assert root.find_children("item") == [first]

    def test_finalized_attributes_are_read_only(self) -> None:
        node = finalized(GenericElement("leaf", {"a": "1"}))

        with pytest.raises(TypeError):
            node.attributes["a"] = "2"  # type: ignore[index]
        with pytest.raises(TypeError):
            del node.attributes["a"]  # type: ignore[attr-defined]
        assert node.get("a") == "1"

    def test_attributes_stay_writable_until_finalized(self) -> None:
        source = {"a": "1"}
        node = GenericElement("leaf", source)
        node.attributes["b"] = "2"  # type: ignore[index]
        node.finalize()

        assert dict(node.attributes) == {"a": "1", "b": "2"}
        assert source == {"a": "1"}

    def test_finalized_nodes_survive_pickling(self) -> None:
        node = GenericElement("leaf", {"a": "1"})
        node.append_text("value")
        node.finalize()

        restored = pickle.loads(pickle.dumps(node))

        assert restored.to_dict() == node.to_dict()
        assert restored.is_finalized
        with pytest.raises(FinalizedNodeError):
            restored.append_text("more")


class TestFoxmlVariants:
    """Test typed conversions of the FOXML variants."""

    def test_object_properties_collect_values(self) -> None:
        properties = ObjectProperties(ObjectProperties.TAG)
        for name, value in [
            (PROPERTY_STATE, "Active"),
            (PROPERTY_CREATED, "2012-05-17T14:33:21.100Z"),
        ]:
            prop = finalized(ObjectProperty(ObjectProperty.TAG, {"NAME": name, "VALUE": value}))
            properties.append_child(prop.label, prop)
        properties.finalize()

        assert properties.state == "Active"
        assert properties.get_property(PROPERTY_STATE) == "Active"
        assert properties.created_date == datetime(
            2012, 5, 17, 14, 33, 21, 100000, tzinfo=timezone.utc
        )
        assert properties.last_modified_date is None

    def test_datastream_version_typed_attributes(self) -> None:
        version = DatastreamVersion(DatastreamVersion.TAG, {
            "ID": "OBJ.0",
            "CREATED": "2013-06-01T00:00:00.000Z",
            "SIZE": "42",
            "ALT_IDS": "urn:a urn:b",
            "MIMETYPE": "image/tiff",
        })
        version.finalize()

        assert version.id == "OBJ.0"
        assert version.size == 42
        assert version.alt_ids == ("urn:a", "urn:b")
        assert version.mimetype == "image/tiff"
        assert version.created is not None and version.created.year == 2013

    def test_datastream_version_bad_size_is_none(self) -> None:
        version = finalized(DatastreamVersion(DatastreamVersion.TAG, {"SIZE": "lots"}))
        assert version.size is None

    def test_datastream_collects_versions_in_order(self) -> None:
        datastream = Datastream(Datastream.TAG, {"ID": "OBJ", "VERSIONABLE": "false"})
        for version_id in ("OBJ.0", "OBJ.1", "OBJ.2"):
            version = finalized(DatastreamVersion(DatastreamVersion.TAG, {"ID": version_id}))
            datastream.append_child(version.label, version)
        datastream.finalize()

        assert [v.id for v in datastream.versions] == ["OBJ.0", "OBJ.1", "OBJ.2"]
        assert datastream.latest.id == "OBJ.2"
        assert datastream.versionable is False

    def test_binary_content_strips_line_breaks_and_decodes(self) -> None:
        content = BinaryContent(BinaryContent.TAG)
        content.append_text("\n  aGVsbG8g\n  d29ybGQ=\n")
        content.finalize()

        assert content.text == "aGVsbG8gd29ybGQ="
        assert content.decode() == b"hello world"

    def test_content_metadata_keeps_payload_opaque(self) -> None:
        payload = GenericElement("{urn:dc}dc")
        payload.append_text("raw & verbatim")
        payload.finalize()
        content = ContentMetadata(ContentMetadata.TAG)
        content.append_child(payload.label, payload)
        content.finalize()

        assert content.root is payload
        assert content.root.text == "raw & verbatim"

    def test_digital_object_lookup_by_datastream_id(self) -> None:
        obj = DigitalObject(DigitalObject.TAG, {"PID": "demo:1"})
        for ds_id in ("DC", "OBJ"):
            datastream = finalized(Datastream(Datastream.TAG, {"ID": ds_id}))
            obj.append_child(datastream.label, datastream)
        obj.finalize()

        assert obj.pid == "demo:1"
        assert len(obj) == 2
        assert "DC" in obj
        assert obj["OBJ"].id == "OBJ"
        assert obj.datastream("MISSING") is None
        with pytest.raises(KeyError):
            obj["MISSING"]
        assert obj.datastream_ids == ["DC", "OBJ"]


class TestElementRegistry:
    """Test the tag to constructor table."""

    def test_default_registry_maps_foxml_tags(self) -> None:
        registry = default_registry()

        assert isinstance(registry.create(foxml_tag("digitalObject"), {}), DigitalObject)
        assert isinstance(registry.create(foxml_tag("datastream"), {}), Datastream)
        assert isinstance(registry.create(foxml_tag("xmlContent"), {}), ContentMetadata)

    def test_unknown_tag_falls_back_to_generic(self) -> None:
        node = default_registry().create("{urn:custom}extension", {"a": "b"})

        assert type(node) is GenericElement
        assert node.attributes == {"a": "b"}

    def test_register_adds_entry(self) -> None:
        registry = default_registry()
        registry.register("{urn:custom}extension", Datastream)

        assert "{urn:custom}extension" in registry
        assert isinstance(registry.create("{urn:custom}extension", {}), Datastream)

    def test_copy_is_independent(self) -> None:
        registry = default_registry()
        clone = registry.copy()
        clone.register("{urn:x}y", Datastream)

        assert not registry.is_registered("{urn:x}y")
        assert len(clone) == len(registry) + 1

    def test_register_types_requires_tag(self) -> None:
        with pytest.raises(ValueError, match="does not declare a TAG"):
            default_registry().register_types([GenericElement])


class TestFinalizedGraph:
    """Test that a finished object graph cannot be changed in place."""

    def build_object(self) -> DigitalObject:
        properties = ObjectProperties(ObjectProperties.TAG)
        prop = finalized(ObjectProperty(ObjectProperty.TAG, {"NAME": PROPERTY_STATE, "VALUE": "Active"}))
        properties.append_child(prop.label, prop)
        properties.finalize()

        obj = DigitalObject(DigitalObject.TAG, {"PID": "demo:1"})
        obj.append_child(properties.label, properties)
        datastream = finalized(Datastream(Datastream.TAG, {"ID": "DC"}))
        obj.append_child(datastream.label, datastream)
        obj.finalize()
        return obj

    def test_property_values_are_read_only(self) -> None:
        obj = self.build_object()

        with pytest.raises(TypeError):
            obj.properties.values[PROPERTY_STATE] = "Deleted"  # type: ignore[index]
        assert obj.properties.state == "Active"

    def test_datastream_index_is_read_only(self) -> None:
        obj = self.build_object()

        with pytest.raises(TypeError):
            obj._datastream_index["X"] = obj["DC"]  # type: ignore[index]
        assert "X" not in obj

    def test_pid_cannot_be_rewritten(self) -> None:
        obj = self.build_object()

        with pytest.raises(TypeError):
            obj.attributes["PID"] = "other:9"  # type: ignore[index]
        assert obj.pid == "demo:1"

    def test_read_only_mappings_survive_pickling(self) -> None:
        restored = pickle.loads(pickle.dumps(self.build_object()))

        assert restored.pid == "demo:1"
        assert restored.properties.state == "Active"
        assert restored["DC"] is restored.datastreams[0]
        with pytest.raises(TypeError):
            restored.attributes["PID"] = "other:9"  # type: ignore[index]
        with pytest.raises(TypeError):
            restored.properties.values[PROPERTY_STATE] = "Deleted"  # type: ignore[index]

    def test_object_without_datastreams_is_truthy(self) -> None:
        obj = finalized(DigitalObject(DigitalObject.TAG, {"PID": "empty:1"}))

        assert len(obj) == 0
        assert obj
