"""Shared FOXML fixtures."""

from pathlib import Path
from typing import Callable

import pytest

SAMPLE_FOXML = """<?xml version="1.0" encoding="UTF-8"?>
<foxml:digitalObject VERSION="1.1" PID="demo:1"
    xmlns:foxml="info:fedora/fedora-system:def/foxml#"
    xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
    xsi:schemaLocation="info:fedora/fedora-system:def/foxml# http://www.fedora.info/definitions/1/0/foxml1-1.xsd">
  <foxml:objectProperties>
    <foxml:property NAME="info:fedora/fedora-system:def/model#state" VALUE="Active"/>
    <foxml:property NAME="info:fedora/fedora-system:def/model#label" VALUE="Café photograph"/>
    <foxml:property NAME="info:fedora/fedora-system:def/model#ownerId" VALUE="fedoraAdmin"/>
    <foxml:property NAME="info:fedora/fedora-system:def/model#createdDate" VALUE="2012-05-17T14:33:21.1Z"/>
    <foxml:property NAME="info:fedora/fedora-system:def/view#lastModifiedDate" VALUE="2014-01-02T03:04:05.678Z"/>
  </foxml:objectProperties>
  <foxml:datastream ID="DC" STATE="A" CONTROL_GROUP="X" VERSIONABLE="true">
    <foxml:datastreamVersion ID="DC.0" LABEL="Dublin Core Record" CREATED="2012-05-17T14:33:21.100Z" MIMETYPE="text/xml" FORMAT_URI="http://www.openarchives.org/OAI/2.0/oai_dc/" SIZE="412">
      <foxml:contentDigest TYPE="MD5" DIGEST="0f343b0931126a20f133d67c2b018a3b"/>
      <foxml:xmlContent>
        <oai_dc:dc xmlns:oai_dc="http://www.openarchives.org/OAI/2.0/oai_dc/" xmlns:dc="http://purl.org/dc/elements/1.1/">
          <dc:title>Café &amp; street, 1923</dc:title>
          <dc:identifier>demo:1</dc:identifier>
        </oai_dc:dc>
      </foxml:xmlContent>
    </foxml:datastreamVersion>
  </foxml:datastream>
  <foxml:datastream ID="RELS-EXT" STATE="A" CONTROL_GROUP="X" VERSIONABLE="false">
    <foxml:datastreamVersion ID="RELS-EXT.0" LABEL="Relationships" CREATED="2012-05-17T14:33:21.200Z" MIMETYPE="application/rdf+xml">
      <foxml:xmlContent>
        <rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#" xmlns:fedora-model="info:fedora/fedora-system:def/model#">
          <rdf:Description rdf:about="info:fedora/demo:1">
            <fedora-model:hasModel rdf:resource="info:fedora/islandora:sp_basic_image"/>
          </rdf:Description>
        </rdf:RDF>
      </foxml:xmlContent>
    </foxml:datastreamVersion>
  </foxml:datastream>
  <foxml:datastream ID="OBJ" STATE="A" CONTROL_GROUP="M" VERSIONABLE="true">
    <foxml:datastreamVersion ID="OBJ.0" LABEL="first.txt" CREATED="2012-05-17T14:33:22Z" MIMETYPE="text/plain" SIZE="11">
      <foxml:binaryContent>
        aGVsbG8g
        d29ybGQ=
      </foxml:binaryContent>
    </foxml:datastreamVersion>
    <foxml:datastreamVersion ID="OBJ.1" LABEL="second.txt" CREATED="2013-06-01T00:00:00.000Z" MIMETYPE="text/plain" SIZE="0">
      <foxml:contentLocation TYPE="INTERNAL_ID" REF="demo:1+OBJ+OBJ.1"/>
    </foxml:datastreamVersion>
  </foxml:datastream>
</foxml:digitalObject>
"""


@pytest.fixture
def sample_foxml() -> str:
    """A complete FOXML 1.1 document with inline XML, base64 and managed content."""
    return SAMPLE_FOXML


@pytest.fixture
def write_foxml(tmp_path: Path) -> Callable[..., Path]:
    """Write a document to a temporary file and return its path."""
    def _write(content: str, name: str = "object.xml") -> Path:
        path = tmp_path / name
        path.write_bytes(content.encode("utf-8"))
        return path
    return _write


@pytest.fixture
def sample_path(write_foxml: Callable[..., Path], sample_foxml: str) -> Path:
    return write_foxml(sample_foxml)
