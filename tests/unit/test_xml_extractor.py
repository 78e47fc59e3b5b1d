"""
Unit tests for the streaming XML extractor
"""

import io
import random
import xml.etree.ElementTree as ET
import pytest
from unittest.mock import patch
from ingestion.extractors.xml_extractor import XMLExtractor, local_name
from schemas.registry import get_schema
from core.exceptions import DecodeError


def _statuses(count):
    return [{"ACTSTATID": str(i), "NAME": f"Status {i}"} for i in range(count)]


class TestXMLExtractor:
    """Test element selection and row mapping"""

    def test_yields_one_row_per_matching_element(self, make_xml):
        """N target elements interleaved with unrelated ones yield exactly N rows"""
        schema = get_schema("ACTSTAT")
        document = make_xml("ActualStatuses", "ActualStatus", _statuses(25), noise=10)

        rows = list(XMLExtractor(schema).iter_rows(io.BytesIO(document)))

        assert len(rows) == 25
        assert rows[0] == {"actstatid": 0, "name": "Status 0"}
        assert rows[-1] == {"actstatid": 24, "name": "Status 24"}
        assert all(set(r) == set(schema.column_names) for r in rows)

    def test_interleaving_order_does_not_matter(self):
        """Shuffled target and unrelated elements give the same rows"""
        schema = get_schema("ACTSTAT")
        targets = [f'<ActualStatus ACTSTATID="{i}" NAME="n{i}"/>' for i in range(40)]
        noise = [f'<Other ACTSTATID="{i}"><ActualStatusX/></Other>' for i in range(15)]
        mixed = targets + noise
        random.Random(7).shuffle(mixed)
        document = ("<Root>" + "".join(mixed) + "</Root>").encode("utf-8")

        rows = list(XMLExtractor(schema).iter_rows(io.BytesIO(document)))

        assert sorted(r["actstatid"] for r in rows) == list(range(40))

    def test_missing_attributes_use_zero_values(self):
        schema = get_schema("ESTSTAT")
        document = b'<EstateStatuses><EstateStatus ESTSTATID="2"/></EstateStatuses>'

        rows = list(XMLExtractor(schema).iter_rows(io.BytesIO(document)))

        assert rows == [{"eststatid": 2, "name": "", "shortname": ""}]

    def test_namespaced_elements_match_by_local_name(self):
        schema = get_schema("OPERSTAT")
        document = (
            b'<x:OperationStatuses xmlns:x="urn:fias">'
            b'<x:OperationStatus OPERSTATID="10" NAME="Insert"/>'
            b'</x:OperationStatuses>'
        )

        rows = list(XMLExtractor(schema).iter_rows(io.BytesIO(document)))

        assert rows == [{"operstatid": 10, "name": "Insert"}]

    def test_element_name_override(self):
        """The element name can differ from the schema default"""
        schema = get_schema("ACTSTAT")
        document = b'<R><Legacy ACTSTATID="1" NAME="a"/><ActualStatus ACTSTATID="2" NAME="b"/></R>'

        rows = list(XMLExtractor(schema, element_name="Legacy").iter_rows(io.BytesIO(document)))

        assert rows == [{"actstatid": 1, "name": "a"}]

    def test_rows_are_lazy(self, make_xml):
        """Nothing is decoded until the sequence is consumed"""
        schema = get_schema("ACTSTAT")
        stream = io.BytesIO(make_xml("R", "ActualStatus", _statuses(3)))

        rows = XMLExtractor(schema).iter_rows(stream)

        assert stream.tell() == 0
        assert next(rows) == {"actstatid": 0, "name": "Status 0"}

    def test_malformed_xml_raises_decode_error_after_good_rows(self):
        """Rows before the damage are yielded, then DecodeError"""
        schema = get_schema("ACTSTAT")
        document = b'<R><ActualStatus ACTSTATID="1" NAME="a"/><ActualStatus ACTSTATID="2" NAME="b"</R>'
        rows = XMLExtractor(schema).iter_rows(io.BytesIO(document), source_name="broken.xml")

        assert next(rows) == {"actstatid": 1, "name": "a"}
        with pytest.raises(DecodeError) as exc_info:
            list(rows)

        assert exc_info.value.context["file_path"] == "broken.xml"
        assert exc_info.value.context["rows_decoded"] == 1

    def _peak_root_children(self, count, make_xml):
        schema = get_schema("ACTSTAT")
        stream = io.BytesIO(make_xml("R", "ActualStatus", _statuses(count)))
        extractor = XMLExtractor(schema)

        real_iterparse = ET.iterparse
        seen = {"max_children": 0}

        def spying_iterparse(source, events=None):
            for event, elem in real_iterparse(source, events=events):
                if event == "start" and "root" not in seen:
                    seen["root"] = elem
                if "root" in seen:
                    seen["max_children"] = max(seen["max_children"], len(seen["root"]))
                yield event, elem

        with patch("ingestion.extractors.xml_extractor.ET.iterparse", spying_iterparse):
            assert sum(1 for _ in extractor.iter_rows(stream)) == count

        return seen["max_children"]

    def test_finished_elements_are_released(self, make_xml):
        """Children held by the root peak at one parser chunk, whatever the document size"""
        small = self._peak_root_children(5_000, make_xml)
        large = self._peak_root_children(50_000, make_xml)

        assert large == small
        assert large < 5_000

    def test_extract_file_reads_from_disk(self, tmp_path, make_xml):
        schema = get_schema("ACTSTAT")
        path = tmp_path / "AS_ACTSTAT_20201001_x.XML"
        path.write_bytes(make_xml("R", "ActualStatus", _statuses(4)))

        rows = list(XMLExtractor(schema).extract_file(path))

        assert [r["actstatid"] for r in rows] == [0, 1, 2, 3]


def test_local_name():
    assert local_name("{urn:fias}Object") == "Object"
    assert local_name("Object") == "Object"
