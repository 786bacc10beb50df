"""
Tree Serialization Unit Tests
Tests for orchestrator/artifacts/io.py

Tests:
- dump/load round trip preserves the root (both encodings)
- numbers serialized as decimal strings, floats refused
- tampered documents are rejected with IntegrityMismatchException
- recipient import from CSV, JSON and Sablier envelopes
"""
import json
from datetime import datetime, timezone

import pytest

from core.merkle.leaf import LeafEncoding
from core.merkle.merkle_tree import MerkleTree
from core.schemas.errors import (
    ErrorCodes,
    IntegrityMismatchException,
    MalformedInputException,
    StructuralViolationException,
    TreeDataFormatException,
)
from core.schemas.tree_data import SerializedTree
from orchestrator.artifacts.io import (
    dump_tree,
    dumps_tree,
    load_recipients_file,
    load_tree,
    load_tree_file,
    parse_recipients_csv,
    parse_recipients_json,
    parse_sablier_envelope,
    save_tree_file,
)

from fixtures.allocations import (
    ADDR_A,
    ADDR_B,
    ZERO_ROOT,
    make_records,
    make_sablier_envelope,
    make_tree,
    make_tree_document,
)


class TestDumpTree:
    """Tests for dump_tree() / dumps_tree()."""

    def test_document_shape(self, two_recipient_tree):
        created = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        document = dump_tree(two_recipient_tree, created_at=created, campaign="genesis")
        assert isinstance(document, SerializedTree)
        assert document.format == "airdrop-merkle-v1"
        assert document.leaf_encoding == "packed"
        assert document.root == two_recipient_tree.root_hex
        assert document.leaves[0].amount == "1000"
        assert document.metadata.total_recipients == 2
        assert document.metadata.total_allocation == "3000"
        assert document.metadata.campaign == "genesis"
        assert document.metadata.created_at.startswith("2026-01-02T03:04:05")

    def test_large_amount_is_string(self):
        big = 2**120
        tree = MerkleTree(make_records(1, base_amount=big))
        data = json.loads(dumps_tree(tree))
        assert data["leaves"][0]["amount"] == str(big)

    def test_canonical_form_is_stable(self, two_recipient_tree):
        created = datetime(2026, 1, 1, tzinfo=timezone.utc)
        first = dumps_tree(two_recipient_tree, indent=None, created_at=created)
        second = dumps_tree(make_tree(), indent=None, created_at=created)
        assert first == second
        assert " " not in first


class TestLoadTree:
    """Tests for load_tree()."""

    @pytest.mark.parametrize("encoding", list(LeafEncoding))
    def test_round_trip(self, encoding):
        tree = MerkleTree(make_records(7), encoding)
        loaded = load_tree(dumps_tree(tree))
        assert loaded.root == tree.root
        assert loaded.encoding is encoding
        assert loaded.leaves == tree.leaves

    def test_accepts_mapping_and_model(self, two_recipient_tree):
        document = dump_tree(two_recipient_tree)
        assert load_tree(document).root == two_recipient_tree.root
        assert load_tree(document.model_dump(mode="json")).root == two_recipient_tree.root

    def test_accepts_integer_numbers(self, two_recipient_tree):
        document = make_tree_document(two_recipient_tree)
        for leaf in document["leaves"]:
            leaf["amount"] = int(leaf["amount"])
            leaf["index"] = int(leaf["index"])
        assert load_tree(json.dumps(document)).root == two_recipient_tree.root

    def test_float_amount_refused(self, two_recipient_tree):
        raw = dumps_tree(two_recipient_tree).replace('"1000"', "1000.0")
        with pytest.raises(TreeDataFormatException, match="Floating-point"):
            load_tree(raw)

    def test_tampered_amount_rejected(self, two_recipient_tree):
        document = make_tree_document(two_recipient_tree)
        document["leaves"][0]["amount"] = "1000000"
        with pytest.raises(IntegrityMismatchException) as exc_info:
            load_tree(document)
        assert exc_info.value.code == ErrorCodes.ROOT_MISMATCH
        assert exc_info.value.expected_root == two_recipient_tree.root_hex

    def test_tampered_root_rejected(self, two_recipient_tree):
        document = make_tree_document(two_recipient_tree, root=ZERO_ROOT)
        with pytest.raises(IntegrityMismatchException):
            load_tree(document)

    def test_root_mismatch_logged(self, two_recipient_tree, caplog):
        document = make_tree_document(two_recipient_tree, root=ZERO_ROOT)
        with caplog.at_level("ERROR"):
            with pytest.raises(IntegrityMismatchException):
                load_tree(document)
        assert any("Root mismatch" in r.message for r in caplog.records)

    def test_expected_root(self, two_recipient_tree):
        document = make_tree_document(two_recipient_tree)
        upper = "0x" + two_recipient_tree.root_hex[2:].upper()
        assert load_tree(document, expected_root=upper).root == two_recipient_tree.root
        with pytest.raises(IntegrityMismatchException, match="published root"):
            load_tree(document, expected_root=ZERO_ROOT)

    def test_encoding_must_match(self, two_recipient_tree):
        document = make_tree_document(two_recipient_tree)
        with pytest.raises(TreeDataFormatException) as exc_info:
            load_tree(document, encoding="standard")
        assert exc_info.value.details["field_path"] == "leaf_encoding"

    def test_unknown_encoding(self, two_recipient_tree):
        document = make_tree_document(two_recipient_tree, leaf_encoding="weird")
        with pytest.raises(TreeDataFormatException):
            load_tree(document)

    def test_unsupported_format(self, two_recipient_tree):
        document = make_tree_document(two_recipient_tree, format="merkle-v0")
        with pytest.raises(TreeDataFormatException, match="Unsupported tree format") as exc_info:
            load_tree(document)
        assert exc_info.value.code == ErrorCodes.UNSUPPORTED_VERSION
        assert exc_info.value.details["field_path"] == "format"

    @pytest.mark.parametrize("raw", [b'{"root": "\xff"}', b'{"root": "\xff\xfe"}', b"\x80{}"])
    def test_non_utf8_bytes(self, raw):
        with pytest.raises(TreeDataFormatException, match="not UTF-8") as exc_info:
            load_tree(raw)
        assert exc_info.value.code == ErrorCodes.TREE_DATA_INVALID

    def test_bad_leaf_reports_path(self, two_recipient_tree):
        document = make_tree_document(two_recipient_tree)
        document["leaves"][1]["recipient"] = "0x1234"
        with pytest.raises(TreeDataFormatException) as exc_info:
            load_tree(document)
        assert exc_info.value.details["field_path"] == "leaves.1.recipient"

    def test_missing_root(self, two_recipient_tree):
        document = make_tree_document(two_recipient_tree)
        del document["root"]
        with pytest.raises(TreeDataFormatException) as exc_info:
            load_tree(document)
        assert exc_info.value.details["field_path"] == "root"

    def test_invalid_json(self):
        with pytest.raises(TreeDataFormatException):
            load_tree("{not json")

    def test_non_object(self):
        with pytest.raises(TreeDataFormatException, match="JSON object"):
            load_tree("[1, 2]")

    def test_duplicate_leaves_rejected(self, two_recipient_tree):
        document = make_tree_document(two_recipient_tree)
        document["leaves"].append(dict(document["leaves"][0]))
        with pytest.raises(StructuralViolationException):
            load_tree(document)

    def test_metadata_count_mismatch_only_warns(self, two_recipient_tree, caplog):
        document = make_tree_document(two_recipient_tree)
        document["metadata"]["total_recipients"] = 99
        with caplog.at_level("WARNING"):
            assert load_tree(document).root == two_recipient_tree.root
        assert any("Metadata lists 99" in r.message for r in caplog.records)


class TestTreeFiles:
    """save_tree_file / load_tree_file."""

    def test_save_and_load(self, tmp_path, five_recipient_tree):
        path = save_tree_file(five_recipient_tree, tmp_path / "out" / "tree.json")
        assert path.exists()
        assert load_tree_file(path).root == five_recipient_tree.root

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_tree_file(tmp_path / "absent.json")


class TestRecipientCsv:
    """Tests for parse_recipients_csv()."""

    def test_with_index(self):
        text = f"index,recipient,amount\n5,{ADDR_A},1000\n6,{ADDR_B},2000\n"
        records = parse_recipients_csv(text)
        assert [(r.index, r.amount) for r in records] == [(5, 1000), (6, 2000)]

    def test_address_column_and_default_index(self):
        text = f"Address, Amount\n{ADDR_A},10\n{ADDR_B},20\n"
        records = parse_recipients_csv(text)
        assert [r.index for r in records] == [0, 1]

    def test_missing_columns(self):
        with pytest.raises(MalformedInputException, match="header"):
            parse_recipients_csv("who,how_much\nx,1\n")

    def test_bad_row_reports_line(self):
        text = f"recipient,amount\n{ADDR_A},10\n{ADDR_B},1.5\n"
        with pytest.raises(MalformedInputException) as exc_info:
            parse_recipients_csv(text)
        assert exc_info.value.message.startswith("Row 3:")
        assert exc_info.value.details["row"] == 3


class TestRecipientJson:
    """Tests for parse_recipients_json()."""

    def test_list_with_aliases(self):
        records = parse_recipients_json([
            {"address": ADDR_A, "amount": "10"},
            {"recipient": ADDR_B, "amount": 20, "index": 9},
        ])
        assert [(r.index, r.amount) for r in records] == [(0, 10), (9, 20)]

    def test_wrapped_in_object(self):
        text = json.dumps({"recipients": [{"address": ADDR_A, "amount": "1"}]})
        assert len(parse_recipients_json(text)) == 1

    def test_not_a_list(self):
        with pytest.raises(MalformedInputException):
            parse_recipients_json({"foo": []})

    def test_row_not_object(self):
        with pytest.raises(MalformedInputException, match="Row 1"):
            parse_recipients_json([{"address": ADDR_A, "amount": "1"}, "oops"])


class TestSablierEnvelope:
    """Tests for parse_sablier_envelope()."""

    def test_import(self):
        records = make_records(3)
        imported = parse_sablier_envelope(make_sablier_envelope(records))
        assert imported == records

    def test_inner_tree_as_object(self):
        records = make_records(2)
        envelope = make_sablier_envelope(records)
        envelope["merkle_tree"] = json.loads(envelope["merkle_tree"])
        assert parse_sablier_envelope(json.dumps(envelope)) == records

    def test_count_mismatch(self):
        envelope = make_sablier_envelope(make_records(2), number_of_recipients=3)
        with pytest.raises(TreeDataFormatException) as exc_info:
            parse_sablier_envelope(envelope)
        assert exc_info.value.details["field_path"] == "number_of_recipients"

    def test_total_mismatch(self):
        envelope = make_sablier_envelope(make_records(2), total_amount="1")
        with pytest.raises(TreeDataFormatException, match="total_amount"):
            parse_sablier_envelope(envelope)

    def test_bad_root_format(self):
        envelope = make_sablier_envelope(make_records(2), root="0x12")
        with pytest.raises(TreeDataFormatException):
            parse_sablier_envelope(envelope)

    def test_bad_value_shape(self):
        envelope = make_sablier_envelope(make_records(1))
        inner = json.loads(envelope["merkle_tree"])
        inner["values"][0]["value"] = ["0", ADDR_A]
        envelope["merkle_tree"] = json.dumps(inner)
        with pytest.raises(TreeDataFormatException) as exc_info:
            parse_sablier_envelope(envelope)
        assert exc_info.value.details["field_path"] == "merkle_tree.values.0.value"

    def test_missing_tree(self):
        with pytest.raises(TreeDataFormatException):
            parse_sablier_envelope({"root": ZERO_ROOT})


class TestLoadRecipientsFile:
    """load_recipients_file dispatches on content."""

    def test_csv(self, tmp_path):
        path = tmp_path / "r.csv"
        path.write_text(f"recipient,amount\n{ADDR_A},1\n")
        assert len(load_recipients_file(path)) == 1

    def test_json(self, tmp_path):
        path = tmp_path / "r.json"
        path.write_text(json.dumps([{"address": ADDR_A, "amount": "1"}]))
        assert len(load_recipients_file(path)) == 1

    def test_sablier(self, tmp_path):
        path = tmp_path / "campaign.json"
        path.write_text(json.dumps(make_sablier_envelope(make_records(4))))
        assert len(load_recipients_file(path)) == 4

    def test_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_recipients_file(tmp_path / "nope.csv")
