"""
Artifacts - Tree Serialization & Recipient Import
File: io.py

Purpose: Move trees and recipient lists across process boundaries.

- dump_tree / load_tree: serialized tree document <-> MerkleTree.
  Loading always rebuilds the tree from its leaves and compares the
  recomputed root with the embedded one; any difference is fatal.
- save_tree_file / load_tree_file: the same, on disk
- parse_recipients_csv / parse_recipients_json: recipient lists for
  tree generation
- parse_sablier_envelope: recipient list from a Sablier IPFS upload
"""

from __future__ import annotations

import csv
import io
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import ValidationError

from core.crypto.hashing import is_hash_hex
from core.merkle.leaf import LeafEncoding
from core.merkle.merkle_tree import MerkleTree
from core.merkle.records import AllocationRecord
from core.schemas.canonical import dumps_canonical, format_datetime_canonical, loads_canonical
from core.schemas.errors import (
    CanonicalizationException,
    ErrorCodes,
    IntegrityMismatchException,
    MalformedInputException,
    TreeDataFormatException,
)
from core.schemas.tree_data import LeafEntry, SerializedTree, TreeMetadata
from core.schemas.versioning import (
    FORMAT_VERSION,
    TREE_FORMAT,
    UnsupportedFormatVersionError,
    assert_supported_tree_format,
)

logger = logging.getLogger(__name__)

TreeSource = Union[SerializedTree, Mapping[str, Any], str, bytes]

# Column aliases accepted in recipient CSV headers
_RECIPIENT_COLUMNS = ("recipient", "address")


# =============================================================================
# Serialized tree
# =============================================================================

def dump_tree(
    tree: MerkleTree,
    *,
    created_at: Optional[datetime] = None,
    campaign: Optional[str] = None,
) -> SerializedTree:
    """
    Serialize a tree. Numbers become decimal strings.

    Args:
        tree: The tree to serialize
        created_at: Timestamp recorded in metadata (defaults to now, UTC)
        campaign: Optional campaign name recorded in metadata
    """
    total = sum(leaf.amount for leaf in tree.leaves)
    return SerializedTree(
        format=TREE_FORMAT,
        leaf_encoding=tree.encoding.value,
        root=tree.root_hex,
        leaves=[LeafEntry(**leaf.to_dict()) for leaf in tree.leaves],
        metadata=TreeMetadata(
            total_recipients=len(tree),
            total_allocation=str(total),
            created_at=format_datetime_canonical(created_at or datetime.now(timezone.utc)),
            version=FORMAT_VERSION,
            campaign=campaign,
        ),
    )


def dumps_tree(tree: MerkleTree, *, indent: Optional[int] = 2, **kwargs: Any) -> str:
    """Serialize a tree to a JSON string (canonical when indent is None)."""
    document = dump_tree(tree, **kwargs).model_dump(mode="json", exclude_none=True)
    if indent is None:
        return dumps_canonical(document)
    return json.dumps(document, indent=indent)


def _parse_document(data: TreeSource) -> SerializedTree:
    if isinstance(data, SerializedTree):
        return data
    if isinstance(data, (str, bytes)):
        try:
            data = loads_canonical(data)
        except CanonicalizationException as e:
            raise TreeDataFormatException(e.message, details=e.details) from e
    if not isinstance(data, Mapping):
        raise TreeDataFormatException(
            f"Tree data must be a JSON object, got {type(data).__name__}"
        )

    try:
        assert_supported_tree_format(data.get("format", TREE_FORMAT))
    except UnsupportedFormatVersionError as e:
        raise TreeDataFormatException(
            str(e),
            field_path="format",
            details={"supported": sorted(e.supported)},
            code=ErrorCodes.UNSUPPORTED_VERSION,
        ) from e

    try:
        return SerializedTree.model_validate(dict(data))
    except ValidationError as e:
        first = e.errors()[0]
        raise TreeDataFormatException(
            f"Invalid tree data: {first['msg']}",
            field_path=".".join(str(p) for p in first["loc"]),
            details={"errors": e.error_count()},
        ) from e


def load_tree(
    data: TreeSource,
    *,
    encoding: LeafEncoding | str | None = None,
    expected_root: Optional[str] = None,
) -> MerkleTree:
    """
    Rebuild a tree from serialized data and check its root.

    Args:
        data: SerializedTree, parsed mapping or raw JSON
        encoding: Leaf scheme the caller expects; must agree with the
            document's leaf_encoding when given
        expected_root: Published root (e.g. read from the contract) the
            rebuilt tree must also match

    Returns:
        The verified MerkleTree

    Raises:
        TreeDataFormatException: On unparseable or malformed data
        StructuralViolationException: If the leaves are not a valid set
        IntegrityMismatchException: If the recomputed root differs from
            the embedded or expected root
    """
    document = _parse_document(data)

    try:
        scheme = LeafEncoding.parse(document.leaf_encoding)
    except MalformedInputException as e:
        raise TreeDataFormatException(e.message, field_path="leaf_encoding") from e
    if encoding is not None and LeafEncoding.parse(encoding) is not scheme:
        raise TreeDataFormatException(
            f"Tree uses {scheme.value} leaves but {LeafEncoding.parse(encoding).value} "
            "was configured",
            field_path="leaf_encoding",
        )

    records = []
    for i, entry in enumerate(document.leaves):
        try:
            records.append(AllocationRecord.create(entry.index, entry.recipient, entry.amount))
        except MalformedInputException as e:
            raise TreeDataFormatException(
                f"Invalid leaf at position {i}: {e.message}",
                field_path=f"leaves.{i}.{e.field_name or ''}".rstrip("."),
                details={"code": e.code},
            ) from e

    tree = MerkleTree(records, scheme)

    embedded = document.root.lower()
    if tree.root_hex != embedded:
        logger.error(
            "Root mismatch on load: embedded %s, recomputed %s", embedded, tree.root_hex,
        )
        raise IntegrityMismatchException(expected_root=embedded, actual_root=tree.root_hex)

    if expected_root is not None:
        published = expected_root.strip().lower()
        if tree.root_hex != published:
            logger.error(
                "Root mismatch against published root: expected %s, recomputed %s",
                published, tree.root_hex,
            )
            raise IntegrityMismatchException(
                expected_root=published,
                actual_root=tree.root_hex,
                message=f"Tree root {tree.root_hex} does not match published root {published}",
            )

    if document.metadata is not None and document.metadata.total_recipients != len(tree):
        logger.warning(
            "Metadata lists %d recipients but tree has %d",
            document.metadata.total_recipients, len(tree),
        )

    logger.info("Loaded tree %s with %d recipients", tree.root_hex, len(tree))
    return tree


def save_tree_file(tree: MerkleTree, path: str | Path, **kwargs: Any) -> Path:
    """Write a serialized tree to disk. Returns the path written."""
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(dumps_tree(tree, **kwargs) + "\n", encoding="utf-8")
    logger.info("Saved tree %s to %s", tree.root_hex, out_path)
    return out_path


def load_tree_file(path: str | Path, **kwargs: Any) -> MerkleTree:
    """Load and verify a serialized tree from disk."""
    in_path = Path(path)
    if not in_path.exists():
        raise FileNotFoundError(f"Tree file not found: {in_path}")
    return load_tree(in_path.read_bytes(), **kwargs)


# =============================================================================
# Recipient lists
# =============================================================================

def _record_at(row_number: int, index: Any, recipient: Any, amount: Any) -> AllocationRecord:
    try:
        return AllocationRecord.create(index, recipient, amount)
    except MalformedInputException as e:
        raise MalformedInputException(
            f"Row {row_number}: {e.message}",
            code=e.code,
            field_name=e.field_name,
            details={**e.details, "row": row_number},
        ) from e


def parse_recipients_csv(text: str) -> list[AllocationRecord]:
    """
    Parse recipients from CSV.

    The header must name a recipient (or address) column and an amount
    column; index is optional and defaults to the row position.

    Example:
        index,recipient,amount
        0,0xAbC...,1000
    """
    reader = csv.DictReader(io.StringIO(text.strip()))
    fields = [f.strip().lower() for f in (reader.fieldnames or [])]
    reader.fieldnames = fields
    recipient_col = next((c for c in _RECIPIENT_COLUMNS if c in fields), None)
    if recipient_col is None or "amount" not in fields:
        raise MalformedInputException(
            "CSV header must contain 'recipient' (or 'address') and 'amount' columns",
            field_name="header",
            value=",".join(fields),
        )

    records = []
    for position, row in enumerate(reader):
        index = row.get("index")
        records.append(_record_at(
            position + 2,  # header is line 1
            index if index not in (None, "") else position,
            row.get(recipient_col),
            row.get("amount"),
        ))
    return records


def parse_recipients_json(data: Union[str, bytes, Iterable[Any], Mapping[str, Any]]) -> list[AllocationRecord]:
    """
    Parse recipients from JSON.

    Accepts a list of {address|recipient, amount, index?} objects, or an
    object holding such a list under "recipients". Missing indices
    default to the list position.
    """
    if isinstance(data, (str, bytes)):
        data = loads_canonical(data)
    if isinstance(data, Mapping):
        data = data.get("recipients", data.get("leaves"))
    if not isinstance(data, list):
        raise MalformedInputException(
            "Recipient JSON must be a list or an object with a 'recipients' list",
            field_name="recipients",
        )

    records = []
    for position, item in enumerate(data):
        if not isinstance(item, Mapping):
            raise MalformedInputException(
                f"Row {position}: expected an object, got {type(item).__name__}",
                field_name="recipients",
            )
        index = item.get("index")
        records.append(_record_at(
            position,
            index if index is not None else position,
            item.get("recipient", item.get("address")),
            item.get("amount"),
        ))
    return records


def load_recipients_file(path: str | Path) -> list[AllocationRecord]:
    """Load recipients from a .csv or .json file (Sablier uploads included)."""
    in_path = Path(path)
    if not in_path.exists():
        raise FileNotFoundError(f"Recipients file not found: {in_path}")
    text = in_path.read_text(encoding="utf-8")
    if in_path.suffix.lower() == ".csv":
        return parse_recipients_csv(text)

    data = loads_canonical(text)
    if isinstance(data, Mapping) and "merkle_tree" in data:
        return parse_sablier_envelope(data)
    return parse_recipients_json(data)


def parse_sablier_envelope(data: Union[str, bytes, Mapping[str, Any]]) -> list[AllocationRecord]:
    """
    Extract recipients from a Sablier campaign upload.

    The upload wraps an OpenZeppelin StandardMerkleTree dump (a JSON
    string under "merkle_tree" whose values[].value is [index, address,
    amount]). Its tree layout differs from ours, so only the recipient
    list is imported; the envelope's own recipient count and total are
    cross-checked against the values.

    Raises:
        TreeDataFormatException: If the envelope is malformed or its
            totals disagree with its values
    """
    if isinstance(data, (str, bytes)):
        data = loads_canonical(data)
    if not isinstance(data, Mapping) or "merkle_tree" not in data:
        raise TreeDataFormatException("Missing merkle_tree field", field_path="merkle_tree")

    inner = data["merkle_tree"]
    if isinstance(inner, str):
        inner = loads_canonical(inner)
    values = inner.get("values") if isinstance(inner, Mapping) else None
    if not isinstance(values, list):
        raise TreeDataFormatException("merkle_tree has no values list", field_path="merkle_tree.values")

    records = []
    for position, item in enumerate(values):
        value = item.get("value") if isinstance(item, Mapping) else None
        if not isinstance(value, list) or len(value) != 3:
            raise TreeDataFormatException(
                "Expected value to be [index, address, amount]",
                field_path=f"merkle_tree.values.{position}.value",
            )
        try:
            records.append(AllocationRecord.create(*value))
        except MalformedInputException as e:
            raise TreeDataFormatException(
                f"Invalid value at position {position}: {e.message}",
                field_path=f"merkle_tree.values.{position}",
                details={"code": e.code},
            ) from e

    count = data.get("number_of_recipients")
    if count is not None and (not str(count).isdigit() or int(str(count)) != len(records)):
        raise TreeDataFormatException(
            f"Envelope lists {count} recipients but holds {len(records)}",
            field_path="number_of_recipients",
        )
    total = data.get("total_amount")
    if total is not None and (
        not str(total).isdigit() or int(str(total)) != sum(r.amount for r in records)
    ):
        raise TreeDataFormatException(
            "Envelope total_amount does not match the sum of its values",
            field_path="total_amount",
        )

    root = data.get("root")
    if root is not None and not is_hash_hex(root):
        raise TreeDataFormatException("Envelope root is not a 32-byte hex string", field_path="root")

    logger.info("Imported %d recipients from Sablier envelope (root %s)", len(records), root)
    return records
