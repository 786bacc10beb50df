"""
Claim Session

Explicit owner of the campaign's loaded tree.

A ClaimSession holds one immutable MerkleTree and answers the lookup
query a claim UI needs: is this address eligible, has it already
claimed, and what arguments go into the contract call. The tree is
replaced wholesale on reload, never mutated; readers holding the old
tree keep a consistent view.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from core.config.runtime import RuntimeConfig
from core.http.client import HttpClient
from core.crypto.addresses import normalize_address
from core.merkle.eligibility import MerkleVerification
from core.merkle.merkle_proofs import MerkleVerifier
from core.merkle.merkle_tree import MerkleTree
from core.merkle.records import AllocationRecord
from core.schemas.claims import CampaignVariant, ClaimParams, EligibilityStatus
from core.schemas.errors import (
    ErrorCodes,
    IntegrityMismatchException,
    MerkleVerificationException,
    TreeDataFormatException,
)

from orchestrator.artifacts.io import load_tree_file
from orchestrator.artifacts.remote import fetch_tree


logger = logging.getLogger(__name__)


@runtime_checkable
class ClaimStatusReader(Protocol):
    """
    Chain-state read of the distribution contract.

    Implementations typically call the contract's hasClaimed(index).
    """

    def has_claimed(self, index: int) -> bool:
        ...


@dataclass(frozen=True)
class LookupResult:
    """Answer to a lookup query for one address."""
    address: str
    status: EligibilityStatus
    variant: CampaignVariant
    root: str
    leaf: Optional[AllocationRecord] = None
    claim: Optional[ClaimParams] = None

    @property
    def is_eligible(self) -> bool:
        return self.status is EligibilityStatus.ELIGIBLE

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "address": self.address,
            "status": self.status.value,
            "variant": self.variant.value,
            "root": self.root,
        }
        if self.leaf is not None:
            data["index"] = str(self.leaf.index)
            data["amount"] = str(self.leaf.amount)
        if self.claim is not None:
            data["claim"] = self.claim.model_dump()
        return data


class ClaimSession:
    """
    Owns the loaded tree for one campaign.

    Usage:
        session = ClaimSession.from_config(config)
        result = session.lookup("0x...")
        if result.is_eligible:
            contract.claim(*result.claim.as_call_args())
    """

    def __init__(
        self,
        tree: MerkleTree,
        *,
        variant: CampaignVariant | str = CampaignVariant.INSTANT,
        status_reader: Optional[ClaimStatusReader] = None,
        loader: Optional[Callable[[], MerkleTree]] = None,
    ) -> None:
        """
        Args:
            tree: The verified tree
            variant: Distribution contract family
            status_reader: Optional chain read for already-claimed status
            loader: Rebuilds the tree from its source; used by reload_if_stale
        """
        self._tree = tree
        self._verification = MerkleVerification(tree)
        self.variant = CampaignVariant(variant)
        self.status_reader = status_reader
        self._loader = loader
        self._reload_lock = threading.Lock()

    @classmethod
    def from_config(
        cls,
        config: RuntimeConfig,
        *,
        status_reader: Optional[ClaimStatusReader] = None,
    ) -> "ClaimSession":
        """
        Load the tree named by the configuration.

        A local tree_path wins over tree_url/ipfs_cid.

        Raises:
            TreeDataFormatException: If the config names no tree source
        """
        merkle = config.merkle
        if merkle.tree_path:
            path = Path(merkle.tree_path)

            def loader() -> MerkleTree:
                return load_tree_file(path, encoding=merkle.encoding)
        elif merkle.tree_url or merkle.ipfs_cid:
            def loader() -> MerkleTree:
                with HttpClient.from_config(config.http, proxy=config.proxy) as client:
                    return fetch_tree(
                        url=merkle.tree_url,
                        cid=merkle.ipfs_cid,
                        gateway=merkle.ipfs_gateway,
                        client=client,
                        encoding=merkle.encoding,
                    )
        else:
            raise TreeDataFormatException(
                "No tree source configured (set tree_path, tree_url or ipfs_cid)",
                field_path="merkle",
            )

        session = cls(
            loader(),
            variant=config.campaign.campaign_variant,
            status_reader=status_reader,
            loader=loader,
        )
        # The published root may move later; only the initial load is pinned to config
        if merkle.expected_root:
            expected = merkle.expected_root.strip().lower()
            if session.root_hex != expected:
                logger.error(
                    "Configured root %s does not match loaded tree %s",
                    expected, session.root_hex,
                )
                raise IntegrityMismatchException(expected_root=expected, actual_root=session.root_hex)
        return session

    @property
    def tree(self) -> MerkleTree:
        return self._tree

    @property
    def verification(self) -> MerkleVerification:
        return self._verification

    @property
    def root_hex(self) -> str:
        return self._tree.root_hex

    def lookup(self, address: str) -> LookupResult:
        """
        Eligibility and claim arguments for an address.

        A miss is a NOT_ELIGIBLE result. An address that the status
        reader reports as claimed is ALREADY_CLAIMED and carries no
        claim arguments.

        Raises:
            MalformedInputException: If the address is syntactically invalid
            MerkleVerificationException: If the generated proof does not
                verify against the session's own tree
        """
        tree = self._tree
        checksummed = normalize_address(address)
        proof = tree.get_proof(checksummed)
        if proof is None:
            return LookupResult(
                address=checksummed,
                status=EligibilityStatus.NOT_ELIGIBLE,
                variant=self.variant,
                root=tree.root_hex,
            )

        check = MerkleVerifier.check(proof, tree.root)
        if not check.valid:
            logger.error(
                "Generated proof for %s (index %d) does not verify: %s",
                checksummed, proof.leaf.index, check.reason,
            )
            raise MerkleVerificationException(
                f"Generated proof does not verify: {check.reason}",
                leaf_index=proof.leaf.index,
            )

        if self.status_reader is not None and self.status_reader.has_claimed(proof.leaf.index):
            return LookupResult(
                address=checksummed,
                status=EligibilityStatus.ALREADY_CLAIMED,
                variant=self.variant,
                root=tree.root_hex,
                leaf=proof.leaf,
            )

        return LookupResult(
            address=checksummed,
            status=EligibilityStatus.ELIGIBLE,
            variant=self.variant,
            root=tree.root_hex,
            leaf=proof.leaf,
            claim=proof.to_claim_params(),
        )

    def replace_tree(self, tree: MerkleTree) -> None:
        """Swap in a new tree. Existing readers keep the old one."""
        self._verification = MerkleVerification(tree)
        self._tree = tree
        logger.info("Claim session now serving tree %s", tree.root_hex)

    def reload_if_stale(self, expected_root: str) -> bool:
        """
        Reload the tree when its root differs from the published one.

        Args:
            expected_root: Root currently published on-chain

        Returns:
            True if a new tree was loaded, False if already current

        Raises:
            IntegrityMismatchException: If the reloaded tree still does
                not match expected_root (the old tree stays in place)
        """
        expected = expected_root.strip().lower()
        if self._tree.root_hex == expected:
            return False
        if self._loader is None:
            raise IntegrityMismatchException(
                expected_root=expected,
                actual_root=self._tree.root_hex,
                message="Tree is stale and the session has no loader to refresh it",
                details={"code": ErrorCodes.TREE_NOT_LOADED},
            )

        with self._reload_lock:
            if self._tree.root_hex == expected:
                return False
            logger.info("Tree %s is stale, reloading for %s", self._tree.root_hex, expected)
            fresh = self._loader()
            if fresh.root_hex != expected:
                logger.error(
                    "Reloaded tree %s still does not match published root %s",
                    fresh.root_hex, expected,
                )
                raise IntegrityMismatchException(expected_root=expected, actual_root=fresh.root_hex)
            self.replace_tree(fresh)
        return True
