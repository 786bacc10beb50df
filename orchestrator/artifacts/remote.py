"""
Artifacts - Remote Tree Loading
File: remote.py

Purpose: Fetch a serialized tree over HTTP or from an IPFS gateway and
hand it to load_tree. Timeouts and retries live in the HTTP client;
the integrity check is the same as for local files.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from core.config.runtime import DEFAULT_IPFS_GATEWAY, MerkleConfig, RuntimeConfig
from core.http.client import HttpClient, HttpError
from core.merkle.merkle_tree import MerkleTree
from core.schemas.errors import RemoteFetchException

from orchestrator.artifacts.io import load_tree

logger = logging.getLogger(__name__)


def ipfs_url(cid: str, gateway: str = DEFAULT_IPFS_GATEWAY) -> str:
    """
    Gateway URL for a CID.

    Example:
        >>> ipfs_url("Qm123", "https://ipfs.io/ipfs")
        'https://ipfs.io/ipfs/Qm123'
    """
    cid = cid.strip()
    if cid.startswith("ipfs://"):
        cid = cid[len("ipfs://"):]
    return gateway.rstrip("/") + "/" + cid


def fetch_tree_data(url: str, client: HttpClient) -> bytes:
    """
    Download raw tree data.

    Raises:
        RemoteFetchException: On transport failure or a non-2xx response
    """
    logger.info("Fetching tree data from %s", url)
    try:
        response = client.get(url, headers={"Accept": "application/json"})
    except HttpError as e:
        raise RemoteFetchException(f"Failed to fetch tree data: {e}", url=url) from e

    if not response.ok:
        raise RemoteFetchException(
            f"Failed to fetch tree data: HTTP {response.status_code}",
            url=url,
            status_code=response.status_code,
            retryable=response.status_code >= 500 or response.status_code == 429,
        )
    return response.content


def fetch_tree(
    *,
    url: Optional[str] = None,
    cid: Optional[str] = None,
    gateway: str = DEFAULT_IPFS_GATEWAY,
    client: Optional[HttpClient] = None,
    **load_kwargs: Any,
) -> MerkleTree:
    """
    Fetch and verify a tree from a URL or an IPFS CID.

    Args:
        url: Direct URL of the serialized tree
        cid: IPFS CID, resolved through gateway (ignored when url is set)
        gateway: IPFS HTTP gateway
        client: HTTP client (a default one is created and closed when omitted)
        **load_kwargs: Passed to load_tree (encoding, expected_root)

    Raises:
        ValueError: If neither url nor cid is given
        RemoteFetchException: If the download fails
        IntegrityMismatchException: If the downloaded tree fails its root check
    """
    if not url and not cid:
        raise ValueError("Either url or cid is required")
    target = url or ipfs_url(cid, gateway)

    if client is not None:
        return load_tree(fetch_tree_data(target, client), **load_kwargs)
    with HttpClient() as owned:
        return load_tree(fetch_tree_data(target, owned), **load_kwargs)


def fetch_tree_from_config(
    config: RuntimeConfig,
    client: Optional[HttpClient] = None,
) -> MerkleTree:
    """Fetch the tree named by a MerkleConfig's tree_url or ipfs_cid."""
    merkle: MerkleConfig = config.merkle
    kwargs = dict(
        url=merkle.tree_url,
        cid=merkle.ipfs_cid,
        gateway=merkle.ipfs_gateway,
        encoding=merkle.encoding,
        expected_root=merkle.expected_root,
    )
    if client is not None:
        return fetch_tree(client=client, **kwargs)
    with HttpClient.from_config(config.http, proxy=config.proxy) as owned:
        return fetch_tree(client=owned, **kwargs)
