"""
Merkle path verification for commitments.

Tree construction and maintenance live with the external path provider;
this module only recomputes a root from the (leaf, siblings, index bits)
it hands over, hashing each node as H(MERKLE, left, right).
"""

from typing import Optional, Sequence

from zkshield.crypto.domain_hash import Domain, DomainHasher
from zkshield.crypto.field import validate_field_element
from zkshield.exceptions import InvalidFieldElementError


def merkle_node(left: int, right: int, hasher: Optional[DomainHasher] = None) -> int:
    """Parent of two sibling nodes."""
    hasher = hasher or DomainHasher()
    return hasher.hash([left, right], Domain.MERKLE)


def empty_leaf(hasher: Optional[DomainHasher] = None) -> int:
    """Placeholder value for unoccupied leaves: H(EMPTY_LEAF, 0)."""
    hasher = hasher or DomainHasher()
    return hasher.hash([0], Domain.EMPTY_LEAF)


def compute_merkle_root(
    leaf: int,
    path_elements: Sequence[int],
    path_indices: Sequence[int],
    hasher: Optional[DomainHasher] = None,
) -> int:
    """
    Fold a leaf up its authentication path.

    Args:
        leaf: Leaf value (a commitment)
        path_elements: Sibling at each level, leaf level first
        path_indices: 0 if the running node is the left child at that level, 1 if right

    Returns:
        int: The implied root

    Raises:
        ValueError: If the two sequences differ in length or an index is not 0/1
    """
    if len(path_elements) != len(path_indices):
        raise ValueError("path_elements and path_indices must have the same length")

    hasher = hasher or DomainHasher()
    node = validate_field_element(leaf, name="leaf")
    for sibling, index in zip(path_elements, path_indices):
        if index == 0:
            node = merkle_node(node, sibling, hasher)
        elif index == 1:
            node = merkle_node(sibling, node, hasher)
        else:
            raise ValueError(f"path index must be 0 or 1, got {index}")
    return node


def verify_merkle_path(
    leaf: int,
    root: int,
    path_elements: Sequence[int],
    path_indices: Sequence[int],
    hasher: Optional[DomainHasher] = None,
) -> bool:
    """True if the path connects leaf to root. Malformed paths return False."""
    try:
        return compute_merkle_root(leaf, path_elements, path_indices, hasher) == root
    except (ValueError, InvalidFieldElementError):
        return False
