"""
Structural Diff Engine: block-level comparison of two plan versions.

Algorithm
---------
1. Hash every block as ``type + ":" + content`` (djb2-xor, 32 bit) and take
   the Longest Common Subsequence of the two hash sequences. LCS pairs are
   ``unchanged`` rows.
2. Old blocks outside the LCS are removal candidates, new blocks outside it
   are addition candidates.
3. Each removal candidate (in old order) is greedily paired with the unused
   addition candidate of the same type with the highest similarity, provided
   it is ``>= modify_threshold``. A pair becomes one ``modified`` row.
4. Leftovers become ``removed`` / ``added`` rows.
5. Output: unmatched removals first, then a walk over the new blocks.

The greedy pairing is not a globally optimal assignment; ties go to the
first candidate encountered.

Similarity
----------
``similarity(a, b) = 1 - levenshtein(a, b) / max(len(a), len(b))`` with the
exact values 1.0 for equal strings and 0.0 when either string is empty.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from redline.core.contracts.block import Block
from redline.core.contracts.diff import BlockDiff, DiffSummary

_MASK32 = 0xFFFFFFFF


def _djb2(text: str) -> int:
    """djb2 string hash (xor variant), kept to 32 bits."""
    h = 5381
    for ch in text:
        h = (((h << 5) + h) ^ ord(ch)) & _MASK32
    return h


def _block_hash(block: Block) -> int:
    return _djb2(f"{block.type}:{block.content}")


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance between ``a`` and ``b`` using two DP rows."""
    if len(a) < len(b):
        a, b = b, a
    prev = list(range(len(b) + 1))
    curr = [0] * (len(b) + 1)

    for i in range(1, len(a) + 1):
        curr[0] = i
        ca = a[i - 1]
        for j in range(1, len(b) + 1):
            if ca == b[j - 1]:
                curr[j] = prev[j - 1]
            else:
                curr[j] = 1 + min(prev[j - 1], prev[j], curr[j - 1])
        prev, curr = curr, prev

    return prev[len(b)]


def similarity(a: str, b: str) -> float:
    """Normalized similarity of two strings in [0.0, 1.0]."""
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    return 1.0 - levenshtein_distance(a, b) / max(len(a), len(b))


def _lcs_pairs(old_blocks: Sequence[Block], new_blocks: Sequence[Block]) -> list[tuple[int, int]]:
    """Return ``(old_index, new_index)`` pairs of the LCS, in order."""
    old_h = [_block_hash(b) for b in old_blocks]
    new_h = [_block_hash(b) for b in new_blocks]
    m, n = len(old_h), len(new_h)

    dp = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(1, m + 1):
        for j in range(1, n + 1):
            if old_h[i - 1] == new_h[j - 1]:
                dp[i][j] = dp[i - 1][j - 1] + 1
            else:
                dp[i][j] = max(dp[i - 1][j], dp[i][j - 1])

    pairs: list[tuple[int, int]] = []
    i, j = m, n
    while i > 0 and j > 0:
        if old_h[i - 1] == new_h[j - 1]:
            pairs.append((i - 1, j - 1))
            i -= 1
            j -= 1
        elif dp[i - 1][j] > dp[i][j - 1]:
            i -= 1
        else:
            j -= 1

    pairs.reverse()
    return pairs


def _best_match(
    removed: Block,
    added: Sequence[tuple[int, Block]],
    used: set[int],
    threshold: float,
) -> tuple[int, float] | None:
    """Best unused same-type addition for ``removed`` as (position, score)."""
    best: tuple[int, float] | None = None
    for pos, (_, candidate) in enumerate(added):
        if pos in used or candidate.type != removed.type:
            continue
        score = similarity(removed.content, candidate.content)
        if score >= threshold and (best is None or score > best[1]):
            best = (pos, score)
    return best


def diff_blocks(
    old_blocks: Sequence[Block],
    new_blocks: Sequence[Block],
    modify_threshold: float = 0.5,
) -> list[BlockDiff]:
    """Compute the block-level diff between two versions of a document.

    Parameters
    ----------
    old_blocks, new_blocks:
        Parse results of the two versions.
    modify_threshold:
        Minimum similarity for a removed/added pair of the same type to be
        reported as one ``modified`` row.

    Returns
    -------
    list[BlockDiff]
        Unmatched removals first, then rows in new-document order.
    """
    lcs = _lcs_pairs(old_blocks, new_blocks)
    old_in_lcs = {o for o, _ in lcs}
    new_to_old = {n: o for o, n in lcs}

    removed = [(i, b) for i, b in enumerate(old_blocks) if i not in old_in_lcs]
    added = [(i, b) for i, b in enumerate(new_blocks) if i not in new_to_old]

    used: set[int] = set()
    matched_old: set[int] = set()
    modified_by_new: dict[int, BlockDiff] = {}

    for old_idx, old_block in removed:
        match = _best_match(old_block, added, used, modify_threshold)
        if match is None:
            continue
        pos, score = match
        new_idx, new_block = added[pos]
        used.add(pos)
        matched_old.add(old_idx)
        modified_by_new[new_idx] = BlockDiff(
            type="modified",
            old_block=old_block,
            new_block=new_block,
            similarity=score,
        )

    result = [
        BlockDiff(type="removed", old_block=block)
        for idx, block in removed
        if idx not in matched_old
    ]

    for new_idx, new_block in enumerate(new_blocks):
        if new_idx in new_to_old:
            result.append(
                BlockDiff(
                    type="unchanged",
                    old_block=old_blocks[new_to_old[new_idx]],
                    new_block=new_block,
                )
            )
        elif new_idx in modified_by_new:
            result.append(modified_by_new[new_idx])
        else:
            result.append(BlockDiff(type="added", new_block=new_block))

    return result


def diff_summary(diffs: Sequence[BlockDiff]) -> DiffSummary:
    """Tally diff rows per type."""
    counts = Counter(d.type for d in diffs)
    return DiffSummary(
        unchanged=counts["unchanged"],
        added=counts["added"],
        removed=counts["removed"],
        modified=counts["modified"],
    )


__all__ = ["diff_blocks", "diff_summary", "levenshtein_distance", "similarity"]
