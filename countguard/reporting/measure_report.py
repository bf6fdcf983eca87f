"""Count obfuscation for MeasureReport-shaped documents.

A report carries a ``group`` list.  Each group names its category in
``code.text`` and holds ``population`` and ``stratifier`` subtrees with
``count`` fields nested at arbitrary depth::

    {
        "group": [
            {
                "code": {"text": "patients"},
                "population": [{"code": {...}, "count": 74}],
                "stratifier": [
                    {
                        "code": [{"text": "Gender"}],
                        "stratum": [
                            {"value": {"text": "male"},
                             "population": [{"code": {...}, "count": 31}]},
                        ],
                    }
                ],
            }
        ]
    }

Only the integer values under ``count`` keys are rewritten.  No key or
list element is ever added or removed.
"""
from __future__ import annotations

import copy as copy_module
import json
import logging
from typing import Any

import numpy as np

from countguard.privacy.errors import DeserializationError, SerializationError
from countguard.privacy.obfuscator import obfuscate_with_cache
from countguard.privacy.policy import (
    POPULATION_BIN,
    STRATIFIER_BIN,
    Below10Mode,
    Category,
    ObfuscationPolicy,
)
from countguard.workflow.cache import ObfuscationCache

logger = logging.getLogger(__name__)

# Counts in 1..10 are reported as this floor rather than perturbed.
SUPPRESSION_FLOOR = 10


class DocumentObfuscator:
    """Rewrites every count in a report according to its group's category.

    The cache decides whether noise is drawn at all, so obfuscating the
    same report twice with the same cache gives identical output.
    """

    def __init__(
        self,
        cache: ObfuscationCache | None,
        policy: ObfuscationPolicy | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        """Initialize the rewriter.

        Parameters
        ----------
        cache:
            Cache shared across every report that must stay consistent.
            ``None`` draws fresh noise for every count.
        policy:
            Supplies epsilon and per-category sensitivities.  Defaults are
            used when ``None``.
        rng:
            Generator for noise draws.  A fresh ``default_rng()`` is used
            when ``None``.
        """
        self.cache = cache
        self.policy = policy or ObfuscationPolicy()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.notes: list[str] = []
        self._suppressed = 0
        self._obfuscated = 0

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    def obfuscate(self, tree: Any, copy: bool = False) -> Any:
        """Obfuscate all counts in *tree* and return it.

        The tree is modified in place unless *copy* is true, in which case
        a deep copy is rewritten and the original is left alone.
        """
        if copy:
            tree = copy_module.deepcopy(tree)

        self._suppressed = 0
        self._obfuscated = 0

        groups = tree.get("group") if isinstance(tree, dict) else None
        if not isinstance(groups, list):
            logger.debug("Document has no group list; nothing to obfuscate")
            return tree

        for group in groups:
            if isinstance(group, dict):
                self._obfuscate_group(group)

        self.notes.append(
            f"{self._suppressed} count(s) raised to {SUPPRESSION_FLOOR}; "
            f"{self._obfuscated} count(s) obfuscated "
            f"(epsilon={self.policy.epsilon})."
        )
        return tree

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _obfuscate_group(self, group: dict) -> None:
        label = _group_label(group)
        category = Category.from_label(label)
        if category is Category.UNKNOWN:
            logger.warning(f"Unknown group category {label!r}; counts left unchanged")
            self.notes.append(f"Group {label!r} not recognized; counts left unchanged.")
            return

        sensitivity = self.policy.sensitivity_for(category)
        if "population" in group:
            self._visit(group["population"], sensitivity, POPULATION_BIN)
        if "stratifier" in group:
            self._visit(group["stratifier"], sensitivity, STRATIFIER_BIN)

    def _visit(self, node: Any, sensitivity: float, bin: int) -> None:
        """Depth-first walk; every child is visited, counts or not."""
        if isinstance(node, dict):
            if "count" in node and _is_count(node["count"]):
                node["count"] = self._obfuscate_count(node["count"], sensitivity, bin)
            for value in node.values():
                self._visit(value, sensitivity, bin)
        elif isinstance(node, list):
            for item in node:
                self._visit(item, sensitivity, bin)

    def _obfuscate_count(self, count: int, sensitivity: float, bin: int) -> int:
        if count == 0:
            return 0
        if count <= SUPPRESSION_FLOOR:
            self._suppressed += 1
            return SUPPRESSION_FLOOR

        # Noisy count at unit granularity, i.e. count plus the rounded draw.
        noisy = obfuscate_with_cache(
            count,
            sensitivity,
            self.policy.epsilon,
            bin,
            self.cache,
            False,
            Below10Mode.OBFUSCATE,
            1,
            self.rng,
        )
        perturbation = noisy - count
        self._obfuscated += 1
        return round_half_up_to_ten(count + perturbation)


def round_half_up_to_ten(value: int) -> int:
    """Integer half-up rounding to a multiple of ten.

    Differs from ``round_to_step(value, 10)`` on exact halves: 25 goes to
    30 here and to 20 there.
    """
    return ((value + 5) // 10) * 10


def _group_label(group: dict) -> Any:
    code = group.get("code")
    if isinstance(code, dict):
        return code.get("text")
    return None


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


# ----------------------------------------------------------------------
# Convenience wrappers
# ----------------------------------------------------------------------


def obfuscate_document(
    tree: Any,
    cache: ObfuscationCache | None,
    policy: ObfuscationPolicy | None = None,
    rng: np.random.Generator | None = None,
    copy: bool = False,
) -> Any:
    """Obfuscate every count in *tree*; see :class:`DocumentObfuscator`."""
    return DocumentObfuscator(cache, policy=policy, rng=rng).obfuscate(tree, copy=copy)


def obfuscate_json(
    text: str | bytes,
    cache: ObfuscationCache | None,
    policy: ObfuscationPolicy | None = None,
    rng: np.random.Generator | None = None,
    indent: int | None = None,
) -> str:
    """Parse a JSON report, obfuscate its counts, and serialize it again.

    Raises
    ------
    DeserializationError
        If *text* is not valid JSON.
    SerializationError
        If the rewritten tree cannot be encoded as strict JSON (e.g. it
        holds NaN or Infinity).
    """
    try:
        tree = json.loads(text)
    except (TypeError, ValueError) as exc:
        raise DeserializationError(str(exc)) from exc

    obfuscate_document(tree, cache, policy=policy, rng=rng)

    try:
        return json.dumps(tree, indent=indent, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(str(exc)) from exc
