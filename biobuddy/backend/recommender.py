"""Question recommendation and candidate elimination."""

from __future__ import annotations

import logging
from typing import AbstractSet

from biobuddy.backend.attributes import AttributeStore
from biobuddy.backend.models import Question

logger = logging.getLogger(__name__)


def recommend(candidates: AbstractSet[str], store: AttributeStore) -> Question | None:
    """Pick the attribute whose yes/no split over ``candidates`` is most even.

    Attributes are scanned in sorted name order and ties keep the first one,
    so the result is reproducible. Returns None for fewer than two candidates
    or when no attribute splits the set.
    """
    total = len(candidates)
    if total <= 1:
        return None

    attribute_names: set[str] = set()
    for animal in candidates:
        attribute_names.update(store.question_attributes(animal))

    best_attribute: str | None = None
    best_difference = total
    for attribute in sorted(attribute_names):
        yes_count = sum(1 for animal in candidates if store.is_yes(animal, attribute))
        difference = abs(yes_count - (total - yes_count))
        if difference < best_difference:
            best_difference = difference
            best_attribute = attribute
            if difference == 0:
                break

    if best_attribute is None:
        return None
    logger.debug("Recommended %r over %d candidates (difference=%d)", best_attribute, total, best_difference)
    return Question(attribute=best_attribute, expected=store.yes_marker)


def eliminate(
    candidates: AbstractSet[str],
    question: Question,
    is_yes: bool,
    store: AttributeStore,
) -> frozenset[str]:
    """Keep the animals consistent with answering ``is_yes`` to ``question``."""
    return frozenset(
        animal
        for animal in candidates
        if (store.value(animal, question.attribute) == question.expected) == is_yes
    )
