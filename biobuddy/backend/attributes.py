"""Read-only animal attribute store and its JSON loader."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from biobuddy.backend.errors import DatasetError

logger = logging.getLogger(__name__)

DESCRIPTION_ATTRIBUTE = "Description"
TRIVIA_ATTRIBUTE = "Trivia"
GROUP_ATTRIBUTE = "Phylum"


class AttributeStore:
    """Immutable ``animal -> {attribute: value}`` mapping.

    Values equal to ``yes_marker`` count as a "yes" for questions. The
    description, trivia and group attributes are kept for info cards but never
    asked about. Their names follow the dataset's language.
    """

    def __init__(
        self,
        animals: Mapping[str, Mapping[str, Any]],
        yes_marker: str = "yes",
        description_attribute: str = DESCRIPTION_ATTRIBUTE,
        trivia_attribute: str = TRIVIA_ATTRIBUTE,
        group_attribute: str = GROUP_ATTRIBUTE,
    ) -> None:
        if not animals:
            raise DatasetError("Attribute store needs at least one animal")
        self.yes_marker = yes_marker
        self.description_attribute = description_attribute
        self.trivia_attribute = trivia_attribute
        self.group_attribute = group_attribute
        self.reserved = frozenset({description_attribute, trivia_attribute, group_attribute})
        self._animals = MappingProxyType(
            {name: MappingProxyType({key: str(value) for key, value in attrs.items()}) for name, attrs in animals.items()}
        )
        self._by_folded_name = {name.strip().casefold(): name for name in self._animals}
        self._names = tuple(sorted(self._animals))

    def __contains__(self, name: object) -> bool:
        return name in self._animals

    def __len__(self) -> int:
        return len(self._animals)

    @property
    def names(self) -> tuple[str, ...]:
        return self._names

    def all_animals(self) -> frozenset[str]:
        return frozenset(self._animals)

    def attributes(self, animal: str) -> Mapping[str, str]:
        return self._animals[animal]

    def value(self, animal: str, attribute: str) -> str | None:
        return self._animals[animal].get(attribute)

    def is_yes(self, animal: str, attribute: str) -> bool:
        return self.value(animal, attribute) == self.yes_marker

    def question_attributes(self, animal: str) -> list[str]:
        """Askable attribute names of one animal in sorted order."""
        return sorted(key for key in self._animals[animal] if key not in self.reserved)

    def resolve(self, name: str | None) -> str | None:
        """Return the canonical animal name for user input, or None."""
        if name is None:
            return None
        return self._by_folded_name.get(name.strip().casefold())

    def find_yes_attribute(self, animal: str, substring: str) -> str | None:
        """First askable attribute containing ``substring`` whose value is yes."""
        needle = substring.strip().casefold()
        for attribute in self.question_attributes(animal):
            if needle in attribute.casefold() and self.is_yes(animal, attribute):
                return attribute
        return None


def _pivot_columns(raw: dict[str, Any], group_attribute: str) -> dict[str, dict[str, Any]]:
    group_column = raw.get(group_attribute)
    if not isinstance(group_column, dict):
        raise DatasetError(f"Column-oriented dataset is missing the {group_attribute!r} column")
    animals: dict[str, dict[str, Any]] = {name: {} for name in group_column}
    for attribute, column in raw.items():
        if not isinstance(column, dict):
            logger.warning("Skipping non-object dataset column %r", attribute)
            continue
        for name, value in column.items():
            if name in animals and value is not None:
                animals[name][attribute] = value
    return animals


def load_attribute_store(
    path: str | Path,
    yes_marker: str = "yes",
    description_attribute: str = DESCRIPTION_ATTRIBUTE,
    trivia_attribute: str = TRIVIA_ATTRIBUTE,
    group_attribute: str = GROUP_ATTRIBUTE,
) -> AttributeStore:
    """Load a dataset file.

    Accepts the column-oriented layout ``{attribute: {animal: value}}`` keyed
    by the taxonomic-group column, or a row-oriented ``{animal: {attribute:
    value}}`` layout.
    """
    dataset_path = Path(path)
    try:
        raw = json.loads(dataset_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise DatasetError(f"Could not read animal dataset {dataset_path}: {exc}") from exc
    if not isinstance(raw, dict) or not raw:
        raise DatasetError(f"Animal dataset {dataset_path} is empty")

    if isinstance(raw.get(group_attribute), dict):
        animals = _pivot_columns(raw, group_attribute)
    else:
        animals = {name: dict(attrs) for name, attrs in raw.items() if isinstance(attrs, dict)}

    store = AttributeStore(
        animals,
        yes_marker=yes_marker,
        description_attribute=description_attribute,
        trivia_attribute=trivia_attribute,
        group_attribute=group_attribute,
    )
    logger.info("Loaded %d animals from %s", len(store), dataset_path)
    return store
