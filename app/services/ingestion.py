"""Outcomes of ingesting provider titles into the catalog."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Union

from app.models.title import Title


class IngestionStage(str, Enum):
    """Step at which ingesting a candidate failed."""

    STORE = "store"
    INDEX = "index"


@dataclass(frozen=True)
class Ingested:
    """A candidate that was persisted and indexed."""

    title: Title


@dataclass(frozen=True)
class IngestionFailure:
    """A candidate that could not be ingested and is left out of the result."""

    candidate: Title
    stage: IngestionStage
    error: Exception


IngestionOutcome = Union[Ingested, IngestionFailure]


def successful_titles(outcomes: Iterable[IngestionOutcome]) -> List[Title]:
    """Keep ingested titles in order, discarding failures."""
    return [o.title for o in outcomes if isinstance(o, Ingested)]


def failures(outcomes: Iterable[IngestionOutcome]) -> List[IngestionFailure]:
    return [o for o in outcomes if isinstance(o, IngestionFailure)]
