"""Best-match selection over all enrolled descriptors."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence

from facelogin.db import models
from facelogin.errors import NoEnrollments, PerceptionServiceError

logger = logging.getLogger(__name__)

ACCEPTANCE_THRESHOLD = 70


@dataclass(slots=True, frozen=True)
class MatchCandidate:
    """Score of one enrolled descriptor against the submitted face."""

    account_id: str
    similarity_score: int
    index: int


class DescriptorComparer(Protocol):
    async def compare(self, submitted: str, stored: str) -> int: ...


def pick_best(
    candidates: Iterable[MatchCandidate],
    threshold: int = ACCEPTANCE_THRESHOLD,
) -> MatchCandidate | None:
    """
    Return the highest candidate at or above ``threshold``.

    Candidates are walked in encounter order, and a later one replaces the
    current best only with a strictly greater score, so equal top scores
    resolve to the earliest enrollment.
    """

    best: MatchCandidate | None = None
    for candidate in sorted(candidates, key=lambda item: item.index):
        if candidate.similarity_score < threshold:
            continue
        if best is None or candidate.similarity_score > best.similarity_score:
            best = candidate
    return best


class MatchSelector:
    """Scores the submitted descriptor against every enrollment (1-to-N)."""

    def __init__(
        self,
        comparer: DescriptorComparer,
        *,
        concurrency: int = 4,
        threshold: int = ACCEPTANCE_THRESHOLD,
    ) -> None:
        self._comparer = comparer
        self._concurrency = max(1, concurrency)
        self._threshold = threshold

    async def _score(
        self,
        semaphore: asyncio.Semaphore,
        index: int,
        submitted: str,
        record: models.FaceData,
    ) -> MatchCandidate:
        async with semaphore:
            try:
                score = await self._comparer.compare(submitted, record.descriptor_text)
            except PerceptionServiceError as exc:
                logger.warning("Comparison with account %s failed: %s", record.account_id, exc)
                score = 0
        score = min(100, max(0, int(score)))
        logger.debug("Account %s scored %d", record.account_id, score)
        return MatchCandidate(account_id=record.account_id, similarity_score=score, index=index)

    async def score_all(
        self,
        submitted: str,
        records: Sequence[models.FaceData],
    ) -> list[MatchCandidate]:
        """Run every comparison with bounded parallelism, in encounter order."""

        semaphore = asyncio.Semaphore(self._concurrency)
        candidates = await asyncio.gather(
            *(
                self._score(semaphore, index, submitted, record)
                for index, record in enumerate(records)
            )
        )
        return sorted(candidates, key=lambda item: item.index)

    async def select(
        self,
        submitted: str,
        records: Sequence[models.FaceData],
    ) -> MatchCandidate | None:
        if not records:
            raise NoEnrollments()

        logger.info("Comparing against %d enrolled descriptors", len(records))
        candidates = await self.score_all(submitted, records)
        best = pick_best(candidates, self._threshold)
        if best is None:
            top = max(candidate.similarity_score for candidate in candidates)
            logger.info("No candidate reached %d (top score %d)", self._threshold, top)
        else:
            logger.info(
                "Best match account=%s similarity=%d", best.account_id, best.similarity_score
            )
        return best
