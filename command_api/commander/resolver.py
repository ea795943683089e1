from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .directory import DestinationDirectory
from .logging_utils import setup_orchestrator_logger
from .models import DestinationEntry

logger = setup_orchestrator_logger("resolver")


@dataclass(frozen=True)
class MatchCandidate:
    entry: DestinationEntry
    score: int


def take_snapshot(directory: DestinationDirectory) -> List[DestinationEntry]:
    """Read the active destinations once; an unreachable directory reads as empty."""
    try:
        return list(directory.list_active_destinations() or [])
    except Exception as e:
        logger.warning(f"⚠️ Destination directory unavailable: {e}")
        return []


def _distinct(keywords: Iterable[str]) -> list[str]:
    seen = []
    for kw in keywords:
        kw = (kw or "").strip().casefold()
        if kw and kw not in seen:
            seen.append(kw)
    return seen


@dataclass(frozen=True)
class DestinationResolver:
    """Fuzzy destination matching for phrases extracted from commands.

    Scoring, case-insensitive:
    - full phrase contained in the name: +10
    - each distinct keyword contained in the name: +5
    - once at least min(2, len(keywords)) keywords match: +3 per matched keyword

    A score of 0 never matches. Ties go to the name that sorts first
    (case-folded), then to the earlier directory position.
    """

    phrase_points: int = 10
    keyword_points: int = 5
    agreement_points: int = 3

    def score(self, name: str, phrase: str, keywords: Sequence[str]) -> int:
        name_l = (name or "").casefold()
        phrase_l = (phrase or "").strip().casefold()
        terms = _distinct(keywords)

        score = 0
        if phrase_l and phrase_l in name_l:
            score += self.phrase_points

        matched = sum(1 for term in terms if term in name_l)
        score += matched * self.keyword_points

        if terms and matched >= min(2, len(terms)):
            score += matched * self.agreement_points

        return score

    def rank(self,
             phrase: Optional[str],
             keywords: Sequence[str],
             destinations: Sequence[DestinationEntry]) -> List[MatchCandidate]:
        """All destinations with a positive score, best first."""
        if not (phrase or "").strip():
            return []

        scored = []
        for position, entry in enumerate(destinations):
            score = self.score(entry.name, phrase, keywords)
            if score > 0:
                scored.append((position, MatchCandidate(entry=entry, score=score)))

        scored.sort(key=lambda item: (-item[1].score, item[1].entry.name.casefold(), item[0]))
        return [candidate for _, candidate in scored]

    def resolve(self,
                phrase: Optional[str],
                keywords: Sequence[str],
                destinations: Sequence[DestinationEntry]) -> Optional[MatchCandidate]:
        candidates = self.rank(phrase, keywords, destinations)
        if not candidates:
            logger.debug(f"❌ No destination matches '{phrase}' {list(keywords)}")
            return None

        # Top candidates only, the full ranking can be long
        top = [(c.entry.name, c.score) for c in candidates[:3]]
        logger.debug(f"📊 {len(candidates)} candidates, top: {top}")

        best = candidates[0]
        logger.debug(f"🎯 Selected destination: {best.entry.name} (score: {best.score})")
        return best
