from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Rank:
    tier: str
    title: str
    min_xp: int
    icon: str


@dataclass(frozen=True)
class RankProgress:
    current_rank: str
    current_xp: int
    xp_to_next_rank: Optional[int]
    progress_percent: int


RANKS: List[Rank] = [
    Rank("beginner", "Beginner", 0, "🌱"),
    Rank("intermediate", "Intermediate", 500, "⚡"),
    Rank("proficient", "Proficient", 2000, "🌟"),
    Rank("master", "Master", 5000, "👑"),
]


def get_rank_by_xp(xp: int) -> Rank:
    for rank in reversed(RANKS):
        if xp >= rank.min_xp:
            return rank
    return RANKS[0]


def get_rank_progress(xp: int) -> RankProgress:
    rank = get_rank_by_xp(xp)
    higher = [r for r in RANKS if r.min_xp > rank.min_xp]
    if not higher:
        return RankProgress(rank.tier, xp, None, 100)

    nxt = higher[0]
    span = nxt.min_xp - rank.min_xp
    percent = min(100, int((xp - rank.min_xp) / span * 100 + 0.5))
    return RankProgress(rank.tier, xp, nxt.min_xp - xp, percent)


def check_rank_up(old_xp: int, new_xp: int) -> Optional[str]:
    old, new = get_rank_by_xp(old_xp), get_rank_by_xp(new_xp)
    return new.tier if new.tier != old.tier else None
