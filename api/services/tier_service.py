"""
Mapping from leaderboard position to mythological tier and period-close reward.
"""
from enum import Enum
from typing import NamedTuple, Optional

from config import settings


class RankTier(str, Enum):
    """Tiers from highest to lowest prestige."""
    LOKI = "Loki of Klicktape"
    ODIN = "Odin of Klicktape"
    POSEIDON = "Poseidon of Klicktape"
    ZEUS = "Zeus of Klicktape"
    HERCULES = "Hercules of Klicktape"


TIERS_BY_PRESTIGE = (
    RankTier.LOKI,
    RankTier.ODIN,
    RankTier.POSEIDON,
    RankTier.ZEUS,
    RankTier.HERCULES,
)


class RewardSpec(NamedTuple):
    reward_type: str
    title_text: Optional[str]
    badge_icon: Optional[str]


# Zeus and Hercules share the entry-level title
REWARDS_BY_TIER = {
    RankTier.LOKI: RewardSpec("premium_badge", None, "premium_star"),
    RankTier.ODIN: RewardSpec("normal_badge", None, "star"),
    RankTier.POSEIDON: RewardSpec("premium_title", "Engagement Master", None),
    RankTier.ZEUS: RewardSpec("normal_title", "Active Member", None),
    RankTier.HERCULES: RewardSpec("normal_title", "Active Member", None),
}


def tier_for_rank(position: int) -> RankTier:
    """
    Get the tier for a leaderboard position.

    Positions are grouped in consecutive bands of LEADERBOARD_TIER_BAND
    (1-10, 11-20, ... 41-50).

    Raises:
        ValueError: If position is outside 1..LEADERBOARD_SIZE
    """
    if position < 1 or position > settings.LEADERBOARD_SIZE:
        raise ValueError(f"Rank position must be between 1 and {settings.LEADERBOARD_SIZE}, got {position}")

    band = (position - 1) // settings.LEADERBOARD_TIER_BAND
    return TIERS_BY_PRESTIGE[min(band, len(TIERS_BY_PRESTIGE) - 1)]


def tier_bounds(tier: RankTier):
    """Return the (first, last) positions covered by a tier."""
    index = TIERS_BY_PRESTIGE.index(RankTier(tier))
    first = index * settings.LEADERBOARD_TIER_BAND + 1
    if index == len(TIERS_BY_PRESTIGE) - 1:
        return first, settings.LEADERBOARD_SIZE
    return first, first + settings.LEADERBOARD_TIER_BAND - 1


def reward_for_rank(position: int) -> RewardSpec:
    """Reward issued at period close for a final position."""
    return REWARDS_BY_TIER[tier_for_rank(position)]
