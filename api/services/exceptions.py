"""
Service-layer errors raised by the leaderboard engine.
"""


class LeaderboardError(Exception):
    def __init__(self, code="LEADERBOARD_ERROR", message="Leaderboard error", details=None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class NoActivePeriodError(LeaderboardError):
    """No active period could be resolved for a point-bearing write."""

    def __init__(self, message="No active leaderboard period", details=None):
        super().__init__("NO_ACTIVE_PERIOD", message, details)


class PeriodStateError(LeaderboardError):
    def __init__(self, message="Leaderboard period is in the wrong state", details=None):
        super().__init__("PERIOD_STATE", message, details)


class RankingInvariantError(LeaderboardError):
    """A structural invariant of the ranking tables was violated."""

    def __init__(self, message="Ranking invariant violated", details=None):
        super().__init__("RANKING_INVARIANT", message, details)
