"""
Point values for each kind of engagement.
"""
from typing import Dict, Tuple

from schemas.engagement import ActionType, ContentType


class PointCatalog:
    """Static lookup of (action type, content type) -> points."""

    POINTS: Dict[Tuple[ActionType, ContentType], float] = {
        (ActionType.LIKE, ContentType.POST): 2.0,
        (ActionType.LIKE, ContentType.REEL): 2.0,
        (ActionType.LIKE, ContentType.STORY): 1.0,
        (ActionType.COMMENT, ContentType.POST): 1.5,
        (ActionType.COMMENT, ContentType.REEL): 3.0,
        (ActionType.COMMENT, ContentType.STORY): 2.0,
        (ActionType.SHARE, ContentType.POST): 3.0,
        (ActionType.SHARE, ContentType.REEL): 3.0,
        (ActionType.SHARE, ContentType.STORY): 3.0,
    }

    # Togglable actions: at most one open event per actor and content item
    LIKE_CLASS = frozenset({ActionType.LIKE})

    @staticmethod
    def points_for(action_type: str, content_type: str) -> float:
        """
        Look up the point value of an engagement.

        Args:
            action_type: 'like', 'comment' or 'share'
            content_type: 'post', 'reel' or 'story'

        Returns:
            Points awarded to the content owner

        Raises:
            ValueError: If the combination is not in the catalog
        """
        key = (ActionType(action_type), ContentType(content_type))
        if key not in PointCatalog.POINTS:
            raise ValueError(f"No point value for {action_type} on {content_type}")
        return PointCatalog.POINTS[key]

    @staticmethod
    def is_like_class(action_type: str) -> bool:
        return ActionType(action_type) in PointCatalog.LIKE_CLASS

    @staticmethod
    def normalize_action(action_type: str) -> str:
        return ActionType(action_type).value

    @staticmethod
    def normalize_content(content_type: str) -> str:
        return ContentType(content_type).value
