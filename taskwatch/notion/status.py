"""Map free-form status labels onto canonical lifecycle buckets."""

from typing import Any, Callable, Dict, List, Optional, Tuple

from .models import NormalizedStatus, StatusBucket

StatusRule = Tuple[Callable[[str], bool], StatusBucket]


def _contains_any(*needles: str) -> Callable[[str], bool]:
    def predicate(label: str) -> bool:
        return any(needle in label for needle in needles)

    return predicate


# Evaluated top to bottom against the lowercased label; first match wins.
STATUS_RULES: List[StatusRule] = [
    (_contains_any("todo", "to-do", "backlog", "planning"), StatusBucket.TODO),
    (
        _contains_any("progress", "working", "development", "review", "testing"),
        StatusBucket.IN_PROGRESS,
    ),
    (
        _contains_any("done", "completed", "finished", "deployed", "closed"),
        StatusBucket.COMPLETED,
    ),
]

DEFAULT_BUCKET = StatusBucket.TODO
DEFAULT_COLOR = "default"


class StatusNormalizer:
    """Pure label -> bucket mapping driven by an ordered rule table."""

    def __init__(
        self,
        rules: Optional[List[StatusRule]] = None,
        default: StatusBucket = DEFAULT_BUCKET,
    ):
        self.rules = list(STATUS_RULES) if rules is None else list(rules)
        self.default = default

    def bucket_for(self, label: str) -> StatusBucket:
        lowered = (label or "").lower()
        for predicate, bucket in self.rules:
            if predicate(lowered):
                return bucket
        return self.default

    def normalize(self, raw_label: str, raw_color: Optional[str] = None) -> NormalizedStatus:
        """
        Normalize a status label.

        Args:
            raw_label: Status name as shown in Notion
            raw_color: Notion color name, passed through for display only

        Returns:
            NormalizedStatus carrying the canonical bucket
        """
        label = raw_label or ""
        bucket = self.bucket_for(label)
        return NormalizedStatus(
            raw_label=label,
            color=raw_color or DEFAULT_COLOR,
            bucket=bucket,
            sub_label=label if label != bucket.value else None,
        )


def read_status_property(properties: Dict[str, Any]) -> Optional[Tuple[str, str]]:
    """
    Read the (label, color) of a record's Status property.

    Both the `status` property type and the older `select` type are
    supported.

    Returns:
        (label, color), or None when the record has no usable status
    """
    prop = properties.get("Status")
    if not isinstance(prop, dict):
        return None

    for key in ("status", "select"):
        option = prop.get(key)
        if isinstance(option, dict) and option.get("name"):
            return option["name"], option.get("color") or DEFAULT_COLOR
    return None
