"""GuardDuty finding model - the record that flows through the summarizer."""
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any

UNKNOWN_ACCOUNT = "Unknown Account"
UNKNOWN_FINDING_ID = "Unknown Finding ID"
UNKNOWN_REGION = "Unknown Region"
UNKNOWN_TYPE = "Unknown Type"


class InvalidFindingError(ValueError):
    """Raised when a queue message does not decode to a finding envelope."""
    pass


class FindingSeverity(str, Enum):
    """GuardDuty severity bands, derived from the numeric score."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_score(cls, score: Optional[float]) -> "FindingSeverity":
        if score is None:
            return cls.UNKNOWN
        if score < 4.0:
            return cls.LOW
        if score < 7.0:
            return cls.MEDIUM
        if score < 9.0:
            return cls.HIGH
        return cls.CRITICAL


@dataclass
class GuardDutyFinding:
    """Read-only view over a GuardDuty EventBridge envelope.

    Missing identifiers fall back to sentinel strings so a partial message
    can still be summarized and mailed.
    """

    account_id: str = UNKNOWN_ACCOUNT
    finding_id: str = UNKNOWN_FINDING_ID
    region: str = UNKNOWN_REGION
    finding_type: str = UNKNOWN_TYPE
    title: Optional[str] = None
    severity_score: Optional[float] = None
    raw_message: Dict[str, Any] = field(default_factory=dict)

    @property
    def severity(self) -> FindingSeverity:
        return FindingSeverity.from_score(self.severity_score)

    @classmethod
    def from_message(cls, message: Any) -> "GuardDutyFinding":
        """Create from a decoded queue message body."""
        if not isinstance(message, dict):
            raise InvalidFindingError(
                f"Expected a JSON object, got {type(message).__name__}"
            )

        detail = message.get("detail")
        if not isinstance(detail, dict):
            detail = {}

        return cls(
            account_id=message.get("account", UNKNOWN_ACCOUNT),
            finding_id=message.get("id", UNKNOWN_FINDING_ID),
            region=message.get("region", UNKNOWN_REGION),
            finding_type=detail.get("type", UNKNOWN_TYPE),
            title=detail.get("title"),
            severity_score=_parse_score(detail.get("severity")),
            raw_message=message,
        )

    def describe_severity(self) -> str:
        """Human-readable severity, e.g. "HIGH (8.0)"."""
        if self.severity_score is None:
            return self.severity.value
        return f"{self.severity.value} ({self.severity_score})"


def _parse_score(value: Any) -> Optional[float]:
    # bool is an int subclass but never a valid score
    if isinstance(value, bool):
        return None
    try:
        score = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(score) else score
