"""Notification model published to the findings topic."""
from dataclasses import dataclass
from typing import Dict, Any

# SNS rejects subjects longer than this
MAX_SUBJECT_LENGTH = 100
SUBJECT_REPLACEMENT_CHAR = "?"


@dataclass
class FindingNotification:
    """Email-ready summary of a single finding.

    The subject is reduced to printable ASCII and truncated, since SNS
    rejects anything else. The body is published unchanged.
    """
    subject: str
    body: str

    def __post_init__(self):
        self.subject = "".join(
            char if " " <= char <= "~" else SUBJECT_REPLACEMENT_CHAR
            for char in self.subject
        )
        if len(self.subject) > MAX_SUBJECT_LENGTH:
            self.subject = self.subject[: MAX_SUBJECT_LENGTH - 3] + "..."

    def to_publish_kwargs(self, topic_arn: str) -> Dict[str, Any]:
        """Keyword arguments for sns.publish."""
        return {
            "TopicArn": topic_arn,
            "Subject": self.subject,
            "Message": self.body,
        }
