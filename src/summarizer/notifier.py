"""Email formatting and SNS delivery for finding summaries."""
import logging

from src.models.finding import GuardDutyFinding
from src.models.notification import FindingNotification

logger = logging.getLogger(__name__)

EMAIL_BODY_TEMPLATE = """
GuardDuty Finding Summary and Recommendations

Account ID: {account_id}
Finding ID: {finding_id}
Region: {region}
Finding Type: {finding_type}
Severity: {severity}

{summary}

For more details, please check the AWS GuardDuty console.

This is an automated message. Please do not reply to this email.
"""


def format_subject(finding: GuardDutyFinding) -> str:
    return f"GuardDuty Alert: Finding Summary for Account {finding.account_id}"


def format_email_body(finding: GuardDutyFinding, summary: str) -> str:
    """Plain-text email body; identifiers are copied verbatim."""
    return EMAIL_BODY_TEMPLATE.format(
        account_id=finding.account_id,
        finding_id=finding.finding_id,
        region=finding.region,
        finding_type=finding.finding_type,
        severity=finding.describe_severity(),
        summary=summary,
    )


class FindingNotifier:
    """Publishes finding summaries to the notification topic."""

    def __init__(self, sns_client, topic_arn: str):
        self.sns_client = sns_client
        self.topic_arn = topic_arn

    def build_notification(self, finding: GuardDutyFinding, summary: str) -> FindingNotification:
        return FindingNotification(
            subject=format_subject(finding),
            body=format_email_body(finding, summary),
        )

    def notify(self, finding: GuardDutyFinding, summary: str) -> FindingNotification:
        notification = self.build_notification(finding, summary)

        logger.info(f"Sending summary to SNS topic: {self.topic_arn}")
        self.sns_client.publish(**notification.to_publish_kwargs(self.topic_arn))
        logger.info(f"Summary sent for finding {finding.finding_id}")

        return notification
