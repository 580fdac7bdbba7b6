"""Unit tests for core data models."""
import pytest

from src.models.finding import (
    GuardDutyFinding,
    FindingSeverity,
    InvalidFindingError,
    UNKNOWN_ACCOUNT,
    UNKNOWN_FINDING_ID,
    UNKNOWN_REGION,
    UNKNOWN_TYPE,
)
from src.models.notification import FindingNotification, MAX_SUBJECT_LENGTH


def test_finding_from_guardduty_event(ssh_brute_force_event):
    """Test that identifiers are taken from the EventBridge envelope."""
    finding = GuardDutyFinding.from_message(ssh_brute_force_event)

    assert finding.account_id == "123456789012"
    assert finding.finding_id == "c8c4daa7-a20c-2f03-0070-b7393dd542ad"
    assert finding.region == "us-east-1"
    assert finding.finding_type == "UnauthorizedAccess:EC2/SSHBruteForce"
    assert finding.title.startswith("198.51.100.0 is performing SSH brute force")
    assert finding.severity_score == 2.0
    assert finding.severity == FindingSeverity.LOW
    assert finding.raw_message is ssh_brute_force_event


def test_finding_defaults_to_sentinels():
    """Test that missing fields fall back to sentinel strings."""
    finding = GuardDutyFinding.from_message({"detail-type": "GuardDuty Finding"})

    assert finding.account_id == UNKNOWN_ACCOUNT
    assert finding.finding_id == UNKNOWN_FINDING_ID
    assert finding.region == UNKNOWN_REGION
    assert finding.finding_type == UNKNOWN_TYPE
    assert finding.title is None
    assert finding.severity == FindingSeverity.UNKNOWN
    assert finding.describe_severity() == "UNKNOWN"


def test_finding_ignores_non_mapping_detail():
    finding = GuardDutyFinding.from_message({"account": "111122223333", "detail": "oops"})

    assert finding.account_id == "111122223333"
    assert finding.finding_type == UNKNOWN_TYPE


@pytest.mark.parametrize("message", [[1, 2, 3], "a string", 42, None])
def test_finding_rejects_non_object_messages(message):
    with pytest.raises(InvalidFindingError):
        GuardDutyFinding.from_message(message)


@pytest.mark.parametrize("score,expected", [
    (1.0, FindingSeverity.LOW),
    (3.9, FindingSeverity.LOW),
    (4.0, FindingSeverity.MEDIUM),
    (6.9, FindingSeverity.MEDIUM),
    (7.0, FindingSeverity.HIGH),
    (8.9, FindingSeverity.HIGH),
    (9.0, FindingSeverity.CRITICAL),
    (None, FindingSeverity.UNKNOWN),
])
def test_severity_bands(score, expected):
    assert FindingSeverity.from_score(score) == expected


@pytest.mark.parametrize("raw", ["high", True, None, {"score": 8}, "nan"])
def test_unparseable_severity_is_unknown(raw):
    finding = GuardDutyFinding.from_message({"detail": {"severity": raw}})

    assert finding.severity_score is None
    assert finding.severity == FindingSeverity.UNKNOWN


def test_severity_accepts_numeric_strings(credential_exfiltration_event):
    credential_exfiltration_event["detail"]["severity"] = "8.5"
    finding = GuardDutyFinding.from_message(credential_exfiltration_event)

    assert finding.severity == FindingSeverity.HIGH
    assert finding.describe_severity() == "HIGH (8.5)"


def test_notification_publish_kwargs():
    notification = FindingNotification(subject="GuardDuty Alert", body="Body text")

    kwargs = notification.to_publish_kwargs("arn:aws:sns:us-east-1:123456789012:topic")
    assert kwargs == {
        "TopicArn": "arn:aws:sns:us-east-1:123456789012:topic",
        "Subject": "GuardDuty Alert",
        "Message": "Body text",
    }


def test_notification_subject_is_truncated():
    notification = FindingNotification(subject="x" * 150, body="")

    assert len(notification.subject) == MAX_SUBJECT_LENGTH
    assert notification.subject.endswith("...")


def test_notification_subject_is_printable_ascii():
    notification = FindingNotification(subject="Account 12\n34\té", body="Account 12\n34\té")

    assert notification.subject == "Account 12?34??"
    assert notification.body == "Account 12\n34\té"
