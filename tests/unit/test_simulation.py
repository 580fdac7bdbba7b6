"""Tests for the local simulation harness."""
import json
from pathlib import Path

import pytest
from freezegun import freeze_time

from simulation.aws_mock import MockAWSClients, MOCK_SUMMARY
from simulation.event_simulator import EventSimulator, build_sqs_event, MALFORMED_BODY
from src.summarizer import handler

EVENTS_DIR = Path(__file__).resolve().parents[2] / "events" / "guardduty"


@pytest.fixture
def simulator(monkeypatch):
    monkeypatch.setenv("SNS_TOPIC_ARN", "arn:aws:sns:us-east-1:123456789012:local")
    sim = EventSimulator()
    yield sim
    handler.reset_clients()


def test_build_sqs_event_encodes_bodies(ssh_brute_force_event):
    event = build_sqs_event([ssh_brute_force_event, MALFORMED_BODY])

    records = event["Records"]
    assert len(records) == 2
    assert json.loads(records[0]["body"]) == ssh_brute_force_event
    assert records[1]["body"] == MALFORMED_BODY
    assert all(r["eventSource"] == "aws:sqs" for r in records)


@freeze_time("2024-05-14 10:30:00")
def test_mock_sns_logs_publish_intent():
    aws = MockAWSClients()

    response = aws.get_sns_client().publish(TopicArn="arn:topic", Subject="s", Message="m")

    assert response["ResponseMetadata"]["HTTPStatusCode"] == 200
    logs = aws.get_logs("sns")
    assert len(logs) == 1
    assert logs[0]["operation"] == "Publish"
    assert logs[0]["timestamp"] == "2024-05-14T10:30:00"
    assert logs[0]["parameters"]["Subject"] == "s"


def test_mock_bedrock_returns_model_specific_payload():
    aws = MockAWSClients(summary="canned")
    client = aws.get_bedrock_client()

    claude = json.loads(client.invoke_model(modelId="anthropic.claude-3", body="{}")["body"].read())
    nova = json.loads(client.invoke_model(modelId="amazon.nova-lite-v1:0", body="{}")["body"].read())

    assert claude["content"][0]["text"] == "canned"
    assert nova["output"]["message"]["content"][0]["text"] == "canned"
    assert len(aws.get_logs("bedrock-runtime")) == 2


def test_simulation_publishes_one_email_per_sample(simulator):
    published = simulator.run_simulation(str(EVENTS_DIR), include_malformed=True)

    sample_count = len(list(EVENTS_DIR.glob("*.json")))
    assert len(published) == sample_count
    assert len(simulator.aws_client.get_logs("bedrock-runtime")) == sample_count
    assert all(MOCK_SUMMARY in log["parameters"]["Message"] for log in published)


def test_simulation_missing_directory_returns_nothing(simulator, tmp_path):
    assert simulator.run_simulation(str(tmp_path / "missing")) == []
    assert simulator.aws_client.get_logs() == []


def test_process_bodies_returns_handler_response(simulator, credential_exfiltration_event):
    response = simulator.process_bodies([credential_exfiltration_event])

    assert response["statusCode"] == 200
    subject = simulator.aws_client.get_logs("sns")[0]["parameters"]["Subject"]
    assert subject == "GuardDuty Alert: Finding Summary for Account 210987654321"
