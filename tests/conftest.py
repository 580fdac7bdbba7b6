"""Shared pytest configuration and fixtures."""
import json
from io import BytesIO
import os
import sys
from pathlib import Path

import pytest

# boto3 clients need a region even when they are never called
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("AWS_REGION", "us-east-1")

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

EVENTS_DIR = PROJECT_ROOT / "events" / "guardduty"


@pytest.fixture
def ssh_brute_force_event():
    with open(EVENTS_DIR / "unauthorized_access_ssh_brute_force.json", "r") as f:
        return json.load(f)


@pytest.fixture
def credential_exfiltration_event():
    with open(EVENTS_DIR / "credential_exfiltration.json", "r") as f:
        return json.load(f)


@pytest.fixture
def bedrock_response():
    """Factory for invoke_model responses wrapping a JSON payload."""
    def _make(payload):
        return {"body": BytesIO(json.dumps(payload).encode("utf-8"))}
    return _make
