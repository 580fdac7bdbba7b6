"""Mock AWS SDK for local simulation and intent logging."""
from typing import Dict, Any, Optional
from datetime import datetime
import io
import json
import uuid

MOCK_SUMMARY = """1. Finding Overview
Simulated summary generated by the local Bedrock mock.

2. Potential Impact
No AWS resources were contacted during this simulation.

3. Recommended Actions
Deploy the stack and review the finding in the GuardDuty console."""


class MockAWSClients:
    """Mock AWS service clients that log intent instead of making calls"""

    def __init__(self, mode: str = "dry_run", summary: str = MOCK_SUMMARY):
        self.mode = mode  # "dry_run" or "intent_only"
        self.summary = summary
        self.logs = []

    def log_intent(self, service: str, operation: str, params: Dict[str, Any]):
        """Log API call intent"""
        log_entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "service": service,
            "operation": operation,
            "parameters": params,
            "mode": self.mode,
            "intent": "This API call would be made in production"
        }
        self.logs.append(log_entry)
        print(f"[MOCK AWS] {service}.{operation} called with params: {json.dumps(params, default=str)[:200]}")
        return log_entry

    def get_bedrock_client(self):
        """Mock bedrock-runtime client"""
        class MockBedrockRuntimeClient:
            def __init__(self, parent):
                self.parent = parent

            def invoke_model(self, **kwargs):
                self.parent.log_intent("bedrock-runtime", "InvokeModel", {
                    "modelId": kwargs.get("modelId"),
                    "body": json.loads(kwargs.get("body", "{}")),
                })
                if "amazon.nova" in (kwargs.get("modelId") or ""):
                    payload = {"output": {"message": {"content": [{"text": self.parent.summary}]}}}
                else:
                    payload = {"content": [{"type": "text", "text": self.parent.summary}]}
                return {
                    "body": io.BytesIO(json.dumps(payload).encode("utf-8")),
                    "contentType": "application/json",
                    "ResponseMetadata": {"HTTPStatusCode": 200}
                }

        return MockBedrockRuntimeClient(self)

    def get_sns_client(self):
        """Mock SNS client"""
        class MockSNSClient:
            def __init__(self, parent):
                self.parent = parent

            def publish(self, **kwargs):
                self.parent.log_intent("sns", "Publish", kwargs)
                return {
                    "MessageId": str(uuid.uuid4()),
                    "ResponseMetadata": {"HTTPStatusCode": 200}
                }

        return MockSNSClient(self)

    def get_logs(self, service: Optional[str] = None) -> list:
        """Get logged intents, optionally for one service"""
        if service is None:
            return self.logs
        return [log for log in self.logs if log["service"] == service]

    def clear_logs(self):
        """Clear intent logs"""
        self.logs = []
