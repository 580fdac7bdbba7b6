"""Event simulation harness for local testing."""

import json
import os
import sys
import uuid
from pathlib import Path
from typing import List, Dict, Any

# =============================================================================
# Ensure project root is in sys.path BEFORE any src imports
# =============================================================================
PROJECT_ROOT = Path(__file__).parent.parent.resolve()
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Now safe to import from src
from src.summarizer import handler
from simulation.aws_mock import MockAWSClients

MOCK_TOPIC_ARN = "arn:aws:sns:us-east-1:123456789012:guardduty-summarizer-local"
MALFORMED_BODY = "{not valid json"


def build_sqs_event(bodies: List[Any]) -> Dict[str, Any]:
    """Wrap message bodies the way the SQS event-source mapping delivers them.

    Strings are used as-is so malformed payloads can be simulated; anything
    else is JSON-encoded.
    """
    records = []
    for body in bodies:
        records.append({
            "messageId": str(uuid.uuid4()),
            "receiptHandle": f"simulated-{uuid.uuid4()}",
            "body": body if isinstance(body, str) else json.dumps(body),
            "attributes": {"ApproximateReceiveCount": "1"},
            "messageAttributes": {},
            "eventSource": "aws:sqs",
            "eventSourceARN": "arn:aws:sqs:us-east-1:123456789012:guardduty-summarizer-local-guardduty-queue",
            "awsRegion": "us-east-1",
        })
    return {"Records": records}


class EventSimulator:
    """Runs GuardDuty sample events through the summarizer handler."""

    def __init__(self, mode: str = "dry_run"):
        self.mode = mode
        self.aws_client = MockAWSClients(mode=mode)

        os.environ.setdefault("SNS_TOPIC_ARN", MOCK_TOPIC_ARN)
        handler.reset_clients()
        handler.initialize_clients(
            bedrock_client=self.aws_client.get_bedrock_client(),
            sns_client=self.aws_client.get_sns_client(),
        )

    def load_event_file(self, event_file_path: str) -> Dict[str, Any]:
        with open(event_file_path, 'r') as f:
            return json.load(f)

    def process_bodies(self, bodies: List[Any]) -> Dict[str, Any]:
        """Deliver bodies as one SQS batch and return the handler response."""
        return handler.lambda_handler(build_sqs_event(bodies), None)

    def run_simulation(self, events_dir: str = "events/guardduty",
                       include_malformed: bool = False) -> List[Dict[str, Any]]:
        """Run simulation on all event files in a directory."""
        events_path = Path(events_dir)

        if not events_path.exists():
            print(f"❌ Events directory not found: {events_dir}")
            return []

        print("🚀 Starting GuardDuty Summarizer Simulation")
        print("=" * 50)

        event_files = sorted(events_path.glob("*.json"))
        bodies: List[Any] = []
        for event_file in event_files:
            print(f"\n🔍 Loading event file: {event_file}")
            bodies.append(self.load_event_file(str(event_file)))

        if include_malformed:
            print("\n🧪 Adding a malformed message to the batch")
            bodies.insert(0, MALFORMED_BODY)

        response = self.process_bodies(bodies)

        published = self.aws_client.get_logs("sns")

        print("\n" + "=" * 50)
        print("📊 Simulation Summary")
        print(f" Total messages delivered: {len(bodies)}")
        print(f" Notifications published: {len(published)}")
        print(f" Handler response: {json.dumps(response)}")

        print(f"\n🔧 AWS API Intent Logs ({self.mode} mode):")
        print("-" * 30)
        logs = self.aws_client.get_logs()
        if logs:
            for i, log in enumerate(logs, 1):
                print(f"{i}. {log['service']}.{log['operation']}")
        else:
            print("No AWS API calls were triggered")

        return published


def main():
    """Main entry point for simulation."""
    import argparse

    from dotenv import load_dotenv

    parser = argparse.ArgumentParser(description="GuardDuty Summarizer Event Simulator")
    parser.add_argument("--mode", choices=["dry_run", "intent_only"],
                        default="dry_run", help="Execution mode")
    parser.add_argument("--event-file", help="Process single event file")
    parser.add_argument("--events-dir", default="events/guardduty",
                        help="Directory containing event files")
    parser.add_argument("--include-malformed", action="store_true",
                        help="Prepend a non-JSON message to the batch")

    args = parser.parse_args()

    load_dotenv()
    simulator = EventSimulator(mode=args.mode)

    if args.event_file:
        bodies: List[Any] = [simulator.load_event_file(args.event_file)]
        if args.include_malformed:
            bodies.insert(0, MALFORMED_BODY)
        simulator.process_bodies(bodies)
        published = simulator.aws_client.get_logs("sns")
    else:
        published = simulator.run_simulation(args.events_dir, args.include_malformed)

    for log in published:
        print("\n📧 " + log["parameters"]["Subject"])
        print(log["parameters"]["Message"])


if __name__ == "__main__":
    main()
