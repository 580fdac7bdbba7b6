"""Lambda handler that summarizes GuardDuty findings from SQS and emails them."""
import json
import logging
import os
from typing import Dict, Any, Optional

import boto3
from botocore.exceptions import ClientError

from src.models.finding import GuardDutyFinding
from src.models.notification import FindingNotification
from .bedrock_summarizer import BedrockSummarizer, DEFAULT_MODEL_ID
from .notifier import FindingNotifier

logger = logging.getLogger()
logger.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())

SUCCESS_RESPONSE = {
    "statusCode": 200,
    "body": json.dumps("Processing completed successfully")
}

# Global instances for reuse across Lambda invocations
summarizer = None
notifier = None


class ConfigurationError(Exception):
    """Raised when the function is deployed without required settings."""
    pass


def initialize_clients(bedrock_client=None, sns_client=None):
    """Create the summarizer and notifier from environment settings."""
    global summarizer, notifier

    if summarizer is None:
        summarizer = BedrockSummarizer(
            bedrock_client or boto3.client("bedrock-runtime"),
            model_id=os.getenv("BEDROCK_MODEL_ID", DEFAULT_MODEL_ID),
            max_tokens=int(os.getenv("BEDROCK_MAX_TOKENS", "1000")),
            temperature=float(os.getenv("BEDROCK_TEMPERATURE", "0.5")),
            top_p=float(os.getenv("BEDROCK_TOP_P", "1")),
            top_k=int(os.getenv("BEDROCK_TOP_K", "250")),
        )
        logger.info(f"Bedrock summarizer initialized with model {summarizer.model_id}")

    if notifier is None:
        topic_arn = os.getenv("SNS_TOPIC_ARN")
        if not topic_arn:
            raise ConfigurationError("SNS_TOPIC_ARN environment variable is not set")
        notifier = FindingNotifier(sns_client or boto3.client("sns"), topic_arn)


def reset_clients():
    """Drop cached clients so the next invocation re-reads configuration."""
    global summarizer, notifier
    summarizer = None
    notifier = None


def lambda_handler(event: Dict[str, Any], context) -> Dict[str, Any]:
    """Summarize each queued finding and publish it by email.

    Records are processed independently: a failure is logged and the next
    record is still handled. The response is always the fixed success
    payload; redelivery is left to the event-source mapping.
    """
    logger.info(f"Received event: {json.dumps(event, default=str)}")

    initialize_clients()

    records = event.get("Records", [])
    failed = 0
    for record in records:
        if handle_record(record) is None:
            failed += 1

    logger.info(f"Finished processing all records: {len(records) - failed} sent, {failed} failed")
    return dict(SUCCESS_RESPONSE)


def handle_record(record: Dict[str, Any]) -> Optional[FindingNotification]:
    """Process one record, logging rather than raising on failure."""
    try:
        return process_record(record, summarizer, notifier)
    except ClientError as e:
        logger.error(f"Error processing GuardDuty finding: {e}")
    except json.JSONDecodeError as e:
        logger.error(f"Error decoding JSON: {e}")
    except KeyError as e:
        logger.error(f"Key error in response: {e}")
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
    return None


def process_record(record: Dict[str, Any], summarizer: BedrockSummarizer,
                   notifier: FindingNotifier) -> FindingNotification:
    """Summarize a single SQS record and publish the result."""
    message = json.loads(record["body"])
    logger.info(f"Processing message: {json.dumps(message, default=str)}")

    finding = GuardDutyFinding.from_message(message)

    summary = summarizer.summarize(finding)
    logger.info(f"Generated summary: {summary}")

    return notifier.notify(finding, summary)
