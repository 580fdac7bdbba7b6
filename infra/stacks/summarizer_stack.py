"""GuardDuty finding summarizer infrastructure stack."""
from pathlib import Path

from aws_cdk import (
    Stack,
    Duration,
    CfnParameter,
    aws_lambda as lambda_,
    aws_lambda_event_sources as lambda_event_sources,
    aws_events as events,
    aws_events_targets as targets,
    aws_iam as iam,
    aws_sns as sns,
    aws_sns_subscriptions as subscriptions,
    aws_sqs as sqs,
    CfnOutput,
)
from constructs import Construct

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_MODEL_ID = "anthropic.claude-3-sonnet-20240229-v1:0"

# Only src/ ships with the function; boto3 comes from the Lambda runtime
ASSET_EXCLUDES = [
    "infra",
    "tests",
    "simulation",
    "events",
    "cdk.out",
    ".git",
    ".env",
    "*.patch",
    ".venv",
    ".pytest_cache",
    ".mypy_cache",
    "*.egg-info",
    "**/__pycache__",
    "*.md",
    "*.txt",
    "setup.py",
]


class GuardDutySummarizerStack(Stack):
    """Routes GuardDuty findings through Bedrock and emails the summary."""

    def __init__(self, scope: Construct, construct_id: str, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # Get context
        environment = self.node.try_get_context("environment") or "dev"
        model_id = self.node.try_get_context("bedrock_model_id") or DEFAULT_MODEL_ID
        function_timeout = Duration.seconds(30)

        email_address = CfnParameter(
            self, "EmailAddress",
            type="String",
            description="Email address to receive GuardDuty notifications"
        )

        # Queue between EventBridge and the function
        queue = sqs.Queue(
            self, "GuardDutyQueue",
            queue_name=f"{self.stack_name}-guardduty-queue",
            visibility_timeout=Duration.seconds(function_timeout.to_seconds() * 6),
        )

        # The SQS target also attaches the queue policy for events.amazonaws.com
        guardduty_rule = events.Rule(
            self, "GuardDutyEventRule",
            description="EventRule for GuardDuty",
            enabled=True,
            event_pattern=events.EventPattern(
                source=["aws.guardduty"],
                detail_type=["GuardDuty Finding"]
            )
        )
        guardduty_rule.add_target(targets.SqsQueue(queue))

        # Notification topic with email fan-out
        topic = sns.Topic(
            self, "GuardDutyNotificationTopic",
            topic_name=f"{self.stack_name}-guardduty-notifications",
            display_name=f"guardduty-summaries-{environment}"
        )
        topic.add_subscription(
            subscriptions.EmailSubscription(email_address.value_as_string)
        )

        function_role = iam.Role(
            self, "GuardDutyProcessingFunctionRole",
            assumed_by=iam.ServicePrincipal("lambda.amazonaws.com"),
            description="Role for the GuardDuty finding summarizer",
            managed_policies=[
                iam.ManagedPolicy.from_aws_managed_policy_name(
                    "service-role/AWSLambdaBasicExecutionRole"
                )
            ],
        )

        function_role.add_to_policy(
            iam.PolicyStatement(
                actions=["bedrock:InvokeModel"],
                resources=self._model_arns(model_id)
            )
        )
        topic.grant_publish(function_role)
        queue.grant_consume_messages(function_role)

        processing_lambda = lambda_.Function(
            self, "GuardDutyProcessingFunction",
            runtime=lambda_.Runtime.PYTHON_3_11,
            handler="src.summarizer.handler.lambda_handler",
            code=lambda_.Code.from_asset(str(PROJECT_ROOT), exclude=ASSET_EXCLUDES),
            timeout=function_timeout,
            memory_size=256,
            role=function_role,
            environment={
                "SNS_TOPIC_ARN": topic.topic_arn,
                "BEDROCK_MODEL_ID": model_id,
                "ENVIRONMENT": environment,
                "LOG_LEVEL": "INFO"
            },
            tracing=lambda_.Tracing.ACTIVE,
        )

        # One message per invocation; retries are left to SQS redelivery
        processing_lambda.add_event_source(
            lambda_event_sources.SqsEventSource(queue, batch_size=1)
        )

        # Store references
        self.queue = queue
        self.topic = topic
        self.guardduty_rule = guardduty_rule
        self.processing_lambda = processing_lambda

        # Outputs
        CfnOutput(self, "GuardDutyQueueUrl",
                  value=queue.queue_url,
                  description="The URL of the SQS queue for GuardDuty notifications")

        CfnOutput(self, "GuardDutyQueueArn",
                  value=queue.queue_arn,
                  description="The ARN of the SQS queue for GuardDuty notifications")

        CfnOutput(self, "GuardDutyNotificationTopicArn",
                  value=topic.topic_arn,
                  description="The ARN of the SNS topic for GuardDuty notifications")

    def _model_arns(self, model_id: str) -> list:
        """Resources bedrock:InvokeModel needs for a model id or inference profile."""
        if model_id.startswith("arn:"):
            return [model_id]
        # Cross-region inference profiles carry a geography prefix, e.g. "us."
        geography, _, base_model_id = model_id.partition(".")
        if geography in ("us", "eu", "apac"):
            return [
                f"arn:aws:bedrock:{self.region}:{self.account}:inference-profile/{model_id}",
                f"arn:aws:bedrock:*::foundation-model/{base_model_id}",
            ]
        return [f"arn:aws:bedrock:{self.region}::foundation-model/{model_id}"]
