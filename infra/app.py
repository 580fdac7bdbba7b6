"""GuardDuty Summarizer CDK application."""
import os
from aws_cdk import App, Environment

from stacks.summarizer_stack import GuardDutySummarizerStack

app = App()

# Get context values
account = app.node.try_get_context("account") or os.environ.get("CDK_DEFAULT_ACCOUNT", "123456789012")
region = app.node.try_get_context("region") or os.environ.get("CDK_DEFAULT_REGION", "us-east-1")
environment = app.node.try_get_context("environment") or "dev"

# Create environment object
env = Environment(account=account, region=region)

print(f"Deploying GuardDuty Summarizer to {account}/{region} in {environment} environment")

summarizer_stack = GuardDutySummarizerStack(
    app, f"GuardDutySummarizer-{environment}",
    env=env,
    description="Processes GuardDuty findings with Bedrock and emails the summary"
)

# Add tags to all resources
tags = summarizer_stack.tags
tags.set_tag("Project", "GuardDutySummarizer")
tags.set_tag("Environment", environment)
tags.set_tag("ManagedBy", "CDK")
tags.set_tag("SecurityTool", "true")
tags.set_tag("Owner", "SecurityEngineering")

app.synth()
