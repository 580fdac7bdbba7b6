"""Bedrock client wrapper that turns a finding into a plain-text summary."""
import json
import logging
from typing import Dict, Any, Optional

from src.models.finding import GuardDutyFinding
from .prompts import build_prompt

logger = logging.getLogger(__name__)

DEFAULT_MODEL_ID = "anthropic.claude-3-sonnet-20240229-v1:0"
ANTHROPIC_VERSION = "bedrock-2023-05-31"


class BedrockSummarizer:
    """
    Summarizes GuardDuty findings with a Bedrock foundation model.

    Claude models get the Anthropic Messages request body. Amazon Nova
    model ids (including cross-region inference profiles such as
    ``us.amazon.nova-pro-v1:0``) get the Nova schema instead.

    Service errors are not handled here: ``ClientError`` propagates, and a
    response without summary text raises ``KeyError``.
    """

    def __init__(self, bedrock_client, model_id: str = DEFAULT_MODEL_ID,
                 max_tokens: int = 1000, temperature: float = 0.5,
                 top_p: float = 1, top_k: int = 250):
        self.bedrock_client = bedrock_client
        self.model_id = model_id
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.top_p = top_p
        self.top_k = top_k

    @property
    def is_nova_model(self) -> bool:
        return "amazon.nova" in self.model_id

    def summarize(self, finding: GuardDutyFinding) -> str:
        """Invoke the model and return the generated summary."""
        prompt = build_prompt(finding)
        request_body = self.build_request_body(prompt)

        logger.info(f"Invoking Bedrock model {self.model_id} for finding {finding.finding_id}")
        response = self.bedrock_client.invoke_model(
            modelId=self.model_id,
            body=json.dumps(request_body),
            accept="application/json",
            contentType="application/json",
        )
        response_body = json.loads(response["body"].read())

        summary = self.extract_text(response_body)
        if summary is None:
            raise KeyError(f"No summary text in Bedrock response for model {self.model_id}")
        return summary.strip()

    def build_request_body(self, prompt: str) -> Dict[str, Any]:
        """Request payload for the configured model family."""
        if self.is_nova_model:
            return {
                "messages": [{"role": "user", "content": [{"text": prompt}]}],
                "inferenceConfig": {
                    "maxTokens": self.max_tokens,
                    "temperature": self.temperature,
                    "topP": self.top_p,
                },
            }

        return {
            "anthropic_version": ANTHROPIC_VERSION,
            "max_tokens": self.max_tokens,
            "messages": [
                {
                    "role": "user",
                    "content": prompt
                }
            ],
            "temperature": self.temperature,
            "top_p": self.top_p,
            "top_k": self.top_k,
        }

    @staticmethod
    def extract_text(body: Dict[str, Any]) -> Optional[str]:
        """Pull the first text block out of a Claude or Nova response."""
        # Claude: {"content": [{"type": "text", "text": ...}]}
        content = body.get("content")
        if isinstance(content, list):
            for block in content:
                if isinstance(block, dict) and block.get("text"):
                    return block["text"]

        # Nova: {"output": {"message": {"content": [{"text": ...}]}}}
        output = body.get("output")
        if isinstance(output, dict):
            blocks = output.get("message", {}).get("content", [])
            for block in blocks:
                if isinstance(block, dict) and block.get("text"):
                    return block["text"]

        return None
