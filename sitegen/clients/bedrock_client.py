# sitegen/clients/bedrock_client.py
# Single-shot calls to an Anthropic model hosted on AWS Bedrock

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from sitegen.config import Settings
from sitegen.middleware.error_handler import ModelInvocationError, UnexpectedResponseFormat
from sitegen.utils.html_extract import ExtractedHtml, extract_html
from sitegen.utils.logger import log_exception, log_info
from sitegen.utils.resilience import with_timeout

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "bedrock-2023-05-31"


class BedrockClient:
    """AI invocation adapter: prompt in, one clean HTML document out."""

    def __init__(
        self,
        runtime_client: Any,
        model_id: str,
        max_tokens: int = 4096,
        temperature: float = 0.7,
        timeout_seconds: float = 120.0,
    ):
        self._client = runtime_client
        self.model_id = model_id
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "BedrockClient":
        runtime = boto3.client(
            "bedrock-runtime",
            region_name=settings.AWS_REGION,
            config=BotoConfig(
                read_timeout=int(settings.MODEL_TIMEOUT_SECONDS),
                retries={"max_attempts": 1},
            ),
        )
        return cls(
            runtime,
            model_id=settings.BEDROCK_MODEL_ID,
            max_tokens=settings.MODEL_MAX_TOKENS,
            temperature=settings.MODEL_TEMPERATURE,
            timeout_seconds=settings.MODEL_TIMEOUT_SECONDS,
        )

    def build_payload(self, system_prompt: str, user_turn: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "anthropic_version": ANTHROPIC_VERSION,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "system": system_prompt,
            "messages": [user_turn],
        }

    def _invoke_blocking(self, body: str) -> bytes:
        response = self._client.invoke_model(
            modelId=self.model_id,
            contentType="application/json",
            accept="application/json",
            body=body,
        )
        return response["body"].read()

    async def _call_model(self, body: str) -> bytes:
        # boto3 blocks; keep the event loop free for other requests
        return await asyncio.to_thread(self._invoke_blocking, body)

    async def invoke(self, system_prompt: str, user_turn: Dict[str, Any]) -> ExtractedHtml:
        body = json.dumps(self.build_payload(system_prompt, user_turn))

        log_info(f"Sending request to Bedrock model {self.model_id}")
        try:
            raw = await with_timeout(self.timeout_seconds)(self._call_model)(body)
        except asyncio.TimeoutError as e:
            log_exception(e, context="bedrock.invoke timeout")
            raise ModelInvocationError("The model did not respond in time") from e
        except (BotoCoreError, ClientError) as e:
            log_exception(e, context="bedrock.invoke")
            raise ModelInvocationError() from e
        log_info("Received response from Bedrock")

        return self.parse_response(raw)

    @staticmethod
    def parse_response(raw: bytes) -> ExtractedHtml:
        try:
            payload = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise UnexpectedResponseFormat("Model response is not valid JSON") from e

        content = payload.get("content") if isinstance(payload, dict) else None
        first = content[0] if isinstance(content, list) and content else None
        if not isinstance(first, dict) or first.get("type") != "text":
            logger.warning("Model reply has no text content part: %s", type(first).__name__)
            raise UnexpectedResponseFormat()

        text = first.get("text")
        if not isinstance(text, str):
            raise UnexpectedResponseFormat("Model reply text is not a string")

        extracted = extract_html(text)
        if not extracted.html:
            raise UnexpectedResponseFormat("Model reply contained no usable text")
        if not extracted.from_code_block:
            logger.info("Model reply had no code block; used raw text")
        return extracted
