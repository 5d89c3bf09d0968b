#!/usr/bin/env python3

from typing import Dict, Any, Type

from openai import AzureOpenAI, OpenAI
from pydantic import ValidationError

from gitai.exceptions import ConfigError, GenerationError
from gitai.generators.base_generator import BaseGenerator, T
from gitai.logger import get_logger

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a senior software engineer helping a developer with their git workflow. "
    "Always answer with a single JSON object matching the requested structure."
)


class AIGenerator(BaseGenerator):
    """Content generator backed by the OpenAI or Azure OpenAI chat completions API."""

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        self.model = config.get("model")
        self.timeout = config.get("request_timeout", 120)
        self.client = self._create_client(config)

    @staticmethod
    def _create_client(config: Dict[str, Any]):
        if config.get("azure_openai_endpoint"):
            return AzureOpenAI(
                base_url=config.get("azure_openai_endpoint"),
                api_key=config.get("azure_openai_key"),
                api_version=config.get("azure_openai_api_version")
            )

        if not config.get("openai_api_key"):
            raise ConfigError(
                "Missing credentials: set OPENAI_API_KEY, or AZURE_OPENAI_ENDPOINT and AZURE_OPENAI_KEY"
            )

        return OpenAI(
            api_key=config.get("openai_api_key"),
            base_url=config.get("openai_base_url")
        )

    def _generate(self, prompt: str, schema: Type[T]) -> T:
        """
        Sends a prompt to the model and returns the structured answer.

        Args:
            prompt: The prompt containing the diff and the instructions
            schema: Pydantic model the answer must validate against

        Returns:
            An instance of schema
        """
        messages = [
            {
                "role": "system",
                "content": SYSTEM_PROMPT
            },
            {
                "role": "user",
                "content": prompt
            }
        ]

        logger.info(f"Sending request to {self.model}...")

        try:
            response = self.client.beta.chat.completions.parse(
                model=self.model,
                response_format=schema,
                timeout=self.timeout,
                messages=messages)

            parsed = response.choices[0].message.parsed
            if parsed is None:
                raise GenerationError(f"Model refused to answer: {response.choices[0].message.refusal}")
            return parsed

        except AttributeError:
            # Older clients have no structured output helper
            logger.debug("Falling back to regular JSON mode...")
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                timeout=self.timeout,
                response_format={"type": "json_object"},
            )

            output = response.choices[0].message.content or ""
            try:
                return schema.model_validate_json(output)
            except ValidationError as e:
                raise GenerationError(f"Model answer does not match {schema.__name__}: {e}") from e
