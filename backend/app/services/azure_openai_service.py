"""
Azure OpenAI Service
Provides integration with Azure OpenAI for generating batches of
vocabulary exercise questions.
"""
import json
import logging
from typing import Optional
from openai import AsyncAzureOpenAI

from app.config import Settings, get_settings
from app.core.exceptions import AugmentationUnavailable

logger = logging.getLogger(__name__)


class AzureOpenAIService:
    """Service for interacting with Azure OpenAI GPT-4"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._client: Optional[AsyncAzureOpenAI] = None
        self.deployment_name = self.settings.AZURE_OPENAI_DEPLOYMENT_NAME
        self.max_tokens = self.settings.AZURE_OPENAI_MAX_TOKENS
        self.temperature = self.settings.AZURE_OPENAI_TEMPERATURE

    @property
    def client(self) -> AsyncAzureOpenAI:
        """Create the OpenAI client on first use."""
        if self._client is None:
            if not self.settings.AZURE_OPENAI_API_KEY or not self.settings.AZURE_OPENAI_ENDPOINT:
                raise AugmentationUnavailable("Azure OpenAI is not configured")
            self._client = AsyncAzureOpenAI(
                api_key=self.settings.AZURE_OPENAI_API_KEY,
                api_version=self.settings.AZURE_OPENAI_API_VERSION,
                azure_endpoint=self.settings.AZURE_OPENAI_ENDPOINT
            )
        return self._client

    async def chat_completion(
        self,
        messages: list[dict],
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None
    ) -> str:
        """
        Send a chat completion request to Azure OpenAI.

        Args:
            messages: List of message dicts with 'role' and 'content'
            max_tokens: Override default max_tokens
            temperature: Override default temperature

        Returns:
            The assistant's response text
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.deployment_name,
                messages=messages,
                max_tokens=max_tokens or self.max_tokens,
                temperature=temperature if temperature is not None else self.temperature
            )
            return response.choices[0].message.content or ""
        except AugmentationUnavailable:
            raise
        except Exception as e:
            logger.error(f"Azure OpenAI chat completion error: {e}")
            raise AugmentationUnavailable(f"Azure OpenAI request failed: {e}") from e

    async def generate_exercise_questions(self, words: list[dict]) -> list[dict]:
        """
        Generate one multiple-choice question per vocabulary word.

        Args:
            words: Dicts with word, definition, example and part_of_speech

        Returns:
            List of dicts with word, type, question, options,
            correct_answer and explanation
        """
        word_lines = "\n".join(
            f'- "{w["word"]}": {w.get("definition") or ""}'
            + (f' (example: {w["example"]})' if w.get("example") else "")
            for w in words
        )

        prompt = f"""Create one multiple-choice vocabulary exercise for each word below.
{word_lines}

Use one of these types per question: word-meaning-match, meaning-word-match,
sentence-completion, synonym-match, context-usage.
Each question has 4 options with exactly one correct answer.

Respond in JSON format:
{{
    "questions": [
        {{
            "word": "the target word",
            "type": "sentence-completion",
            "question": "The question text",
            "options": ["option1", "option2", "option3", "option4"],
            "correct_answer": "the correct option",
            "explanation": "Brief explanation"
        }}
    ]
}}"""

        messages = [
            {"role": "system", "content": "You are an expert English teacher creating vocabulary exercises. Always respond with valid JSON."},
            {"role": "user", "content": prompt}
        ]

        response = await self.chat_completion(messages)
        data = self._parse_json(response)

        questions = data.get("questions") if isinstance(data, dict) else data
        if not isinstance(questions, list):
            raise AugmentationUnavailable("Exercise response has no question list")
        return questions

    def _parse_json(self, response: str):
        try:
            return json.loads(response)
        except json.JSONDecodeError:
            # Try to extract JSON from response
            start = response.find('{')
            end = response.rfind('}') + 1
            if start != -1 and end > start:
                try:
                    return json.loads(response[start:end])
                except json.JSONDecodeError:
                    pass
            raise AugmentationUnavailable("Failed to parse exercise JSON from response")
