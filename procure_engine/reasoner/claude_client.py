"""
Claude API Client

Optional enhancement service. Stages ask Claude for structured output through
tool use; any failure is reported as EnhancementError so the caller can fall
back to its deterministic path.
"""

import logging
from typing import Any, Dict, Optional

from anthropic import Anthropic
from anthropic.types import Message

from ..config import DEFAULT_MODEL, Settings
from ..exceptions import EnhancementError

logger = logging.getLogger(__name__)


class ClaudeClient:
    """
    Client for asking Claude to structure procurement data.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        max_tokens: int = 2048,
        timeout: float = 30.0
    ):
        """
        Initialize Claude API client.

        Args:
            api_key: Anthropic API key
            model: Claude model identifier
            max_tokens: Maximum tokens for responses
            timeout: Per-request timeout in seconds
        """
        self.client = Anthropic(api_key=api_key, timeout=timeout, max_retries=1)
        self.model = model
        self.max_tokens = max_tokens
        logger.info(f"ClaudeClient initialized with model: {model}")

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["ClaudeClient"]:
        """
        Build a client when a key is configured.

        Returns:
            ClaudeClient, or None if no API key is set
        """
        if not settings.anthropic_api_key:
            return None
        return cls(api_key=settings.anthropic_api_key, model=settings.anthropic_model)

    def generate_structured(
        self,
        prompt: str,
        system_prompt: str,
        tool_definition: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Ask Claude to answer by calling the given tool, and return the tool input.

        Args:
            prompt: User message
            system_prompt: System instructions
            tool_definition: Tool schema Claude must fill in

        Returns:
            The tool call's input dictionary

        Raises:
            EnhancementError: If the API call fails or no tool call comes back
        """
        tool_name = tool_definition["name"]
        logger.info(f"Requesting structured output from Claude via {tool_name}")

        try:
            message = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                system=system_prompt,
                tools=[tool_definition],
                tool_choice={"type": "tool", "name": tool_name},
                messages=[
                    {
                        "role": "user",
                        "content": prompt
                    }
                ]
            )
        except Exception as e:
            logger.warning(f"Claude request failed: {e}")
            raise EnhancementError(f"Claude API call failed: {e}") from e

        logger.debug(f"Claude response received: {message.stop_reason}")

        result = self._extract_tool_input(message, tool_name)
        if result is None:
            raise EnhancementError(f"Claude did not call {tool_name}")
        return result

    def _extract_tool_input(self, message: Message, tool_name: str) -> Optional[Dict[str, Any]]:
        """
        Find the named tool call in Claude's response.

        Args:
            message: Claude API message response
            tool_name: Expected tool name

        Returns:
            Tool input dictionary, or None if not found
        """
        for block in message.content:
            if getattr(block, 'type', None) == 'tool_use' and block.name == tool_name:
                if isinstance(block.input, dict):
                    return block.input

        logger.warning(f"No {tool_name} call found. Response content: {message.content}")
        return None

    def validate_api_key(self) -> bool:
        """
        Validate that the API key is working.

        Returns:
            True if API key is valid, False otherwise
        """
        try:
            self.client.messages.create(
                model=self.model,
                max_tokens=10,
                messages=[
                    {
                        "role": "user",
                        "content": "Test"
                    }
                ]
            )
            logger.info("API key validation successful")
            return True
        except Exception as e:
            logger.error(f"API key validation failed: {e}")
            return False
