"""
CI Summarizer - Text Generator
==============================

Chat-completion wrapper used by every command.

A generation sends a system prompt and a user prompt, optionally with
tools. The model may call tools for at most ``max_steps - 1`` rounds;
the last allowed call is made with ``tool_choice="none"`` so it has to
answer in text.
"""

from typing import Any, Optional, Sequence

from openai import AsyncOpenAI

from ci_summarizer.config import Settings
from ci_summarizer.core.tools import Tool
from ci_summarizer.exceptions import GenerationError
from ci_summarizer.schemas import GenerationResult
from ci_summarizer.utils.logging import get_logger

logger = get_logger(__name__)


class TextGenerator:
    """
    Generates text with an OpenAI chat model.

    Example:
        generator = TextGenerator.from_settings(settings)
        result = await generator.generate(SYSTEM, prompt, tools=[diff_tool], max_steps=2)
        print(result.text)
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str,
        temperature: Optional[float] = None
    ):
        """
        Initialize the generator.

        Args:
            client: OpenAI async client
            model: Chat model name (e.g., "gpt-4o")
            temperature: Sampling temperature; the API default when None
        """
        self._client = client
        self.model = model
        self.temperature = temperature

    @classmethod
    def from_settings(cls, settings: Settings) -> "TextGenerator":
        client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            timeout=settings.http_timeout_seconds * 4,
        )
        return cls(client, settings.openai_model)

    async def generate(
        self,
        system: str,
        prompt: str,
        tools: Sequence[Tool] = (),
        max_steps: int = 1
    ) -> GenerationResult:
        """
        Run one generation to its final answer.

        Args:
            system: System prompt
            prompt: User prompt
            tools: Tools the model may call
            max_steps: Maximum number of model calls

        Returns:
            GenerationResult with the final text

        Raises:
            GenerationError: on an empty answer or an unusable tool call
        """
        max_steps = max(1, max_steps)
        tool_map = {tool.name: tool for tool in tools}
        messages: list[dict[str, Any]] = [
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ]
        called: list[str] = []

        for step in range(1, max_steps + 1):
            last_step = step == max_steps
            request: dict[str, Any] = {"model": self.model, "messages": list(messages)}
            if self.temperature is not None:
                request["temperature"] = self.temperature
            if tools:
                request["tools"] = [tool.to_openai() for tool in tools]
                request["tool_choice"] = "none" if last_step else "auto"

            response = await self._client.chat.completions.create(**request)
            self._log_usage(response, step)

            if not response.choices:
                raise GenerationError("Model returned no choices.")
            message = response.choices[0].message

            if message.tool_calls and not last_step:
                messages.append({
                    "role": "assistant",
                    "content": message.content,
                    "tool_calls": [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {
                                "name": call.function.name,
                                "arguments": call.function.arguments,
                            },
                        }
                        for call in message.tool_calls
                    ],
                })
                for call in message.tool_calls:
                    tool = tool_map.get(call.function.name)
                    if tool is None:
                        raise GenerationError(f"Model called unknown tool {call.function.name!r}.")
                    output = await tool.invoke(call.function.arguments)
                    called.append(tool.name)
                    messages.append({
                        "role": "tool",
                        "tool_call_id": call.id,
                        "content": output,
                    })
                continue

            text = (message.content or "").strip()
            if not text:
                raise GenerationError("Model returned an empty answer.")
            return GenerationResult(text=text, steps=step, tool_calls=called)

        # Unreachable: the last step either returns or raises
        raise GenerationError("Step budget exhausted without an answer.")

    def _log_usage(self, response: Any, step: int) -> None:
        usage = getattr(response, "usage", None)
        logger.debug(
            f"Model step {step} complete",
            extra={
                "model": self.model,
                "prompt_tokens": getattr(usage, "prompt_tokens", None),
                "completion_tokens": getattr(usage, "completion_tokens", None),
            }
        )

    async def close(self) -> None:
        await self._client.close()
