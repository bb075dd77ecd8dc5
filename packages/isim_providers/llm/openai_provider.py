from typing import List

from openai import AsyncOpenAI

from packages.isim_core.dto import LLMMessageDTO, LLMResponseDTO
from packages.isim_core.logging import get_logger
from packages.isim_providers.llm.base import ILLMProvider

logger = get_logger("isim.providers.llm")

class OpenAIChatProvider(ILLMProvider):
    """Chat completions through the official OpenAI SDK."""

    def __init__(self, api_key: str, model: str = "gpt-4-turbo-preview", timeout_sec: float = 30.0):
        if not api_key:
            raise ValueError("OPENAI_API_KEY not configured")
        self.model = model
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout_sec)
        logger.info(f"OpenAI provider initialized. Model: {model}")

    async def chat(
        self,
        messages: List[LLMMessageDTO],
        temperature: float = 0.7,
        json_mode: bool = True
    ) -> LLMResponseDTO:
        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": m.role, "content": m.content} for m in messages],
            temperature=temperature,
            **kwargs
        )

        choice = response.choices[0]
        usage = None
        if response.usage is not None:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }
        return LLMResponseDTO(
            content=choice.message.content or "",
            token_usage=usage,
            finish_reason=choice.finish_reason,
        )
