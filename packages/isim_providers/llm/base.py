from abc import ABC, abstractmethod
from typing import List
from packages.isim_core.dto import LLMMessageDTO, LLMResponseDTO

class ILLMProvider(ABC):
    @abstractmethod
    async def chat(
        self,
        messages: List[LLMMessageDTO],
        temperature: float = 0.7,
        json_mode: bool = True
    ) -> LLMResponseDTO:
        """
        Chat with LLM.
        Args:
            messages: List of LLMMessageDTO
            temperature: Sampling temperature
            json_mode: Ask the model for a JSON object response
        Returns:
            LLMResponseDTO
        """
        pass
