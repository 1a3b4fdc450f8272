import logging
from typing import Optional
from openai import OpenAI
import tiktoken
from tenacity import retry, wait_exponential, stop_after_attempt

logger = logging.getLogger(__name__)

class OpenAIService:
    """Service for OpenAI chat completions used to comment on match results"""

    def __init__(
        self,
        api_key: str,
        llm_model: str = "gpt-4o"
    ):
        """
        Initialize OpenAI service

        Args:
            api_key: OpenAI API key
            llm_model: Model for text generation
        """
        self.client = OpenAI(api_key=api_key)
        self.llm_model = llm_model
        self.encoding = tiktoken.encoding_for_model("gpt-4o")
        logger.info(f"OpenAI service initialized - LLM: {llm_model}")

    # ===================== TOKEN HELPERS =====================

    def truncate_to_tokens(self, text: str, max_tokens: int) -> str:
        """Cut text down to at most max_tokens tokens."""
        if not text:
            return ""
        tokens = self.encoding.encode(text)
        if len(tokens) <= max_tokens:
            return text
        return self.encoding.decode(tokens[:max_tokens]) + "..."

    # ===================== TEXT GENERATION =====================

    @retry(wait=wait_exponential(multiplier=1, min=2, max=10), stop=stop_after_attempt(3))
    def generate_text(
        self,
        prompt: str,
        system_message: Optional[str] = None,
        temperature: float = 0.2,
        max_tokens: int = 2000,
        json_mode: bool = False
    ) -> str:
        """
        Generate text with the configured chat model

        Args:
            prompt: User prompt
            system_message: System message for context
            temperature: Temperature for generation
            max_tokens: Maximum tokens to generate
            json_mode: If True, response will be a JSON object

        Returns:
            Generated text
        """
        try:
            messages = []

            if system_message:
                messages.append({"role": "system", "content": system_message})

            messages.append({"role": "user", "content": prompt})

            kwargs = {
                "model": self.llm_model,
                "messages": messages,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }

            if json_mode:
                kwargs["response_format"] = {"type": "json_object"}

            response = self.client.chat.completions.create(**kwargs)

            generated_text = response.choices[0].message.content
            logger.info(f"Generated text with {response.usage.completion_tokens} tokens")
            return generated_text
        except Exception as e:
            logger.error(f"Error generating text: {str(e)}")
            raise


_openai_service: Optional[OpenAIService] = None

def get_openai_service() -> Optional[OpenAIService]:
    """Shared OpenAIService, or None when no API key is configured."""
    global _openai_service
    if _openai_service is None:
        from talentmatch.config import settings
        if not settings.OPENAI_API_KEY:
            return None
        _openai_service = OpenAIService(
            api_key=settings.OPENAI_API_KEY,
            llm_model=settings.OPENAI_LLM_MODEL,
        )
    return _openai_service
