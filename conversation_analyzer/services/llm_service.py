# conversation_analyzer/services/llm_service.py

import logging
from typing import Optional

from google import genai
from google.genai import types

from conversation_analyzer.config import config

logger = logging.getLogger(__name__)


class AnalysisError(Exception):
    """The model call failed, or returned nothing usable."""


_client = None
def get_client():
    """Create the Gemini client on first use so the app can start without a key."""
    global _client
    if _client is None:
        if not config.GEMINI_API_KEY:
            raise AnalysisError("Missing GEMINI_API_KEY environment variable.")
        _client = genai.Client(api_key=config.GEMINI_API_KEY)
    return _client


def generate_json(
    prompt: str,
    system_instruction: str,
    model: str,
    temperature: float,
    max_tokens: int,
    client=None,
) -> str:
    """
    Ask Gemini for a JSON response.

    Args:
        prompt (str): User prompt.
        system_instruction (str): Role the model should take.
        model (str): Gemini model name.
        temperature (float): Sampling temperature.
        max_tokens (int): Output token budget.
        client: Optional client, defaults to the shared one.

    Returns:
        str: Raw response text (expected to be JSON).

    Raises:
        AnalysisError: on any SDK/network failure or an empty response.
    """
    client = client or get_client()
    try:
        response = client.models.generate_content(
            model=model,
            contents=prompt,
            config=types.GenerateContentConfig(
                system_instruction=system_instruction,
                temperature=temperature,
                max_output_tokens=max_tokens,
                response_mime_type="application/json",
            ),
        )
    except Exception as e:
        raise AnalysisError(f"{type(e).__name__}: {e}") from e

    # Safely extract text
    text: Optional[str] = getattr(response, "text", "") or ""
    if not text.strip():
        raise AnalysisError("No response content received from the model")
    return text
