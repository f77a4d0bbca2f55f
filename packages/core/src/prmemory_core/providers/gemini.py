from __future__ import annotations

from prmemory_core.providers.base import BaseSummarizer


class GeminiSummarizer(BaseSummarizer):
    MODEL = "gemini-2.0-flash"
    TEMPERATURE = 0.2

    def __init__(self, api_key: str, model: str | None = None):
        try:
            from google import genai
        except ImportError:
            raise ImportError(
                "Gemini summaries need the 'google-genai' package: pip install 'prmemory[gemini]'"
            )
        super().__init__(model)
        self.client = genai.Client(api_key=api_key)

    def _call_api(self, prompt: str) -> str:
        from google.genai import types

        response = self.client.models.generate_content(
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(
                temperature=self.TEMPERATURE,
                max_output_tokens=self.MAX_TOKENS,
            ),
        )
        return response.text or ""
