"""xAI Grok adapter (OpenAI-compatible chat completions)."""

from __future__ import annotations

from genrelay.providers.openai_compat import OpenAICompatProvider


class GrokProvider(OpenAICompatProvider):
    """Grok uses the OpenAI-compatible API surface, text only."""

    display_name = "xAI Grok"
    default_base_url = "https://api.x.ai/v1"
    default_model = "grok-beta"
    supports_response_format = False
