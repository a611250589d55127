"""OpenAI Responses API client for structured analysis requests."""

import json
import logging
from dataclasses import dataclass

from openai import AsyncOpenAI

from daily_ledger.services.analysis import AnalysisClient, StructuredRequest

_logger = logging.getLogger(__name__)


@dataclass
class OpenAIAnalysisClient(AnalysisClient):
    """Analysis client backed by the OpenAI Responses API.

    Serves both image requests (nutrition) and text-only requests (workout
    routines); each request names its own strict JSON schema.
    """

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIAnalysisClient":
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def complete(
        self,
        request: StructuredRequest,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
    ) -> dict[str, object]:
        request_payload: dict[str, object] = {
            "model": model,
            "input": [{"role": "user", "content": _content(request)}],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": request.name,
                    "strict": True,
                    "schema": request.schema,
                }
            },
            "store": store,
        }
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        return _parse_output(request.name, response.output_text)

    async def close(self) -> None:
        await self.client.close()


def _content(request: StructuredRequest) -> list[dict[str, str]]:
    content = [{"type": "input_text", "text": request.prompt}]
    if request.image_data_url is not None:
        content.append({"type": "input_image", "image_url": request.image_data_url})
    return content


def _parse_output(name: str, output_text: str | None) -> dict[str, object]:
    if not output_text:
        raise RuntimeError(f"OpenAI returned an empty {name} response")
    try:
        parsed = json.loads(output_text)
    except json.JSONDecodeError as exc:
        _logger.warning("Unparseable %s response: %.200s", name, output_text)
        raise RuntimeError(f"OpenAI returned invalid JSON for {name}") from exc
    if not isinstance(parsed, dict):
        raise RuntimeError(f"OpenAI returned a non-object {name} response")
    return parsed
