import json
import re
import time
import logging
from typing import Any, List, Sequence

from langchain_ollama import ChatOllama
from langchain_core.messages import HumanMessage
import httpx

logger = logging.getLogger(__name__)


def _extract_json(content: str) -> str:
    """
    Extract JSON from LLM response, stripping markdown code blocks if present.
    """
    content = content.strip()

    # Remove markdown code blocks (```json ... ``` or ``` ... ```)
    pattern = r'^```(?:json)?\s*\n?(.*?)\n?```$'
    match = re.match(pattern, content, re.DOTALL)
    if match:
        return match.group(1).strip()

    # Try to find JSON array or object in the content
    array_match = re.search(r'\[.*\]|\{.*\}', content, re.DOTALL)
    if array_match:
        return array_match.group(0)

    return content


class LLMClient:
    """
    LangChain-based Ollama client.

    Requests are not retried: a failed call fails the digest run.
    """

    def __init__(
        self,
        base_url: str,
        model: str,
        temperature: float = 0.1,
    ):
        # ChatOllama uses Ollama's native API, not OpenAI-compatible /v1 endpoint
        # Strip /v1 suffix if present
        if base_url.endswith("/v1"):
            base_url = base_url[:-3]
        elif base_url.endswith("/v1/"):
            base_url = base_url[:-4]

        self.base_url = base_url.rstrip('/')
        self.model = model

        self.llm = ChatOllama(
            base_url=self.base_url,
            model=model,
            temperature=temperature,
            num_ctx=8192,  # candidate content is sent whole for summaries
        )

    @staticmethod
    def _text(response: Any) -> str:
        content = getattr(response, "content", response)
        if isinstance(content, list):
            # Content blocks; keep only text parts
            content = "".join(
                block if isinstance(block, str) else block.get("text", "")
                for block in content
            )
        return str(content)

    async def complete(self, prompt: str) -> str:
        """
        Run a single text completion.
        """
        start = time.time()
        response = await self.llm.ainvoke([HumanMessage(content=prompt)])
        latency_ms = int((time.time() - start) * 1000)
        logger.info(f"LLM completion received (model={self.model}, latency: {latency_ms}ms)")
        return self._text(response)

    async def complete_batch(self, prompts: Sequence[str]) -> List[str]:
        """
        Run one completion per prompt concurrently.

        The i-th response always belongs to the i-th prompt; callers assign
        results by position.
        """
        if not prompts:
            return []

        start = time.time()
        responses = await self.llm.abatch(
            [[HumanMessage(content=prompt)] for prompt in prompts]
        )
        latency_ms = int((time.time() - start) * 1000)

        if len(responses) != len(prompts):
            raise ValueError(
                f"Batch returned {len(responses)} responses for {len(prompts)} prompts"
            )

        logger.info(f"LLM batch of {len(prompts)} completed (latency: {latency_ms}ms)")
        return [self._text(r) for r in responses]

    async def complete_json(self, prompt: str) -> Any:
        """
        Run a completion and parse the response as JSON.
        """
        raw_content = await self.complete(prompt)
        logger.debug(f"Raw response: {raw_content[:500]}...")

        clean_json = _extract_json(raw_content)
        try:
            return json.loads(clean_json)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse JSON response: {e}")
            logger.error(f"Raw content: {raw_content}")
            raise ValueError(f"Invalid JSON response from LLM: {e}") from e

    async def health_check(self) -> bool:
        """
        Check if the Ollama server is reachable by calling /api/tags.
        """
        url = f"{self.base_url}/api/tags"
        try:
            async with httpx.AsyncClient(timeout=5.0) as client:
                resp = await client.get(url)
                if resp.status_code == 200:
                    return True
                logger.error(f"Ollama health check failed: {resp.status_code} {resp.text}")
                return False
        except httpx.HTTPError as e:
            logger.error(f"Ollama health check error: {e} (url={url})")
            return False
