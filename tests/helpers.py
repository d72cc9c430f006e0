"""In-memory stand-ins for the job's collaborators."""

from typing import Any, Dict, List, Optional

from core.entities import RankedItem
from core.schemas import DigestDefinition, LibraryItem
from ingestion.base import SearchService
from services.cache import KeyValueCache


def make_item(item_id: str, title: Optional[str] = None, **kwargs) -> LibraryItem:
    return LibraryItem(id=item_id, title=title or f"Title {item_id}", **kwargs)


def make_ranked(topic: str, item_id: str, summary: str = "") -> RankedItem:
    return RankedItem(topic=topic, library_item=make_item(item_id), summary=summary)


def make_definition(
    preference_count: int = 2,
    candidate_count: int = 3,
) -> DigestDefinition:
    return DigestDefinition.model_validate({
        "name": "test-digest",
        "preferenceSelectors": [
            {"query": "is:read", "count": preference_count, "reason": "read items"},
        ],
        "candidateSelectors": [
            {"query": "is:unread", "count": candidate_count, "reason": "new items"},
        ],
        "summaryPrompt": "Summarize {title} by {author}:\n{content}",
        "zeroShot": {
            "userPreferencesProfilePrompt": "Titles:\n{titles}",
            "rankPrompt": "Profile: {userProfile}\nTitles: {titles}",
        },
    })


class FakeSearch(SearchService):
    def __init__(self, results: Dict[str, List[LibraryItem]]):
        self.results = results
        self.calls: List[Dict[str, Any]] = []

    async def search(self, query, size, include_content, user_id):
        self.calls.append({
            "query": query,
            "size": size,
            "include_content": include_content,
            "user_id": user_id,
        })
        if query not in self.results:
            raise RuntimeError(f"search failed for {query}")
        return list(self.results[query][:size])


class FakeLLM:
    def __init__(
        self,
        profile: str = "Likes systems programming.",
        ranking: Any = None,
        summaries: Optional[List[str]] = None,
    ):
        self.profile = profile
        self.ranking = ranking if ranking is not None else []
        self.summaries = summaries
        self.prompts: List[str] = []
        self.batches: List[List[str]] = []
        self.json_prompts: List[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.profile

    async def complete_batch(self, prompts: List[str]) -> List[str]:
        self.batches.append(list(prompts))
        if self.summaries is not None:
            return list(self.summaries)
        return [f"summary for prompt {i}" for i in range(len(prompts))]

    async def complete_json(self, prompt: str) -> Any:
        self.json_prompts.append(prompt)
        if isinstance(self.ranking, Exception):
            raise self.ranking
        return self.ranking


class DictCache(KeyValueCache):
    def __init__(self, values: Optional[Dict[str, str]] = None):
        self.values = dict(values or {})
        self.sets: List[str] = []

    async def get(self, key):
        return self.values.get(key)

    async def set(self, key, value):
        self.sets.append(key)
        self.values[key] = value
