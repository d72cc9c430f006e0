"""
Create-digest job: rank, summarize and narrate a user's saved items.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from core.entities import Digest
from core.schemas import CreateDigestJobData, DigestDefinition
from ingestion.base import SearchService
from ingestion.library import get_candidates_list
from processing.filtering import filter_summaries, generate_title
from processing.narration import generate_speech_files
from processing.profile import find_or_create_user_profile
from processing.ranking import rank_candidates
from processing.selection import choose_ranked_selections
from processing.summarizer import summarize_items
from services.cache import KeyValueCache
from services.database import DigestStore
from services.definition import fetch_digest_definition
from services.llm import LLMClient
from services.speech import SpeechOptions
from workflows.base import Job

logger = logging.getLogger(__name__)

CREATE_DIGEST_JOB = "create-digest"


@dataclass(frozen=True)
class DigestRun:
    """
    Per-run context: who the digest is for and the definition fetched for this run.
    """
    user_id: str
    definition: DigestDefinition


class CreateDigestJob(Job[CreateDigestJobData, Digest]):
    """
    Builds and stores one digest per run.

    The run is all-or-nothing: any failure propagates and nothing is written.
    """

    name = CREATE_DIGEST_JOB

    def __init__(
        self,
        *,
        definition_url: Optional[str],
        search: SearchService,
        llm: LLMClient,
        cache: KeyValueCache,
        store: DigestStore,
        speech_options: Optional[SpeechOptions] = None,
    ):
        self.definition_url = definition_url
        self.search = search
        self.llm = llm
        self.cache = cache
        self.store = store
        self.speech_options = speech_options or SpeechOptions()

    async def run(self, job_data: CreateDigestJobData) -> Digest:
        log_extra = {"user_id": job_data.user_id, "job": self.name}

        definition = await fetch_digest_definition(self.definition_url)
        run = DigestRun(user_id=job_data.user_id, definition=definition)

        candidates = await get_candidates_list(run.user_id, run.definition, self.search)
        logger.info(f"Found {len(candidates)} candidates", extra=log_extra)

        user_profile = await find_or_create_user_profile(
            run.user_id, run.definition, self.search, self.llm, self.cache,
        )

        ranked_candidates = await rank_candidates(
            candidates, user_profile, run.definition, self.llm,
        )
        selections = choose_ranked_selections(ranked_candidates)

        summaries = await summarize_items(selections, run.definition, self.llm)
        filtered_summaries = filter_summaries(summaries)

        speech_files = generate_speech_files(filtered_summaries, self.speech_options)
        # Title lists every summarized item, including ones the filter dropped
        title = generate_title(summaries)

        digest = Digest(
            id=str(uuid.uuid4()),
            title=title,
            content="content",
            urls_to_audio=[],
            job_state="completed",
            speech_files=speech_files,
        )

        await self.store.write_digest(run.user_id, digest)
        logger.info(
            f"Digest {digest.id} completed with {len(speech_files)} speech files",
            extra=log_extra,
        )
        return digest
