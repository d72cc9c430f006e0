"""Unit tests for retrieval, profile resolution, ranking and summarization."""

import unittest

from helpers import DictCache, FakeLLM, FakeSearch, make_definition, make_item, make_ranked
from ingestion.library import get_candidates_list, get_preferences_list
from processing.profile import find_or_create_user_profile, profile_key
from processing.ranking import rank_candidates
from processing.summarizer import summarize_items


class TestRetrieval(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.definition = make_definition().model_copy(update={
            "candidate_selectors": [
                *make_definition().candidate_selectors,
                make_definition().candidate_selectors[0].model_copy(update={"query": "recent"}),
            ],
        })

    async def test_candidates_are_deduped_and_converted_to_markdown(self):
        search = FakeSearch({
            "is:unread": [
                make_item("1", readableContent="<p>Hello <b>world</b></p>"),
                make_item("2", readableContent="<h1>Heading</h1>"),
            ],
            "recent": [
                make_item("2", readableContent="<h1>Heading</h1>"),
                make_item("3", readableContent="<p>Three</p>"),
            ],
        })

        candidates = await get_candidates_list("user-1", self.definition, search)

        self.assertEqual([c.id for c in candidates], ["1", "2", "3"])
        self.assertIn("**world**", candidates[0].readable_content)
        self.assertNotIn("<p>", candidates[0].readable_content)
        self.assertTrue(candidates[1].readable_content.startswith("# Heading"))
        self.assertTrue(all(call["include_content"] for call in search.calls))
        self.assertEqual(search.calls[0]["size"], 3)
        self.assertEqual(search.calls[0]["user_id"], "user-1")

    async def test_preferences_skip_content(self):
        search = FakeSearch({"is:read": [make_item("1"), make_item("1")]})

        preferences = await get_preferences_list("user-1", make_definition(), search)

        self.assertEqual([p.id for p in preferences], ["1"])
        self.assertFalse(search.calls[0]["include_content"])

    async def test_failing_selector_fails_whole_retrieval(self):
        search = FakeSearch({"is:unread": [make_item("1")]})

        with self.assertRaises(RuntimeError):
            await get_candidates_list("user-1", self.definition, search)


class TestUserProfile(unittest.IsolatedAsyncioTestCase):
    async def test_cache_miss_builds_and_stores_profile(self):
        search = FakeSearch({"is:read": [make_item("1", "Rust"), make_item("2", "Go")]})
        llm = FakeLLM(profile="Enjoys languages.")
        cache = DictCache()

        profile = await find_or_create_user_profile("u1", make_definition(), search, llm, cache)

        self.assertEqual(profile, "Enjoys languages.")
        self.assertEqual(cache.values[profile_key("u1")], "Enjoys languages.")
        self.assertEqual(profile_key("u1"), "userProfile:u1")
        self.assertIn("* Rust\n* Go", llm.prompts[0])

    async def test_second_call_is_a_cache_read(self):
        search = FakeSearch({"is:read": [make_item("1")]})
        llm = FakeLLM()
        cache = DictCache()

        first = await find_or_create_user_profile("u1", make_definition(), search, llm, cache)
        second = await find_or_create_user_profile("u1", make_definition(), search, llm, cache)

        self.assertEqual(first, second)
        self.assertEqual(len(llm.prompts), 1)
        self.assertEqual(len(search.calls), 1)
        self.assertEqual(cache.sets, ["userProfile:u1"])

    async def test_existing_profile_skips_retrieval(self):
        search = FakeSearch({})
        llm = FakeLLM()
        cache = DictCache({"userProfile:u1": "cached"})

        profile = await find_or_create_user_profile("u1", make_definition(), search, llm, cache)

        self.assertEqual(profile, "cached")
        self.assertEqual(search.calls, [])
        self.assertEqual(llm.prompts, [])


class TestRanking(unittest.IsolatedAsyncioTestCase):
    async def test_entries_map_to_candidates_in_llm_order(self):
        candidates = [make_item("a", "Alpha"), make_item("b", "Beta"), make_item("c", "Gamma")]
        llm = FakeLLM(ranking=[
            {"index": 2, "topic": "T1"},
            {"title": "Alpha", "topic": "T2"},
            {"libraryItem": {"id": "b"}, "topic": "T1"},
            {"title": "Unknown", "topic": "T3"},
        ])

        ranked = await rank_candidates(candidates, "profile", make_definition(), llm)

        self.assertEqual([r.library_item.id for r in ranked], ["c", "a", "b"])
        self.assertEqual([r.topic for r in ranked], ["T1", "T2", "T1"])
        self.assertIn('["Alpha", "Beta", "Gamma"]', llm.json_prompts[0])
        self.assertIn("Profile: profile", llm.json_prompts[0])

    async def test_malformed_response_is_fatal(self):
        llm = FakeLLM(ranking=ValueError("Invalid JSON response from LLM"))

        with self.assertRaises(ValueError):
            await rank_candidates([make_item("a")], "profile", make_definition(), llm)

    async def test_title_wins_over_disagreeing_index(self):
        candidates = [make_item("a", "Alpha"), make_item("b", "Beta")]
        llm = FakeLLM(ranking=[
            {"index": 1, "title": "Alpha", "topic": "T1"},
            {"index": 1, "title": "Not a candidate", "topic": "T2"},
        ])

        with self.assertLogs("processing.ranking", level="WARNING"):
            ranked = await rank_candidates(candidates, "profile", make_definition(), llm)

        self.assertEqual([r.library_item.id for r in ranked], ["a", "b"])

    async def test_repeated_entries_are_ranked_once(self):
        candidates = [make_item("a", "Alpha"), make_item("b", "Beta")]
        llm = FakeLLM(ranking=[
            {"index": 0, "topic": "T1"},
            {"title": "Alpha", "topic": "T1"},
            {"index": 1, "topic": "T2"},
            {"libraryItem": {"id": "b"}, "topic": "T2"},
        ])

        ranked = await rank_candidates(candidates, "profile", make_definition(), llm)

        self.assertEqual([r.library_item.id for r in ranked], ["a", "b"])

    async def test_non_array_response_is_fatal(self):
        llm = FakeLLM(ranking={"topic": "x"})

        with self.assertRaises(ValueError):
            await rank_candidates([make_item("a")], "profile", make_definition(), llm)


class TestSummarizer(unittest.IsolatedAsyncioTestCase):
    async def test_summaries_assigned_by_position(self):
        items = [make_ranked("A", "1"), make_ranked("B", "2"), make_ranked("A", "3")]
        llm = FakeLLM(summaries=["third?", "first?", "second?"])

        result = await summarize_items(items, make_definition(), llm)

        self.assertIs(result, items)
        self.assertEqual([i.summary for i in result], ["third?", "first?", "second?"])
        self.assertEqual(len(llm.batches), 1)
        self.assertIn("Summarize Title 1 by :", llm.batches[0][0])
        self.assertIn("Summarize Title 3", llm.batches[0][2])

    async def test_length_mismatch_raises(self):
        llm = FakeLLM(summaries=["only one"])

        with self.assertRaises(ValueError):
            await summarize_items(
                [make_ranked("A", "1"), make_ranked("B", "2")], make_definition(), llm,
            )


if __name__ == "__main__":
    unittest.main()
