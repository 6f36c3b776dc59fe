import os
import sys
import threading
import time
import unittest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from descargarr.providers.cache import FeedCursor, QueryCache
from descargarr.providers.release import Release, ReleaseType


def make_release(title="Lost.S01E05.HDTV", url="https://descargas2020.org/lost/5/"):
    return Release(ReleaseType.TV, title, url, series_name="Lost", season=1, episode=5)


class QueryCacheTests(unittest.TestCase):
    def test_keys_ignore_case_and_surrounding_whitespace(self):
        cache = QueryCache()
        cache.put("Lost", [make_release()])

        self.assertIsNotNone(cache.get("  LOST "))
        self.assertIn("lost", cache)
        self.assertIsNone(cache.get("Lost Girl"))

    def test_entries_are_copied_in_and_out(self):
        cache = QueryCache()
        original = [make_release()]
        cache.put("Lost", original)

        original[0].title = "changed before read"
        first = cache.get("Lost")
        first[0].title = "changed after read"

        self.assertEqual(cache.get("Lost")[0].title, "Lost.S01E05.HDTV")

    def test_clean_evicts_entries_older_than_ttl(self):
        cache = QueryCache(ttl=60)
        cache.put("Lost", [make_release()])
        cache.put("Fringe", [])

        self.assertEqual(cache.clean(now=time.time() + 30), 0)
        self.assertEqual(cache.clean(now=time.time() + 61), 2)
        self.assertNotIn("Lost", cache)

    def test_get_or_populate_runs_populate_once(self):
        cache = QueryCache()
        calls = []

        def populate():
            calls.append(1)
            return [make_release()]

        first = cache.get_or_populate("Lost", populate)
        second = cache.get_or_populate("lost", populate)

        self.assertEqual(len(calls), 1)
        self.assertEqual(first, second)
        self.assertIsNot(first[0], second[0])

    def test_concurrent_queries_for_same_series_walk_once(self):
        cache = QueryCache()
        calls = []

        def populate():
            calls.append(1)
            time.sleep(0.05)
            return [make_release()]

        threads = [threading.Thread(target=cache.get_or_populate, args=("Lost", populate)) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(calls), 1)

    def test_empty_result_is_cached(self):
        cache = QueryCache()
        cache.get_or_populate("Nothing", lambda: [])

        self.assertEqual(cache.get_or_populate("Nothing", lambda: [make_release()]), [])

    def test_invalidate(self):
        cache = QueryCache()
        cache.put("Lost", [])
        cache.put("Fringe", [])

        cache.invalidate("LOST")
        self.assertNotIn("Lost", cache)
        self.assertIn("Fringe", cache)

        cache.invalidate()
        self.assertEqual(cache.stats()["entries"], 0)

    def test_stats(self):
        cache = QueryCache(ttl=10)
        cache.put("Lost", [])
        cache.get("Lost")
        cache.get("Fringe")

        stats = cache.stats()

        self.assertEqual((stats["hits"], stats["misses"], stats["hit_rate"], stats["ttl"]), (1, 1, 50.0, 10))


class FeedCursorTests(unittest.TestCase):
    def test_position_uses_title_and_link(self):
        cursor = FeedCursor()
        top = make_release()
        cursor.update(top)

        same = make_release()
        other_link = make_release(url="https://pctnew.site/lost/5/")

        self.assertEqual(cursor.position_in([make_release("Lost.S01E06.HDTV"), same]), 1)
        self.assertIsNone(cursor.position_in([other_link]))

    def test_empty_cursor(self):
        cursor = FeedCursor()

        self.assertIsNone(cursor.current)
        self.assertIsNone(cursor.position_in([make_release()]))

    def test_current_is_a_copy(self):
        cursor = FeedCursor()
        release = make_release()
        cursor.update(release)
        release.title = "changed"

        self.assertEqual(cursor.current.title, "Lost.S01E05.HDTV")

        cursor.clear()
        self.assertIsNone(cursor.current)


if __name__ == "__main__":
    unittest.main()
