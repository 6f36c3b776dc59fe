import os
import sys
import unittest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from descargarr.providers.release import Release, ReleaseType
from descargarr.providers.scoring import WORD_NOT_FOUND_SCORE, is_full_match, score_releases, score_title, tokenize


class ScoringTests(unittest.TestCase):
    def test_tokenize_splits_on_separators(self):
        self.assertEqual(tokenize("The.Matrix (1999) [BluRay]_x264-Grupo;ES,"),
                         ["the", "matrix", "1999", "bluray", "x264", "grupo", "es"])

    def test_score_is_sum_of_positions(self):
        self.assertEqual(score_title("matrix", "Matrix.BluRay"), 0)
        self.assertEqual(score_title("matrix reloaded", "The.Matrix.Reloaded.BluRay"), 1 + 2)

    def test_missing_word_adds_sentinel(self):
        score = score_title("matrix reloaded", "The.Matrix.BluRay")

        self.assertEqual(score, 1 + WORD_NOT_FOUND_SCORE)

    def test_repeated_word_needs_repeated_occurrence(self):
        self.assertEqual(score_title("the the", "The.Matrix"), WORD_NOT_FOUND_SCORE)
        self.assertEqual(score_title("the the", "The.The.Matrix"), 1)

    def test_score_releases(self):
        releases = [
            Release(ReleaseType.MOVIE, "The.Matrix.BluRay", "https://example.org/a/"),
            Release(ReleaseType.MOVIE, "Avatar.BluRay", "https://example.org/b/"),
        ]

        score_releases(releases, "matrix")

        self.assertTrue(is_full_match(releases[0]))
        self.assertFalse(is_full_match(releases[1]))


if __name__ == "__main__":
    unittest.main()
