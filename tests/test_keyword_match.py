import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ats_engine.scoring import detect_keyword_stuffing, match_keywords  # noqa: E402

JOB = "We need a Python developer with Django, PostgreSQL and Kubernetes experience for data pipelines."
RESUME = "Python developer building data pipelines with Django and PostgreSQL."


class KeywordMatchTests(unittest.TestCase):
    def test_identical_texts_match_fully(self):
        result = match_keywords(JOB, JOB)
        self.assertAlmostEqual(result.similarity, 1.0)
        self.assertAlmostEqual(result.coverage, 1.0)
        self.assertAlmostEqual(result.score, 1.0)
        self.assertEqual(result.missing_keywords, [])

    def test_missing_job_terms_are_reported(self):
        result = match_keywords(RESUME, JOB)
        missing = [hit.term for hit in result.missing_keywords]
        matched = [hit.term for hit in result.matched_keywords]
        self.assertIn("Kubernetes", missing)
        self.assertIn("Python", matched)
        self.assertIn("PostgreSQL", matched)
        self.assertGreater(result.score, 0.0)
        self.assertLess(result.score, 1.0)

    def test_synonyms_count_as_matches(self):
        result = match_keywords("Senior JS engineer, Postgres and k8s in production.", "JavaScript engineer with PostgreSQL and Kubernetes.")
        matched = {hit.term for hit in result.matched_keywords}
        self.assertTrue({"JavaScript", "PostgreSQL", "Kubernetes"} <= matched)

    def test_empty_input_scores_zero(self):
        for resume, job in (("", JOB), (RESUME, ""), (None, None)):
            result = match_keywords(resume, job)
            self.assertEqual(result.score, 0.0)
            self.assertEqual(result.matched_keywords, [])

    def test_stuffing_is_flagged_and_lowers_the_score(self):
        base = match_keywords(RESUME, JOB)
        stuffed = match_keywords(RESUME + " python" * 10, JOB)
        self.assertFalse(base.stuffing.is_stuffing)
        self.assertTrue(stuffed.stuffing.is_stuffing)
        self.assertIn("python", stuffed.stuffing.terms)
        self.assertGreater(stuffed.stuffing.penalty, 0.0)
        self.assertLess(stuffed.score, base.score)

    def test_stuffing_needs_minimum_occurrences(self):
        self.assertTrue(detect_keyword_stuffing(["python"] * 10 + ["developer"], total_words=11).is_stuffing)
        self.assertFalse(detect_keyword_stuffing(["python"] * 9 + ["developer"], total_words=10).is_stuffing)

    def test_stuffing_needs_density(self):
        report = detect_keyword_stuffing(["python"] * 10, total_words=1000)
        self.assertFalse(report.is_stuffing)
        self.assertEqual(report.penalty, 0.0)


if __name__ == "__main__":
    unittest.main()
