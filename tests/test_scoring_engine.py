import sys
import unittest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ats_engine.schemas.resume import Resume  # noqa: E402
from ats_engine.schemas.scoring import ATSResult  # noqa: E402
from ats_engine.scoring import DIMENSION_WEIGHTS, calculate_ats_score  # noqa: E402

DIMENSIONS = ["keyword_match", "skills_alignment", "formatting", "impact_metrics", "readability"]


class ScoringEngineTests(unittest.TestCase):
    RESUME_TEXT = (
        "JANE DOE\n"
        "jane.doe@example.com | (555) 123-4567 | linkedin.com/in/janedoe\n"
        "\n"
        "SUMMARY\n"
        "Senior software engineer with 7 years of experience building web platforms with JavaScript, React and Node.js.\n"
        "\n"
        "EXPERIENCE\n"
        "Senior Software Engineer, Acme Corp\n"
        "- Led a team of 6 engineers to rebuild the checkout flow in React, increasing conversion by 18%.\n"
        "- Reduced API latency by 40% by introducing Redis caching for Node.js services.\n"
        "- Built CI/CD pipelines on AWS with Docker, cutting release time from 2 days to 3 hours.\n"
        "- Served 250,000 monthly active users with 99.9% uptime.\n"
        "Software Engineer, Beta Labs\n"
        "- Developed REST APIs with Node.js and PostgreSQL processing 1M requests per day.\n"
        "- Mentored 3 junior developers and introduced code reviews.\n"
        "\n"
        "SKILLS\n"
        "JavaScript, TypeScript, React, Node.js, PostgreSQL, Redis, AWS, Docker, Git, Communication, Leadership\n"
        "\n"
        "EDUCATION\n"
        "B.S. Computer Science, State University\n"
    )
    JOB_TEXT = (
        "We are hiring a Senior Frontend Engineer to build customer-facing web applications.\n"
        "Requirements:\n"
        "- 5+ years of experience with JavaScript and TypeScript\n"
        "- Strong React and Node.js skills\n"
        "- Experience with AWS and Docker\n"
        "- Familiarity with GraphQL and Kubernetes\n"
        "- Excellent communication and teamwork\n"
        "You will collaborate with product managers and designers, mentor engineers, and improve application performance.\n"
    )

    def _assert_complete(self, result: ATSResult) -> None:
        names = [name for name, _ in result.breakdown.items()]
        self.assertEqual(names, DIMENSIONS)
        for name, sub in result.breakdown.items():
            self.assertEqual(sub.details.kind, name)
            self.assertEqual(sub.weight, DIMENSION_WEIGHTS[name])
            self.assertGreaterEqual(sub.score, 0.0)
            self.assertLessEqual(sub.score, 100.0)
        self.assertGreaterEqual(result.overall_score, 0.0)
        self.assertLessEqual(result.overall_score, 100.0)

    def test_weights_sum_to_one_hundred(self):
        self.assertEqual(sum(DIMENSION_WEIGHTS.values()), 100.0)
        self.assertEqual(list(DIMENSION_WEIGHTS), DIMENSIONS)

    def test_overall_is_sum_of_weighted_scores(self):
        result = calculate_ats_score(self.RESUME_TEXT, self.JOB_TEXT)
        self._assert_complete(result)
        weighted = sum(sub.weighted_score for _, sub in result.breakdown.items())
        self.assertAlmostEqual(result.overall_score, weighted, places=9)
        for _, sub in result.breakdown.items():
            self.assertAlmostEqual(sub.weighted_score, sub.score * sub.weight / 100.0, places=9)
        self.assertEqual(result.display_score, round(result.overall_score))
        self.assertGreater(result.overall_score, 50.0)
        self.assertTrue(result.explanation)
        self.assertEqual(result.warnings, [])

    def test_identical_texts_max_keyword_match(self):
        result = calculate_ats_score(self.RESUME_TEXT, self.RESUME_TEXT)
        self.assertAlmostEqual(result.breakdown.keyword_match.score, 100.0, places=6)
        self.assertAlmostEqual(result.breakdown.keyword_match.details.similarity, 1.0)

    def test_weak_resume_scores_low(self):
        result = calculate_ats_score("Worked at company", self.JOB_TEXT)
        self._assert_complete(result)
        self.assertLess(result.breakdown.readability.score, 10.0)
        self.assertLess(result.breakdown.impact_metrics.score, 10.0)
        self.assertLess(result.overall_score, 50.0)
        self.assertTrue(result.recommendations)

    def test_empty_resume_returns_zero_with_every_dimension(self):
        result = calculate_ats_score("", self.JOB_TEXT)
        self._assert_complete(result)
        self.assertEqual(result.overall_score, 0.0)
        self.assertTrue(result.warnings)

    def test_short_job_description_returns_zero(self):
        result = calculate_ats_score(self.RESUME_TEXT, "Engineer")
        self._assert_complete(result)
        self.assertEqual(result.overall_score, 0.0)

    def test_structured_resume_text_is_used_when_raw_text_missing(self):
        result = calculate_ats_score("", self.JOB_TEXT, Resume(raw_text=self.RESUME_TEXT))
        self.assertGreater(result.overall_score, 0.0)

    def test_failing_detector_scores_zero_and_warns(self):
        with patch("ats_engine.scoring.engine.detect_impact", side_effect=RuntimeError("boom")):
            with self.assertLogs("ats_engine.scoring.engine", level="WARNING"):
                result = calculate_ats_score(self.RESUME_TEXT, self.JOB_TEXT)
        self._assert_complete(result)
        impact = result.breakdown.impact_metrics
        self.assertEqual(impact.score, 0.0)
        self.assertTrue(impact.details.failed)
        self.assertEqual(impact.details.error, "boom")
        self.assertEqual(len(result.warnings), 1)
        weighted = sum(sub.weighted_score for _, sub in result.breakdown.items())
        self.assertAlmostEqual(result.overall_score, weighted, places=9)

    def test_recommendations_target_weak_dimensions(self):
        result = calculate_ats_score("Worked at company", self.JOB_TEXT)
        weak = [name for name, sub in result.breakdown.items() if sub.score < 80.0]
        self.assertEqual(len(result.recommendations), min(5, len(weak)))

    def test_result_serializes_with_dimension_kinds(self):
        payload = calculate_ats_score(self.RESUME_TEXT, self.JOB_TEXT).model_dump(mode="json")
        restored = ATSResult.model_validate(payload)
        self.assertEqual(restored.breakdown.formatting.details.kind, "formatting")


if __name__ == "__main__":
    unittest.main()
