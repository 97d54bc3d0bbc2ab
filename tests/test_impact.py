import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ats_engine.scoring import detect_impact  # noqa: E402
from ats_engine.scoring.impact import find_metrics  # noqa: E402


class ImpactMetricsTests(unittest.TestCase):
    QUANTIFIED_RESUME = (
        "EXPERIENCE\n"
        "- Led a team of 6 engineers to rebuild the checkout flow in React, increasing conversion by 18%.\n"
        "- Reduced API latency by 40% by introducing Redis caching for Node.js services.\n"
        "- Served 250,000 monthly active users with 99.9% uptime.\n"
        "- Developed REST APIs with Node.js and PostgreSQL processing 1M requests per day.\n"
        "- Mentored 3 junior developers and introduced code reviews.\n"
        "- Achieved a 25% reduction in cloud costs, saving $120K annually through rightsizing AWS resources.\n"
    )

    def test_quantified_resume_scores_well(self):
        result = detect_impact(self.QUANTIFIED_RESUME)
        self.assertGreater(result.score, 0.6)
        self.assertEqual(result.details.metric_types, ["count", "currency", "percentage", "scale", "time"])
        self.assertEqual(len(result.impact_statements), 1)
        self.assertTrue(result.impact_statements[0].has_metric)

    def test_no_numbers_scores_zero(self):
        result = detect_impact("Worked at company")
        self.assertEqual(result.score, 0.0)
        self.assertEqual(result.metrics, [])

    def test_overlapping_patterns_count_once(self):
        metrics = find_metrics("Reduced latency by 40%")
        self.assertEqual(len(metrics), 1)
        self.assertEqual(metrics[0].type, "time")
        self.assertTrue(metrics[0].high_magnitude)

    def test_currency_magnitude_is_parsed(self):
        metrics = find_metrics("Generated $1.5M in new revenue")
        self.assertEqual(len(metrics), 1)
        self.assertEqual(metrics[0].type, "currency")
        self.assertEqual(metrics[0].value, 1_500_000)
        self.assertTrue(metrics[0].high_magnitude)

    def test_metric_points_saturate(self):
        text = "\n".join(f"- Improved conversion by {index + 1}%" for index in range(30))
        result = detect_impact(text)
        self.assertEqual(result.details.metric_points, 50)
        self.assertEqual(result.details.diversity_points, 5)
        self.assertAlmostEqual(result.score, 0.65)

    def test_empty_text(self):
        self.assertEqual(detect_impact("").score, 0.0)
        self.assertEqual(detect_impact(None).metrics, [])


if __name__ == "__main__":
    unittest.main()
