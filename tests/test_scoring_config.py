import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ats_engine.core.config.scoring import get_scoring_config, get_scoring_value  # noqa: E402


class ScoringConfigTests(unittest.TestCase):
    def test_loader_and_value_lookup(self):
        config = get_scoring_config()
        self.assertIsInstance(config, dict)
        self.assertEqual(get_scoring_value("keyword_match.stuffing.min_occurrences"), 10)
        self.assertEqual(get_scoring_value("formatting.deductions.critical"), 20)

    def test_missing_path_returns_default(self):
        self.assertEqual(get_scoring_value("formatting.deductions.unknown", 7), 7)
        self.assertEqual(get_scoring_value("", "fallback"), "fallback")
        self.assertIsNone(get_scoring_value("keyword_match.top_keywords.nested"))

    def test_deductions_are_ordered_by_severity(self):
        critical = get_scoring_value("formatting.deductions.critical")
        warning = get_scoring_value("formatting.deductions.warning")
        improvement = get_scoring_value("formatting.deductions.improvement")
        self.assertGreater(critical, warning)
        self.assertGreater(warning, improvement)


if __name__ == "__main__":
    unittest.main()
