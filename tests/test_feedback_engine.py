import sys
import unittest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from ats_engine.feedback import (  # noqa: E402
    detect_missing_keywords,
    detect_overused_words,
    detect_unquantified_bullets,
    detect_weak_action_verbs,
    generate_feedback,
)
from ats_engine.feedback.engine import SEVERITY_ORDER  # noqa: E402
from ats_engine.feedback.rules import QuantificationReport  # noqa: E402
from ats_engine.feedback.templates import NO_ISSUES_SUMMARY  # noqa: E402
from ats_engine.schemas.feedback import Feedback  # noqa: E402
from ats_engine.schemas.scoring import FormattingResult, KeywordHit, KeywordMatchResult, SkillsMatchResult  # noqa: E402
from ats_engine.scoring import calculate_ats_score  # noqa: E402


class FeedbackEngineTests(unittest.TestCase):
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

    def _assert_consistent(self, feedback: Feedback) -> None:
        stats = feedback.statistics
        self.assertEqual(stats.total, len(feedback.suggestions))
        self.assertEqual(stats.total, stats.critical + stats.warning + stats.improvement)
        self.assertEqual(stats.critical, len(feedback.by_severity.critical))
        self.assertEqual(stats.warning, len(feedback.by_severity.warning))
        self.assertEqual(stats.improvement, len(feedback.by_severity.improvement))
        ranks = [SEVERITY_ORDER[item.severity] for item in feedback.suggestions]
        self.assertEqual(ranks, sorted(ranks))
        for item in feedback.suggestions:
            self.assertTrue(item.suggestion)

    def test_statistics_match_suggestions(self):
        feedback = generate_feedback(self.RESUME_TEXT, self.JOB_TEXT)
        self._assert_consistent(feedback)
        self.assertGreater(feedback.details.missing_keyword_count, 0)
        self.assertIn("missing_keywords", {item.category for item in feedback.suggestions})

    def test_weak_resume_gets_blocking_feedback(self):
        feedback = generate_feedback("Worked at company", self.JOB_TEXT)
        self._assert_consistent(feedback)
        self.assertTrue(
            any(item.category == "formatting" and item.severity == "critical" for item in feedback.suggestions)
        )
        verbs = [item for item in feedback.suggestions if item.category == "action_verbs"]
        self.assertEqual(len(verbs), 1)
        self.assertEqual(verbs[0].severity, "warning")
        self.assertEqual(verbs[0].weak_verbs, ["worked"])
        self.assertNotEqual(feedback.summary, NO_ISSUES_SUMMARY)

    def test_empty_resume_reports_input_problem(self):
        feedback = generate_feedback("", self.JOB_TEXT)
        self._assert_consistent(feedback)
        self.assertEqual(len(feedback.suggestions), 1)
        self.assertEqual(feedback.suggestions[0].category, "input")
        self.assertEqual(feedback.suggestions[0].severity, "critical")

    def test_missing_job_description_is_a_warning(self):
        feedback = generate_feedback(self.RESUME_TEXT, "")
        self._assert_consistent(feedback)
        inputs = [item for item in feedback.suggestions if item.category == "input"]
        self.assertEqual([item.severity for item in inputs], ["warning"])

    def test_short_job_description_skips_keyword_feedback(self):
        feedback = generate_feedback(self.RESUME_TEXT, "Python developer")
        self._assert_consistent(feedback)
        self.assertEqual(feedback.details.missing_keyword_count, 0)
        self.assertNotIn("missing_keywords", {item.category for item in feedback.suggestions})
        inputs = [item for item in feedback.suggestions if item.category == "input"]
        self.assertEqual([item.severity for item in inputs], ["warning"])

        result = calculate_ats_score(self.RESUME_TEXT, "Python developer")
        self.assertEqual(result.overall_score, 0.0)

    def test_clean_resume_gets_congratulatory_summary(self):
        with patch("ats_engine.feedback.engine.match_keywords", return_value=KeywordMatchResult()), patch(
            "ats_engine.feedback.engine.match_skills", return_value=SkillsMatchResult()
        ), patch("ats_engine.feedback.engine.detect_weak_action_verbs", return_value=[]), patch(
            "ats_engine.feedback.engine.detect_unquantified_bullets", return_value=QuantificationReport()
        ), patch("ats_engine.feedback.engine.detect_overused_words", return_value=[]), patch(
            "ats_engine.feedback.engine.check_formatting", return_value=FormattingResult(score=1.0)
        ):
            feedback = generate_feedback("Engineer.", self.JOB_TEXT)
        self.assertEqual(feedback.suggestions, [])
        self.assertEqual(feedback.statistics.total, 0)
        self.assertEqual(feedback.summary, NO_ISSUES_SUMMARY)

    def test_failing_detector_is_skipped(self):
        with patch("ats_engine.feedback.engine.detect_overused_words", side_effect=RuntimeError("boom")):
            with self.assertLogs("ats_engine.feedback.engine", level="WARNING"):
                feedback = generate_feedback(self.RESUME_TEXT, self.JOB_TEXT)
        self._assert_consistent(feedback)
        self.assertEqual(feedback.details.overused_word_count, 0)


class FeedbackRuleTests(unittest.TestCase):
    def test_missing_keyword_criticality(self):
        result = KeywordMatchResult(
            missing_keywords=[
                KeywordHit(term="GraphQL", job_count=1, category="hard"),
                KeywordHit(term="billing", job_count=3),
                KeywordHit(term="stakeholders", job_count=2),
                KeywordHit(term="office", job_count=1),
            ]
        )
        report = detect_missing_keywords(result)
        self.assertEqual([hit.term for hit in report.critical], ["billing", "GraphQL"])
        self.assertEqual([hit.term for hit in report.important], ["stakeholders"])

    def test_action_verb_strength(self):
        hits = detect_weak_action_verbs(
            "- Worked on the billing system\n"
            "- Managed vendor relationships across regions\n"
            "- Architected a new pipeline\n"
        )
        self.assertEqual([(hit.verb, hit.strength) for hit in hits], [("worked", "weak"), ("managed", "medium")])
        self.assertIn("Executed", hits[0].suggestions)

    def test_quantification_rate(self):
        report = detect_unquantified_bullets(
            "- Built a reporting tool that saved 10 hours per week\n"
            "- Built dashboards for the sales organization\n"
            "- Led migration to AWS for 12 services\n"
        )
        self.assertEqual(report.unquantified, ["Built dashboards for the sales organization"])
        self.assertAlmostEqual(report.rate, 2 / 3)

    def test_overused_words(self):
        flagged = detect_overused_words("Passionate engineer. I am passionate about code. Truly passionate.")
        self.assertEqual([item.word for item in flagged], ["passionate"])
        self.assertEqual(flagged[0].count, 3)
        self.assertIn("dedicated", flagged[0].alternatives)


if __name__ == "__main__":
    unittest.main()
