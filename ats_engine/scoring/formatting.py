from __future__ import annotations

import re
import unicodedata

from ats_engine.core.config.scoring import get_scoring_value
from ats_engine.schemas.resume import Resume
from ats_engine.schemas.scoring import FormattingIssue, FormattingResult, Severity
from ats_engine.semantic.text import (
    BULLET_CHARS,
    count_section_headings,
    has_email,
    has_phone,
    is_bullet_like,
    is_section_heading,
    lines,
)

_TABLE_CELL_RE = re.compile(r"\|\s*[^|\n]+?\s*\|")
_BOX_DRAWING_RE = re.compile(r"[─-╿]")
_PAGE_MARKER_RE = re.compile(
    r"^\s*(?:page\s+\d+(?:\s+of\s+\d+)?|\d+\s*/\s*\d+|-\s*\d+\s*-|\d{1,2})\s*$",
    re.IGNORECASE,
)
_HEADER_FOOTER_RE = re.compile(r"\b(?:confidential|proprietary|curriculum vitae\s+-\s+page)\b", re.IGNORECASE)
_MULTI_SPACE_RE = re.compile(r"(?<=\S) {2,}(?=\S)")
_ALL_CAPS_WORD_RE = re.compile(r"\b[A-Z]{4,}\b")
_ALLOWED_PUNCTUATION = set(".,;:!?'\"()-/&%$+#@*_[]–—’‘“”…€£")
_HOSTILE_UNICODE_CATEGORIES = {"So", "Co", "Cn", "Cs"}
_BULLET_SET = set(BULLET_CHARS)

_RULE_TEXT: dict[str, tuple[str, str]] = {
    "empty_document": (
        "The resume has no readable text.",
        "Export the resume as a text-based PDF or DOCX so the content can be parsed.",
    ),
    "missing_contact_info": (
        "No email address or phone number was found.",
        "Add an email address and phone number at the top of the resume.",
    ),
    "missing_email": (
        "No email address was found.",
        "Add a professional email address to your contact line.",
    ),
    "missing_phone": (
        "No phone number was found.",
        "Add a phone number so recruiters can reach you quickly.",
    ),
    "unsupported_file_format": (
        "The file format may not be parsed reliably by applicant tracking systems.",
        "Submit the resume as PDF or DOCX.",
    ),
    "table_layout": (
        "Table or grid layout detected.",
        "Replace tables with plain sections and bullet points; many ATS parsers read tables out of order.",
    ),
    "header_footer_content": (
        "Header or footer content detected (page numbers, confidentiality notes).",
        "Move important details into the body; ATS parsers often skip headers and footers.",
    ),
    "unusual_unicode": (
        "Unusual symbols or icons detected.",
        "Replace icons and decorative symbols with plain text labels.",
    ),
    "excessive_special_characters": (
        "Many special characters detected.",
        "Use standard punctuation and simple bullet characters only.",
    ),
    "missing_section_headings": (
        "Few recognizable section headings were found.",
        "Use standard headings such as Experience, Education and Skills.",
    ),
    "long_lines": (
        "Many lines are very long.",
        "Break long paragraphs into concise bullet points.",
    ),
    "inconsistent_whitespace": (
        "Inconsistent spacing or indentation detected.",
        "Use single spaces between words and one indentation style.",
    ),
    "inconsistent_bullets": (
        "Several different bullet styles are used.",
        "Pick one bullet character and use it throughout.",
    ),
    "excessive_capitals": (
        "Many words are written in all capitals.",
        "Reserve capitals for headings and acronyms.",
    ),
}


def _violation(code: str, severity: Severity, detail: str | None = None) -> FormattingIssue:
    message, suggestion = _RULE_TEXT[code]
    deduction = float(get_scoring_value(f"formatting.deductions.{severity}", 0))
    if detail:
        message = f"{message} {detail}"
    return FormattingIssue(
        code=code,
        severity=severity,
        message=message,
        suggestion=suggestion,
        deduction=deduction,
    )


def _contact_violation(text: str, resume: Resume | None) -> FormattingIssue | None:
    contact = resume.contact if resume is not None else None
    email = has_email(text) or bool(contact and contact.email)
    phone = has_phone(text) or bool(contact and contact.phone)
    if not email and not phone:
        return _violation("missing_contact_info", "critical")
    if not email:
        return _violation("missing_email", "improvement")
    if not phone:
        return _violation("missing_phone", "improvement")
    return None


def _format_violation(resume: Resume | None) -> FormattingIssue | None:
    if resume is None or resume.metadata is None or not resume.metadata.format:
        return None
    file_format = resume.metadata.format.strip().lower().lstrip(".")
    accepted = {str(item).lower() for item in get_scoring_value("formatting.accepted_formats", [])}
    if file_format in accepted:
        return None
    return _violation("unsupported_file_format", "warning", f"Detected format: {file_format}.")


def _unusual_characters(text: str) -> tuple[set[str], set[str]]:
    hostile: set[str] = set()
    special: set[str] = set()
    for char in text:
        if char.isalnum() or char.isspace() or char in _BULLET_SET or char in _ALLOWED_PUNCTUATION:
            continue
        if unicodedata.category(char) in _HOSTILE_UNICODE_CATEGORIES:
            hostile.add(char)
        else:
            special.add(char)
    return hostile, special


def check_formatting(text: str | None, resume: Resume | None = None) -> FormattingResult:
    content = text or ""
    if not content.strip():
        empty = _violation("empty_document", "critical")
        return FormattingResult(
            score=0.0,
            issues=[empty],
            details={"critical": 1, "warning": 0, "improvement": 0},
        )

    all_lines = lines(content)
    violations: list[FormattingIssue] = []

    contact = _contact_violation(content, resume)
    if contact is not None:
        violations.append(contact)

    file_format = _format_violation(resume)
    if file_format is not None:
        violations.append(file_format)

    table_cells = len(_TABLE_CELL_RE.findall(content))
    tab_rows = sum(1 for line in content.splitlines() if line.count("\t") >= 2)
    if (
        table_cells > int(get_scoring_value("formatting.table_cell_threshold", 3))
        or _BOX_DRAWING_RE.search(content)
        or tab_rows >= 3
    ):
        violations.append(_violation("table_layout", "warning"))

    header_marks = sum(
        1 for line in all_lines if _PAGE_MARKER_RE.match(line) or _HEADER_FOOTER_RE.search(line)
    )
    if header_marks >= int(get_scoring_value("formatting.header_footer_threshold", 2)):
        violations.append(_violation("header_footer_content", "warning"))

    hostile, special = _unusual_characters(content)
    if hostile:
        sample = " ".join(sorted(hostile)[:5])
        violations.append(_violation("unusual_unicode", "warning", f"Examples: {sample}"))

    visible = sum(1 for char in content if not char.isspace())
    special_count = sum(1 for char in content if char in special)
    if special and (
        len(special) > int(get_scoring_value("formatting.special_char_unique_threshold", 5))
        or special_count / max(visible, 1) > float(get_scoring_value("formatting.special_char_ratio", 0.03))
    ):
        violations.append(_violation("excessive_special_characters", "warning"))

    if count_section_headings(content) < int(get_scoring_value("formatting.min_section_headers", 2)):
        violations.append(_violation("missing_section_headings", "warning"))

    long_line_chars = int(get_scoring_value("formatting.long_line_chars", 150))
    long_lines = sum(1 for line in all_lines if len(line) > long_line_chars)
    if all_lines and long_lines / len(all_lines) > float(get_scoring_value("formatting.long_line_ratio", 0.3)):
        violations.append(_violation("long_lines", "improvement"))

    raw_lines = content.splitlines()
    tab_indented = any(line.startswith("\t") for line in raw_lines)
    space_indented = any(line.startswith("  ") for line in raw_lines)
    if len(_MULTI_SPACE_RE.findall(content)) > int(get_scoring_value("formatting.multi_space_runs", 20)) or (
        tab_indented and space_indented
    ):
        violations.append(_violation("inconsistent_whitespace", "improvement"))

    bullet_styles = {line.lstrip()[0] for line in all_lines if is_bullet_like(line) and not line.lstrip()[0].isdigit()}
    if len(bullet_styles) > int(get_scoring_value("formatting.bullet_styles", 2)):
        violations.append(_violation("inconsistent_bullets", "improvement"))

    caps_words = sum(
        len(_ALL_CAPS_WORD_RE.findall(line)) for line in all_lines if not is_section_heading(line)
    )
    if caps_words > int(get_scoring_value("formatting.all_caps_words", 10)):
        violations.append(_violation("excessive_capitals", "improvement"))

    total_deduction = sum(item.deduction for item in violations)
    score = max(0.0, 100.0 - total_deduction) / 100.0
    counts = {"critical": 0, "warning": 0, "improvement": 0}
    for item in violations:
        counts[item.severity] += 1
    return FormattingResult(
        score=score,
        issues=[item for item in violations if item.severity != "improvement"],
        warnings=[item for item in violations if item.severity == "improvement"],
        details=counts,
    )
