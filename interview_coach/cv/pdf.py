"""
CV PDF rendering with fpdf2.

Single-column, Times typeface, A4 portrait with 20 mm margins. Text is laid
out line by line with manual wrapping and page breaks so the y cursor stays
under our control.
"""
import logging
import re
from typing import List, Sequence

from fpdf import FPDF

from ..candidate.models import CandidateProfile

logger = logging.getLogger("cv_pdf")

PAGE_WIDTH = 210
PAGE_HEIGHT = 297
MARGIN = 20
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN
LINE_HEIGHT = 5
BULLET_INDENT = 5

FONTS = {
    "header": ("B", 24),
    "section": ("B", 12),
    "subheader": ("B", 11),
    "bold": ("B", 10),
    "italic": ("I", 10),
    "body": ("", 10),
}

_REPLACEMENTS = {
    "\u2018": "'",  # smart quotes
    "\u2019": "'",
    "\u201C": '"',
    "\u201D": '"',
    "\u2014": "-",  # em dash
    "\u2026": "...",
    "\u00A0": " ",  # non-breaking space
}


def safe_text(value) -> str:
    """Coerce to a stripped string the core Times font can encode."""
    if value is None:
        return ""
    text = str(value)
    for k, v in _REPLACEMENTS.items():
        text = text.replace(k, v)
    text = re.sub(r"[\x00-\x1F\x7F]", " ", text)
    return text.encode("cp1252", errors="replace").decode("cp1252").strip()


class _CVDocument(FPDF):
    def footer(self):
        self.set_font("Times", "", 9)
        self.set_text_color(0, 0, 0)
        self.set_xy(MARGIN, PAGE_HEIGHT - 14)
        self.cell(CONTENT_WIDTH, 6, f"Page {self.page_no()} of {{nb}}", align="C")


class CVPdfRenderer:
    """Renders a CandidateProfile as a one-column CV."""

    def __init__(self):
        self.pdf = None
        self.y = MARGIN

    def render(self, profile: CandidateProfile) -> bytes:
        self.pdf = _CVDocument(orientation="P", unit="mm", format="A4")
        self.pdf.core_fonts_encoding = "windows-1252"
        self.pdf.set_margins(MARGIN, MARGIN, MARGIN)
        self.pdf.set_auto_page_break(False)
        self.pdf.alias_nb_pages()
        self.pdf.add_page()
        self.y = MARGIN

        self._header(profile)
        if profile.summary.strip():
            self._section_title("Professional Summary")
            self._set_font("body")
            self._paragraph(profile.summary)
            self.y += 6
        self._experience(profile)
        self._education(profile)
        self._skills(profile)
        self._projects(profile)
        self._certifications(profile)

        data = bytes(self.pdf.output())
        logger.info("Rendered CV for %s: %d pages, %d bytes",
                    profile.personal_info.name or "unnamed", self.page_count, len(data))
        return data

    @property
    def page_count(self) -> int:
        return self.pdf.page_no() if self.pdf else 0

    # ------------------------------------------------------------------
    # Layout primitives
    # ------------------------------------------------------------------

    def _set_font(self, kind: str) -> None:
        style, size = FONTS[kind]
        self.pdf.set_text_color(0, 0, 0)
        self.pdf.set_font("Times", style, size)

    def _check_page_break(self, height_needed: float) -> None:
        if self.y + height_needed > PAGE_HEIGHT - MARGIN:
            self.pdf.add_page()
            self.y = MARGIN

    def wrap(self, text: str, width: float) -> List[str]:
        """Split text into lines no wider than width at the current font."""
        lines: List[str] = []
        for paragraph in safe_text(text).split("\n"):
            current = ""
            for word in paragraph.split():
                candidate = f"{current} {word}" if current else word
                if self.pdf.get_string_width(candidate) <= width:
                    current = candidate
                    continue
                if current:
                    lines.append(current)
                current = ""
                while self.pdf.get_string_width(word) > width:
                    cut = len(word)
                    while cut > 1 and self.pdf.get_string_width(word[:cut]) > width:
                        cut -= 1
                    lines.append(word[:cut])
                    word = word[cut:]
                current = word
            if current:
                lines.append(current)
        return lines

    def _text(self, x: float, text: str, align: str = "L") -> None:
        text = safe_text(text)
        if align == "C":
            x = (PAGE_WIDTH - self.pdf.get_string_width(text)) / 2
        elif align == "R":
            x = x - self.pdf.get_string_width(text)
        self.pdf.text(x, self.y, text)

    def _paragraph(self, text: str, x: float = MARGIN, width: float = CONTENT_WIDTH) -> None:
        lines = self.wrap(text, width)
        self._check_page_break(len(lines) * LINE_HEIGHT)
        for line in lines:
            self._text(x, line)
            self.y += LINE_HEIGHT

    def _rule(self, width: float) -> None:
        self.pdf.set_line_width(width)
        self.pdf.set_draw_color(0, 0, 0)
        self.pdf.line(MARGIN, self.y, PAGE_WIDTH - MARGIN, self.y)

    def _section_title(self, title: str) -> None:
        self._check_page_break(15)
        self._set_font("section")
        self._text(MARGIN, title.upper())
        self.y += 2
        self._rule(0.1)
        self.y += 6

    def _bullets(self, bullets: Sequence[str]) -> None:
        self._set_font("body")
        for bullet in bullets:
            clean = re.sub(r"^[-*•]\s*", "", safe_text(bullet))
            if not clean:
                continue
            lines = self.wrap(clean, CONTENT_WIDTH - BULLET_INDENT)
            self._check_page_break(len(lines) * LINE_HEIGHT)
            self._text(MARGIN, "•")
            for line in lines:
                self._text(MARGIN + BULLET_INDENT, line)
                self.y += LINE_HEIGHT

    def _dated_row(self, title: str, start: str, end: str) -> None:
        self._set_font("subheader")
        self._text(MARGIN, title)
        self._set_font("body")
        self._text(PAGE_WIDTH - MARGIN, f"{safe_text(start)} – {safe_text(end)}", align="R")

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def _header(self, profile: CandidateProfile) -> None:
        self._set_font("header")
        self._text(0, safe_text(profile.personal_info.name).upper(), align="C")
        self.y += 8

        contact = [safe_text(c) for c in profile.personal_info.contact_parts()]
        if contact:
            self._set_font("body")
            contact_line = "  |  ".join(contact)
            if self.pdf.get_string_width(contact_line) <= CONTENT_WIDTH:
                lines = [contact_line]
            else:
                lines = self.wrap(contact_line, CONTENT_WIDTH)
            for line in lines:
                self._text(0, line, align="C")
                self.y += LINE_HEIGHT
            self.y += 4

        self._rule(0.3)
        self.y += 8

    def _experience(self, profile: CandidateProfile) -> None:
        if not profile.experience:
            return
        self._section_title("Experience")
        for exp in profile.experience:
            self._check_page_break(25)
            self._dated_row(exp.role, exp.start_date, exp.end_date)
            self.y += 5
            self._set_font("italic")
            self._text(MARGIN, exp.company)
            self.y += 5
            self._bullets(exp.description)
            self.y += 4

    def _education(self, profile: CandidateProfile) -> None:
        if not profile.education:
            return
        self._section_title("Education")
        for edu in profile.education:
            self._check_page_break(15)
            self._dated_row(edu.institution, edu.start_date, edu.end_date)
            self.y += 5
            degree = safe_text(edu.degree)
            if edu.major:
                degree += f", {safe_text(edu.major)}"
            self._text(MARGIN, degree)
            self.y += 6
            if edu.description:
                self._bullets(edu.description)
                self.y += 2
            self.y += 2

    def _skills(self, profile: CandidateProfile) -> None:
        skills = [safe_text(s) for s in profile.skills if safe_text(s)]
        if not skills:
            return
        self._section_title("Skills")
        self._set_font("body")
        self._paragraph(" • ".join(skills))
        self.y += 6

    def _projects(self, profile: CandidateProfile) -> None:
        if not profile.projects:
            return
        self._section_title("Projects")
        for proj in profile.projects:
            self._check_page_break(15)
            self._set_font("bold")
            self._text(MARGIN, proj.name)
            if proj.link:
                self._set_font("body")
                self._text(PAGE_WIDTH - MARGIN, proj.link, align="R")
            self.y += 5
            if proj.description:
                self._bullets(proj.description)
                self.y += 3

    def _certifications(self, profile: CandidateProfile) -> None:
        if not profile.certifications:
            return
        self._section_title("Certifications")
        self._set_font("body")
        for cert in profile.certifications:
            self._check_page_break(10)
            line = f"• {safe_text(cert.name)}"
            if cert.issuer:
                line += f" | {safe_text(cert.issuer)}"
            self._text(MARGIN, line)
            self.y += 5
