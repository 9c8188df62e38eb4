import logging
import os
from datetime import datetime
from typing import List, Optional

from .error_handling import InputValidationError
from .models import AnalysisResult, ChecklistResult

logger = logging.getLogger(__name__)

SECTION_TITLES = {
    "title": "Title & Keywords",
    "abstract": "Abstract",
    "methodology": "Methodology",
    "results": "Results & Discussion",
    "references": "References",
}

FOOTER = "Generated automatically by SintaScan AI. Use this report as a reference only."


def _numbered(items) -> List[str]:
    return [f"{i}. {item}" for i, item in enumerate(items, 1)] or ["_None reported._"]


class ReportGenerator:
    """Turns a finished analysis into a shareable document"""

    def build_report(self, journal_title: str, analysis: AnalysisResult, analysis_date: Optional[datetime] = None,
                     checklist: Optional[ChecklistResult] = None) -> str:
        if not journal_title or not journal_title.strip():
            raise InputValidationError("Journal title must not be empty")
        analysis_date = analysis_date or datetime.now()

        lines = [
            "# Journal Analysis Report",
            "",
            f"**Journal:** {journal_title.strip()}  ",
            f"**Analyzed:** {analysis_date.strftime('%d %B %Y %H:%M')}",
            "",
            "## Prediction",
            "",
            f"- SINTA Level: **{analysis.level.value}**",
            f"- Publishability Score: {analysis.publishability_score}/100",
            f"- Completeness: {analysis.completeness}%",
            "",
            f"## Issues & Weaknesses ({len(analysis.weaknesses)})",
            "",
            *_numbered(analysis.weaknesses),
            "",
            f"## Improvement Suggestions ({len(analysis.suggestions)})",
            "",
            *_numbered(analysis.suggestions),
            "",
            "## Detailed Analysis",
        ]
        for key, title in SECTION_TITLES.items():
            lines += ["", f"### {title}", "", analysis.section_analysis[key]]

        if checklist is not None:
            lines += [
                "",
                f"## Requirements Checklist ({checklist.passed_count}/{checklist.total_count} passed)",
                "",
                "| Requirement | Status | Details |",
                "|---|---|---|",
            ]
            lines += [
                f"| {item.name} | {item.status.value} | {item.details.replace('|', '/')} |"
                for item in checklist.items
            ]

        lines += ["", "---", FOOTER]
        return "\n".join(lines) + "\n"

    def build_text_summary(self, journal_title: str, analysis: AnalysisResult,
                           analysis_date: Optional[datetime] = None) -> str:
        """Plain-text variant for sharing as a message"""
        analysis_date = analysis_date or datetime.now()
        lines = [
            "SINTA ANALYSIS REPORT",
            "=====================",
            f"Journal: {journal_title}",
            f"Date: {analysis_date.strftime('%d/%m/%Y')}",
            "",
            f"SINTA Level: {analysis.level.value}",
            f"Publishability Score: {analysis.publishability_score}/100",
            f"Completeness: {analysis.completeness}%",
            "",
            f"ISSUES FOUND ({len(analysis.weaknesses)})",
            *[f"{i}. {w}" for i, w in enumerate(analysis.weaknesses, 1)],
            "",
            f"SUGGESTIONS ({len(analysis.suggestions)})",
            *[f"{i}. {s}" for i, s in enumerate(analysis.suggestions, 1)],
            "",
            "DETAILED ANALYSIS",
        ]
        for key, title in SECTION_TITLES.items():
            lines += [f"{title}:", analysis.section_analysis[key], ""]
        lines.append(FOOTER)
        return "\n".join(lines)

    def save_report(self, journal_title: str, analysis: AnalysisResult, output_dir: str,
                    analysis_date: Optional[datetime] = None, checklist: Optional[ChecklistResult] = None) -> str:
        content = self.build_report(journal_title, analysis, analysis_date=analysis_date, checklist=checklist)
        os.makedirs(output_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        report_path = os.path.join(output_dir, f'sinta_report_{timestamp}.md')
        with open(report_path, 'w', encoding='utf-8') as f:
            f.write(content)
        logger.info(f"Report saved to {report_path}")
        return report_path
