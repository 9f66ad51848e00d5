"""
Report generator core logic for creating HTML reports.

This module provides save_results, which writes a scored attempt to a
results JSONL file, and the ReportGenerator class that loads such a file,
charts it and produces a standalone HTML report.
"""

import html
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from ..core.file_io import FileIO
from ..core.models import DomainScore, Quiz, QuizResult
from .metrics import DEFAULT_PASSING_SCORE, MAX_SCALED_SCORE
from .visualization import create_allocation_chart, create_domain_score_chart


def save_results(output_path: str, quiz: Quiz, result: QuizResult,
                 passing_score: int = DEFAULT_PASSING_SCORE) -> None:
    """
    Save a scored attempt as JSONL: summary line first, then one response per line.

    Args:
        output_path: Output file path
        quiz: Quiz that was attempted
        result: Scored attempt
        passing_score: Passing score out of 1000 the attempt was judged by
    """
    metadata = {
        "title": quiz.title,
        "description": quiz.description,
        "exam_name": quiz.metadata.get("exam_name"),
        "composition": quiz.metadata.get("composition"),
        "mode": quiz.metadata.get("mode"),
        "requested_count": quiz.metadata.get("requested_count"),
        "allocation": quiz.metadata.get("allocation", {}),
        "breakdown": quiz.metadata.get("breakdown", {}),
        "partial_supply": quiz.metadata.get("partial_supply", False),
        "passing_score": passing_score,
        "scored_at": datetime.now(timezone.utc).isoformat(),
        "result": result.to_dict(),
    }
    FileIO.write_jsonl(output_path, result.responses, metadata=metadata)


class ReportGenerator:
    """Generate standalone HTML reports from scored quiz attempts."""

    def __init__(self, results_path: str):
        """
        Initialize ReportGenerator by loading a results file.

        Args:
            results_path: Path to results JSONL file written by save_results

        Raises:
            FileNotFoundError: If results file doesn't exist
            ValueError: If the file holds no responses or no result summary
        """
        self.results_path = results_path
        self.metadata, self.responses = FileIO.read_jsonl(results_path)

        if not self.responses:
            raise ValueError(f"No responses found in {results_path}")
        if "result" not in self.metadata:
            raise ValueError(f"No result summary found in {results_path}")

        self.result = self.metadata["result"]
        self.domain_scores = [
            DomainScore(**entry) for entry in self.result.get("domain_scores", [])
        ]

    def generate_report(self, output_path: str, incorrect_examples: int = 20) -> None:
        """
        Generate complete standalone HTML report.

        Args:
            output_path: Path for output HTML file
            incorrect_examples: Maximum number of missed questions to review

        Raises:
            IOError: If report cannot be written
        """
        html_content = self._generate_html_report(incorrect_examples)

        output_file = Path(output_path)
        output_file.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(output_file, 'w', encoding='utf-8') as f:
                f.write(html_content)
        except OSError as e:
            raise IOError(f"Failed to write report file: {e}")

    def _generate_html_report(self, incorrect_examples: int) -> str:
        title = html.escape(self.metadata.get("title") or "Practice Quiz")

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title} - Results</title>
    {self._get_embedded_css()}
</head>
<body>
    <div class="container">
        <header>
            <h1>{title}</h1>
            <p class="subtitle">{html.escape(self.metadata.get("description") or "")}</p>
        </header>

        {self._generate_summary_section()}

        {self._generate_composition_section()}

        {self._generate_domain_section()}

        {self._generate_performance_section()}

        {self._generate_review_section(incorrect_examples)}

        <footer>
            <p>Generated on {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}</p>
        </footer>
    </div>
</body>
</html>"""

    def _generate_summary_section(self) -> str:
        """
        Generate HTML for the score summary.

        Returns:
            HTML string for summary section
        """
        passed = self.result.get("passed", False)
        passing_score = self.metadata.get("passing_score", DEFAULT_PASSING_SCORE)
        time_taken = self.result.get("time_taken")
        time_display = f"{time_taken // 60}m {time_taken % 60}s" if time_taken else "Not recorded"

        verdict_class = "pass" if passed else "fail"
        verdict_text = "PASSED" if passed else "NOT PASSED"

        return f"""
        <section class="summary">
            <h2>Score Summary</h2>

            <div class="verdict {verdict_class}">{verdict_text}</div>

            <div class="metrics-grid">
                <div class="metric-card">
                    <div class="metric-value">{self.result.get("weighted_score", 0)}/{MAX_SCALED_SCORE}</div>
                    <div class="metric-label">Scaled Score</div>
                    <div class="metric-detail">Passing: {passing_score}</div>
                </div>
                <div class="metric-card">
                    <div class="metric-value">{self.result.get("percentage", 0)}%</div>
                    <div class="metric-label">Correct</div>
                    <div class="metric-detail">{self.result.get("score", 0)} of {self.result.get("total_questions", 0)} questions</div>
                </div>
                <div class="metric-card">
                    <div class="metric-value">{time_display}</div>
                    <div class="metric-label">Time Taken</div>
                </div>
            </div>

            <div class="config-grid">
                <div class="config-item">
                    <span class="config-label">Exam:</span>
                    <span class="config-value">{html.escape(str(self.metadata.get("exam_name") or "Unknown"))}</span>
                </div>
                <div class="config-item">
                    <span class="config-label">Mode:</span>
                    <span class="config-value">{html.escape(str(self.metadata.get("mode") or "Unknown"))}</span>
                </div>
                <div class="config-item">
                    <span class="config-label">Scored At:</span>
                    <span class="config-value">{self.metadata.get("scored_at", "Unknown")}</span>
                </div>
            </div>
        </section>
        """

    def _group_names(self) -> Dict[str, str]:
        return {d.domain_id: d.domain_name for d in self.domain_scores}

    def _generate_composition_section(self) -> str:
        """
        Generate HTML for the requested-versus-sampled chart.

        Returns:
            HTML string for composition section
        """
        allocation = self.metadata.get("allocation") or {}
        breakdown = self.metadata.get("breakdown") or {}
        if not allocation and not breakdown:
            return ""

        try:
            chart_html = create_allocation_chart(allocation, breakdown, self._group_names())
        except Exception as e:
            chart_html = f'<div class="error-message">Failed to generate visualization: {e}</div>'

        note = ""
        if self.metadata.get("partial_supply"):
            note = (
                '<p class="warning-message">The question banks could not supply every '
                f'requested question: {sum(breakdown.values())} of '
                f'{self.metadata.get("requested_count", "?")} were sampled.</p>'
            )

        return f"""
        <section class="composition">
            <h2>Quiz Composition</h2>
            <p class="section-description">
                Questions requested for each domain from its exam weighting,
                next to the number actually drawn from the question banks.
            </p>
            {note}
            {chart_html}
        </section>
        """

    def _generate_domain_section(self) -> str:
        """
        Generate HTML for per-domain performance.

        Returns:
            HTML string for domain section
        """
        if not self.domain_scores:
            return ""

        passing_percentage = self.metadata.get("passing_score", DEFAULT_PASSING_SCORE) / 10
        try:
            chart_html = create_domain_score_chart(self.domain_scores, passing_percentage)
        except Exception as e:
            chart_html = f'<div class="error-message">Failed to generate visualization: {e}</div>'

        rows = ""
        for d in self.domain_scores:
            weight = f"{d.weight:g}%" if d.weight is not None else "-"
            rows += f"""
                <tr>
                    <td>{html.escape(d.domain_name)}</td>
                    <td>{weight}</td>
                    <td>{d.score}/{d.total_questions}</td>
                    <td>{d.percentage}%</td>
                </tr>"""

        return f"""
        <section class="domains">
            <h2>Performance by Domain</h2>
            {chart_html}
            <table class="domain-table">
                <thead>
                    <tr><th>Domain</th><th>Exam Weight</th><th>Correct</th><th>Score</th></tr>
                </thead>
                <tbody>{rows}
                </tbody>
            </table>
        </section>
        """

    def _generate_performance_section(self) -> str:
        """
        Generate HTML for the performance level and the topic/difficulty breakdowns.

        Returns:
            HTML string for performance section
        """
        level = self.result.get("performance_level")
        if not level:
            return ""

        recommendations = "".join(
            f"<li>{html.escape(text)}</li>" for text in self.result.get("recommendations", [])
        )

        return f"""
        <section class="performance">
            <h2>Performance: {html.escape(level)}</h2>
            <ul class="recommendations">{recommendations}</ul>
            {self._performance_table("Topic", self.result.get("topic_performance") or {})}
            {self._performance_table("Difficulty", self.result.get("difficulty_performance") or {})}
        </section>
        """

    @staticmethod
    def _performance_table(label: str, performance: Dict[str, Dict[str, int]]) -> str:
        if not performance:
            return ""

        rows = ""
        for key, entry in performance.items():
            rows += f"""
                <tr>
                    <td>{html.escape(key)}</td>
                    <td>{entry["correct"]}/{entry["total"]}</td>
                    <td>{entry["percentage"]}%</td>
                </tr>"""

        return f"""
            <table class="domain-table">
                <thead>
                    <tr><th>{label}</th><th>Correct</th><th>Score</th></tr>
                </thead>
                <tbody>{rows}
                </tbody>
            </table>"""

    def _generate_review_section(self, max_examples: int) -> str:
        """
        Generate HTML reviewing missed questions with their explanations.

        Args:
            max_examples: Maximum number of missed questions to include

        Returns:
            HTML string for review section
        """
        missed = [r for r in self.responses if not r.get("is_correct")]

        if not missed:
            return """
        <section class="review">
            <h2>Review</h2>
            <p class="success-message">Every question was answered correctly.</p>
        </section>
        """

        shown = missed[:max_examples]
        names = self._group_names()
        cases_html = "".join(
            self._render_missed_question(idx, response, names)
            for idx, response in enumerate(shown, 1)
        )

        return f"""
        <section class="review">
            <h2>Review</h2>
            <p class="section-description">
                Showing {len(shown)} of {len(missed)} missed questions.
            </p>
            {cases_html}
        </section>
        """

    @staticmethod
    def _render_missed_question(idx: int, response: Dict[str, Any], names: Dict[str, str]) -> str:
        if response.get("error"):
            return f"""
            <div class="review-case">
                <div class="review-header">
                    <span class="review-number">#{idx}</span>
                    <span class="badge badge-error">{html.escape(response["error"])}</span>
                </div>
                <div class="review-content">Question id: {html.escape(str(response.get("question_id")))}</div>
            </div>
            """

        options_html = ""
        for i, option in enumerate(response.get("options", [])):
            css = ""
            if i == response.get("correct_index"):
                css = " correct"
            elif i == response.get("selected_index"):
                css = " chosen"
            options_html += f'<div class="option{css}">{chr(65 + i)}. {html.escape(option)}</div>'

        selected = response.get("selected_answer")
        badge = "Incorrect" if selected is not None else "Unanswered"
        explanation = response.get("explanation")
        explanation_html = (
            f'<div class="explanation"><strong>Explanation:</strong> {html.escape(explanation)}</div>'
            if explanation else ""
        )
        domain = names.get(response.get("group"), response.get("group", ""))

        return f"""
            <div class="review-case">
                <div class="review-header">
                    <span class="review-number">#{idx}</span>
                    <span class="badge badge-incorrect">{badge}</span>
                    <span class="domain-tag">{html.escape(str(domain))}</span>
                </div>
                <div class="review-content">
                    <div class="question-text">{html.escape(response.get("question", ""))}</div>
                    <div class="options">{options_html}</div>
                    {explanation_html}
                </div>
            </div>
            """

    @staticmethod
    def _get_embedded_css() -> str:
        return """
    <style>
        * { margin: 0; padding: 0; box-sizing: border-box; }

        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Arial, sans-serif;
            line-height: 1.6;
            color: #333;
            background: #eef1f7;
            padding: 20px;
        }

        .container {
            max-width: 1200px;
            margin: 0 auto;
            background: white;
            border-radius: 12px;
            box-shadow: 0 6px 24px rgba(0, 0, 0, 0.12);
            overflow: hidden;
        }

        header {
            background: linear-gradient(135deg, #1f4e79 0%, #2e75b6 100%);
            color: white;
            padding: 36px;
            text-align: center;
        }

        header h1 { font-size: 2.2em; margin-bottom: 8px; }
        .subtitle { font-size: 1.1em; opacity: 0.9; }

        section { padding: 36px; border-bottom: 1px solid #e0e0e0; }
        h2 { font-size: 1.8em; margin-bottom: 20px; color: #1f4e79; }
        .section-description { color: #666; margin-bottom: 24px; }

        .verdict {
            display: inline-block;
            padding: 8px 24px;
            border-radius: 24px;
            font-weight: 700;
            letter-spacing: 1px;
            margin-bottom: 24px;
        }
        .verdict.pass { background: #d4edda; color: #155724; }
        .verdict.fail { background: #f8d7da; color: #721c24; }

        .metrics-grid {
            display: grid;
            grid-template-columns: repeat(auto-fit, minmax(220px, 1fr));
            gap: 20px;
            margin-bottom: 24px;
        }
        .metric-card {
            background: #2e75b6;
            color: white;
            padding: 22px;
            border-radius: 10px;
            text-align: center;
        }
        .metric-value { font-size: 2.2em; font-weight: 700; }
        .metric-label { font-weight: 500; }
        .metric-detail { font-size: 0.9em; opacity: 0.85; }

        .config-grid {
            display: grid;
            grid-template-columns: repeat(auto-fit, minmax(280px, 1fr));
            gap: 12px;
            background: #f8f9fa;
            padding: 20px;
            border-radius: 8px;
        }
        .config-item { display: flex; justify-content: space-between; }
        .config-label { font-weight: 600; color: #555; }
        .config-value { font-family: 'Courier New', monospace; }

        .domain-table { width: 100%; border-collapse: collapse; margin-top: 20px; }
        .domain-table th, .domain-table td { padding: 10px 14px; border-bottom: 1px solid #e0e0e0; text-align: left; }
        .domain-table th { background: #f8f9fa; color: #1f4e79; }

        .recommendations { margin: 10px 0 20px 20px; line-height: 1.8; }

        .review-case {
            border: 1px solid #ddd;
            border-radius: 8px;
            margin-bottom: 20px;
            overflow: hidden;
        }
        .review-header {
            background: #f8f9fa;
            padding: 12px 18px;
            display: flex;
            align-items: center;
            gap: 12px;
            border-bottom: 1px solid #ddd;
        }
        .review-number { font-weight: 700; color: #1f4e79; }
        .review-content { padding: 18px; }
        .domain-tag { margin-left: auto; color: #666; font-size: 0.9em; }

        .badge {
            padding: 4px 12px;
            border-radius: 20px;
            font-size: 0.8em;
            font-weight: 600;
            text-transform: uppercase;
        }
        .badge-incorrect { background: #dc3545; color: white; }
        .badge-error { background: #6c757d; color: white; }

        .question-text {
            background: #f8f9fa;
            padding: 14px;
            border-left: 4px solid #2e75b6;
            border-radius: 6px;
            margin-bottom: 12px;
        }
        .option { padding: 6px 10px; border-radius: 4px; }
        .option.correct { background: #d4edda; color: #155724; font-weight: 600; }
        .option.chosen { background: #f8d7da; color: #721c24; }
        .explanation { margin-top: 12px; color: #444; }

        .success-message, .warning-message, .error-message {
            padding: 16px;
            border-radius: 8px;
            margin-bottom: 16px;
        }
        .success-message { background: #d4edda; color: #155724; text-align: center; }
        .warning-message { background: #fff3cd; color: #856404; }
        .error-message { background: #f8d7da; color: #721c24; }

        footer { background: #f8f9fa; padding: 24px; text-align: center; color: #666; }

        @media (max-width: 768px) {
            section { padding: 18px; }
            .metrics-grid, .config-grid { grid-template-columns: 1fr; }
        }
    </style>
        """
