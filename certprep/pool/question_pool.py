"""
Read-only, in-memory index over the question inventory.

The pool groups questions by their primary group (exam domain) and by topic
(source question bank). It is built once by a loader and never mutated;
filtering returns a new pool.
"""

from collections import OrderedDict
from dataclasses import replace
from typing import Dict, Iterable, Iterator, List, Optional

from ..core.models import Composition, Group, Question, QuestionFilter


class QuestionPool:
    """Lookup structure answering supply queries for the samplers."""

    def __init__(self, questions: Iterable[Question], groups: Iterable[Group] = ()):
        """
        Build the pool.

        Args:
            questions: Questions to index; ids must be unique
            groups: Configured groups in their stable display order. Groups
                referenced by questions but not configured are appended in
                first-seen order.

        Raises:
            ValueError: If two questions share an id
        """
        configured: "OrderedDict[str, Group]" = OrderedDict()
        for group in groups:
            configured[group.id] = group

        by_id: Dict[str, Question] = {}
        by_group: Dict[str, List[Question]] = {group_id: [] for group_id in configured}
        by_topic: Dict[str, List[Question]] = {}

        for question in questions:
            if question.id in by_id:
                raise ValueError(f"Duplicate question id in pool: {question.id}")
            by_id[question.id] = question

            if question.group_key not in configured:
                configured[question.group_key] = Group(
                    id=question.group_key,
                    display_name=question.group_key,
                )
                by_group[question.group_key] = []

            by_group[question.group_key].append(question)
            by_topic.setdefault(question.topic, []).append(question)

        self._questions = by_id
        self._by_group = {key: tuple(value) for key, value in by_group.items()}
        self._by_topic = {key: tuple(value) for key, value in by_topic.items()}
        self._groups = [
            replace(group, members=frozenset(q.id for q in self._by_group[group.id]))
            for group in configured.values()
        ]

    def questions_in_group(self, group_id: str) -> List[Question]:
        """
        Return all questions whose primary group is group_id.

        An unknown or empty group yields an empty list.
        """
        return list(self._by_group.get(group_id, ()))

    def total_available(self, group_id: Optional[str] = None) -> int:
        """Count questions in one group, or across all groups when group_id is None."""
        if group_id is None:
            return len(self._questions)
        return len(self._by_group.get(group_id, ()))

    def all_groups(self) -> List[Group]:
        """Configured groups in stable order."""
        return list(self._groups)

    def group_ids(self) -> List[str]:
        return [group.id for group in self._groups]

    def has_group(self, group_id: str) -> bool:
        return group_id in self._by_group

    def get_group(self, group_id: str) -> Optional[Group]:
        for group in self._groups:
            if group.id == group_id:
                return group
        return None

    def get(self, question_id: str) -> Optional[Question]:
        return self._questions.get(question_id)

    def all_questions(self) -> List[Question]:
        """All questions, grouped in stable group order."""
        return [q for group in self._groups for q in self._by_group[group.id]]

    def questions_in_topic(self, topic: str) -> List[Question]:
        return list(self._by_topic.get(topic, ()))

    def topics(self) -> List[str]:
        return sorted(self._by_topic)

    def filter(self, question_filter: QuestionFilter) -> "QuestionPool":
        """
        Return a new pool holding only the questions matching the filter.

        The configured groups are kept so group order and group lookups
        behave the same on the filtered pool.
        """
        if question_filter.is_empty():
            return self
        kept = [q for q in self.all_questions() if question_filter.matches(q)]
        return QuestionPool(kept, self._groups)

    def stats(self) -> Dict[str, Dict]:
        """Question count, group and difficulty spread for every topic."""
        stats = {}
        for topic, questions in sorted(self._by_topic.items()):
            difficulties: Dict[int, int] = {}
            for question in questions:
                difficulties[question.difficulty] = difficulties.get(question.difficulty, 0) + 1
            stats[topic] = {
                "question_count": len(questions),
                "group": questions[0].group_key,
                "difficulty": difficulties,
            }
        return stats

    def coverage(self, composition: Optional[Composition] = None) -> Dict[str, Dict]:
        """
        Summarize how well each group is covered by loaded questions.

        Cross-listed banks count toward every group listing them, so the
        figures describe supply for display and do not add up to the pool size.

        Args:
            composition: Optional composition providing required counts

        Returns:
            Mapping of group display name to coverage figures
        """
        coverage = {}
        for group in self._groups:
            topic_details = {}
            for topic in group.topics:
                if topic in self._by_topic:
                    topic_details[topic] = len(self._by_topic[topic])

            topics_total = len(group.topics)
            topics_loaded = len(topic_details)
            entry = {
                "group_id": group.id,
                "total_questions": self.total_available(group.id),
                "listed_questions": sum(topic_details.values()),
                "topics_loaded": topics_loaded,
                "topics_total": topics_total,
                "coverage_percentage": round(topics_loaded / topics_total * 100) if topics_total else 0,
                "topic_details": topic_details,
            }

            if composition is not None:
                entry["required_questions"] = round(
                    composition.total_questions * group.target_weight_percent / 100
                )

            coverage[group.display_name] = entry
        return coverage

    def required_vs_loaded(self) -> Dict[str, List[str]]:
        """Compare the topics groups list against the topics actually loaded."""
        required = sorted({topic for group in self._groups for topic in group.topics})
        loaded = self.topics()
        missing = [topic for topic in required if topic not in self._by_topic]
        return {"required": required, "loaded": loaded, "missing": missing}

    def __len__(self) -> int:
        return len(self._questions)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._questions

    def __iter__(self) -> Iterator[Question]:
        return iter(self.all_questions())
