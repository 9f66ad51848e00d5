"""
Composition registry for certification exams.

A composition lists the exam domains, the weight of each domain, and the
question banks that feed it. Compositions are static configuration: the
built-in table below can be extended from a JSON file.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models import Composition, Group


logger = logging.getLogger(__name__)


TABLEAU_CONSULTANT = Composition(
    id="tableau-consultant",
    exam_name="Salesforce Certified Tableau Consultant",
    total_questions=60,
    passing_score=750,
    time_limit=120,
    groups=[
        Group(
            id="domain1",
            display_name="Evaluate Current State",
            description="Map analytics architecture and assess current state analytics solutions",
            target_weight_percent=22,
            topics=[
                "compare-license-types",
                "tableau-products",
                "upgrade-tableau-server-overview",
                "upgrading-from-2018-2-and-later-windows",
                "location-data-tableau-supports",
                "geocode-locations-not-recognized",
                "dashboards",
                "structure-data-for-analysis",
                "optimize-relationship-queries-performance-options",
                "best-practices-published-data-sources",
                "optimize-workbook-performance",
                "tableau-cloud-release-notes",
                "tableau-support-policy",
                "about-tableau-catalog",
                "use-lineage-for-impact-analysis",
                "designing-efficient-production-dashboards-whitepaper",
            ],
        ),
        Group(
            id="domain2",
            display_name="Plan and Prepare Data Connections",
            description="Design data architecture and establish data connectivity strategies",
            target_weight_percent=22,
            topics=[
                "get-your-data-tableau-ready",
                "set-up-data-sources",
                "rls-best-practices-for-data-sources-and-workbooks",
                "overview-of-row-level-security-options-in-tableau",
                "row-level-security-in-the-database",
                "best-practices-for-row-level-security-in-tableau-with-entitlements-tables-whitepaper",
                "how-relationships-differ-from-joins",
                "functions-in-tableau",
                "user-functions",
                "dashboard-extensions-api",
                "tableau-prep-save-and-share-your-work",
                "designing-efficient-production-dashboards-whitepaper",
                "manage-data",
                "refresh-extracts",
            ],
        ),
        Group(
            id="domain3",
            display_name="Design and Troubleshoot Calculations and Workbooks",
            description="Build advanced analytics solutions and troubleshoot complex workbooks",
            target_weight_percent=40,
            topics=[
                "optimize-workbook-performance",
                "tableau-workbook-performance-checklist",
                "create-custom-fields-with-calculations",
                "level-of-detail-expressions",
                "level-of-detail-expressions-and-aggregation",
                "functions-in-tableau",
                "best-practices-for-creating-calculations-in-tableau",
                "actions",
                "filter-data-from-your-views",
                "tableaus-order-of-operations",
                "use-radar-charts-to-compare-dimensions-over-several-metrics",
                "view-acceleration",
                "interpret-a-performance-recording",
                "designing-efficient-workbooks-whitepaper",
                "exploring-sankey-and-radial-charts-with-the-new-chart-types-pilot-on-tableau-public",
                "use-dynamic-zone-visibility",
                "fiscal-dates",
            ],
        ),
        Group(
            id="domain4",
            display_name="Establish Governance and Support Published Content",
            description="Implement governance frameworks and support enterprise Tableau deployments",
            target_weight_percent=16,
            topics=[
                "governance-in-tableau",
                "publish-data-sources-and-workbooks",
                "data-security",
                "data-labels",
                "introduction-to-tableau-metadata-api",
                "create-virtual-connection",
                "send-data-driven-alerts",
                "embed-views-into-webpages",
                "work-with-content-revisions",
                "administrative-views",
                "use-admin-insights-to-create-custom-views",
                "cmt-migration-limitations",
                "about-tableau-catalog",
                "collect-data-with-tableau-server-repository",
                "manage-content-access",
                "tableau-public-faq",
                "mfa-and-tableau-cloud",
            ],
        ),
    ],
)


# Default question counts for each quiz mode
QUIZ_PRESETS = {
    "full_practice": {"name": "Full Practice Exam", "total_questions": 60},
    "domain_focus": {"name": "Domain-Focused Practice", "total_questions": 15},
    "quick_review": {"name": "Quick Review", "total_questions": 20},
    "custom": {"name": "Weak Areas Focus", "total_questions": 30},
    "random": {"name": "Random Practice", "total_questions": 10},
}


_REGISTRY: Dict[str, Composition] = {
    TABLEAU_CONSULTANT.id: TABLEAU_CONSULTANT,
}


def composition_from_dict(data: Dict[str, Any]) -> Composition:
    """
    Build a Composition from its JSON representation.

    Args:
        data: Dictionary with id, examName, totalQuestions, passingScore,
            timeLimit and a list of domains (id, name, description,
            weightPercentage, questionBanks)

    Returns:
        Composition instance

    Raises:
        ValueError: If required fields are missing or weights do not sum to 100
    """
    for key in ("id", "examName", "totalQuestions", "domains"):
        if key not in data:
            raise ValueError(f"Composition is missing required field: {key}")

    groups = [
        Group(
            id=domain["id"],
            display_name=domain.get("name", domain["id"]),
            description=domain.get("description", ""),
            target_weight_percent=float(domain.get("weightPercentage", 0)),
            topics=list(domain.get("questionBanks", [])),
        )
        for domain in data["domains"]
    ]

    if not groups:
        raise ValueError(f"Composition '{data['id']}' has no domains")

    total_weight = sum(group.target_weight_percent for group in groups)
    if abs(total_weight - 100) > 1e-6:
        raise ValueError(
            f"Composition '{data['id']}' domain weights sum to {total_weight}, expected 100"
        )

    return Composition(
        id=data["id"],
        exam_name=data["examName"],
        groups=groups,
        total_questions=int(data["totalQuestions"]),
        passing_score=int(data.get("passingScore", 700)),
        time_limit=int(data.get("timeLimit", 0)),
    )


def load_compositions(file_path: str) -> List[Composition]:
    """
    Load compositions from a JSON file and add them to the registry.

    The file holds either a single composition object or a list of them.

    Args:
        file_path: Path to the JSON file

    Returns:
        List of loaded compositions

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If a composition is malformed
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Compositions file not found: {file_path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    entries = data if isinstance(data, list) else [data]
    compositions = [composition_from_dict(entry) for entry in entries]

    for composition in compositions:
        if composition.id in _REGISTRY:
            logger.warning(f"Overriding composition '{composition.id}' from {file_path}")
        _REGISTRY[composition.id] = composition

    logger.info(f"Loaded {len(compositions)} composition(s) from {file_path}")
    return compositions


def get_composition(composition_id: str) -> Composition:
    """
    Look up a composition by id.

    Raises:
        ValueError: If the id is not registered
    """
    composition = _REGISTRY.get(composition_id)
    if composition is None:
        raise ValueError(
            f"Unknown composition: {composition_id}. "
            f"Available compositions: {', '.join(sorted(_REGISTRY))}"
        )
    return composition


def list_compositions() -> List[str]:
    return sorted(_REGISTRY)


def preset_question_count(mode: str, composition: Optional[Composition] = None) -> int:
    """Default question count for a quiz mode."""
    if mode == "full_practice" and composition is not None:
        return composition.total_questions
    if mode not in QUIZ_PRESETS:
        raise ValueError(f"Unknown quiz mode: {mode}")
    return QUIZ_PRESETS[mode]["total_questions"]
