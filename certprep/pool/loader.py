"""
Question bank loading.

Question banks are JSON documents, one per topic, shaped like::

    {
      "title": "Level of Detail Expressions",
      "metadata": {"domain": "domain3", "difficulty": "advanced",
                   "sourceUrl": "...", "generatedDate": "..."},
      "questions": [
        {"id": "lod-1", "question": "...", "options": ["...", "..."],
         "correctAnswer": 0, "explanation": "...", "difficulty": "advanced",
         "tags": ["lod"]}
      ]
    }

Banks can be read from a directory, from a bundle (a single document holding
every bank under "questionBanks"), or fetched over HTTP as a bundle or bank
by bank. The loaders return the raw banks; build_pool turns them into a
QuestionPool for a composition.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

import aiohttp

from ..core.errors import BankLoadError
from ..core.file_io import FileIO
from ..core.models import Composition, Group, Question, parse_difficulty
from ..core.validator import QuestionValidator
from .question_pool import QuestionPool


logger = logging.getLogger(__name__)


BUNDLE_FILE_NAME = "question-banks-bundle.json"


class _RetryableHTTPError(Exception):
    """Server-side HTTP failure worth retrying."""


def parse_question(
    record: Dict[str, Any],
    group_key: str,
    topic: str,
    bank_metadata: Optional[Dict[str, Any]] = None,
    cross_listed: Iterable[str] = ()
) -> Question:
    """
    Convert a validated bank record into a Question.

    Difficulty falls back to the bank's difficulty, then to intermediate.
    """
    bank_metadata = bank_metadata or {}
    bank_difficulty = parse_difficulty(bank_metadata.get("difficulty"))

    return Question(
        id=str(record["id"]),
        group_key=group_key,
        content=record["question"],
        options=tuple(record["options"]),
        correct_option_index=record["correctAnswer"],
        explanation=record.get("explanation"),
        difficulty=parse_difficulty(record.get("difficulty"), default=bank_difficulty),
        topic=topic,
        source_url=record.get("sourceUrl") or bank_metadata.get("sourceUrl", ""),
        tags=tuple(record.get("tags") or ()),
        cross_listed=tuple(cross_listed),
    )


def _topic_owners(composition: Composition, banks: Dict[str, Dict]) -> Dict[str, List[str]]:
    """Map each topic to the groups listing it, in composition order."""
    owners: Dict[str, List[str]] = {}
    for group in composition.groups:
        for topic in group.topics:
            listed = owners.setdefault(topic, [])
            if group.id not in listed:
                listed.append(group.id)

    # Banks the composition doesn't list may still declare their domain
    group_ids = set(composition.group_ids())
    for topic, bank in banks.items():
        if topic in owners:
            continue
        domain = (bank.get("metadata") or {}).get("domain")
        if domain in group_ids:
            owners[topic] = [domain]
        else:
            logger.debug(f"Bank '{topic}' is not part of composition '{composition.id}', skipping")

    return owners


def build_pool(
    banks: Dict[str, Dict],
    composition: Composition,
    validator: Optional[QuestionValidator] = None
) -> QuestionPool:
    """
    Build a QuestionPool from raw banks for one composition.

    A bank listed under several groups is assigned to the first group that
    lists it; the other groups are recorded as cross-listings. Invalid
    records and repeated question ids are skipped with a warning.

    Args:
        banks: Mapping of topic (bank name) to bank document
        composition: Composition providing groups and topic lists
        validator: Question validator. If None, uses QuestionValidator.

    Returns:
        QuestionPool with one primary group per question
    """
    validator = validator or QuestionValidator()
    owners = _topic_owners(composition, banks)

    questions: List[Question] = []
    seen_ids = set()
    skipped = 0

    for topic, group_ids in owners.items():
        bank = banks.get(topic)
        if bank is None:
            continue

        primary, cross_listed = group_ids[0], group_ids[1:]
        bank_metadata = bank.get("metadata") or {}

        for record in bank.get("questions") or []:
            is_valid, error = validator.validate(record)
            if not is_valid:
                logger.warning(f"Skipping invalid question in bank '{topic}': {error}")
                skipped += 1
                continue

            question_id = str(record["id"])
            if question_id in seen_ids:
                logger.warning(f"Skipping duplicate question id '{question_id}' in bank '{topic}'")
                skipped += 1
                continue
            seen_ids.add(question_id)

            questions.append(
                parse_question(record, primary, topic, bank_metadata, cross_listed)
            )

    pool = QuestionPool(questions, composition.groups)
    logger.info(
        f"Built pool for '{composition.id}': {len(pool)} questions "
        f"from {len(banks)} banks ({skipped} skipped)"
    )
    return pool


def pool_from_records(
    records: Iterable[Dict[str, Any]],
    groups: Iterable[Group] = (),
    validator: Optional[QuestionValidator] = None
) -> QuestionPool:
    """
    Build a QuestionPool from a flat feed of question records.

    Each record carries its own "group" and optional "topic" keys, as rows
    coming from a relational store would.
    """
    validator = validator or QuestionValidator()
    questions = []

    for record in records:
        is_valid, error = validator.validate(record)
        if not is_valid:
            logger.warning(f"Skipping invalid question record: {error}")
            continue
        if not record.get("group"):
            logger.warning(f"Skipping question '{record['id']}' without a group")
            continue
        questions.append(
            parse_question(record, record["group"], record.get("topic", ""))
        )

    return QuestionPool(questions, groups)


def build_bundle(bank_dir: str, output_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Merge every bank file of a directory into one bundle document.

    Args:
        bank_dir: Directory holding <topic>.json bank files
        output_path: Optional path to write the bundle to

    Returns:
        Bundle dictionary with version, generatedAt and questionBanks

    Raises:
        FileNotFoundError: If bank_dir doesn't exist
        BankLoadError: If a bank file cannot be parsed
    """
    now = datetime.now(timezone.utc)
    bundle = {
        "version": str(int(now.timestamp() * 1000)),
        "generatedAt": now.isoformat(),
        "questionBanks": {},
    }

    total_questions = 0
    for path in FileIO.list_json_files(bank_dir, exclude=[BUNDLE_FILE_NAME]):
        try:
            content = FileIO.read_json(str(path))
        except ValueError as e:
            raise BankLoadError(f"Failed to parse bank file {path.name}: {e}")

        bundle["questionBanks"][path.stem] = content
        count = len(content.get("questions") or [])
        total_questions += count
        logger.info(f"  {path.stem}: {count} questions")

    logger.info(
        f"Bundled {len(bundle['questionBanks'])} banks with {total_questions} questions"
    )

    if output_path:
        FileIO.write_json(output_path, bundle)
        logger.info(f"Bundle written to {output_path} (version {bundle['version']})")

    return bundle


class BankLoader:
    """Loads raw question banks from disk, from a bundle, or over HTTP."""

    def __init__(self, config: Optional[Dict] = None, backoff_base: float = 1.0):
        """
        Initialize the loader.

        Args:
            config: Loader configuration (see Config.get_loader_config):
                - timeout: HTTP request timeout in seconds
                - retry_times: Maximum attempts per HTTP request
            backoff_base: Initial retry delay in seconds
        """
        config = config or {}
        self.timeout = config.get("timeout", 30)
        self.retry_times = max(1, config.get("retry_times", 3))
        self.backoff_base = backoff_base

    def load_directory(self, bank_dir: str, topics: Optional[Iterable[str]] = None) -> Dict[str, Dict]:
        """
        Read bank files from a directory.

        Banks that fail to load are skipped with a warning so that a single
        broken file does not block quiz generation.

        Args:
            bank_dir: Directory holding <topic>.json files
            topics: Only load these topics; None loads every file

        Returns:
            Mapping of topic to bank document

        Raises:
            FileNotFoundError: If bank_dir doesn't exist
        """
        wanted = set(topics) if topics is not None else None
        banks = {}

        for path in FileIO.list_json_files(bank_dir, exclude=[BUNDLE_FILE_NAME]):
            if wanted is not None and path.stem not in wanted:
                continue
            try:
                banks[path.stem] = FileIO.read_json(str(path))
            except (ValueError, IOError) as e:
                logger.warning(f"Failed to load question bank '{path.stem}': {e}")

        if wanted is not None:
            missing = sorted(wanted - set(banks))
            if missing:
                logger.warning(f"{len(missing)} question banks not found: {', '.join(missing)}")

        logger.info(f"Loaded {len(banks)} question banks from {bank_dir}")
        return banks

    def load_bundle(self, bundle_path: str) -> Dict[str, Dict]:
        """
        Read a bundle file.

        Raises:
            FileNotFoundError: If the bundle doesn't exist
            BankLoadError: If the bundle is malformed
        """
        try:
            bundle = FileIO.read_json(bundle_path)
        except ValueError as e:
            raise BankLoadError(f"Invalid bundle {bundle_path}: {e}")

        banks = self._banks_from_bundle(bundle, bundle_path)
        logger.info(
            f"Loaded bundle {bundle_path} (version {bundle.get('version', 'unknown')}): "
            f"{len(banks)} banks"
        )
        return banks

    async def fetch_bundle(self, url: str) -> Dict[str, Dict]:
        """
        Fetch a bundle over HTTP.

        Raises:
            BankLoadError: If the bundle cannot be fetched or is malformed
        """
        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
            bundle = await self._retry_with_backoff(session, url)

        if bundle is None:
            raise BankLoadError(f"Failed to fetch question bank bundle from {url}")

        banks = self._banks_from_bundle(bundle, url)
        logger.info(f"Fetched bundle from {url}: {len(banks)} banks")
        return banks

    async def fetch_banks(
        self,
        base_url: str,
        topics: Iterable[str],
        concurrency: int = 5
    ) -> Dict[str, Dict]:
        """
        Fetch individual bank files (<base_url>/<topic>.json) concurrently.

        Banks that cannot be fetched are skipped with a warning.

        Args:
            base_url: URL prefix of the bank files
            topics: Topics to fetch
            concurrency: Maximum number of concurrent requests

        Returns:
            Mapping of topic to bank document for the banks fetched
        """
        semaphore = asyncio.Semaphore(concurrency)
        topics = list(dict.fromkeys(topics))
        base_url = base_url.rstrip("/")

        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
            async def fetch_with_semaphore(topic: str):
                async with semaphore:
                    return await self._retry_with_backoff(session, f"{base_url}/{topic}.json")

            results = await asyncio.gather(
                *(fetch_with_semaphore(topic) for topic in topics),
                return_exceptions=True
            )

        banks = {}
        for topic, result in zip(topics, results):
            if isinstance(result, Exception):
                logger.warning(f"Could not load question bank '{topic}': {result}")
            elif result is None:
                logger.warning(f"Could not load question bank '{topic}'")
            else:
                banks[topic] = result

        logger.info(f"Fetched {len(banks)} of {len(topics)} question banks from {base_url}")
        return banks

    async def load_for_config(self, config: Dict,
                              topics: Optional[Iterable[str]] = None) -> Dict[str, Dict]:
        """
        Load banks from whichever source the configuration names.

        Precedence: bundle_url, then bank_base_url, then bundle_path, then bank_dir.

        Args:
            config: Configuration with the bank source keys
            topics: Banks to fetch from bank_base_url, which has no listing

        Raises:
            ValueError: If no source is configured, or bank_base_url is set
                without any topics to fetch
        """
        if config.get("bundle_url"):
            return await self.fetch_bundle(config["bundle_url"])
        if config.get("bank_base_url"):
            topics = list(topics or [])
            if not topics:
                raise ValueError("bank_base_url needs the list of question banks to fetch")
            return await self.fetch_banks(config["bank_base_url"], topics)
        if config.get("bundle_path"):
            return self.load_bundle(config["bundle_path"])
        if config.get("bank_dir"):
            return self.load_directory(config["bank_dir"])
        raise ValueError(
            "No question bank source configured "
            "(bank_dir, bundle_path, bundle_url or bank_base_url)"
        )

    async def load_pool(self, config: Dict, composition: Composition) -> QuestionPool:
        """Load banks from the configured source and build the composition's pool."""
        banks = await self.load_for_config(config, composition.topics())
        if not banks:
            raise BankLoadError("No question banks could be loaded")
        return build_pool(banks, composition)

    @staticmethod
    def _banks_from_bundle(bundle: Any, source: str) -> Dict[str, Dict]:
        if not isinstance(bundle, dict) or not isinstance(bundle.get("questionBanks"), dict):
            raise BankLoadError(f"Bundle from {source} has no 'questionBanks' mapping")
        return bundle["questionBanks"]

    async def _get_json(self, session: aiohttp.ClientSession, url: str) -> Any:
        async with session.get(url) as response:
            if response.status >= 500:
                raise _RetryableHTTPError(f"HTTP {response.status} from {url}")
            if response.status >= 400:
                raise BankLoadError(f"HTTP {response.status} from {url}")
            return await response.json(content_type=None)

    async def _retry_with_backoff(self, session: aiohttp.ClientSession, url: str) -> Optional[Any]:
        """Fetch JSON with exponential backoff.

        Args:
            session: Open client session
            url: URL to fetch

        Returns:
            Parsed JSON, or None if all retries failed or the error is not retryable
        """
        for attempt in range(self.retry_times):
            try:
                result = await self._get_json(session, url)
                if attempt > 0:
                    logger.info(f"Request succeeded on attempt {attempt + 1}")
                return result

            except (_RetryableHTTPError, aiohttp.ClientConnectionError, asyncio.TimeoutError) as e:
                if attempt < self.retry_times - 1:
                    delay = self.backoff_base * (2 ** attempt)
                    logger.warning(
                        f"Fetch failed, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{self.retry_times}): {e}"
                    )
                    await asyncio.sleep(delay)
                else:
                    logger.error(f"Fetch failed after {self.retry_times} attempts: {e}")
                    return None

            except (BankLoadError, aiohttp.ContentTypeError, ValueError) as e:
                logger.error(f"Non-retryable error fetching {url}: {e}")
                return None

        return None
