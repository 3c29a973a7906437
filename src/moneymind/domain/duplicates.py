"""Duplicate transaction detection.

Only exact duplicates are grouped. Two transactions are duplicates when they
fall on the same day, have identical amounts, the same description (trimmed,
case-insensitive) and, when both carry one, the same reason. No tolerance or
fuzzy matching is applied; ``calculate_similarity`` is offered as a utility
but the detection path does not use it.
"""

import time
from datetime import date, timedelta
from typing import Optional

from moneymind.database.base import Database
from moneymind.domain.entities import (
    DuplicateDetectionResult,
    DuplicateGroup,
    Transaction,
)
from moneymind.utils.date_parser import format_display_date, to_day
from moneymind.utils.logger import get_logger

logger = get_logger(__name__)

EXACT_MATCH_SIMILARITY = 1.0


def _normalize(text: Optional[str]) -> str:
    return (text or "").strip().casefold()


def is_exact_duplicate(first: Transaction, second: Transaction) -> bool:
    """Return True if two transactions are exact duplicates of each other."""
    if to_day(first.date) != to_day(second.date):
        logger.debug(f"  date mismatch: {first.date} != {second.date}")
        return False

    if first.amount != second.amount:
        logger.debug(f"  amount mismatch: {first.amount} != {second.amount}")
        return False

    if _normalize(first.description) != _normalize(second.description):
        logger.debug(f"  description mismatch: '{first.description}' != '{second.description}'")
        return False

    # Reasons only disqualify when both sides have one
    reason1 = _normalize(first.reason)
    reason2 = _normalize(second.reason)
    if reason1 and reason2 and reason1 != reason2:
        logger.debug(f"  reason mismatch: '{first.reason}' != '{second.reason}'")
        return False

    return True


def levenshtein_distance(s1: str, s2: str) -> int:
    """Edit distance with unit cost for insertion, deletion and substitution."""
    m, n = len(s1), len(s2)
    previous = list(range(n + 1))
    for i in range(1, m + 1):
        current = [i] + [0] * n
        for j in range(1, n + 1):
            cost = 0 if s1[i - 1] == s2[j - 1] else 1
            current[j] = min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + cost,
            )
        previous = current
    return previous[n]


def calculate_similarity(s1: Optional[str], s2: Optional[str]) -> float:
    """Normalized Levenshtein similarity in [0.0, 1.0].

    Strings are compared lowercased and trimmed. Empty input scores 0.
    """
    if not s1 or not s2:
        return 0.0

    s1 = s1.strip().lower()
    s2 = s2.strip().lower()

    if s1 == s2:
        return 1.0

    max_len = max(len(s1), len(s2))
    return 1.0 - levenshtein_distance(s1, s2) / max_len


def group_by_day(transactions: list[Transaction]) -> dict[date, list[Transaction]]:
    """Group transactions by calendar day, preserving input order."""
    by_day: dict[date, list[Transaction]] = {}
    for txn in transactions:
        by_day.setdefault(to_day(txn.date), []).append(txn)
    return by_day


class DuplicateDetectionService:
    """Service for finding and removing duplicate transactions."""

    def __init__(self, db: Database):
        """Initialize duplicate detection service.

        Args:
            db: Database instance used to load and delete transactions
        """
        self.db = db

    def detect_duplicates(
        self,
        transactions: Optional[list[Transaction]] = None,
        account_id: Optional[int] = None,
    ) -> DuplicateDetectionResult:
        """Find groups of exact duplicate transactions.

        Args:
            transactions: Transactions to scan. When None they are loaded
                from the database, oldest first.
            account_id: Restrict loading to one account's ledger (ignored
                when ``transactions`` is given)

        Returns:
            DuplicateDetectionResult. Never raises; failures are reported
            with ``success=False``.
        """
        result = DuplicateDetectionResult()
        started = time.perf_counter()

        try:
            logger.info("Starting duplicate detection")

            if transactions is None:
                # Oldest entry of each group is kept by default
                transactions = sorted(
                    self.db.list_transactions(account_id=account_id),
                    key=lambda t: (to_day(t.date), t.id),
                )
            result.total_transactions = len(transactions)

            if len(transactions) >= 2:
                result.groups = self._find_groups(transactions)

            result.duplicate_groups_found = len(result.groups)
            result.total_duplicates = sum(g.transaction_count - 1 for g in result.groups)
            result.success = True

            logger.info(
                f"Duplicate detection completed: {result.duplicate_groups_found} groups, "
                f"{result.total_duplicates} duplicates"
            )
        except Exception as e:
            logger.exception("Error detecting duplicates")
            result.success = False
            result.error = str(e)

        result.elapsed_time = timedelta(seconds=time.perf_counter() - started)
        return result

    def _find_groups(self, transactions: list[Transaction]) -> list[DuplicateGroup]:
        groups: list[DuplicateGroup] = []
        processed: set[int] = set()
        group_id = 1

        for day, day_transactions in group_by_day(transactions).items():
            if len(day_transactions) < 2:
                continue

            logger.info(f"Checking {len(day_transactions)} transactions on {format_display_date(day)}")

            for i, candidate in enumerate(day_transactions):
                if candidate.id in processed:
                    continue

                members = [candidate]
                max_similarity = 0.0

                for other in day_transactions[i + 1:]:
                    if other.id in processed:
                        continue

                    logger.debug(f"Comparing [{candidate.id}] vs [{other.id}]")
                    if is_exact_duplicate(candidate, other):
                        members.append(other)
                        max_similarity = max(max_similarity, EXACT_MATCH_SIMILARITY)
                        processed.add(other.id)

                if len(members) > 1:
                    processed.add(candidate.id)
                    groups.append(
                        DuplicateGroup(
                            group_id=group_id,
                            transactions=members,
                            similarity_score=max_similarity,
                            selected_to_keep=candidate,
                        )
                    )
                    logger.info(
                        f"Duplicate group #{group_id}: {len(members)} x "
                        f"{candidate.amount} '{candidate.description}' on {format_display_date(day)}"
                    )
                    group_id += 1

        return groups

    def delete_duplicates(self, groups: list[DuplicateGroup]) -> int:
        """Delete every non-kept member of each group.

        Groups whose kept transaction is missing or not one of their members
        keep their first transaction. The first failing delete stops the
        operation; deletions already issued stay done and are counted.

        Returns:
            Number of transactions deleted
        """
        deleted_count = 0

        try:
            logger.info(f"Deleting duplicates from {len(groups)} groups")

            for group in groups:
                if group.transactions and not group.keeps_member():
                    if group.selected_to_keep is not None:
                        logger.warning(
                            f"Group #{group.group_id}: kept transaction {group.selected_to_keep.id} "
                            f"is not a member, keeping {group.transactions[0].id}"
                        )
                    group.selected_to_keep = group.transactions[0]

                for transaction in group.to_delete:
                    self.db.delete_transaction(transaction.id)
                    deleted_count += 1

            logger.info(f"Deleted {deleted_count} duplicate transactions")
        except Exception:
            logger.exception(f"Error deleting duplicates after {deleted_count} deletions")

        return deleted_count

    calculate_similarity = staticmethod(calculate_similarity)
