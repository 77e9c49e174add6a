"""
Counter Audit Script
Compares the trigger-maintained tutorial counters with live child-row counts.
Counters are never repaired automatically; drift is reported, and with --apply
each drifted counter is recounted in the database by recount_tutorial_counter.

    python -m app.scripts.audit_counters [--apply]

Requires SUPABASE_SERVICE_ROLE_KEY: enrollments are private under RLS.
"""

import argparse
import sys
from collections import Counter
from typing import Dict, List

from app.config import settings
from app.database.supabase_client import SupabaseClient
from app.modules.tutorials.counters import COUNTED_RELATIONS, RECOUNT_FUNCTION, CounterDrift, find_drift
from app.modules.tutorials.models import TABLE as TUTORIALS_TABLE, COUNTER_COLUMNS
from supabase import Client
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

PAGE_SIZE = 1000


def fetch_all(supabase: Client, table: str, columns: str) -> List[dict]:
    """Read every row of table, PAGE_SIZE rows per request"""
    rows = []
    start = 0
    while True:
        result = supabase.table(table)\
            .select(columns)\
            .order("id")\
            .range(start, start + PAGE_SIZE - 1)\
            .execute()
        batch = result.data or []
        rows.extend(batch)
        if len(batch) < PAGE_SIZE:
            return rows
        start += PAGE_SIZE


def audit(supabase: Client) -> List[CounterDrift]:
    """Drift for every counted relation"""
    tutorials = fetch_all(supabase, TUTORIALS_TABLE, "id, " + ", ".join(COUNTER_COLUMNS))
    logger.info(f"Auditing counters of {len(tutorials)} tutorials")
    drift = []
    for relation in COUNTED_RELATIONS:
        stored: Dict[str, int] = {t["id"]: t[relation.counter_column] for t in tutorials}
        children = fetch_all(supabase, relation.table, "id, tutorial_id")
        actual = Counter(row["tutorial_id"] for row in children)
        relation_drift = find_drift(relation.counter_column, stored, dict(actual))
        logger.info(
            f"{relation.table}: {len(children)} rows, {len(relation_drift)} tutorials with drifted {relation.counter_column}"
        )
        drift.extend(relation_drift)
    return drift


def apply_corrections(supabase: Client, drift: List[CounterDrift]) -> int:
    """Recount each drifted counter in the database.

    The snapshot values are only used for reporting; the new value is counted
    by recount_tutorial_counter under a row lock, so rows added after the
    audit are not overwritten.
    """
    corrected = 0
    for item in drift:
        try:
            result = supabase.rpc(RECOUNT_FUNCTION, {
                "p_tutorial_id": item.tutorial_id,
                "p_counter": item.counter_column
            }).execute()
        except Exception as e:
            logger.error(f"Error correcting {item.counter_column} on {item.tutorial_id}: {e}")
            continue
        corrected += 1
        if result.data is None:
            logger.warning(f"{item.tutorial_id} no longer exists; {item.counter_column} not recounted")
        elif result.data != item.actual:
            logger.warning(
                f"{item.tutorial_id} {item.counter_column} changed since the audit: "
                f"audited {item.actual}, recounted {result.data}"
            )
    return corrected


def main(argv=None):
    parser = argparse.ArgumentParser(description="Report (and optionally fix) tutorial counter drift")
    parser.add_argument("--apply", action="store_true", help="recount drifted counters from live rows")
    args = parser.parse_args(argv)

    if not settings.supabase_service_role_key:
        logger.error("SUPABASE_SERVICE_ROLE_KEY is required to read every child row")
        return 2

    try:
        supabase = SupabaseClient.get_service_client()
        drift = audit(supabase)
        for item in drift:
            logger.warning(
                f"{item.tutorial_id} {item.counter_column}: stored={item.stored} actual={item.actual} ({item.delta:+d})"
            )
        if not drift:
            logger.info("No counter drift found")
            return 0
        if args.apply:
            corrected = apply_corrections(supabase, drift)
            logger.info(f"Corrected {corrected} of {len(drift)} drifted counters")
        else:
            logger.info("Run with --apply to recount the drifted counters")
        return 1 if not args.apply else 0
    except Exception as e:
        logger.error(f"Error during counter audit: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
