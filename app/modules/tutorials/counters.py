"""Counted child relations of a tutorial.

Each child table has an AFTER INSERT OR DELETE trigger that adds 1 to, or
subtracts 1 from (never below 0), one counter column on the parent tutorial.
There is no recomputation in the request path; find_drift() only reports
differences for the operator audit script.
"""
from dataclasses import dataclass
from typing import Dict, List


@dataclass(frozen=True)
class CountedRelation:
    table: str
    counter_column: str
    trigger_name: str


# Trigger function shared by every counted relation; the counter column is its argument
COUNTER_FUNCTION = "maintain_tutorial_counter"

# Service-role RPC that recomputes one counter from live rows under a row lock
RECOUNT_FUNCTION = "recount_tutorial_counter"

COUNTED_RELATIONS = (
    CountedRelation("tutorial_likes", "likes_count", "on_tutorial_like_change"),
    CountedRelation("tutorial_comments", "comments_count", "on_tutorial_comment_change"),
    CountedRelation("enrollments", "enrollments_count", "on_enrollment_change"),
)


def relation_for(table: str) -> CountedRelation:
    for relation in COUNTED_RELATIONS:
        if relation.table == table:
            return relation
    raise KeyError(f"{table} is not a counted relation")


@dataclass(frozen=True)
class CounterDrift:
    tutorial_id: str
    counter_column: str
    stored: int
    actual: int

    @property
    def delta(self) -> int:
        return self.actual - self.stored


def find_drift(counter_column: str, stored: Dict[str, int], actual: Dict[str, int]) -> List[CounterDrift]:
    """Compare stored counters (tutorial_id -> value) with live child-row counts."""
    drift = []
    for tutorial_id, stored_value in stored.items():
        actual_value = actual.get(tutorial_id, 0)
        if stored_value != actual_value:
            drift.append(CounterDrift(tutorial_id, counter_column, stored_value, actual_value))
    return drift
