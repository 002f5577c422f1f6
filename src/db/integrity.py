"""Store Integrity Report

Provides programmatic verification of the loose references between synced
tables. Upstream data is known to have gaps, so nothing here is enforced by
the schema; the report only lists what does not resolve:
 - TXT runeword rune codes without a matching socketable
 - Set items whose set name is not in the sets table
 - Enabled unique items whose base item code has no item type
 - Sync metadata consistency (records without a version, version without records)

Returned structure is a list of dictionaries so callers (CLI, tests) can render or assert.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, List

from .store import GameDataStore


@dataclass
class IntegrityIssue:
    category: str
    message: str
    details: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _check_runeword_rune_codes(store: GameDataStore) -> List[IntegrityIssue]:
    known = {s["code"] for s in store.all("socketables")}
    issues: List[IntegrityIssue] = []
    for rw in store.all("txt_runewords"):
        for rune in rw["runes"]:
            if rune["code"] not in known:
                issues.append(
                    IntegrityIssue(
                        category="unknown_rune_code",
                        message=f"Runeword '{rw['id']}' uses unknown socketable code '{rune['code']}'",
                        details={"runeword": rw["id"], "code": rune["code"]},
                    )
                )
    return issues


def _check_set_item_sets(store: GameDataStore) -> List[IntegrityIssue]:
    cur = store.conn.execute(
        """
        SELECT si.item_index, si.set_name
        FROM set_item si
        LEFT JOIN item_set s ON s.name = si.set_name
        WHERE s.set_index IS NULL
        ORDER BY si.set_item_id
        """
    )
    return [
        IntegrityIssue(
            category="unknown_set",
            message=f"Set item '{index}' references unknown set '{set_name}'",
            details={"set_item": index, "set_name": set_name},
        )
        for index, set_name in cur.fetchall()
    ]


def _check_unique_item_codes(store: GameDataStore) -> List[IntegrityIssue]:
    # Only meaningful once item types were synced
    if store.count("item_types") == 0:
        return []
    cur = store.conn.execute(
        """
        SELECT u.item_index, u.item_code
        FROM unique_item u
        LEFT JOIN item_type t ON t.code = lower(u.item_code)
        WHERE u.enabled = 1 AND u.item_code != '' AND t.code IS NULL
        ORDER BY u.unique_id
        """
    )
    return [
        IntegrityIssue(
            category="unknown_item_code",
            message=f"Unique item '{index}' has base code '{code}' without an item type",
            details={"unique_item": index, "item_code": code},
        )
        for index, code in cur.fetchall()
    ]


def _check_metadata(store: GameDataStore) -> List[IntegrityIssue]:
    state = store.data_state()
    issues: List[IntegrityIssue] = []
    if state.has_data and not state.stored_version:
        issues.append(
            IntegrityIssue(
                category="metadata",
                message="Store holds records but no synced version",
                details={"counts": dict(state.counts or {})},
            )
        )
    if state.stored_version and not state.has_data:
        issues.append(
            IntegrityIssue(
                category="metadata",
                message=f"Version {state.stored_version} recorded but no runewords stored",
                details={"version": state.stored_version},
            )
        )
    return issues


def run_integrity_checks(store: GameDataStore) -> List[Dict[str, Any]]:
    """Run all integrity checks and return list of issue dictionaries.

    Empty list indicates every loose reference resolved.
    """
    issues: List[IntegrityIssue] = []
    issues.extend(_check_runeword_rune_codes(store))
    issues.extend(_check_set_item_sets(store))
    issues.extend(_check_unique_item_codes(store))
    issues.extend(_check_metadata(store))
    return [i.to_dict() for i in issues]


__all__ = ["IntegrityIssue", "run_integrity_checks"]
