"""
Snapshot reconciliation.

diff() computes the edit operations that turn one snapshot into another and
apply_operations() replays them.

Index policy: operations are applied sequentially. Every index refers to the
state produced by all previous operations in the list, never to the old or
the new snapshot as a whole. A RowMove removes the row first and then inserts
it at ``to_row`` of the resulting target section. A SectionDelete removes the
section together with any rows still in it.

Emission order:
1. RowDelete for rows of surviving sections that disappear, or whose new
   section did not exist before
2. SectionDelete for sections that disappear
3. SectionInsert for new sections, in ascending index order
4. RowMove / RowInsert walking the new snapshot in order
5. RowUpdate for rows that stayed in place but whose fields changed

Rows are matched by team id only. Within a surviving section the rows that
stay put are the longest subsequence whose relative order is unchanged, so a
single team changing position produces a single RowMove.
"""

from bisect import bisect_left
from typing import Callable, List, Sequence

from worldcup.data_models.snapshot import (
    Operation, RowDelete, RowInsert, RowMove, RowUpdate,
    SectionDelete, SectionInsert, SectionSnapshot, Snapshot
)


def _longest_increasing_run(items: Sequence, key: Callable) -> List:
    """Longest subsequence of items whose key values strictly increase"""
    tails = []
    tail_values = []
    predecessors = [None] * len(items)

    for i, item in enumerate(items):
        value = key(item)
        pos = bisect_left(tail_values, value)
        if pos > 0:
            predecessors[i] = tails[pos - 1]
        if pos == len(tails):
            tails.append(i)
            tail_values.append(value)
        else:
            tails[pos] = i
            tail_values[pos] = value

    result = []
    i = tails[-1] if tails else None
    while i is not None:
        result.append(items[i])
        i = predecessors[i]
    result.reverse()
    return result


def _check_section_order(old_keys, new_keys, old_key_set, new_key_set):
    surviving_old = [key for key in old_keys if key in new_key_set]
    surviving_new = [key for key in new_keys if key in old_key_set]
    if surviving_old != surviving_new:
        raise ValueError(
            "Snapshots order their common sections differently; "
            "both must come from the same query specification"
        )


def diff(old: Snapshot, new: Snapshot) -> List[Operation]:
    """
    Compute the ordered operations that transform old into new.

    Raises:
        ValueError: If sections present in both snapshots are ordered differently
    """
    old_keys = old.section_keys
    new_keys = new.section_keys
    old_key_set = set(old_keys)
    new_key_set = set(new_keys)
    _check_section_order(old_keys, new_keys, old_key_set, new_key_set)

    new_section_of = {
        team_id: section.key
        for section in new.sections
        for team_id in section.row_ids
    }

    # Rows that keep their place inside a surviving section
    old_by_key = {section.key: section for section in old.sections}
    stable = set()
    for section in new.sections:
        old_section = old_by_key.get(section.key)
        if old_section is None:
            continue
        old_rows = {team_id: row for row, team_id in enumerate(old_section.row_ids)}
        kept = [team_id for team_id in section.row_ids if team_id in old_rows]
        stable.update(_longest_increasing_run(kept, key=old_rows.__getitem__))

    operations: List[Operation] = []
    working = [[section.key, list(section.row_ids)] for section in old.sections]

    for section_index, (key, rows) in enumerate(working):
        if key not in new_key_set:
            continue
        for row_index in range(len(rows) - 1, -1, -1):
            team_id = rows[row_index]
            target = new_section_of.get(team_id)
            if target is None or target not in old_key_set:
                operations.append(RowDelete(section_index, row_index, team_id))
                del rows[row_index]

    for section_index in range(len(working) - 1, -1, -1):
        key = working[section_index][0]
        if key not in new_key_set:
            operations.append(SectionDelete(section_index, key))
            del working[section_index]

    for section_index, key in enumerate(new_keys):
        if key not in old_key_set:
            operations.append(SectionInsert(section_index, key))
            working.insert(section_index, [key, []])

    section_of = {
        team_id: section_index
        for section_index, (_, rows) in enumerate(working)
        for team_id in rows
    }
    for section_index, section in enumerate(new.sections):
        rows = working[section_index][1]
        previous = None
        for team_id in section.row_ids:
            if team_id in stable:
                previous = team_id
                continue

            from_section = section_of.get(team_id)
            if from_section is not None:
                from_rows = working[from_section][1]
                from_row = from_rows.index(team_id)
                del from_rows[from_row]

            to_row = 0 if previous is None else rows.index(previous) + 1
            rows.insert(to_row, team_id)
            section_of[team_id] = section_index

            if from_section is None:
                operations.append(RowInsert(section_index, to_row, team_id))
            else:
                operations.append(RowMove(from_section, from_row, section_index, to_row, team_id))
            previous = team_id

    for section_index, section in enumerate(new.sections):
        for row_index, team_id in enumerate(section.row_ids):
            if team_id in stable and old.fingerprints.get(team_id) != new.fingerprints.get(team_id):
                operations.append(RowUpdate(section_index, row_index, team_id))

    return operations


def _rows(working, section: int) -> list:
    if not 0 <= section < len(working):
        raise ValueError(f"Section {section} does not exist")
    return working[section][1]


def _take(working, section: int, row: int, team_id: int) -> list:
    rows = _rows(working, section)
    if not 0 <= row < len(rows) or rows[row] != team_id:
        raise ValueError(f"Team {team_id} is not at section {section}, row {row}")
    return rows


def _put(working, section: int, row: int, team_id: int):
    rows = _rows(working, section)
    if not 0 <= row <= len(rows):
        raise ValueError(f"Row {row} is outside section {section}")
    rows.insert(row, team_id)


def apply_operations(snapshot: Snapshot, operations: Sequence[Operation]) -> Snapshot:
    """
    Replay operations on a copy of snapshot using the sequential index policy.

    Raises:
        ValueError: If an operation does not match the state it is applied to
    """
    working = [[section.key, list(section.row_ids)] for section in snapshot.sections]

    for operation in operations:
        if isinstance(operation, SectionInsert):
            if not 0 <= operation.index <= len(working):
                raise ValueError(f"Section index {operation.index} is out of range")
            working.insert(operation.index, [operation.key, []])
        elif isinstance(operation, SectionDelete):
            _rows(working, operation.index)
            if working[operation.index][0] != operation.key:
                raise ValueError(f"Section {operation.index} is not '{operation.key}'")
            del working[operation.index]
        elif isinstance(operation, RowInsert):
            _put(working, operation.section, operation.row, operation.team_id)
        elif isinstance(operation, RowDelete):
            rows = _take(working, operation.section, operation.row, operation.team_id)
            del rows[operation.row]
        elif isinstance(operation, RowMove):
            rows = _take(working, operation.from_section, operation.from_row, operation.team_id)
            del rows[operation.from_row]
            _put(working, operation.to_section, operation.to_row, operation.team_id)
        elif isinstance(operation, RowUpdate):
            _take(working, operation.section, operation.row, operation.team_id)
        else:
            raise TypeError(f"Unknown operation {operation!r}")

    return Snapshot(
        sections=tuple(SectionSnapshot(key, tuple(rows)) for key, rows in working),
        fingerprints=snapshot.fingerprints,
        generation=snapshot.generation,
    )
