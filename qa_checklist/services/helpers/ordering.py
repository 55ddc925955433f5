"""
Position planning shared by every ordered collection.

Ordered scopes:
  - the module library            (Module.order_index)
  - a module's test cases         (TestCase.order_index)
  - a project's checklist modules (ProjectChecklistModule.order_index)
  - an instance's checklist items (ChecklistTestResult.display_order)

Rules:
  - The requested ids take positions 0..N-1 in the order given.
  - Siblings the request does not mention keep their relative order and
    follow at N.., so the scope stays contiguous.
  - A duplicate id rejects the whole request.
  - Nothing here touches the session; callers apply the plan and commit once.
"""

from qa_checklist.core.exceptions import ValidationError


def find_duplicates(ordered_ids):
    """Return ids that appear more than once, in first-seen order."""
    seen, dupes = set(), []
    for item_id in ordered_ids:
        if item_id in seen and item_id not in dupes:
            dupes.append(item_id)
        seen.add(item_id)
    return dupes


def find_unknown(ordered_ids, known_ids):
    """Return the requested ids that are not in ``known_ids``."""
    known = set(known_ids)
    return [item_id for item_id in ordered_ids if item_id not in known]


def plan_positions(ordered_ids, current_ids):
    """Map every id of the scope to its new zero-based position.

    Args:
        ordered_ids: Ids in the requested order. Must be unique.
        current_ids: All ids of the scope in their current order.

    Returns:
        ``{id: position}`` covering ``current_ids`` (plus any requested id
        the caller already verified), positions ``0..len-1`` each used once.

    Raises:
        ValidationError: ``ordered_ids`` contains duplicates.
    """
    dupes = find_duplicates(ordered_ids)
    if dupes:
        raise ValidationError(
            "Duplicate ids in reorder request",
            details={"ids": f"Duplicate ids: {', '.join(dupes)}"},
        )

    requested = set(ordered_ids)
    sequence = list(ordered_ids) + [i for i in current_ids if i not in requested]
    return {item_id: position for position, item_id in enumerate(sequence)}


def apply_positions(rows, positions, attr="order_index"):
    """Write planned positions onto ORM rows. Returns how many changed."""
    changed = 0
    for row in rows:
        new_value = positions.get(row.id)
        if new_value is not None and getattr(row, attr) != new_value:
            setattr(row, attr, new_value)
            changed += 1
    return changed


def compact(rows, attr="order_index"):
    """Renumber rows 0..n-1 keeping their current relative order."""
    ordered = sorted(rows, key=lambda r: getattr(r, attr))
    return apply_positions(ordered, {r.id: i for i, r in enumerate(ordered)}, attr)


def insert_at(rows, new_row, position=None, attr="order_index"):
    """Place ``new_row`` at ``position`` (end when None) and shift the rest.

    ``rows`` are the existing siblings, excluding ``new_row``.
    """
    ordered = sorted(rows, key=lambda r: getattr(r, attr))
    if position is None or position > len(ordered):
        position = len(ordered)
    ordered.insert(position, new_row)
    for index, row in enumerate(ordered):
        setattr(row, attr, index)
    return position
