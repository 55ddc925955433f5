"""
Pending-result fan-out.

Every checklist item of a module instance (library test cases of the linked
module, then the instance's custom testcases) gets one ChecklistTestResult per
tester. ``materialize`` adds whatever rows are missing and never touches
existing ones, so it serves attach, custom-testcase creation and tester
backfill alike.
"""

from qa_checklist.models.checklist import ChecklistTestResult


def instance_items(instance):
    """``[(kind, item_id)]`` in display order for a checklist module instance."""
    items = []
    if instance.module is not None:
        items += [("testcase", tc.id) for tc in instance.module.testcases]
    items += [("custom", ct.id) for ct in instance.custom_testcases]
    return items


def item_order(instance):
    """Item ids as the checklist shows them: by result rows first, then any
    item that has no rows yet in library order."""
    ordered = []
    for r in sorted(instance.results, key=lambda r: r.display_order):
        if r.item_id not in ordered:
            ordered.append(r.item_id)
    ordered += [item_id for _, item_id in instance_items(instance) if item_id not in ordered]
    return ordered


def compact_items(instance) -> int:
    """Renumber an instance's items to ``0..N-1`` keeping their relative order.

    All testers' rows for one item share its position. Returns the number of
    rows whose ``display_order`` changed.
    """
    positions = {item_id: pos for pos, item_id in enumerate(item_order(instance))}
    changed = 0
    for r in instance.results:
        if r.display_order != positions[r.item_id]:
            r.display_order = positions[r.item_id]
            changed += 1
    return changed


def materialize(instance, tester_ids, items=None) -> int:
    """Create missing Pending rows for ``items`` x ``tester_ids``.

    Items that already have rows keep their display order; new items are
    appended after the highest order in use. Returns the number of rows added.
    """
    items = instance_items(instance) if items is None else items
    existing = {(r.item_id, r.tester_id) for r in instance.results}
    orders = {r.item_id: r.display_order for r in instance.results}
    next_order = max(orders.values()) + 1 if orders else 0

    created = 0
    for kind, item_id in items:
        if item_id not in orders:
            orders[item_id] = next_order
            next_order += 1
        for tester_id in tester_ids:
            if (item_id, tester_id) in existing:
                continue
            row = ChecklistTestResult(
                tester_id=tester_id,
                status="Pending",
                display_order=orders[item_id],
            )
            if kind == "testcase":
                row.testcase_id = item_id
            else:
                row.custom_testcase_id = item_id
            instance.results.append(row)
            existing.add((item_id, tester_id))
            created += 1
    return created
