"""
Checklist progress arithmetic.

A unit of work is one (testcase, tester) pair inside a checklist module
instance. Pass and Fail both count as tested.

    total    = passed + failed + pending
    progress = round_half_up((passed + failed) / total * 100), 0 when total == 0
"""


def percent(done: int, total: int) -> int:
    """Integer percentage of ``done`` over ``total``, ties rounded up."""
    if total <= 0:
        return 0
    return (200 * done + total) // (2 * total)


def tally(statuses) -> dict:
    """Count result statuses into a stats dict."""
    passed = failed = pending = 0
    for status in statuses:
        if status == "Pass":
            passed += 1
        elif status == "Fail":
            failed += 1
        else:
            pending += 1
    total = passed + failed + pending
    return {
        "total": total,
        "passed": passed,
        "failed": failed,
        "pending": pending,
        "progress": percent(passed + failed, total),
    }


def merge(stats_list) -> dict:
    """Sum several stats dicts and recompute the percentage."""
    passed = sum(s["passed"] for s in stats_list)
    failed = sum(s["failed"] for s in stats_list)
    pending = sum(s["pending"] for s in stats_list)
    total = passed + failed + pending
    return {
        "total": total,
        "passed": passed,
        "failed": failed,
        "pending": pending,
        "progress": percent(passed + failed, total),
    }


def project_status_for(stats: dict) -> str:
    """Derive the project status from overall checklist stats.

    Draft: nothing tested yet (or nothing to test).
    Completed: every unit tested and none failed.
    In Progress: anything in between.
    """
    tested = stats["passed"] + stats["failed"]
    if stats["total"] == 0 or tested == 0:
        return "Draft"
    if stats["pending"] == 0 and stats["failed"] == 0:
        return "Completed"
    return "In Progress"


# ── Project-level aggregation over the ORM graph ─────────────────────────────


def assigned_tester_ids(project) -> set:
    return {link.tester_id for link in project.tester_links}


def instance_stats(instance, tester_ids) -> dict:
    """Stats for one checklist module instance, counting assigned testers only."""
    return tally(r.status for r in instance.results if r.tester_id in tester_ids)


def project_stats(project) -> tuple[dict, list[tuple]]:
    """Overall stats plus ``(instance, stats)`` per checklist module, in order."""
    tester_ids = assigned_tester_ids(project)
    per_instance = [(inst, instance_stats(inst, tester_ids)) for inst in project.checklist_modules]
    return merge([s for _, s in per_instance]), per_instance
