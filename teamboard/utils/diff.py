from teamboard.models import TeamResult


def calculate_stats(old_results: list[TeamResult], new_results: list[TeamResult]) -> str:
    """Calculates statistics between two results snapshots.

    Teams are matched by name. A team counts as changed when its score or
    number of answers differs.

    Args:
        old_results: The previously applied snapshot.
        new_results: The incoming snapshot.

    Returns:
        A one-line summary, e.g. ``"New: 1, Changed: 2, Dropped: 0"``.
    """
    old_map = {t.name: t for t in old_results}
    new_map = {t.name: t for t in new_results}

    new_names = set(new_map.keys()) - set(old_map.keys())
    dropped_names = set(old_map.keys()) - set(new_map.keys())
    common_names = set(old_map.keys()) & set(new_map.keys())

    changed_count = 0
    for name in common_names:
        old, new = old_map[name], new_map[name]
        if old.score != new.score or len(old.answers) != len(new.answers):
            changed_count += 1

    return (
        f"New: {len(new_names)}, Changed: {changed_count}, "
        f"Dropped: {len(dropped_names)}"
    )
