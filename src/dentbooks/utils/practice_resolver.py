"""Utility for resolving practice names to IDs."""

from dentbooks.domain.practice import PracticeService


def resolve_practice(practice_service: PracticeService, practice: str | int) -> int:
    """Resolve practice name or ID to practice ID.

    Args:
        practice_service: PracticeService instance
        practice: Practice name (str) or ID (int or string representation of int)

    Returns:
        Practice ID

    Raises:
        ValueError: If practice is not found
    """
    if isinstance(practice, int):
        if practice_service.get_practice(practice) is None:
            raise ValueError(f"Practice ID {practice} not found")
        return practice

    # Numeric strings are IDs
    try:
        practice_id = int(practice)
    except (ValueError, TypeError):
        practice_id = None

    if practice_id is not None:
        if practice_service.get_practice(practice_id) is None:
            raise ValueError(f"Practice ID {practice_id} not found")
        return practice_id

    for candidate in practice_service.list_practices():
        if candidate.name == practice:
            return candidate.id

    raise ValueError(f"Practice '{practice}' not found")
