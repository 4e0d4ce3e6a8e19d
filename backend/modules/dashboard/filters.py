"""
List filtering.

Filters return new lists holding the surviving records in their original
order; the input is never modified. All active criteria must match.
"""

from typing import Sequence

from modules.records.models import Client, Project

from .models import FilterCriteria


def _contains(needle: str, *haystacks: str) -> bool:
    return any(needle in haystack.lower() for haystack in haystacks)


def _project_matches(project: Project, criteria: FilterCriteria, needle: str) -> bool:
    if needle and not _contains(needle, project.title, project.client):
        return False
    if criteria.status and project.status.value != criteria.status:
        return False

    date_range = criteria.date_range
    if date_range.start is not None and project.deadline < date_range.start:
        return False
    if date_range.end is not None and project.deadline > date_range.end:
        return False

    amount_range = criteria.amount_range
    if project.payment < amount_range.min or project.payment > amount_range.max:
        return False
    return True


def filter_projects(projects: Sequence[Project], criteria: FilterCriteria) -> list[Project]:
    """
    Projects matching ``criteria``.

    Search looks at the title and the client name, case-insensitively.
    Date and amount bounds are inclusive.
    """
    needle = criteria.search.lower()
    return [p for p in projects if _project_matches(p, criteria, needle)]


def filter_clients(clients: Sequence[Client], criteria: FilterCriteria) -> list[Client]:
    """
    Clients matching the search text in name or email.

    Clients carry no status, dates or amounts, so only ``search`` applies.
    """
    needle = criteria.search.lower()
    if not needle:
        return list(clients)
    return [c for c in clients if _contains(needle, c.name, c.email)]
