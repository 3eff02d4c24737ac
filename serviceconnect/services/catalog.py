"""
Service search over the catalog.
"""

from typing import Iterable, List, Optional

from ..domain.models import Service


def search_services(
    services: Iterable[Service],
    query: Optional[str] = None,
    category: Optional[str] = None,
) -> List[Service]:
    """
    Filter services by free text and category, both case-insensitive.
    
    The text matches the service name, its description or the technician's
    name. A category of ``"all"`` (or nothing) does not filter.
    """
    needle = (query or "").strip().lower()
    wanted = (category or "").strip().lower()
    if wanted == "all":
        wanted = ""
    
    result = []
    for service in services:
        if wanted and service.category.lower() != wanted:
            continue
        if needle and not any(
            needle in text.lower()
            for text in (service.name, service.description, service.technician.name)
        ):
            continue
        result.append(service)
    return result
