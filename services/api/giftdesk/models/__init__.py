from .all_models import SEARCH_TYPES, SearchRecord, User

__all__ = [
    "SEARCH_TYPES",
    "SearchRecord",
    "User",
]
