from family_tree.client.api import ApiError, FamilyApiClient, RequestTracker, StaleResponseError
from family_tree.client.cache import ExpansionCache
from family_tree.client.controller import InteractionController

__all__ = [
    "ApiError",
    "ExpansionCache",
    "FamilyApiClient",
    "InteractionController",
    "RequestTracker",
    "StaleResponseError",
]
