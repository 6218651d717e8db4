"""Feature store and data models for parcels and stations.

Re-exports FeatureStore and the model types from their modules so that
routes and services have one import location.

Example:
    Use in a service or FastAPI dependency:
        >>> from landmap.store import FeatureStore
        >>> store = FeatureStore()
"""

from landmap.store.feature_store import FeatureStore, SelectionListener
from landmap.store.models import (
    GeoPoint,
    Parcel,
    SelectionChange,
    Station,
)

__all__ = [
    "FeatureStore",
    "GeoPoint",
    "Parcel",
    "SelectionChange",
    "SelectionListener",
    "Station",
]
