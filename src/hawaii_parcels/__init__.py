"""Package initializer for `hawaii_parcels`."""

__version__ = "0.1.0"

from .models import Centroid, EnrichmentRecord, Parcel, QueryResult  # noqa: E402
from .service import HawaiiParcelService, get_service  # noqa: E402

__all__ = [
    "Centroid",
    "EnrichmentRecord",
    "HawaiiParcelService",
    "Parcel",
    "QueryResult",
    "get_service",
]
