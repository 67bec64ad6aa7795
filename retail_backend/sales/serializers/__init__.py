from .folio import (
    FolioCancelSerializer,
    FolioClientSerializer,
    FolioDateSerializer,
    FolioDetailSerializer,
    FolioListQuerySerializer,
    FolioSummarySerializer,
    LineQuantitySerializer,
)
from .sale import SaleSerializer

__all__ = [
    "SaleSerializer",
    "FolioSummarySerializer",
    "FolioDetailSerializer",
    "FolioListQuerySerializer",
    "FolioCancelSerializer",
    "FolioDateSerializer",
    "FolioClientSerializer",
    "LineQuantitySerializer",
]
