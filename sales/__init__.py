"""Sale and visit recording from the field."""

from sales.recorder import QuickSale, RecordOutcome, SaleRecorder, VisitReport

__all__ = ["QuickSale", "RecordOutcome", "SaleRecorder", "VisitReport"]
