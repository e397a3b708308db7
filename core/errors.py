from __future__ import annotations


NOTHING_TO_EXPORT_MESSAGE = "ไม่พบข้อมูลที่จะดาวน์โหลด"


class PortfolioError(Exception):
    """Base class for recoverable dashboard errors."""


class NothingToExportError(PortfolioError):
    def __init__(self, message: str = NOTHING_TO_EXPORT_MESSAGE):
        super().__init__(message)


class ExportRenderError(PortfolioError):
    """Raised when a detail export cannot be rasterized or assembled."""


class ExportInProgressError(PortfolioError):
    def __init__(self, message: str = "กำลังสร้างไฟล์อยู่ กรุณารอสักครู่"):
        super().__init__(message)


class RecordNotFoundError(PortfolioError):
    def __init__(self, index: int):
        super().__init__(f"ไม่พบข้อมูล (index {index})")
        self.index = index
