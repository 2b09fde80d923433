"""Services layer - Business logic"""

from .template_service import TemplateService
from .ledger_service import TimeLedgerService
from .month_matrix_service import MonthMatrixService
from .excel_export_service import ExcelExportService

__all__ = ["TemplateService", "TimeLedgerService", "MonthMatrixService", "ExcelExportService"]
