"""Domain layer for dentbooks application."""

import importlib

# Services load lazily; the database package imports domain entities.
_SERVICES = {
    "TransactionService": "dentbooks.domain.transaction",
    "CategoryService": "dentbooks.domain.category",
    "PracticeService": "dentbooks.domain.practice",
    "CSVImportService": "dentbooks.domain.csv_import",
    "ReconciliationService": "dentbooks.domain.reconciliation",
    "ProductionService": "dentbooks.domain.production",
    "ReportService": "dentbooks.domain.report",
    "TaxPlanningService": "dentbooks.domain.tax_planning",
    "SettingService": "dentbooks.domain.settings",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        return getattr(importlib.import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
