"""Domain layer for feerecon application."""

# Services import the database layer, which imports domain entities;
# resolve them lazily so importing feerecon.domain.entities stays cheap.
_SERVICES = {
    "InvoiceService": "feerecon.domain.invoice",
    "MappingProfileService": "feerecon.domain.mapping_profile",
    "PaymentHistoryService": "feerecon.domain.payment_history",
    "StatementImportService": "feerecon.domain.statement_import",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        from importlib import import_module

        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
