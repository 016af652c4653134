"""Suppliers Module (``tooling_modules.suppliers``): the supplier directory."""

from tooling_modules.suppliers.models import Supplier, SupplierStatus, supplier_ratings

__all__ = ["Supplier", "SupplierStatus", "supplier_ratings"]
