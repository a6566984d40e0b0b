"""Flask blueprint package for the invoicing dashboard.

Blueprints are defined in the sibling modules (e.g., ``invoice_routes``) and
registered in :mod:`invoicing.__init__`.
"""
