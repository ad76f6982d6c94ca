"""
API Endpoint URL Constants

This module defines the URL paths of the back-office resources.

These URLs are relative to the `/api` mount point. Company scoped paths
take the company id as a `{company_id}` path parameter; use
`.format(company_id=...)` when building a request.
"""

# -------------------------------
# Company
# -------------------------------
URL_COMPANY = "/companies"
URL_STATION = "/companies/{company_id}/stations"
URL_STAFF = "/companies/{company_id}/staff"
URL_DRIVER = "/companies/{company_id}/drivers"
URL_VEHICLE = "/companies/{company_id}/vehicles"

# -------------------------------
# Platform
# -------------------------------
URL_COMPLAINT = "/complaints"
URL_PROMOTION = "/promotions"
URL_USER = "/users"

# -------------------------------
# Catalog
# -------------------------------
URL_LABELS = "/catalog/labels"
URL_WORKFLOWS = "/catalog/workflows"

# Suffix applying a workflow action to a resource
URL_ACTION = "/action"
