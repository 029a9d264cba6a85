"""
Analytics feature package.

This vertical slice keeps every layer of the /dashboard/analytics feature
co-located: domain models, range resolution and aggregation, the PDF
report, the service that wires them together, and the HTTP routes.
Import from the subpackages directly; the package itself re-exports nothing
so that models and services can import each other without cycles.
"""
