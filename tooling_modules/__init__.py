"""
Tooling Modules.

One sub-package per aggregate of the tooling procurement workflow.  Each
holds its domain models and, where the aggregate has a lifecycle, its
workflow table, service and ORM models:

- bom: bill-of-materials catalog and resolver
- projects: customer tooling projects
- suppliers: supplier directory
- requisitions: PR builder, requisition workflow, award
- quotations: supplier quotations and their comparison
- handover: tool handover and maintenance inspection
- inventory: spares stock ledger
- spares: spares requests served from stock

Sub-packages are imported by path; nothing is imported here.
"""
