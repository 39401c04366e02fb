"""Domain layer for pnlkit application.

Services are imported from their modules, e.g. pnlkit.domain.aggregation_service.
"""
