"""Export module for audit reports."""

from .audit_report import (
    AuditReportConfig,
    generate_audit_excel,
)

__all__ = [
    "AuditReportConfig",
    "generate_audit_excel",
]
