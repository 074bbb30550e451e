"""Audit Report Generator - Export the pro forma with its calculation trail.

Generates an Excel workbook showing the headline metrics, the formula
registry, the traced values of a run, the exit sensitivity, the refinance
waterfall and the monthly cash flow.
"""

import io
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter
from openpyxl.utils.dataframe import dataframe_to_rows

from ..calculations.cashflow import CashflowView, cashflow_to_dataframe
from ..calculations.formula_registry import FormulaCategory, FormulaRegistry
from ..calculations.proforma import ProformaResult
from ..calculations.trace import TraceContext, format_value


@dataclass
class AuditReportConfig:
    """Configuration for audit report generation."""
    include_summary: bool = True
    include_formula_registry: bool = True
    include_traced_values: bool = True
    include_exit_sensitivity: bool = True
    include_waterfall: bool = True
    include_cash_flows: bool = True
    cashflow_view: CashflowView = CashflowView.MONTHLY
    project_name: str = "Development Project"
    scenario_name: str = "Selected"


def _add_header_style(ws, row: int, cols: int) -> None:
    """Apply header styling to a row."""
    header_fill = PatternFill(start_color="1F4E79", end_color="1F4E79", fill_type="solid")
    header_font = Font(color="FFFFFF", bold=True)

    for col in range(1, cols + 1):
        cell = ws.cell(row=row, column=col)
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center")


def _add_section_header(ws, title: str, row: int) -> int:
    """Add a section header and return next row."""
    ws.cell(row=row, column=1, value=title)
    ws.cell(row=row, column=1).font = Font(bold=True, size=14)
    return row + 1


def _write_table(ws, row: int, headers, records) -> int:
    """Write a header row plus records; return the next free row."""
    for col, header in enumerate(headers, 1):
        ws.cell(row=row, column=col, value=header)
    _add_header_style(ws, row, len(headers))
    row += 1
    for record in records:
        for col, value in enumerate(record, 1):
            ws.cell(row=row, column=col, value=value)
        row += 1
    return row


def _set_widths(ws, widths: Dict[int, int]) -> None:
    for col, width in widths.items():
        ws.column_dimensions[get_column_letter(col)].width = width


def generate_audit_excel(
    result: ProformaResult,
    config: Optional[AuditReportConfig] = None,
) -> bytes:
    """Generate an Excel audit report for one pro forma run.

    Args:
        result: The ProformaResult from calculate_proforma()
        config: Optional configuration for the report

    Returns:
        Excel file as bytes
    """
    if config is None:
        config = AuditReportConfig()

    wb = Workbook()
    wb.remove(wb.active)

    if config.include_summary:
        _create_summary_sheet(wb.create_sheet("Summary"), result, config)

    if config.include_formula_registry:
        _create_formula_registry_sheet(wb.create_sheet("Formula Registry"))

    if config.include_traced_values and result.trace_context:
        _create_traced_calculations_sheet(
            wb.create_sheet("Traced Calculations"), result.trace_context
        )

    if config.include_exit_sensitivity:
        _create_exit_sheet(wb.create_sheet("Exit Sensitivity"), result)

    if config.include_waterfall:
        _create_waterfall_sheet(wb.create_sheet("Refinance Waterfall"), result)

    if config.include_cash_flows:
        _create_cash_flows_sheet(wb.create_sheet("Cash Flows"), result, config.cashflow_view)

    output = io.BytesIO()
    wb.save(output)
    output.seek(0)
    return output.getvalue()


def _create_summary_sheet(ws, result: ProformaResult, config: AuditReportConfig) -> None:
    """Create the summary sheet."""
    row = 1
    ws.cell(row=row, column=1, value=f"Audit Report: {config.project_name}")
    ws.cell(row=row, column=1).font = Font(bold=True, size=16)
    row += 1
    ws.cell(row=row, column=1, value=f"Scenario: {config.scenario_name}")
    row += 1
    ws.cell(row=row, column=1, value=f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    row += 2

    metrics = result.metrics
    loan = result.construction_loan
    debt = result.debt_service

    row = _add_section_header(ws, "Key Metrics", row)
    row += 1
    lines = [
        ("Revenue (Monthly)", f"${result.monthly_revenue:,.0f}"),
        ("Revenue (Annual)", f"${result.annual_revenue:,.0f}"),
        ("Operating Expenses (Annual)", f"${metrics.annual_expenses:,.0f}"),
        ("NOI", f"${metrics.noi:,.0f}"),
        ("", ""),
        ("Development Costs", f"${result.development.selected_development_costs:,.0f}"),
        ("Partner Equity", f"${result.gp_equity:,.0f}"),
        ("Construction Loan", f"${loan.loan_amount:,.0f}"),
        ("Interest Accrued", f"${loan.interest_accrued:,.0f}"),
        ("Loan-to-Cost", f"{loan.loan_to_cost:.2%}"),
        ("LTC Above Threshold", "YES" if loan.exceeds_ltc_threshold else "NO"),
        ("Cap Rate on Cost", f"{metrics.cap_rate_on_cost:.2%}"),
        ("", ""),
        ("Annual Debt Service", f"${debt.annual_debt_service_after:,.0f}"),
        ("DCR", format_value(debt.dcr, "x")),
        ("Available Cash (Before Refi)", f"${debt.available_cash_before:,.0f}"),
        ("Available Cash (After Refi)", f"${debt.available_cash_after:,.0f}"),
    ]
    for label, value in lines:
        if label:
            ws.cell(row=row, column=1, value=label)
            ws.cell(row=row, column=2, value=value)
        row += 1

    _set_widths(ws, {1: 30, 2: 20})


def _create_formula_registry_sheet(ws) -> None:
    """Create the Formula Registry sheet."""
    row = _add_section_header(ws, "Formula Registry - All Calculation Definitions", 1)
    row += 1

    all_formulas = FormulaRegistry.get_all()
    records = []
    for category in FormulaCategory:
        in_category = sorted(
            (f for f in all_formulas.values() if f.category == category),
            key=lambda f: f.field_path,
        )
        for formula in in_category:
            records.append((
                category.value,
                formula.name,
                formula.field_path,
                formula.formula,
                ", ".join(formula.inputs) if formula.inputs else "-",
                formula.notes or "-",
            ))

    _write_table(ws, row, ["Category", "Name", "Field Path", "Formula", "Inputs", "Notes"],
                 records)
    _set_widths(ws, {1: 15, 2: 32, 3: 34, 4: 55, 5: 45, 6: 40})


def _create_traced_calculations_sheet(ws, trace_context: TraceContext) -> None:
    """Create the Traced Calculations sheet, grouped by formula category."""
    row = _add_section_header(ws, "Traced Calculations - Actual Values Used", 1)
    row += 1

    def record(category: str, traced) -> tuple:
        return (
            category,
            traced.field_path,
            "-" if traced.period is None else traced.period,
            traced.format_inputs() or "-",
            format_value(traced.value, traced.unit),
            traced.computed_formula[:120],
            traced.notes or "-",
        )

    records = []
    for category in FormulaCategory:
        in_category = trace_context.get_traces_by_category(category.value)
        for key in sorted(in_category):
            records.append(record(category.value, in_category[key]))
    for key in sorted(trace_context.traces):
        traced = trace_context.traces[key]
        if traced.formula_def is None:
            records.append(record("Other", traced))

    _write_table(
        ws, row,
        ["Category", "Field Path", "Period", "Inputs", "Result", "Computed Formula", "Notes"],
        records,
    )
    _set_widths(ws, {1: 15, 2: 34, 3: 8, 4: 60, 5: 18, 6: 90, 7: 25})


def _create_exit_sheet(ws, result: ProformaResult) -> None:
    """Create the Exit Sensitivity sheet."""
    row = _add_section_header(ws, "Exit Cap Rate Sensitivity", 1)
    row += 1

    records = [
        (f"{e.cap_rate_pct:.2f}%", round(e.sale_price, 2), round(e.net_proceeds, 2),
         round(e.money_in_hand, 2))
        for e in result.exit_sensitivity
    ]
    _write_table(ws, row, ["Cap Rate", "Sale Price", "Net Proceeds", "Money in Hand"], records)
    _set_widths(ws, {1: 12, 2: 18, 3: 18, 4: 18})


def _create_waterfall_sheet(ws, result: ProformaResult) -> None:
    """Create the Refinance Waterfall sheet."""
    waterfall = result.waterfall
    row = _add_section_header(ws, "Refinance Distribution", 1)
    ws.cell(row=row, column=1, value="Refinance Amount")
    ws.cell(row=row, column=2, value=round(waterfall.refinance_amount, 2))
    row += 2

    records = [
        (d.partner, d.partner_class.value, round(d.contribution, 2), d.holding_pct,
         round(d.refinance_share, 2), round(d.residual_cash_in, 2),
         f"{d.coc_before:.2%}", f"{d.coc_after:.2%}")
        for d in waterfall.distributions
    ]
    headers = ["Partner", "Class", "Contribution", "Holding %", "Refi Share",
               "Residual Cash-In", "CoC Before", "CoC After"]
    _write_table(ws, row, headers, records)
    _set_widths(ws, {col: 16 for col in range(1, len(headers) + 1)})


def _create_cash_flows_sheet(ws, result: ProformaResult, view: CashflowView) -> None:
    """Create the Cash Flows sheet from the pandas rendering of the projection."""
    row = _add_section_header(ws, "Projected Cash Flow", 1)
    row += 1

    frame = cashflow_to_dataframe(result.cashflow, view).round(2)
    frame.index.name = "Line"
    header_row = row
    for record in dataframe_to_rows(frame.reset_index(), index=False, header=True):
        for col, value in enumerate(record, 1):
            ws.cell(row=row, column=col, value=value)
        row += 1
    _add_header_style(ws, header_row, len(frame.columns) + 1)

    ws.column_dimensions["A"].width = 36
    ws.freeze_panes = ws.cell(row=header_row + 1, column=2)
