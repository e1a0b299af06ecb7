"""PDF rendering helpers for the program administrator report.

These utilities centralize layout for the report so the Streamlit download
button and tests render the same document.
"""

from typing import List, Sequence, Tuple

import pandas as pd
from fpdf import FPDF
from fpdf.enums import XPos, YPos

from frontend.ui.metrics import fmt_currency, fmt_number, fmt_years
from services.calculator_core import INCENTIVE_LABELS, INCENTIVE_RATES_PER_MT, TECHNOLOGY_LABELS, TECHNOLOGIES
from services.package_analysis import CalculatorInputs, CalculatorResults
from services.program_report import PROGRAM_RECOMMENDATIONS, build_key_findings, build_program_summary

REPORT_TITLE = "Heat Pump Carbon Reduction - Program Report"
REPORT_FILENAME = "carbon_incentive_program_report.pdf"


def _draw_metric_card(
    pdf: FPDF,
    x: float,
    y: float,
    w: float,
    h: float,
    title: str,
    value: str,
    subtitle: str,
    fill_rgb: Tuple[int, int, int],
) -> None:
    pdf.set_fill_color(*fill_rgb)
    pdf.set_draw_color(230, 232, 235)
    pdf.rect(x, y, w, h, style="DF")
    pdf.set_xy(x + 2, y + 2)
    pdf.set_text_color(50, 50, 50)
    pdf.set_font("Helvetica", "B", 9)
    pdf.cell(w - 4, 5, title)

    pdf.set_xy(x + 2, y + 9)
    pdf.set_font("Helvetica", "", 13)
    pdf.set_text_color(15, 15, 15)
    pdf.cell(w - 4, 7, value)

    pdf.set_xy(x + 2, y + h - 6)
    pdf.set_font("Helvetica", "", 8)
    pdf.set_text_color(80, 80, 80)
    pdf.cell(w - 4, 4, subtitle)
    pdf.set_text_color(0, 0, 0)


def _draw_section_header(pdf: FPDF, title: str, margin: float, usable_width: float) -> None:
    pdf.set_font("Helvetica", "B", 12)
    pdf.set_text_color(20, 20, 20)
    pdf.cell(0, 7, title, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_draw_color(220, 223, 228)
    pdf.line(margin, pdf.get_y(), margin + usable_width, pdf.get_y())
    pdf.ln(2)


def _draw_table(
    pdf: FPDF,
    x: float,
    y: float,
    col_widths: List[float],
    rows: List[List[str]],
    highlight_rows: Sequence[int] = (),
    font_size: int = 8,
) -> float:
    """Draw a header plus zebra-striped body; the first column is left aligned, numbers right.

    ``highlight_rows`` are body indexes drawn in bold (e.g., the package total).
    Returns the y position below the table.
    """
    header, body = rows[0], rows[1:]
    pdf.set_xy(x, y)
    pdf.set_draw_color(220, 223, 228)
    pdf.set_fill_color(37, 99, 235)
    pdf.set_text_color(255, 255, 255)
    pdf.set_font("Helvetica", "B", font_size)
    for width, text in zip(col_widths, header):
        pdf.cell(width, 6, text, border=1, align="C", fill=True)
    pdf.ln(6)

    pdf.set_text_color(20, 20, 20)
    for row_idx, row in enumerate(body):
        pdf.set_x(x)
        pdf.set_font("Helvetica", "B" if row_idx in highlight_rows else "", font_size)
        pdf.set_fill_color(*((246, 248, 250) if row_idx % 2 else (255, 255, 255)))
        for col_idx, (width, text) in enumerate(zip(col_widths, row)):
            pdf.cell(width, 6, text, border=1, align="L" if col_idx == 0 else "R", fill=True)
        pdf.ln(6)
    return pdf.get_y()


def _bullets(pdf: FPDF, lines: List[str]) -> None:
    pdf.set_font("Helvetica", "", 9)
    for line in lines:
        pdf.multi_cell(0, 5, f"- {line}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def _summary_rows(summary: pd.DataFrame) -> List[List[str]]:
    rows = [["Technology", "Annual MTCO2e", "Lifecycle MTCO2e", "Incentive", "$/MT (Annual)", "$/MT (Life)", "Recommended"]]
    for record in summary.to_dict("records"):
        recommended = record["Recommended Incentive"]
        rows.append(
            [
                str(record["Technology"]),
                fmt_number(record["Annual MTCO2e"]),
                fmt_number(record["Lifecycle MTCO2e"]),
                fmt_currency(record["Current Incentive"]),
                fmt_currency(record["$/MTCO2e (Annual)"]),
                fmt_currency(record["$/MTCO2e (Lifecycle)"]),
                "-" if recommended is None or pd.isna(recommended) else fmt_currency(recommended),
            ]
        )
    return rows


def build_program_report_pdf(results: CalculatorResults, inputs: CalculatorInputs) -> bytes:
    """Render the program administrator report as PDF bytes."""
    pdf = FPDF(format="A4")
    pdf.set_auto_page_break(auto=True, margin=12)
    pdf.add_page()
    margin = 12
    usable_width = 210 - 2 * margin

    pdf.set_font("Helvetica", "B", 15)
    pdf.set_text_color(20, 20, 20)
    pdf.cell(0, 10, REPORT_TITLE, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font("Helvetica", "", 10)
    pdf.cell(
        0,
        6,
        f"Bundle discount: {inputs.bundle_discount_percent:g}%  |  "
        f"Incentive rates: {', '.join(f'${rate:,.2f}' for rate in INCENTIVE_RATES_PER_MT)} per MTCO2e",
        new_x=XPos.LMARGIN,
        new_y=YPos.NEXT,
    )
    pdf.ln(2)

    combined = results.combined
    card_w = (usable_width - 6) / 4
    card_h = 24
    y = pdf.get_y()
    cards = [
        (
            "Package reduction",
            f"{fmt_number(combined.net_emissions_reduction)} MT/yr",
            f"Lifecycle {fmt_number(combined.lifetime_emissions_reduction)} MT",
            (232, 245, 233),
        ),
        ("Total incentive", fmt_currency(combined.total_incentive), "Bundle discount included", (227, 242, 253)),
        (
            "Cost per MTCO2e",
            fmt_currency(combined.cost_per_mtco2e),
            f"Lifecycle {fmt_currency(combined.lifetime_cost_per_mtco2e)}",
            (255, 243, 224),
        ),
        (
            "Package payback",
            fmt_years(combined.payback_period),
            f"Savings {fmt_currency(combined.combined_annual_savings)}/yr",
            (243, 229, 245),
        ),
    ]
    for idx, (title, value, subtitle, fill) in enumerate(cards):
        _draw_metric_card(pdf, margin + idx * (card_w + 2), y, card_w, card_h, title, value, subtitle, fill)
    pdf.set_y(y + card_h + 6)

    _draw_section_header(pdf, "Incentive Program Summary", margin, usable_width)
    rows = _summary_rows(build_program_summary(results))
    col_widths = [40.0] + [(usable_width - 40.0) / 6] * 6
    pdf.set_y(_draw_table(pdf, margin, pdf.get_y(), col_widths, rows, highlight_rows=[len(rows) - 2]) + 4)

    _draw_section_header(pdf, "Optimal Incentives by Technology", margin, usable_width)
    incentive_rows = [["Technology"] + list(INCENTIVE_LABELS)]
    for technology in TECHNOLOGIES:
        result = results.for_technology(technology)
        incentive_rows.append(
            [TECHNOLOGY_LABELS[technology]] + [fmt_currency(value) for value in result.optimal_incentives]
        )
    col_widths = [usable_width / 4] * 4
    pdf.set_y(_draw_table(pdf, margin, pdf.get_y(), col_widths, incentive_rows) + 4)

    _draw_section_header(pdf, "Key Findings", margin, usable_width)
    _bullets(pdf, build_key_findings(results, inputs))
    pdf.ln(2)

    _draw_section_header(pdf, "Program Recommendations", margin, usable_width)
    _bullets(pdf, PROGRAM_RECOMMENDATIONS)

    pdf.ln(3)
    pdf.set_font("Helvetica", "I", 8)
    pdf.set_text_color(90, 90, 90)
    pdf.multi_cell(
        0,
        4,
        "Auto-generated from the current calculator inputs. Emission factors and reference "
        "EV / e-bike rows are fixed assumptions and should be reviewed before program filings.",
    )

    return bytes(pdf.output())
