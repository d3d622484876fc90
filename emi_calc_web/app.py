import io
import logging
import os
import re
from dataclasses import replace
from datetime import date

from flask import Flask, Response, render_template, request

from emi_calc.data_models import ReductionStrategy
from emi_calc.export import XLSX_MIME, excel_bytes, export_to_csv, schedule_table
from emi_calc.formatter import format_inr
from emi_calc.grouping import financial_year_label, group_by_year, payment_breakdown, yearly_chart_series
from emi_calc.loan_types import LOAN_TYPE_CONFIGS, LOAN_TYPES, clamp, get_config
from emi_calc.state import Action, CalculatorState, reduce
from emi_calc.utils import parse_emi_increase, parse_part_payment, parse_year_month, sanitize_digits


def _log_level(name: str) -> int:
    level = getattr(logging, name.upper(), None)
    return level if isinstance(level, int) else logging.INFO


logging.basicConfig(level=_log_level(os.environ.get("EMI_CALC_LOG_LEVEL", "INFO")))
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
app.jinja_env.filters["inr"] = format_inr


# A comma separates entries only when the next entry's "INDEX:" follows it,
# so grouped amounts such as 1,00,000 stay whole.
_ENTRY_SEPARATOR = re.compile(r"[\n;]|,(?=\s*\d+\s*:)")


def parse_form_list(value: str) -> list[str]:
    """Parse a list of ``INDEX:VALUE`` entries from a form field.

    Entries are separated by newlines, semicolons or commas. Returns a list of
    trimmed strings, skipping any empty entries.
    """
    if not value:
        return []
    parts = [p.strip(" \t\r,") for p in _ENTRY_SEPARATOR.split(value)]
    return [p for p in parts if p]


def _number(form, name: str, default: float) -> float:
    raw = form.get(name, "").strip()
    if not raw:
        return float(default)
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"Invalid number for {name}: {raw}")


def _form_to_state(form) -> CalculatorState:
    loan_type = form.get("loan_type", "home")
    if loan_type not in LOAN_TYPES:
        loan_type = "home"
    config = get_config(loan_type)

    digits = sanitize_digits(form.get("amount", ""))
    amount = float(clamp(float(digits) if digits else config.loan_amount.default, config.loan_amount))
    rate = float(clamp(_number(form, "rate", config.interest_rate.default), config.interest_rate))
    tenure_unit = form.get("tenure_unit", "years")
    if tenure_unit not in ("years", "months"):
        tenure_unit = "years"
    tenure = _number(form, "tenure", config.tenure.default)
    if tenure_unit == "years":
        tenure = clamp(tenure, config.tenure)
    else:
        tenure = min(max(tenure, config.tenure.min * 12), config.tenure.max * 12)

    start_date = form.get("start_date", "").strip()
    if start_date:
        parse_year_month(start_date)

    part_payments = {}
    for item in parse_form_list(form.get("part_payments", "")):
        idx, extra = parse_part_payment(item)
        part_payments[idx] = part_payments.get(idx, 0.0) + extra
    emi_increases = {}
    for item in parse_form_list(form.get("emi_increases", "")):
        idx, increase = parse_emi_increase(item)
        emi_increases[idx] = increase

    grouping = form.get("year_grouping", "calendar")
    state = CalculatorState(
        loan_type=loan_type,
        amount=amount,
        rate=rate,
        tenure=tenure,
        tenure_unit=tenure_unit,
        year_grouping=grouping if grouping in ("calendar", "financial") else "calendar",
        reduce_mode=ReductionStrategy(form.get("mode", ReductionStrategy.REDUCE_EMI.value)),
        part_payments=part_payments,
        emi_increases=emi_increases,
    )
    if start_date:
        state = replace(state, start_date=start_date)
    return state


def _run_analysis(form):
    state = _form_to_state(form)
    result = state.result()
    rows = state.calendar_schedule(result)
    groups = group_by_year(rows, state.year_grouping)
    logger.info(
        "Computed %s loan: amount=%s rate=%s tenure=%s %s, %d months",
        state.loan_type,
        state.amount,
        state.rate,
        state.tenure,
        state.tenure_unit,
        result.months,
    )
    return state, result, rows, groups


def _current_group_key(groups, grouping: str, today=None):
    """Key of the group holding ``today``, or of the first group otherwise."""
    if not groups:
        return None
    today = today or date.today()
    if grouping == "financial":
        key = financial_year_label(today.year, today.month)
    else:
        key = str(today.year)
    if any(group.key == key for group in groups):
        return key
    return groups[0].key


@app.route("/", methods=["GET", "POST"])
def index():
    state = None
    result = None
    groups = []
    tables = {}
    chart = None
    breakdown = None
    error = None

    if request.method == "POST":
        try:
            state, result, rows, groups = _run_analysis(request.form)
            chart = yearly_chart_series(result.schedule)
            breakdown = payment_breakdown(result, state.amount)
            tables = {group.key: schedule_table(state, group.rows) for group in groups}
            open_key = _current_group_key(groups, state.year_grouping)
            if open_key is not None:
                state = reduce(state, Action("SET_EXPANDED", {open_key: True}))
        except ValueError as exc:
            logger.warning("Rejected form input: %s", exc)
            error = str(exc)

    if state is None:
        loan_type = request.args.get("loan_type", "home")
        state = reduce(CalculatorState(), Action("SET_LOAN_TYPE", loan_type if loan_type in LOAN_TYPES else "home"))

    return render_template(
        "index.html",
        state=state,
        config=LOAN_TYPE_CONFIGS[state.loan_type],
        loan_types=LOAN_TYPES,
        result=result,
        groups=groups,
        tables=tables,
        chart=chart,
        breakdown=breakdown,
        error=error,
        form=request.form,
    )


@app.post("/export/<fmt>")
def export(fmt: str):
    try:
        state, _, rows, _ = _run_analysis(request.form)
    except ValueError as exc:
        return Response(str(exc), status=400, mimetype="text/plain")
    if fmt == "csv":
        buffer = io.StringIO()
        export_to_csv(buffer, state, rows)
        return Response(
            buffer.getvalue(),
            mimetype="text/csv",
            headers={"Content-Disposition": "attachment; filename=amortization.csv"},
        )
    if fmt == "xlsx":
        return Response(
            excel_bytes(state, rows),
            mimetype=XLSX_MIME,
            headers={"Content-Disposition": "attachment; filename=amortization.xlsx"},
        )
    return Response(f"Unsupported export format: {fmt}", status=404, mimetype="text/plain")


if __name__ == "__main__":
    print("Starting EMI calculator web app...")
    app.run(host="0.0.0.0", port=8710, debug=True)
