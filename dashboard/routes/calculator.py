"""Calculator routes: bench-sheet form and JSON interpretation API."""

import logging
from functools import wraps

from flask import Blueprint, current_app, jsonify, render_template, request

from legionella_src.inputs import build_sample_set
from legionella_src.report import evaluate_samples
from legionella_src.rules.schemas import Channel, ValidationError
from legionella_src.rules.ufc_criteria import INTERFERENCE_NOTICE

logger = logging.getLogger(__name__)

calculator_bp = Blueprint("calculator", __name__)

CHANNEL_LABELS = {
    Channel.DIRECT: "Direct",
    Channel.FILTRATE_10ML: "Filtration 10 ml",
    Channel.FILTRATE_100ML: "Filtration 100 ml",
}


def check_api_key(f):
    """Decorator to check API key for protected endpoints."""
    @wraps(f)
    def decorated(*args, **kwargs):
        api_key = current_app.config.get("DASHBOARD_API_KEY")

        # If no API key configured, allow all requests (dev mode)
        if not api_key:
            return f(*args, **kwargs)

        # Check key from query param or header
        provided_key = request.args.get("key") or request.headers.get("X-API-Key")

        if provided_key != api_key:
            return jsonify({"error": "Invalid or missing API key"}), 401

        return f(*args, **kwargs)

    return decorated


def _form_rows(form, sample_types: list[str]) -> tuple[dict, list[str]]:
    """Read the bench-sheet form: ``d_A``, ``n_1_A``... and channel checkboxes."""
    rows = {
        sample_type: {
            channel.value: form.get(f"{channel.value}_{sample_type}", "")
            for channel in Channel
        }
        for sample_type in sample_types
    }
    interfered = [
        channel.value for channel in Channel
        if form.get(f"{channel.value}_checkbox")
    ]
    return rows, interfered


@calculator_bp.route("/", methods=["GET", "POST"])
def calculator():
    """Bench-sheet form; POST interprets the submitted counts."""
    sample_types = current_app.config["SAMPLE_TYPES"]
    rows, interfered = _form_rows(request.form, sample_types)
    report = None
    error = None

    if request.method == "POST":
        try:
            report = evaluate_samples(build_sample_set(rows, interfered))
        except ValidationError as e:
            logger.info("Rejected bench sheet: %s", e)
            error = str(e)

    return render_template(
        "calculator.html",
        sample_types=sample_types,
        channels=list(Channel),
        channel_labels=CHANNEL_LABELS,
        rows=rows,
        interfered=interfered,
        report=report,
        error=error,
        interference_notice=INTERFERENCE_NOTICE,
    )


@calculator_bp.route("/api/interpret", methods=["POST"])
@check_api_key
def api_interpret():
    """Interpret counts sent as JSON.

    Body: {"samples": {"A": {"d": 0, "n_1": 0, "n_2": 50}, ...},
           "interfered": ["d"]}
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not isinstance(data.get("samples"), dict):
        return jsonify({"error": "Body must be a JSON object with a 'samples' object"}), 400

    samples = data["samples"]
    interfered = data.get("interfered") or []
    if not isinstance(interfered, list):
        return jsonify({"error": "'interfered' must be a list of channels"}), 400
    for sample_type, row in samples.items():
        if not isinstance(row, dict):
            return jsonify({"error": f"Type {sample_type}: expected an object with d, n_1, n_2"}), 400

    try:
        report = evaluate_samples(build_sample_set(samples, interfered))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    return jsonify(report.to_dict())
