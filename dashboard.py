"""Flask dashboard for weight tracking."""

import logging
from datetime import datetime

from flask import Flask, abort, jsonify, render_template, request

import db
import nutrition
import weights
from config import BASE_DIR, DASHBOARD_HOST, DASHBOARD_PORT, DEFAULT_USER_KEY, FRAME_ANCESTORS

log = logging.getLogger(__name__)

app = Flask(__name__, template_folder=BASE_DIR / "templates")


@app.after_request
def add_embedding_headers(response):
    """Allow cross-origin API use and embedding in the configured hosts."""
    response.headers["Access-Control-Allow-Origin"] = "*"
    response.headers["Access-Control-Allow-Methods"] = "GET,OPTIONS,PATCH,DELETE,POST,PUT"
    response.headers["Access-Control-Allow-Headers"] = (
        "X-Requested-With, Access-Control-Allow-Headers, Content-Type, "
        "Authorization, Origin, Accept"
    )
    response.headers["Content-Security-Policy"] = "frame-ancestors " + " ".join(
        ["'self'", *FRAME_ANCESTORS]
    )
    response.headers["X-Frame-Options"] = "ALLOWALL"
    return response


def _user_key() -> str:
    return request.args.get("user") or DEFAULT_USER_KEY


@app.route("/")
def index():
    """Render the dashboard."""
    user_key = _user_key()
    try:
        entries = weights.list_weights(user_key)
    except db.StorageError:
        log.exception("Failed to load weights for dashboard")
        entries = []

    latest = entries[-1] if entries else None
    return render_template(
        "index.html",
        user_key=user_key,
        logged_today=weights.has_entry_for_day(entries),
        targets=nutrition.targets_for(latest),
        split=nutrition.MACRO_SPLIT,
    )


@app.route("/api/weights", methods=["GET"])
def list_weights():
    """Return all weight entries, oldest first."""
    try:
        entries = weights.list_weights(request.args.get("user"))
    except db.StorageError:
        log.exception("GET /api/weights failed")
        return jsonify({"error": "Failed to fetch weights"}), 500
    return jsonify(entries)


@app.route("/api/weights", methods=["POST"])
def create_weight():
    """Record a new weight entry."""
    payload = request.get_json(silent=True)
    data = payload if isinstance(payload, dict) else request.form
    user_key = data.get("user") or DEFAULT_USER_KEY

    try:
        entry = weights.record_weight(data.get("weight"), user_key=user_key)
    except weights.ValidationError as e:
        log.warning("Rejected weight %r: %s", data.get("weight"), e)
        return jsonify({"error": "Invalid weight", "details": str(e)}), 400
    except db.StorageError as e:
        log.exception("POST /api/weights failed")
        return jsonify({"error": "Failed to add weight", "details": str(e)}), 500
    return jsonify(entry)


# HTMX partial routes
@app.route("/partials/nutrition")
def partials_nutrition():
    """Render nutrition card partial for the latest entry."""
    try:
        entries = weights.list_weights(_user_key())
    except db.StorageError:
        log.exception("Failed to load weights for nutrition card")
        entries = []

    latest = entries[-1] if entries else None
    return render_template(
        "partials/nutrition.html",
        targets=nutrition.targets_for(latest),
        split=nutrition.MACRO_SPLIT,
    )


@app.route("/partials/macros/<macro>")
def partials_macros(macro: str):
    """Render food recommendations for a macro."""
    try:
        foods = nutrition.recommendations_for(macro)
    except KeyError:
        abort(404)
    return render_template("partials/macros.html", macro=macro, foods=foods)


@app.route("/embed-test")
def embed_test():
    """Placeholder page for checking iframe embedding."""
    return render_template("embed_test.html", now=datetime.now())


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    db.init_db()
    app.run(host=DASHBOARD_HOST, port=DASHBOARD_PORT, debug=False)
