import logging
from typing import Optional

from flask import Flask, jsonify, request, Blueprint
from flask_cors import CORS

from .host import HostError
from .service import TabMoverService

api_logger = logging.getLogger("TabMover.API")

# Create API Blueprint for the TabMover service
tabmover_api = Blueprint("tabmover_api", __name__)

# Service instance (initialized in setup_api function)
service: Optional[TabMoverService] = None

# Upper bound for extension long-polls, in seconds
MAX_POLL_WAIT = 25.0


def _require_service() -> TabMoverService:
    if service is None:
        raise RuntimeError("TabMover service is not initialized")
    return service


def setup_api(app=None, config_path=None, tabmover_service=None):
    """Set up the TabMover API.

    Args:
        app (Flask, optional): Flask application to attach routes to.
            If None, returns a Blueprint.
        config_path (str, optional): Path to config file.
            If None, uses default location.
        tabmover_service (TabMoverService, optional): Use an existing service.

    Returns:
        Flask or Blueprint: The Flask app or Blueprint with API routes
    """
    global service

    api_logger.info("=== Initializing TabMover API ===")

    service = tabmover_service or TabMoverService(config_path)
    api_logger.info("TabMover service initialized")

    if app:
        app.register_blueprint(tabmover_api, url_prefix="/tabmover")
        return app

    return tabmover_api


def create_app(config_path=None, tabmover_service=None):
    """Create the Flask app the browser extension talks to."""
    app = Flask(__name__)

    # The extension's service worker calls from a chrome-extension:// origin
    CORS(app, resources={r"/*": {"origins": "*"}})

    return setup_api(app, config_path, tabmover_service)


@tabmover_api.route("/health", methods=["GET"])
def health():
    """Liveness check for the extension and the CLI."""
    _require_service()
    return jsonify({"ok": True})


@tabmover_api.route("/status", methods=["GET"])
def get_status():
    """Get the current status of the TabMover service."""
    svc = _require_service()
    return jsonify(svc.get_status())


# ============================================================================
# SETTINGS ENDPOINTS
# ============================================================================


@tabmover_api.route("/settings", methods=["GET"])
def get_settings():
    """Get application settings."""
    svc = _require_service()
    return jsonify(svc.config_manager.get_settings())


@tabmover_api.route("/settings", methods=["POST", "PUT", "PATCH"])
def update_settings():
    """Update application settings.

    Request body (partial updates allowed):
        {"debounce_ms": 150, "command_timeout_seconds": 3.0, ...}

    Response:
        {"success": true, "settings": {...}}
    """
    svc = _require_service()
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return jsonify({"error": "No data provided"}), 400

    try:
        svc.config_manager.update_settings(data)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    svc.apply_settings()
    return jsonify({"success": True, "settings": svc.config_manager.get_settings()})


# ============================================================================
# EXTENSION COMMAND QUEUE
# ============================================================================


@tabmover_api.route("/chrome-commands", methods=["GET"])
def get_chrome_commands():
    """Get commands the extension has not run yet.

    Query:
        wait: seconds to long-poll when the queue is empty (default 0)

    Response:
        {"commands": [{id, action, params, timestamp}]}
    """
    svc = _require_service()
    try:
        wait = float(request.args.get("wait", 0))
    except ValueError:
        return jsonify({"error": "wait must be a number"}), 400

    wait = max(0.0, min(wait, MAX_POLL_WAIT))
    return jsonify({"commands": svc.bridge.pending_commands(wait=wait)})


@tabmover_api.route("/chrome-commands/<int:cmd_id>/result", methods=["POST"])
def report_chrome_command_result(cmd_id):
    """Extension reports the outcome of a command.

    Request body:
        {"ok": true, "result": <any>} or {"ok": false, "error": "message"}

    Response:
        {"success": true} or 404 for unknown/expired commands
    """
    svc = _require_service()
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or "ok" not in data:
        return jsonify({"error": "ok is required"}), 400

    delivered = svc.bridge.complete(
        cmd_id, bool(data["ok"]), data.get("result"), data.get("error")
    )
    if not delivered:
        return jsonify({"error": "Command not found"}), 404
    return jsonify({"success": True})


@tabmover_api.route("/chrome-commands/<int:cmd_id>", methods=["DELETE"])
def acknowledge_chrome_command(cmd_id):
    """Extension acknowledges command execution without a result.

    Response:
        {"success": true}
    """
    svc = _require_service()
    svc.bridge.acknowledge(cmd_id)
    return jsonify({"success": True})


# ============================================================================
# TRIGGERS
# ============================================================================


@tabmover_api.route("/commands/<name>", methods=["POST"])
def trigger_command(name):
    """Run a keyboard command forwarded by the extension.

    Response:
        {"accepted": true} or 404 for unknown commands
    """
    svc = _require_service()
    if not svc.dispatch_command(name):
        return jsonify({"accepted": False, "error": f"Unknown command '{name}'"}), 404
    api_logger.info(f"Command accepted: {name}")
    return jsonify({"accepted": True})


@tabmover_api.route("/displays", methods=["GET"])
def get_displays():
    """Get displays in left-to-right order."""
    svc = _require_service()
    try:
        displays = svc.relocator.topology.resolve()
    except HostError as e:
        api_logger.error(f"Error resolving displays: {str(e)}")
        return jsonify({"error": str(e)}), 502
    return jsonify({"displays": displays, "count": len(displays)})
