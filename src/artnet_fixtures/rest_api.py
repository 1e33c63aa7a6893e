"""
Flask REST API with WebSocket push for the fixture control surface
"""
from flask import Flask, jsonify, request
from flask_cors import CORS
from flask_socketio import SocketIO

from .config_schema import ConfigValidator
from .instance import FixtureInstance, UnknownDefinitionError
from .logger import get_logger

logger = get_logger(__name__)


def _options_from_request():
    """`options` object from the JSON body; None if the body is malformed."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        return None
    options = data.get('options', {})
    return options if isinstance(options, dict) else None


def register_config_routes(app, instance: FixtureInstance, validator: ConfigValidator):
    """Configuration endpoints."""

    @app.route('/api/config', methods=['GET'])
    def get_config():
        with instance.lock:
            return jsonify({"success": True, "config": dict(instance.config)})

    @app.route('/api/config', methods=['POST'])
    def apply_config():
        """Apply a new host configuration and rebuild everything derived from it."""
        config = request.get_json(silent=True)
        if not isinstance(config, dict):
            return jsonify({"success": False, "error": "Expected a JSON object"}), 400

        is_valid, errors = validator.validate_instance(config)
        if not is_valid:
            return jsonify({"success": False, "error": "Invalid configuration", "details": errors}), 400

        instance.config_updated(config)
        return jsonify({"success": True, **instance.status_info()})

    @app.route('/api/config/fields', methods=['GET'])
    def get_config_fields():
        with instance.lock:
            return jsonify({"success": True, "fields": instance.get_config_fields()})

    @app.route('/api/config/schema', methods=['GET'])
    def get_config_schema():
        return jsonify(validator.get_schema())

    @app.route('/api/registry', methods=['GET'])
    def get_registry():
        """Parsed templates, fixtures (with live values) and presets."""
        with instance.lock:
            registries = instance.registries
            return jsonify({
                "templates": registries.templates.to_dict(),
                "fixtures": registries.fixtures.to_list(),
                "presets": registries.presets.to_list()
            })


def register_surface_routes(app, instance: FixtureInstance):
    """Actions, feedbacks, variables and presets."""

    @app.route('/api/status', methods=['GET'])
    def status():
        return jsonify(instance.status_info())

    @app.route('/api/actions', methods=['GET'])
    def list_actions():
        with instance.lock:
            return jsonify({action_id: action.to_dict() for action_id, action in instance.actions.items()})

    @app.route('/api/actions/<action_id>', methods=['POST'])
    def trigger_action(action_id):
        options = _options_from_request()
        if options is None:
            return jsonify({"success": False, "error": "options must be an object"}), 400
        try:
            applied = instance.run_action(action_id, options)
        except UnknownDefinitionError:
            return jsonify({"success": False, "error": f"Unknown action: {action_id}"}), 404
        return jsonify({"success": True, "applied": bool(applied)})

    @app.route('/api/actions/<action_id>/release', methods=['POST'])
    def release_action(action_id):
        options = _options_from_request()
        if options is None:
            return jsonify({"success": False, "error": "options must be an object"}), 400
        try:
            applied = instance.release_action(action_id, options)
        except UnknownDefinitionError:
            return jsonify({"success": False, "error": f"Unknown action: {action_id}"}), 404
        return jsonify({"success": True, "applied": bool(applied)})

    @app.route('/api/feedbacks', methods=['GET'])
    def list_feedbacks():
        with instance.lock:
            return jsonify({
                "definitions": {fid: feedback.to_dict() for fid, feedback in instance.feedbacks.items()},
                "states": dict(instance.feedback_states)
            })

    @app.route('/api/feedbacks/<feedback_id>', methods=['POST'])
    def evaluate_feedback(feedback_id):
        options = _options_from_request()
        if options is None:
            return jsonify({"success": False, "error": "options must be an object"}), 400
        try:
            value = instance.evaluate_feedback(feedback_id, options)
        except UnknownDefinitionError:
            return jsonify({"success": False, "error": f"Unknown feedback: {feedback_id}"}), 404
        return jsonify({"success": True, "value": value})

    @app.route('/api/feedbacks/<feedback_id>/watch/<watch_id>', methods=['PUT'])
    def watch_feedback(feedback_id, watch_id):
        options = _options_from_request()
        if options is None:
            return jsonify({"success": False, "error": "options must be an object"}), 400
        try:
            value = instance.watch_feedback(watch_id, feedback_id, options)
        except UnknownDefinitionError:
            return jsonify({"success": False, "error": f"Unknown feedback: {feedback_id}"}), 404
        return jsonify({"success": True, "value": value})

    @app.route('/api/variables', methods=['GET'])
    def list_variables():
        with instance.lock:
            return jsonify({"definitions": list(instance.variables), "values": dict(instance.variable_values)})

    @app.route('/api/presets', methods=['GET'])
    def list_presets():
        with instance.lock:
            return jsonify(instance.presets)

    @app.route('/api/dmx', methods=['GET'])
    def dmx_buffer():
        with instance.lock:
            return jsonify({"channels": instance.dmx_buffer.tolist()})


class RestAPI:
    """REST API server with WebSocket push of variables, feedbacks and status."""

    def __init__(self, instance: FixtureInstance, config=None):
        self.instance = instance
        self.config = config or {}
        self.validator = ConfigValidator()

        self.app = Flask(__name__)
        self.app.config['SECRET_KEY'] = self.config.get('api', {}).get('secret_key', 'artnet_fixtures')
        CORS(self.app)

        self.socketio = SocketIO(
            self.app,
            cors_allowed_origins="*",
            async_mode='threading',
            logger=False,
            engineio_logger=False
        )

        register_config_routes(self.app, instance, self.validator)
        register_surface_routes(self.app, instance)
        instance.add_listener(self._broadcast)

        @self.app.errorhandler(500)
        def handle_internal_error(e):
            logger.error(f"Server error: {e}", exc_info=True)
            return jsonify({"error": "Internal Server Error"}), 500

        @self.app.errorhandler(404)
        def handle_not_found(e):
            logger.debug(f"404: {request.path}")
            return jsonify({"error": "Not Found"}), 404

    def _broadcast(self, event, payload):
        self.socketio.emit(event, payload)

    def run(self, host='0.0.0.0', port=5000):
        """Start the server (blocking)."""
        logger.info(f"REST API listening on http://{host}:{port}")
        self.socketio.run(self.app, host=host, port=port, allow_unsafe_werkzeug=True)
