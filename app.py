"""Application entry point for the leave form bot."""

from __future__ import annotations

from pathlib import Path
from uuid import uuid4

from flask import Flask, jsonify, request, copy_current_request_context
from slack_bolt import App as SlackApp
from slack_bolt.adapter.flask import SlackRequestHandler
from slack_sdk.errors import SlackApiError
from slack_sdk.signature import Clock, SignatureVerifier
import structlog

from leave_form_bot.background import run_async
from leave_form_bot.config import AppSettings, get_settings
from leave_form_bot.errors import slack_error_code
from leave_form_bot.leave import (
    HandlerContext,
    Outcome,
    announce_form_button,
    register_listeners,
)
from leave_form_bot.logging_config import configure_logging
from leave_form_bot.safety import install_safety_net
from leave_form_bot.slack_client import SlackClient


def _create_bolt_app(settings: AppSettings) -> SlackApp:
    """Initialise the Slack Bolt application using validated settings."""

    return SlackApp(
        token=settings.bot_token,
        signing_secret=settings.signing_secret,
        token_verification_enabled=False,
        # listeners run in the calling worker thread so the route's trace_id stays bound
        process_before_response=True,
    )


def _create_slack_client(settings: AppSettings, bolt_app: SlackApp) -> SlackClient:
    return SlackClient(client=bolt_app.client, allow_rich_content=settings.announce_rich_content)


def _register_error_handlers(flask_app: Flask) -> None:
    """Register a JSON error handler that attaches a trace identifier."""

    @flask_app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):  # type: ignore[override]
        trace_id = str(uuid4())
        flask_app.logger.exception(
            "Unhandled application error", extra={"trace_id": trace_id}, exc_info=error
        )
        response = jsonify({"error": "internal_server_error", "trace_id": trace_id})
        response.status_code = 500
        return response


def _announce_on_ready(context: HandlerContext) -> Outcome | None:
    """Wait for ``auth.test`` to confirm the bot identity, then post the form button."""

    log = structlog.get_logger()
    try:
        identity = context.slack.identify()
    except SlackApiError as exc:
        log.error("slack_identify_failed", error=slack_error_code(exc))
        return None
    except Exception as exc:
        log.exception("slack_identify_failed", error=str(exc))
        return None

    log.info("slack_ready", bot_user_id=identity.user_id, team_id=identity.team_id)
    return announce_form_button(context)


def _is_signed_by_slack(verifier: SignatureVerifier, body: str, headers) -> bool:
    """Check the request signature; a malformed timestamp header counts as unsigned."""

    try:
        return verifier.is_valid_request(body, dict(headers))
    except ValueError:
        return False


_LOGGING_CONFIGURED = False


def _load_version() -> str:
    version_file = Path(__file__).resolve().parent / "VERSION"
    if version_file.exists():
        return version_file.read_text(encoding="utf-8").strip()
    return "unknown"


def create_app() -> Flask:
    """Create and configure the Flask application."""

    settings = get_settings()

    global _LOGGING_CONFIGURED
    if not _LOGGING_CONFIGURED:
        configure_logging(settings.log_level)
        install_safety_net()
        _LOGGING_CONFIGURED = True

    verifier = SignatureVerifier(settings.signing_secret, clock=Clock())
    bolt_app = _create_bolt_app(settings)
    handler = SlackRequestHandler(bolt_app)
    context = HandlerContext(slack=_create_slack_client(settings, bolt_app), settings=settings)

    flask_app = Flask(__name__)
    flask_app.config["APP_VERSION"] = _load_version()
    flask_app.logger.setLevel("INFO")

    _register_error_handlers(flask_app)
    register_listeners(bolt_app, context)

    if settings.post_form_button_on_startup:
        run_async(_announce_on_ready, context, trace_id=str(uuid4()))

    @flask_app.route("/slack/events", methods=["POST"])
    def slack_events():
        raw_body = request.get_data(as_text=True)

        if not _is_signed_by_slack(verifier, raw_body, request.headers):
            response = jsonify({"error": "invalid_signature"})
            response.status_code = 401
            return response

        trace_id = str(uuid4())

        @copy_current_request_context
        def process_request():
            handler.handle(request)

        run_async(process_request, trace_id=trace_id)
        return "", 200

    @flask_app.route("/healthz", methods=["GET"])
    def healthz():
        health: dict[str, object] = {"ok": True}
        health["version"] = flask_app.config.get("APP_VERSION", "unknown")

        try:
            get_settings()
            health["config"] = "valid"
        except Exception as exc:  # pragma: no cover - settings were valid at startup
            health["config"] = "invalid"
            health["config_error"] = str(exc)
            health["ok"] = False

        status = 200 if health["ok"] else 503
        return jsonify(health), status

    return flask_app


if __name__ == "__main__":  # pragma: no cover - manual execution helper
    application = create_app()
    application.run(host="0.0.0.0", port=3000)
