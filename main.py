from flask import Flask, Response, request, jsonify
from werkzeug.exceptions import MethodNotAllowed
import json
import logging

from credentials import load_service_account
from errors import ValidationError
from leads import LeadSubmission, utc_timestamp
from settings import Settings
from sheets import SheetAppender
from static_site import StaticSite
from token_provider import TokenProvider

# ─── HTTP SURFACE ─────────────────────────────────────────────────
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}
ANY_METHOD = ["GET", "POST", "PUT", "PATCH", "DELETE"]

SUCCESS_MESSAGE = "Dados enviados com sucesso!"
VALIDATION_MESSAGE = "Nome, sobrenome e email são obrigatórios."
FAILURE_MESSAGE = "Erro ao processar a solicitação."
METHOD_MESSAGE = "Use POST para enviar o formulário."


def build_appender(settings: Settings) -> SheetAppender:
    """
    Loads the service-account key once and wires the token provider and
    sheet appender that every submission shares.
    """
    credential = load_service_account(settings.key_file)
    token_provider = TokenProvider(credential, timeout=settings.http_timeout)
    return SheetAppender(
        token_provider,
        settings.sheet_id,
        settings.cell_range,
        session=token_provider.session,
        timeout=settings.http_timeout,
    )


def create_app(settings: Settings = None, appender: SheetAppender = None, site: StaticSite = None) -> Flask:
    settings = settings or Settings.from_env()
    appender = appender or build_appender(settings)
    site = site or StaticSite(settings.static_root, not_found_behavior=settings.not_found_behavior)

    app = Flask(__name__, static_folder=None)
    app.config["SETTINGS"] = settings

    @app.before_request
    def short_circuit_preflight():
        if request.method == "OPTIONS":
            return Response(status=204)

    @app.after_request
    def add_cors_headers(response):
        response.headers.update(CORS_HEADERS)
        return response

    def post_only():
        response = jsonify({"error": METHOD_MESSAGE})
        response.headers["Allow"] = "POST, OPTIONS"
        return response, 405

    @app.errorhandler(MethodNotAllowed)
    def any_method_gets_the_site(error):
        # verbs outside ANY_METHOD still reach the static site
        if request.path == "/submit":
            return post_only()
        return serve_static(request.path)

    @app.route("/submit", methods=ANY_METHOD)
    def submit():
        if request.method != "POST":
            return post_only()

        try:
            body = request.get_data()
            data = json.loads(body)
            lead = LeadSubmission.from_payload(data)

            row = lead.to_row(utc_timestamp())
            appender.append_row(row)
            app.logger.info("Lead submission appended to sheet")
            return jsonify({"message": SUCCESS_MESSAGE}), 200

        except ValidationError as e:
            app.logger.info(f"Rejected submission: {e}")
            return jsonify({"error": VALIDATION_MESSAGE}), 400
        except Exception:
            # upstream and parse failures share one generic answer
            app.logger.exception("Submission processing failed")
            return jsonify({"error": FAILURE_MESSAGE}), 500

    @app.route("/", defaults={"path": ""}, methods=ANY_METHOD)
    @app.route("/<path:path>", methods=ANY_METHOD)
    def serve_static(path):
        result = site.respond(path)
        return Response(result.body, status=result.status, content_type=result.content_type)

    return app


def main():
    settings = Settings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = create_app(settings)
    app.logger.info(f"Server running at http://localhost:{settings.port}")
    app.run(host=settings.host, port=settings.port, threaded=True)


if __name__ == "__main__":
    main()
