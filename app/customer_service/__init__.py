import logging
import uuid

from flask import Flask, g
from dotenv import load_dotenv

from app.customer_service.config import load_config
from app.customer_service.db import db_session, init_db, teardown_db_session
from app.customer_service.routes import bp as routes_bp
from app.customer_service.modules.customers.api import CustomerHandler, bp as customers_bp
from app.customer_service.modules.customers.service import CustomerStore, SqlCustomerStore


def create_app(store: CustomerStore | None = None) -> Flask:
    load_dotenv()
    app = Flask(__name__)
    app.config.from_mapping(load_config())

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if not app.config.get("DATABASE_URL") or str(app.config["DATABASE_URL"]).strip() == "":
            raise RuntimeError("DATABASE_URL is required in production.")
        if str(app.config["DATABASE_URL"]).startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")

    init_db(app)

    def _dispose_engine_on_fork() -> None:
        import os
        if hasattr(os, "register_at_fork"):
            def _after_fork_child():
                engine = app.extensions.get("sqlalchemy_engine")
                if engine:
                    engine.dispose()
                    app.logger.info("Disposed DB engine after fork (pid=%s)", os.getpid())

            os.register_at_fork(after_in_child=_after_fork_child)

    _dispose_engine_on_fork()

    if store is None:
        store = SqlCustomerStore(db_session)
    app.extensions["customer_handler"] = CustomerHandler(store)

    app.register_blueprint(routes_bp)
    app.register_blueprint(customers_bp, url_prefix="/customers")

    @app.before_request
    def _assign_request_id():
        if not getattr(g, "request_id", None):
            g.request_id = uuid.uuid4().hex

    @app.after_request
    def _echo_request_id(response):
        rid = getattr(g, "request_id", None)
        if rid:
            response.headers["X-Request-ID"] = rid
        return response

    app.teardown_appcontext(teardown_db_session)

    @app.errorhandler(400)
    def _err_400(e):  # type: ignore[no-redef]
        return {"error": getattr(e, "description", None) or "Bad Request"}, 400

    @app.errorhandler(404)
    def _err_404(e):  # type: ignore[no-redef]
        return {"error": "Not Found"}, 404

    @app.errorhandler(405)
    def _err_405(e):  # type: ignore[no-redef]
        return {"error": "Method Not Allowed"}, 405

    @app.errorhandler(413)
    def _err_413(e):  # type: ignore[no-redef]
        return {"error": f"Request body too large (limit {app.config['MAX_CONTENT_LENGTH']} bytes)."}, 413

    @app.errorhandler(500)
    def _err_500(e):  # type: ignore[no-redef]
        rid = getattr(g, "request_id", None)
        app.logger.exception("Unhandled 500 (request_id=%s)", rid)
        return {"error": "Internal Server Error", "request_id": rid}, 500

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
