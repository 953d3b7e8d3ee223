from portal.routes.auth import auth_bp
from portal.routes.intake import intake_bp
from portal.routes.application import application_bp
from portal.api.location.dashboard import dashboard_bp
from portal.api.location.details import location_details_bp
from portal.api.location.hours import hours_bp
from portal.api.location.upgrade import upgrade_bp
from portal.api.location.staff import staff_bp
from portal.api.location.events import events_bp
from portal.api.location.schedule import schedule_bp
from portal.api.admin.verification import admin_verification_bp
from flask import Flask
from flask_cors import CORS
from dotenv import load_dotenv
from flasgger import Swagger
from swagger__config import SWAGGER_CONFIG, SWAGGER_TEMPLATE
import os

load_dotenv()
from portal.config import Config  # noqa: E402
from portal.extensions import db  # noqa: E402


def create_app():
    print("Starting create_app()")
    app = Flask(__name__)
    try:
        app.config.from_object(Config)
        print(f"Config loaded: {len(app.config)} items")

        CORS(app)
        print("CORS initialized")

        db.init_app(app)
        print("Database initialized")

        host = os.environ.get("API_HOST", "127.0.0.1:5000")
        swagger_template = SWAGGER_TEMPLATE.copy()
        swagger_template["host"] = host

        Swagger(app, config=SWAGGER_CONFIG, template=swagger_template)
        print("Swagger initialized - Access at /api/docs")

        blueprints = [
            auth_bp,
            intake_bp,
            application_bp,
            dashboard_bp,
            location_details_bp,
            hours_bp,
            upgrade_bp,
            staff_bp,
            events_bp,
            schedule_bp,
            admin_verification_bp,
        ]

        for bp in blueprints:
            app.register_blueprint(bp)
            print(f"  ✓ {bp.name} registered")

        @app.route("/")
        def home():
            """
            Root endpoint - API status
            ---
            tags:
              - Utility
            responses:
              200:
                description: API is running
                schema:
                  type: object
                  properties:
                    status:
                      type: string
                    message:
                      type: string
                    docs_url:
                      type: string
            """
            return {
                "status": "ok",
                "message": "CardChase location portal is running!",
                "docs_url": "/api/docs",
            }, 200

        route_count = 0
        for rule in app.url_map.iter_rules():
            route_count += 1
            print(
                f"   Route {route_count}: {rule.endpoint} -> {rule.rule} [{sorted(rule.methods)}]"
            )  # noqa: E501
        print(f"Total routes registered: {route_count}")

    except Exception as e:
        print(f"Error during app creation: {e}")
        import traceback

        print(f"Full traceback: {traceback.format_exc()}")
        raise

    print("create_app() completed successfully")
    return app


app = create_app()

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    app.run(
        host="0.0.0.0", port=port, debug=os.environ.get("FLASK_ENV") != "production"
    )
