from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData
from flask_migrate import Migrate


# 1. Create extension instances WITHOUT an app
# They will be "connected" to the app inside the factory

# Define naming convention for SQLAlchemy
convention = {
    "ix": 'ix_%(column_0_label)s',
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}
metadata = MetaData(naming_convention=convention)

db = SQLAlchemy(metadata=metadata)
migrate = Migrate()
from flask_caching import Cache
cache = Cache()


from flask_login import LoginManager
login_manager = LoginManager()
login_manager.login_view = 'auth_bp.login'
login_manager.login_message = 'Inicia sesión para continuar.'
login_manager.login_message_category = 'info'


def create_app(config_class='config.Config'):
    """
    Application Factory Function
    """

    app = Flask(__name__, instance_relative_config=True)

    # Load configuration from the config.py file
    app.config.from_object(config_class)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    cache.init_app(app)

    @app.context_processor
    def inject_global_vars():
        from flask_login import current_user
        from .constants import TicketType, PaymentStatus

        return dict(
            staff=current_user,
            TicketType=TicketType,
            PaymentStatus=PaymentStatus
        )

    # Register Blueprints
    # Imports are *inside* the factory to avoid circular import issues
    with app.app_context():
        from .tickets_routes import tickets_bp
        from .auth.routes import auth_bp

        # Import models so SQLAlchemy knows about them
        from . import models
        # Session listeners that turn commits into ticket change signals
        from . import events

        app.register_blueprint(tickets_bp)
        app.register_blueprint(auth_bp)

    # Connect the spreadsheet mirror to the change signals
    from .sheets.mirror import init_mirror
    init_mirror(app)

    # Register CLI commands
    from .commands.mirror_resync import mirror_resync

    app.cli.add_command(mirror_resync)

    return app
