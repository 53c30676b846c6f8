# ==============================================================================
# payroll/__init__.py
# ------------------------------------------------------------------------------
# Application factory for creating and configuring the Flask app instance.
# ==============================================================================

import os
import json
import logging
from datetime import date

import click
from flask import Flask
from config import Config
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

# Initialize extensions globally to be accessible by other modules
db = SQLAlchemy()
migrate = Migrate()


def create_app(config_class=Config):
    """
    Application factory function. Creates and configures the Flask application.

    Args:
        config_class (class): The configuration class to use.

    Returns:
        Flask: The configured Flask application instance.
    """
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_class)

    # Configure logging
    log_level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(level=log_level,
                        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s')

    # Ensure the instance folder exists for the SQLite database
    os.makedirs(app.instance_path, exist_ok=True)

    # Initialize extensions with the application instance
    db.init_app(app)
    migrate.init_app(app, db)

    # One cache per application, shared by every request
    from payroll.cache import TTLCache
    from payroll.datasource import CachedDataSource, SheetDataSource
    ttl = app.config.get('CACHE_TTL_SECONDS', 900)
    cache = TTLCache(default_ttl=ttl)
    app.extensions['payroll_cache'] = cache
    app.extensions['payroll_source'] = CachedDataSource(SheetDataSource(app), cache, ttl)

    # Register blueprints with the application
    from payroll.main import bp as main_bp
    app.register_blueprint(main_bp)

    @app.cli.command("seed")
    def seed():
        """Seeds the database with default values."""
        from payroll.seed import seed_data
        seed_data()
        app.logger.info("Database has been seeded with default values.")

    @app.cli.command("salary")
    @click.argument("supervisor_code")
    @click.option("--start", help="First day of the period (defaults to the first of this month).")
    @click.option("--end", help="Last day of the period (defaults to today).")
    def salary(supervisor_code, start, end):
        """Calculates one supervisor's salary and prints it as JSON."""
        from payroll.calculator.errors import PayrollError
        from payroll.main.utils import default_salary_period, run_salary_calculation
        default_start, default_end = default_salary_period(date.today())
        try:
            result = run_salary_calculation(supervisor_code, start or default_start, end or default_end)
        except (PayrollError, ValueError) as e:
            raise click.ClickException(str(e))
        click.echo(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))

    app.logger.info('Supervisor Payroll startup complete')

    return app
