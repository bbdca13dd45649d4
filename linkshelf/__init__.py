from flask import Flask

from linkshelf.api import api_bp
from linkshelf.config import Config
from linkshelf.extensions import db
from linkshelf.jobs.scheduler import purge_deleted_links, start_scheduler


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    db.init_app(app)

    app.register_blueprint(api_bp)

    @app.cli.command("init-db")
    def init_db_command():
        db.create_all()
        print("Initialized LinkShelf database.")

    @app.cli.command("purge-links")
    def purge_links_command():
        purged = purge_deleted_links(app)
        print(f"Purged {purged} deleted links.")

    with app.app_context():
        db.create_all()

    start_scheduler(app)
    return app
