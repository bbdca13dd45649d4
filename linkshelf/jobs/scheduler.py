import os
from datetime import timedelta

from apscheduler.schedulers.background import BackgroundScheduler

from linkshelf.extensions import db
from linkshelf.models import Link, LinkGroup, utcnow


scheduler = BackgroundScheduler()


def purge_deleted_links(app) -> int:
    with app.app_context():
        cutoff = utcnow() - timedelta(seconds=app.config["LINK_PURGE_GRACE_SECONDS"])
        doomed = (
            Link.query.filter(Link.deletion_timestamp.is_not(None))
            .filter(Link.deletion_timestamp <= cutoff)
            .all()
        )
        if not doomed:
            return 0

        names = {link.name for link in doomed}
        for group in LinkGroup.query.all():
            members = list(group.links or [])
            kept = [name for name in members if name not in names]
            if kept != members:
                group.links = kept
                group.version += 1

        for link in doomed:
            db.session.delete(link)
        db.session.commit()
        app.logger.info("Purged %d deleted links", len(doomed))
        return len(doomed)


def start_scheduler(app):
    if not app.config.get("SCHEDULER_ENABLED", True):
        return
    if os.environ.get("WERKZEUG_RUN_MAIN") == "false":
        return

    interval_seconds = app.config["LINK_PURGE_INTERVAL_SECONDS"]
    if not scheduler.get_jobs():
        scheduler.add_job(
            purge_deleted_links,
            "interval",
            seconds=interval_seconds,
            kwargs={"app": app},
            id="link_purge",
            replace_existing=True,
        )
        scheduler.start()
