import logging

import typer
from rich import print
from rich.markup import escape

from content_ingest.config.settings import get_settings
from content_ingest.db.database import init_db, make_engine
from content_ingest.db.repository import ArticleRepository
from content_ingest.services.notify import Notifier, NullNotifier, build_notifier
from content_ingest.services.scheduler import PublishScheduler
from content_ingest.tools.lock import RunLock
from content_ingest.tools.logging_setup import setup_logging
from content_ingest.workflows.run_ingest import run_ingest


app = typer.Typer(help="Content ingestion pipeline")

@app.command()
def doctor():
    """Check config + DB connectivity."""
    s = get_settings()
    print("[bold green]Config loaded[/bold green]")
    print("DB:", s.database_url)
    print("Publish window:", f"{s.publish_window_start}:00-{s.publish_window_end}:00")
    print("Feeds:", s.rss_feeds or "(none)")
    print("Catalog API:", s.catalog_api_url, "| credentials:", bool(s.catalog_api_id and s.catalog_affiliate_id))
    print("Notifier:", type(build_notifier(s)).__name__)
    init_db(make_engine(s))
    print("[bold green]DB OK[/bold green]")

@app.command()
def run():
    """Run one ingestion over all sources."""
    log = logging.getLogger("content_ingest.run")
    notifier: Notifier = NullNotifier()

    try:
        s = get_settings()
        setup_logging(s)
        notifier = build_notifier(s)
        engine = make_engine(s)
        init_db(engine)
        with RunLock(s.lock_path):
            result = run_ingest(s, ArticleRepository(engine), notifier, logger=log)
    except Exception as e:
        log.exception("Fatal error: %s", e)
        notifier.send(f"Fatal error: {e}")
        print(f"[bold red]Run failed[/bold red]: {escape(str(e))}")
        raise typer.Exit(code=1)

    color = {0: "green", 1: "red"}[result.exit_code]
    print(f"[bold {color}]Run {result.state.value}[/bold {color}] ({result.success_count}/{len(result.outcomes)} sources)")
    for o in result.outcomes:
        print(" ", o.describe())
    raise typer.Exit(code=result.exit_code)

@app.command("schedule-preview")
def schedule_preview(total: int = typer.Option(5, min=1, help="Batch size to spread over the window")):
    """Show the publish times a batch of TOTAL records would get today."""
    scheduler = PublishScheduler.from_settings(get_settings())
    for i in range(total):
        print(f"{i + 1:>3}. {scheduler.schedule(i, total).isoformat(timespec='minutes')}")


if __name__ == "__main__":
    app()
