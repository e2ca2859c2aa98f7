"""
Command-line interface for galaxy-sync.

Usage:
    galaxy-sync serve             # Run the API server with the scheduler
    galaxy-sync run-once          # Crawl every configured source once
    galaxy-sync validate-config   # Check the sources file and list sources
    galaxy-sync validate-galaxy   # Check a local galaxy.yml
    galaxy-sync subscription      # Run one subscription check
    galaxy-sync trigger           # Start syncs on a running server and follow them
"""

import asyncio
import os
import sys

import click

from galaxy_sync.config.settings import get_settings
from galaxy_sync.errors import ConfigurationError
from galaxy_sync.observability.logging import setup_logging
from galaxy_sync.observability.metrics import get_metrics


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """galaxy-sync - Ansible collection discovery and catalog sync."""
    if debug:
        os.environ["LOG_LEVEL"] = "DEBUG"
        get_settings.cache_clear()

    setup_logging()


@main.command()
@click.option("--host", default=None, help="API server host")
@click.option("--port", default=None, type=int, help="API server port")
@click.option("--reload", is_flag=True, help="Enable auto-reload (dev only)")
@click.option("--metrics-port", default=None, type=int, help="Metrics server port")
def serve(host: str | None, port: int | None, reload: bool, metrics_port: int | None) -> None:
    """Start the API server and the sync scheduler."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    metrics_port = metrics_port or settings.metrics_port

    get_metrics().start_server(port=metrics_port)

    click.echo(f"Starting API server on {host}:{port}")
    click.echo(f"Metrics available on http://localhost:{metrics_port}/metrics")
    click.echo(f"API docs available on http://localhost:{port}/docs")

    uvicorn.run(
        "galaxy_sync.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


@main.command("validate-config")
@click.option("--config", "config_path", default=None, help="Sources file (defaults to SOURCES_FILE)")
def validate_config(config_path: str | None) -> None:
    """Validate the sources file and list the sync sources it defines."""
    from galaxy_sync.catalog.identifiers import generate_source_id
    from galaxy_sync.config.sources import load_sync_config

    path = config_path or get_settings().sources_file
    try:
        config = load_sync_config(path)
    except ConfigurationError as e:
        click.echo(click.style(f"✗ {e}", fg="red"))
        sys.exit(1)

    sources = config.source_configs()
    click.echo(click.style(f"✓ {path} is valid", fg="green"))
    click.echo(f"\nSCM sources ({len(sources)}):")
    for source in sources:
        state = "enabled" if source.enabled else "disabled"
        click.echo(
            f"  {generate_source_id(source)} "
            f"(every {source.schedule.frequency_seconds}s, {state})"
        )

    if config.hub and config.hub.repositories:
        click.echo(f"\nHub repositories ({len(config.hub.repositories)}):")
        for name in config.hub.repositories:
            click.echo(f"  {name}")


@main.command("validate-galaxy")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def validate_galaxy(path: str) -> None:
    """Validate a local galaxy.yml file."""
    from galaxy_sync.errors import GalaxyParseError, GalaxyValidationError
    from galaxy_sync.galaxy.schema import load_galaxy_metadata

    with open(path, encoding="utf-8") as f:
        raw_text = f.read()

    try:
        metadata = load_galaxy_metadata(raw_text)
    except GalaxyParseError as e:
        click.echo(click.style(f"✗ {e}", fg="red"))
        sys.exit(1)
    except GalaxyValidationError as e:
        click.echo(click.style(f"✗ {path} is invalid:", fg="red"))
        for error in e.errors:
            click.echo(f"  {error}")
        sys.exit(1)

    click.echo(click.style(f"✓ {metadata.full_name} {metadata.version}", fg="green"))


@main.command("run-once")
@click.option("--config", "config_path", default=None, help="Sources file (defaults to SOURCES_FILE)")
def run_once(config_path: str | None) -> None:
    """Crawl every enabled source once and print what was found."""
    from galaxy_sync.catalog.sink import InMemoryCatalogSink
    from galaxy_sync.config.sources import load_sync_config
    from galaxy_sync.sync.scheduler import build_scheduler

    settings = get_settings()
    try:
        config = load_sync_config(config_path or settings.sources_file)
    except ConfigurationError as e:
        click.echo(click.style(f"✗ {e}", fg="red"))
        sys.exit(1)

    async def run():
        sink = InMemoryCatalogSink()
        scheduler = build_scheduler(config, settings, sink)
        outcomes = await scheduler.run_all_once()

        click.echo("\nSync Results:")
        exit_code = 0
        for source_id, ok in outcomes.items():
            state = scheduler.store.get(source_id)
            if ok:
                click.echo(click.style(
                    f"  ✓ {source_id}: {state.collections_found} collections", fg="green"
                ))
            else:
                click.echo(click.style(f"  ✗ {source_id}: failed", fg="red"))
                exit_code = 1

        click.echo(f"\nCatalog: {len(sink.entities)} entities, {len(sink.relations)} relations")
        return exit_code

    result = asyncio.run(run())
    if result != 0:
        sys.exit(result)


@main.command()
def subscription() -> None:
    """Run one automation platform subscription check."""
    from galaxy_sync.subscription.service import SubscriptionService

    settings = get_settings()
    if not settings.aap_configured:
        click.echo(click.style("AAP_BASE_URL and AAP_TOKEN must be set", fg="red"))
        sys.exit(1)

    service = SubscriptionService(
        settings.aap_base_url,
        settings.aap_token,
        check_ssl=settings.aap_check_ssl,
    )
    status = asyncio.run(service.check())

    if status.is_valid:
        click.echo(click.style("✓ Subscription is valid", fg="green"))
    else:
        click.echo(click.style(f"✗ {status.error_message} (status {status.status_code})", fg="red"))
        sys.exit(1)


@main.command()
@click.option("--api-url", default=None, help="galaxy-sync API base URL")
@click.option("--provider", "scm_provider", default=None, help="SCM provider (github, gitlab)")
@click.option("--host", "host_name", default=None, help="SCM host")
@click.option("--org", "organization", default=None, help="Organization or group")
@click.option("--follow/--no-follow", default=True, help="Poll until the started syncs finish")
def trigger(
    api_url: str | None,
    scm_provider: str | None,
    host_name: str | None,
    organization: str | None,
    follow: bool,
) -> None:
    """Start SCM syncs on a running server and report when they finish."""
    from galaxy_sync.client.feed import StatusFeedClient
    from galaxy_sync.client.notifications import NotificationInserted, NotificationLog
    from galaxy_sync.client.status_poller import SyncStatusPoller, started_syncs_from_results

    settings = get_settings()
    api_url = api_url or f"http://localhost:{settings.api_port}"
    api_key = settings.api_keys.split(",")[0].strip() if settings.api_keys else None

    sync_filter = {
        key: value
        for key, value in (
            ("scmProvider", scm_provider),
            ("hostName", host_name),
            ("organization", organization),
        )
        if value
    }

    async def run():
        async with StatusFeedClient(api_url, api_key=api_key) as feed:
            providers = await feed.fetch_status()
            response = await feed.trigger_scm([sync_filter] if sync_filter else [])

            summary = response.get("summary", {})
            click.echo(
                f"Started {summary.get('sync_started', 0)}, "
                f"already syncing {summary.get('already_syncing', 0)}, "
                f"failed {summary.get('failed', 0)}, "
                f"invalid {summary.get('invalid', 0)}"
            )
            for result in response.get("results", []):
                if result.get("error"):
                    click.echo(click.style(f"  ✗ {result['error']['message']}", fg="red"))

            started = started_syncs_from_results(response.get("results", []), providers)
            if not follow or not started:
                return 0

            notifications = NotificationLog()
            poller = SyncStatusPoller(
                feed.fetch_status,
                notifications,
                fast_interval=settings.fast_poll_interval_seconds,
                slow_interval=settings.slow_poll_interval_seconds,
                tracking_timeout=settings.tracking_timeout_seconds,
            )
            poller.start_tracking(started)

            shown = 0
            while poller.tracked:
                in_progress = await poller.check_sync_status()
                for event in notifications.events[shown:]:
                    if isinstance(event, NotificationInserted):
                        n = event.notification
                        color = "red" if n.severity == "error" else "green"
                        click.echo(click.style(f"{n.title}: {n.description}", fg=color))
                shown = len(notifications.events)
                if poller.tracked:
                    await asyncio.sleep(
                        settings.fast_poll_interval_seconds
                        if in_progress
                        else settings.slow_poll_interval_seconds
                    )

            failed = any(n.severity == "error" for n in notifications.visible)
            return 1 if failed else 0

    result = asyncio.run(run())
    if result != 0:
        sys.exit(result)


if __name__ == "__main__":
    main()
