"""
Command-line interface for querying carbon emissions.

Credentials are taken from the environment (or the settings files); the
query is built from command-line options and results are printed as JSON.
"""

import asyncio
import logging
import sys
from datetime import datetime, time, timezone

import click

from .client import CarbemClient, emissions_to_json
from .config.settings import get_config
from .models import EmissionQuery, TimePeriod
from .providers.base import CarbemError
from .providers.registry import ProviderRegistry
from .query_config import AzureQueryConfig, IbmGroupBy, IbmQueryConfig

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Configure logging based on verbosity settings."""
    logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # Default is quiet: only errors reach the terminal
    logging.getLogger().setLevel(logging.DEBUG if verbose else logging.ERROR)
    logging.getLogger("httpx").setLevel(logging.INFO if verbose else logging.ERROR)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _build_provider_config(provider, ibm_enterprise_id, group_by, limit, offset, subscriptions):
    if provider == "ibm":
        enterprise_id = ibm_enterprise_id or get_config().ibm_from_env()["enterprise_id"]
        return IbmQueryConfig(
            enterprise_id=enterprise_id,
            group_by=IbmGroupBy(group_by) if group_by else IbmGroupBy.MONTH,
            limit=limit,
            offset=offset,
        )
    if provider == "azure":
        return AzureQueryConfig(subscription_list=subscriptions)
    return None


def _build_client(provider: str) -> CarbemClient:
    builder = CarbemClient.builder()
    if provider == "ibm":
        builder.with_ibm_from_env()
    elif provider == "azure":
        builder.with_azure_from_env()
    else:
        builder.with_provider(provider, get_config().get_provider_config(provider))
    return builder.build()


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging and debug output")
@click.pass_context
def cli(ctx, verbose):
    """Carbem - Query carbon emissions across cloud providers."""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command()
def providers():
    """List the providers this client knows about."""
    for name in ProviderRegistry.get_available_providers():
        click.echo(name)


@cli.command()
@click.option(
    "--provider",
    type=click.Choice(ProviderRegistry.get_available_providers()),
    required=True,
    help="Cloud provider to query",
)
@click.option("--start", type=click.DateTime(formats=["%Y-%m-%d"]), required=True)
@click.option("--end", type=click.DateTime(formats=["%Y-%m-%d"]), required=True)
@click.option("--region", "regions", multiple=True, help="Region filter (repeatable)")
@click.option("--service", "services", multiple=True, help="Service filter (repeatable)")
@click.option("--enterprise-id", help="IBM enterprise id (defaults to IBM_ACCOUNT_ID)")
@click.option(
    "--group-by",
    type=click.Choice([g.value for g in IbmGroupBy]),
    help="IBM grouping dimension",
)
@click.option("--limit", type=int, help="Page size passed through to the provider")
@click.option("--offset", type=int, help="Page offset passed through to the provider")
@click.option("--subscription", "subscriptions", multiple=True, help="Azure subscription id")
def query(
    provider, start, end, regions, services, enterprise_id, group_by, limit, offset, subscriptions
):
    """Query emissions from a single provider and print them as JSON."""

    async def _query():
        async with _build_client(provider) as client:
            return await client.query_emissions(emission_query)

    try:
        emission_query = EmissionQuery(
            provider=provider,
            regions=regions,
            services=services or None,
            time_period=TimePeriod(
                start=datetime.combine(start.date(), time.min, tzinfo=timezone.utc),
                end=datetime.combine(end.date(), time(23, 59, 59), tzinfo=timezone.utc),
            ),
            provider_config=_build_provider_config(
                provider, enterprise_id, group_by, limit, offset, subscriptions
            ),
        )
        emissions = asyncio.run(_query())
    except CarbemError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(emissions_to_json(emissions))


if __name__ == "__main__":
    cli()
