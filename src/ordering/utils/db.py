from protean.domain import Domain
from sqlalchemy import create_engine

SQL_PROVIDERS = ("sqlite", "postgresql")


def database_config(url: str | None) -> dict:
    """Provider settings for an Order Store URL; no URL means the memory provider."""
    if not url:
        return {"provider": "memory"}
    provider = "postgresql" if url.startswith(("postgresql", "postgres")) else "sqlite"
    return {"provider": provider, "database_uri": url}


def configure_database(domain: Domain, url: str | None) -> None:
    """Point the domain's default provider at ``url`` and reconnect.

    Nothing happens when the provider already points there, so data held
    by the memory provider survives repeated wiring.
    """
    config = database_config(url)
    if domain.config["databases"].get("default") == config and len(domain.providers):
        return
    domain.config["databases"]["default"] = config
    domain.providers._initialize()


def setup_db(domain: Domain):
    """Setup database schema"""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] in SQL_PROVIDERS:
                engine = create_engine(provider.conn_info["database_uri"])

                for _, aggregate_record in domain.registry.aggregates.items():
                    if aggregate_record.cls.meta_.provider == provider.name:
                        domain.repository_for(aggregate_record.cls)._dao  # noqa: B018

                provider._metadata.create_all(engine)
                engine.dispose()


def drop_db(domain: Domain):
    """Drop database schema"""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] in SQL_PROVIDERS:
                engine = create_engine(provider.conn_info["database_uri"])
                provider._metadata.drop_all(engine)
                engine.dispose()
