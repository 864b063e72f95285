from protean.domain import Domain
from sqlalchemy import create_engine

_SQL_PROVIDERS = ("sqlite", "postgresql")


def _register_models(domain: Domain, provider_name: str) -> None:
    # Touching a repository's DAO registers its model with the provider's metadata
    records = [
        *domain.registry.aggregates.values(),
        *domain.registry.entities.values(),
        *domain.registry.projections.values(),
    ]
    for record in records:
        if record.cls.meta_.provider == provider_name:
            domain.repository_for(record.cls)._dao  # noqa: B018


def setup_db(domain: Domain):
    """Create tables for every relational provider configured on the domain."""
    with domain.domain_context():
        for name, provider in domain.providers.items():
            if provider.conn_info["provider"] not in _SQL_PROVIDERS:
                continue
            engine = create_engine(provider.conn_info["database_uri"])
            _register_models(domain, name)
            provider._metadata.create_all(engine)


def drop_db(domain: Domain):
    """Drop tables for every relational provider configured on the domain."""
    with domain.domain_context():
        for _, provider in domain.providers.items():
            if provider.conn_info["provider"] not in _SQL_PROVIDERS:
                continue
            engine = create_engine(provider.conn_info["database_uri"])
            provider._metadata.drop_all(engine)
