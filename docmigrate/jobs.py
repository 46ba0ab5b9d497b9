"""Catalog of the migrations this tool knows how to run."""

from typing import Dict, List

from .models.migration import DataSource, DataTarget, MigrationJob, StoreType

BOTS_DATABASE = "myFirstDatabase"
SOCIALFLUX_DATABASE = "SocialFlux"


def _socialflux_job(entity: str, description: str) -> MigrationJob:
    return MigrationJob(
        name=entity,
        description=description,
        source=DataSource(entity=entity, database=SOCIALFLUX_DATABASE, collection=entity),
        target=DataTarget(type=StoreType.SQL, name=entity),
    )


SERVICES: Dict[str, List[MigrationJob]] = {
    "bots": [
        MigrationJob(
            name="bots",
            description="Convert the old bot listings into the current bot layout",
            source=DataSource(entity="bots", database=BOTS_DATABASE, collection="bots"),
            target=DataTarget(
                type=StoreType.MONGO,
                name="transformedbots",
                database=BOTS_DATABASE,
                unique_key="id",
            ),
        ),
    ],
    "socialflux": [
        _socialflux_job("posts", "Copy posts into MySQL"),
        _socialflux_job("users", "Copy user accounts into MySQL"),
        _socialflux_job("partners", "Copy partner cards into MySQL"),
        _socialflux_job("blogs", "Copy blog posts and their content blocks into MySQL"),
    ],
}


def get_jobs(service: str) -> List[MigrationJob]:
    """Jobs for a named service, in the order they run."""
    try:
        return SERVICES[service]
    except KeyError:
        raise ValueError(f"Unknown service: {service} (known: {', '.join(sorted(SERVICES))})") from None
