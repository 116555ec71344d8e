import logging
from sqlalchemy.orm import registry

logger = logging.getLogger(__name__)

# one registry for every context so foreign keys resolve across tables
mapper_registry = registry()
metadata = mapper_registry.metadata


def start_mappers():
    logger.info("Starting mappers")

    # context modules import the registry from here
    from directory.adapters import orm as directory_orm
    from case.adapters import orm as case_orm
    from supplies.adapters import orm as supplies_orm

    directory_orm.map_entities()
    case_orm.map_entities()
    supplies_orm.map_entities()
