"""Route path templates for each path style."""

from dataclasses import dataclass

from collrest.config.settings import PathStyle


@dataclass(frozen=True)
class RoutePaths:
    """Path templates for one route table layout."""

    collection: str
    document: str
    field: str
    definitions: tuple[str, ...]
    token: str = "/token"
    definition_link: str = "/definitions/{coll}"


PREFIXED = RoutePaths(
    collection="/collection/{coll}",
    document="/collection/{coll}/{id}",
    field="/collection/{coll}/{id}/{field}",
    definitions=("/definitions", "/definitions/{coll}"),
)

FLAT = RoutePaths(
    collection="/{coll}",
    document="/{coll}/{id}",
    field="/{coll}/{id}/{field}",
    definitions=("/definitions/{coll}",),
)


def paths_for(style: PathStyle) -> RoutePaths:
    return FLAT if style is PathStyle.FLAT else PREFIXED
