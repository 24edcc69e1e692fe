from laptop_api.api.graphql.schema import schema, graphql_router

__all__ = [
    "schema",
    "graphql_router"
]
