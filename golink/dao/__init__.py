"""Link data access objects.

Subpackages:
    base:    LinkBaseDAO interface
    redis:   LinkRedisDAO (production)
    memory:  LinkMemoryDAO (tests, local runs)

Use golink.dao.factory.build_link_dao() to get the DAO of the configured backend.
"""
