"""Pure domain layer: entities, predicates, query objects and the repository contract.

Nothing in this package imports a persistence library.
"""
