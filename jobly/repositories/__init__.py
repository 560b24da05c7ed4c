"""
Repositories.

One module per entity. Each declares the entity's column-name map and
filter rules next to the statements that use them.
"""
