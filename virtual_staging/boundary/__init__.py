"""
Boundary layer: database, generation provider and object store adapters.
"""
