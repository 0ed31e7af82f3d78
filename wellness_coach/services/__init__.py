"""
Typed registries (clients, goals, resources, interactions, recommendations)
over a ``RecordStore``. See ``services.registries``.
"""
