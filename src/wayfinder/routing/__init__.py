"""Routing — route tables, locations, and matching.

Route configs are flattened into a ``RouteTable`` once, then every
navigation request is normalized into a ``Location`` and matched to an
immutable ``Route`` snapshot.  Nothing in this package knows about
guards or history.
"""
