"""Routing — template compilation and first-match route lookup.

Routes are registered during setup and frozen before the first request.
"""
