"""Routing — path patterns, parameter descriptors, and the route table.

Routes are registered during setup and read, never mutated, while
requests are dispatched.
"""
