"""ROSTER

A student, class and exam management core built around observable
repositories: CRUD over a persistence context plus live, deduplicated
views of every record of a type that view-state holders subscribe to.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
