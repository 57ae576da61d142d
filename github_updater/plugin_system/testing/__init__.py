"""
Testing helpers

In-memory stand-ins for the host collaborators, for tests and dry runs.
"""

from .mocks import MockOptionStore, MockPluginHost

__all__ = [
    'MockOptionStore',
    'MockPluginHost',
]
