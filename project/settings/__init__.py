# project/settings/__init__.py

"""
Default settings entrypoint.

Defaults to the local development configuration so that
`project.settings` keeps working for manage.py and runserver.
"""

from .local import *  # noqa
