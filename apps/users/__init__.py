"""Users app package.

Custom user model with email login and the per-user booking history kept
up to date by the booking workflows. Use ``apps.users.models.User`` as the
AUTH_USER_MODEL throughout the project.
"""
