"""Users app package.

Defines the custom user model with guest and admin roles. Use
``apps.users.models.CustomUser`` as the AUTH_USER_MODEL throughout
the project.
"""
