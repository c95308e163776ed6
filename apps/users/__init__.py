"""Users app package.

Defines the custom user model with marketplace roles (customer, spa owner,
administrator). Use ``apps.users.models.CustomUser`` as AUTH_USER_MODEL.
"""
