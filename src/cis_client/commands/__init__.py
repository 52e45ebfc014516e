"""Built-in sub-commands for the ``cis-client`` CLI.

Modules:
    users: ``get-user``, ``update-user`` and ``delete-user``.
    token: ``token`` -- obtain a bearer token and show its expiry.
    config: ``config show`` -- print the effective settings.
"""
