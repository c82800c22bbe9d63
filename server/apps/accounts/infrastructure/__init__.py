"""Infrastructure layer for accounts app.

Integrations with the volatile session store live here, away from the
authentication rules in ``logic``.
"""
