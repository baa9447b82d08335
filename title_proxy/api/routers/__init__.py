"""Endpoint routers mounted by :func:`title_proxy.api.app.create_app`."""
