"""Configuration directory for the LivePoll server.

Drop a ``server_config.json`` here to override the defaults in
``utils.config_loader.DEFAULT_CONFIG``. Sections: ``logging``, ``server``,
``polls``, ``chat`` and ``health_check``. Environment variables (or a ``.env``
file) take precedence over this file.
"""
