"""
SLO and SLI plugins.

Plugins are loaded from source files in an isolated sandbox and served
by ID from a ``FilePluginRepository``. Built-in processors live in
``slogen.plugins.core``, the plugins shipped with slogen in
``plugins/contrib``.
"""
