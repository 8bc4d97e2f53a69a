"""ViewModel package for the settings surface.

Call context:
    ``kikyo/app/main.py`` builds one ``SettingsSession`` per window; the
    session owns the profile store, the layout list and the drag controller.

Dependencies:
    Domain types and ports only. Transport lives in ``kikyo.adapters``.
"""
