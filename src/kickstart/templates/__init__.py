"""
kickstart.templates - Project Template Files
============================================

Files used to build the generated Node.js project.

Layout
------
render/
    Jinja2 templates (``.j2``). A plan action's ``source`` is a path
    relative to this directory, e.g. ``auth/passport-google.js.j2``.
    ``auth/oauth-strategy.js.j2`` is a base template extended by the
    OAuth provider modules and is never rendered on its own.
static/
    Trees copied verbatim: ``public/`` (CSS) and ``views/`` (EJS pages
    and partials).

Template Context
----------------
Every render receives ``config`` (the ``ProjectConfig``) and
``kickstart_version``. Strategy templates also receive ``strategy`` and
``descriptor``; the docs index receives ``docs``. The global
``generate_secret()`` returns a fresh random hex string.
"""
