"""
kickstart - Node.js Web Project Scaffolding
===========================================

A CLI tool that generates a ready-to-run Express web application with
optional PostgreSQL, sessions, axios, and Passport.js authentication.

Features
--------
- **Consistent options**: contradictory flags are corrected, not rejected
- **Pluggable auth**: local, bearer, and seven OAuth providers
- **Deterministic plans**: identical options produce identical output
- **Dry run**: inspect every planned action without touching disk

Quick Start
-----------
```bash
# Interactive mode
kickstart web myapp

# Everything from flags
kickstart web myapp --pg --session --passport local,google --silent

# Inspect the plan only
kickstart web myapp --passport bearer --dry-run --silent
```

Example
-------
>>> from kickstart import ProjectConfig, build_plan
>>> plan = build_plan(ProjectConfig(project_name="myapp"))
>>> plan.dependencies
['dotenv', 'ejs', 'express']

Architecture
------------
- ``models``: Pydantic configuration models
- ``registry``: authentication strategy table
- ``normalizer``: merges preset, prompt, and flag input
- ``planner``: expands a configuration into ordered actions
- ``executor``: performs actions (Jinja2, npm, git)
- ``reporter``: builds NEXT_STEPS.md
- ``generator``: the end-to-end pipeline
- ``cli``: Typer command line interface

License
-------
MIT License.
"""

# =============================================================================
# Package Metadata
# =============================================================================
__version__ = "1.0.0"
__license__ = "MIT"

# =============================================================================
# Public API Exports
# =============================================================================

from kickstart.generator import GenerationResult, create_project
from kickstart.models import ProjectConfig
from kickstart.normalizer import normalize_options
from kickstart.planner import build_plan
from kickstart.registry import StrategyKind


__all__ = [
    "GenerationResult",
    "ProjectConfig",
    "StrategyKind",
    "__version__",
    "build_plan",
    "create_project",
    "normalize_options",
]
