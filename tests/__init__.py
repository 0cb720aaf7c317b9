"""
kickstart test suite
====================

Test Modules
------------
- test_models.py: Configuration models, slugs, and legacy preset keys
- test_registry.py: Strategy table and identifier parsing
- test_normalizer.py: Layer folding, prompts, and prerequisite rules
- test_planner.py: Plan contents, ordering, and dependencies
- test_executor.py: Rendering, manifest patching, commands, dry run
- test_reporter.py: NEXT_STEPS.md content
- test_generator.py: End-to-end generation
- test_cli.py: Command-line interface

Running Tests
-------------
    # Run all tests
    pytest

    # Run specific module
    pytest tests/test_planner.py

    # Run specific test class
    pytest tests/test_planner.py::TestTailOrdering
"""
