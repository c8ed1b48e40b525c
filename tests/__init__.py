"""Calendar Engine Test Suite

Test organization:
- unit/: Unit tests for individual modules
  - scheduling/: Conflict detection, suggestions, layout, invitations, recurrence
  - store/: Memory and SQLite event stores
- integration/: CalendarService and CLI end to end

Running tests:
    # All tests
    pytest

    # Specific module
    pytest tests/unit/scheduling/

    # With coverage
    pytest --cov=calendar_engine --cov-report=term-missing
"""
