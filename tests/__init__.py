"""
Test Package
============

Unit and integration tests for the A11y Announcer.

Test organization:
    - test_cleaner.py: Markup stripping and text normalization
    - test_channel.py: Dedup window, repeat buffer, speaker formatting
    - test_queue.py / test_scheduler.py: Output pacing and delayed announcements
    - test_arbiter.py / test_input.py / test_tracker.py: Mode arbitration and input
    - test_service.py: The wired AccessibilityService
    - test_api.py: FastAPI endpoint tests

Run tests with:
    pytest tests/ -v
    pytest tests/ -v --cov=a11y_announcer --cov-report=html
"""
