"""
Tests Package

Test suite for the FastAPI booking service.

Modules:
- test_algorithms: Slot scoring, display helpers and age milestones
- test_face_matcher: Face distance and match decisions
- test_intent_detector: Help assistant topic rules
- test_security: Password hashing and session tokens
- test_backend_client: Backend client against a mock transport
- test_logging: Trace id injection into log records
- test_api: FastAPI endpoints with a faked backend

Run all tests:
    pytest app/tests/

Run specific test file:
    pytest app/tests/test_algorithms.py -v
"""
