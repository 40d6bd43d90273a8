"""
ArtDID Registry Test Suite
============================

Test organization mirrors the source code structure:
    tests/
    ├── test_core/           → artdid.core (config, DID codec, models, exceptions)
    ├── test_integrations/   → artdid.integrations.ledger (in-memory, web3, factory)
    ├── test_infrastructure/ → artdid.infrastructure (CID, content stores)
    ├── test_orchestration/  → artdid.orchestration (record workflows)
    ├── test_api/            → artdid.api (HTTP handlers)
    ├── test_integration/    → End-to-end lifecycle tests
    ├── test_facade.py       → artdid.facade
    └── conftest.py          → Shared pytest fixtures

Running Tests:
    pytest                          # Run all tests
    pytest tests/test_core/         # Run only core tests
    pytest --cov=artdid             # Run with coverage report
"""
