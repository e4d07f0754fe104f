"""
Test package for deepstream-async.

This package contains:
- test_paths.py: Dot-notation field access
- test_bridge.py: Awaitable record operations and login
- test_rpc.py: RPC calls, providers and progress events
- test_join.py: Concurrent list and field joins
- test_scenarios.py: Join scenarios loaded from scenarios/*.yaml
- test_client.py: Facade, options and configuration
- test_errors.py: Error taxonomy
- test_cli.py: Command line interface
- mock_store.py: In-memory store client
- conftest.py: Pytest configuration and fixtures
"""
