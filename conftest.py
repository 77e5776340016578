"""Root pytest configuration: enables the goldens plugin for the test suite."""

pytest_plugins = ["src.testing.pytest_plugin"]
