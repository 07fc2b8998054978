pytest_plugins = ["voicecommit.testing.conftest"]
