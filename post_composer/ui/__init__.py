"""用户界面."""
