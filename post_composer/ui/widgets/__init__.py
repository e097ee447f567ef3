"""界面组件."""
