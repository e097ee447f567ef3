"""服务模块."""
