"""rbxstatus - normalized Roblox system status over HTTP."""

__version__ = "2.0.0"
