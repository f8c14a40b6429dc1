"""AidBridge — matches donors of physical goods with NGOs."""

__version__ = "0.1.0"
