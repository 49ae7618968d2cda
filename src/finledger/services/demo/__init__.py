"""Demo mode."""

from finledger.services.demo.demo_mode import DemoMode, DemoModeLogger
from finledger.services.demo.seed import generate_demo_snapshot

__all__ = ["DemoMode", "DemoModeLogger", "generate_demo_snapshot"]
