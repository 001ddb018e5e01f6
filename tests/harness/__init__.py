"""Test fakes for membuddy.

Re-exports all public API for convenient imports:
    from tests.harness import ScriptedAccountant, SteppingAccountant, StubMeter
"""

from tests.harness.fakes import ScriptedAccountant, SteppingAccountant, StubMeter

__all__ = ["ScriptedAccountant", "SteppingAccountant", "StubMeter"]
