"""BDD tests for reporter export ticks.

Step definitions are in conftest.py.
"""

import pytest
from pytest_bdd import scenarios

scenarios("export_tick.feature")

pytestmark = [
    pytest.mark.tier(1),
    pytest.mark.tra("Core.Reporter.Tick"),
]
