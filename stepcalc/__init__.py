"""stepcalc — an integer calculator driven by Gherkin scenarios.

Feature files describe calculator sessions in plain sentences. Each step is
looked up in an explicit phrase table and applied to a fresh Calculator per
scenario; results are reported with Rich and stored as JSON.

Usage:
    python -m stepcalc list                        # Show features
    python -m stepcalc steps                       # Show the step table
    python -m stepcalc run                         # Run bundled features
    python -m stepcalc run my.feature --policy wrap32
    python -m stepcalc results                     # List stored runs
    python -m stepcalc report                      # Generate RESULTS.md
"""

from stepcalc.calculator import Calculator, IntegerPolicy

__version__ = "0.1.0"

__all__ = ["Calculator", "IntegerPolicy", "__version__"]
