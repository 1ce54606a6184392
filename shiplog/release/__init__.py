"""Release orchestration.

- resolve: option layering and git-derived defaults
- tokens: credential lookup
- run: the release state machine and execution modes
- errors: the release error taxonomy
"""

from __future__ import annotations
