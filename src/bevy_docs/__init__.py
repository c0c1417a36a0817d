"""bevy-docs core library.

Looks up an API item on docs.rs/bevy/latest and reports its definition and
an example.

Repo rules:
- Every fetch stays under docs.rs/bevy/latest.
- When nothing is found the only output is "Documentation not found."
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
