"""appchain-cli: command line interface for appchain-deploy.

Provides the ``appchain`` command for declaring contract classes on a
Starknet appchain node.
"""

from __future__ import annotations

__version__ = "0.1.0"
