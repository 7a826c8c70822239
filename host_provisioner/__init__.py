"""One-shot provisioning for RHEL-family hosts.

Core design goals:
- Explicit run context, no global state
- Best-effort steps that never block completion
- Local install media first, embedded mirrors as fallback
- Only missing packages are installed
- Centralized logging
"""

__all__ = []
