"""Internal tooling for repository guard checks.

This package hosts guard scripts that enforce standards such as:
- No bare except and require re-raise in handlers
- No use of print; use centralized logging instead
- No typing.Any, casts or "type: ignore" comments
- No static or class methods declared in guarded namespaces

Run them all with `python -m tools.guard`.
"""
