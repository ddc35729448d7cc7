# =============================================================================
# steamguard/cli/__main__.py: Package Entry Point
# =============================================================================
#
# Enables running the CLI package itself as a module:
#     python -m steamguard.cli code --secret <shared_secret>
# =============================================================================

"""Allow ``python -m steamguard.cli`` execution."""

from steamguard.cli.guard import main

main()
