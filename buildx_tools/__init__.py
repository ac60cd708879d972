"""
Script: buildx_tools package
What: Holds the Python build helpers that replaced the older build-from-commit shell scripts.
Doing: Groups CLI entrypoints, git/buildx wrappers, and shared utility code in one importable package.
Why: Keeps build logic readable and testable instead of duplicating it across shell dialects.
Goal: Provide a clear, maintainable home for commit-tagged image builds.
"""
