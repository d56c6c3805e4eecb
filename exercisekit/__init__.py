"""Run, verify and grade small compiler-checked programming exercises."""

__version__ = "5.5.1"