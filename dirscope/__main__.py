"""Allow running dirscope as ``python -m dirscope``."""

from dirscope import main

main()
