"""
Entry point for `python -m chapterlens`.
"""
from chapterlens.cli.main import run

run()
