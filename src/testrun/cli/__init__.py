#
# src/testrun/cli/__init__.py
#
